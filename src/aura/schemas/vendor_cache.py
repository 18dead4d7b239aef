"""Vendor cache response schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class VendorCacheEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    vendor_name: str
    category_id: UUID
    hit_count: int
    updated_at: datetime
