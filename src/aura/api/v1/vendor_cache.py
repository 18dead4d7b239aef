"""Vendor cache listing."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from aura.api.deps import get_current_user
from aura.db.session import get_db
from aura.models.user import User
from aura.repositories.vendor_cache import VendorCacheRepository
from aura.schemas.vendor_cache import VendorCacheEntryResponse

router = APIRouter(prefix="/vendor-cache", tags=["vendor-cache"])


@router.get(
    "",
    response_model=list[VendorCacheEntryResponse],
    summary="List learned vendor categories",
    description="Most-used vendors first.",
)
async def list_vendor_cache(
    skip: Annotated[int, Query(ge=0)] = 0,
    limit: Annotated[int, Query(ge=1, le=500)] = 100,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[VendorCacheEntryResponse]:
    entries = await VendorCacheRepository(db).list_by_user(current_user.id, skip, limit)
    return [VendorCacheEntryResponse.model_validate(e) for e in entries]
