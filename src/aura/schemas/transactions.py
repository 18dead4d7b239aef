"""Transaction request/response schemas.

Amounts are integers in minor units (cents); see ``MoneyMeta``.
"""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from aura.core.enums import Confidence, TransactionSource
from aura.schemas.common import MoneyMeta, PaginationMeta


class TransactionCreate(BaseModel):
    """Manually entered expense."""

    amount: int = Field(..., description="Amount in cents (must be > 0)")
    vendor: str = Field(..., min_length=1, max_length=255)
    category_id: UUID
    txn_date: date
    description: str = Field(default="", max_length=500)


class TransactionUpdate(BaseModel):
    """Partial update; only the fields sent are changed."""

    amount: int | None = Field(default=None, description="Amount in cents (must be > 0)")
    vendor: str | None = Field(default=None, min_length=1, max_length=255)
    category_id: UUID | None = None
    txn_date: date | None = None
    description: str | None = Field(default=None, max_length=500)


class TransactionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    category_id: UUID
    amount: int = Field(description="Amount in cents")
    vendor: str
    description: str
    txn_date: date
    confidence: Confidence
    source: TransactionSource
    resolved_by: str = Field(description="Categorization tier, or 'manual'")
    external_message_id: str | None = None
    created_at: datetime


class TransactionListResult(BaseModel):
    transactions: list[TransactionResponse]
    pagination: PaginationMeta
    money: MoneyMeta
