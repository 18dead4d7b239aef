"""Transaction model: one categorized expense."""
from datetime import date
from uuid import UUID

from sqlalchemy import BigInteger, Date, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from aura.core.enums import Confidence, TransactionSource
from aura.models.base import BaseModel, value_enum


class Transaction(BaseModel):
    """A categorized expense, either ingested from a message or entered manually.

    ``external_message_id`` is unique when present: the storage-level guard
    against two deliveries of the same inbound message.
    """

    __tablename__ = "transactions"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    category_id: Mapped[UUID] = mapped_column(
        ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    vendor: Mapped[str] = mapped_column(String(255), nullable=False)
    vendor_key: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(String(500), default="", nullable=False)
    txn_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    external_message_id: Mapped[str | None] = mapped_column(
        String(255), unique=True, nullable=True
    )
    raw_subject: Mapped[str] = mapped_column(String(500), default="", nullable=False)
    confidence: Mapped[Confidence] = mapped_column(
        value_enum(Confidence, "confidence"), nullable=False
    )
    source: Mapped[TransactionSource] = mapped_column(
        value_enum(TransactionSource, "transaction_source"), nullable=False
    )
    resolved_by: Mapped[str] = mapped_column(String(50), nullable=False)

    __table_args__ = (
        Index("ix_transactions_user_id_vendor_key", "user_id", "vendor_key"),
    )

    def __repr__(self) -> str:
        return f"<Transaction(id={self.id}, vendor={self.vendor}, amount={self.amount})>"
