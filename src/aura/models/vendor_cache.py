"""User-specific vendor -> category memory.

This is user-scoped (not global) so each user's corrections only affect
their own future resolutions.
"""

from uuid import UUID

from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from aura.models.base import BaseModel


class VendorCacheEntry(BaseModel):
    """Cached category for a canonical vendor name of a specific user."""

    __tablename__ = "vendor_cache"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    vendor_name: Mapped[str] = mapped_column(String(255), nullable=False)
    category_id: Mapped[UUID] = mapped_column(
        ForeignKey("categories.id", ondelete="CASCADE"), nullable=False, index=True
    )
    hit_count: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "vendor_name", name="uq_vendor_cache_user_vendor"),
    )

    def __repr__(self) -> str:
        return (
            f"<VendorCacheEntry(id={self.id}, user_id={self.user_id}, "
            f"vendor_name={self.vendor_name}, category_id={self.category_id}, "
            f"hit_count={self.hit_count})>"
        )
