"""User-owned expense categories."""
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from aura.models.base import BaseModel

# Name of the per-user system fallback category.
OTHER_CATEGORY_NAME = "Other"


class Category(BaseModel):
    """Expense category.

    The description is what the reasoning oracle matches vendors against.
    Exactly one category per user has ``is_default`` set: the system "Other"
    category, which can never be deleted.
    """

    __tablename__ = "categories"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    icon: Mapped[str | None] = mapped_column(String(16), nullable=True)
    color: Mapped[str | None] = mapped_column(String(16), nullable=True)
    is_default: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_category_user_name"),
    )

    @property
    def is_system_other(self) -> bool:
        return self.is_default or self.name.strip().lower() == OTHER_CATEGORY_NAME.lower()

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name={self.name}, is_default={self.is_default})>"
