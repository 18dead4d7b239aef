"""Account owning categories, transactions and an inbound mail address."""
from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from aura.models.base import BaseModel


class User(BaseModel):
    """An account.

    Inbound bank alerts are routed to their owner through ``inbound_email``
    (``user-<hex>@<inbound domain>``), assigned once at registration.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    inbound_email: Mapped[str] = mapped_column(
        String(255), unique=True, index=True, nullable=False
    )
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, inbound_email={self.inbound_email})>"
