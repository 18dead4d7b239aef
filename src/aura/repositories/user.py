"""User lookups for login and inbound-mail routing."""
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from aura.models.user import User
from aura.repositories.base import BaseRepository


def _address(value: str) -> str:
    return value.strip().lower()


class UserRepository(BaseRepository[User]):
    """E-mail addresses are matched case-insensitively everywhere."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, User)

    async def get_by_email(self, email: str) -> User | None:
        result = await self.db.execute(
            select(User).where(func.lower(User.email) == _address(email))
        )
        return result.scalar_one_or_none()

    async def email_exists(self, email: str) -> bool:
        result = await self.db.execute(
            select(User.id).where(func.lower(User.email) == _address(email))
        )
        return result.first() is not None

    async def get_by_inbound_email(self, address: str) -> User | None:
        """Owner of an inbound address, or None for mail nobody forwards here."""
        result = await self.db.execute(
            select(User).where(func.lower(User.inbound_email) == _address(address))
        )
        return result.scalar_one_or_none()
