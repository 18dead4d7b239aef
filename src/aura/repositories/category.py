"""Category repository."""
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from aura.models.category import OTHER_CATEGORY_NAME, Category
from aura.repositories.base import BaseRepository


class CategoryRepository(BaseRepository[Category]):
    def __init__(self, db: AsyncSession):
        super().__init__(db, Category)

    async def list_by_user(self, user_id: UUID) -> list[Category]:
        """All of a user's categories in display order."""
        result = await self.db.execute(
            select(Category)
            .where(Category.user_id == user_id)
            .order_by(Category.sort_order, Category.name)
        )
        return list(result.scalars().all())

    async def get_by_name(self, user_id: UUID, name: str) -> Category | None:
        """Find a user's category by name, ignoring case."""
        result = await self.db.execute(
            select(Category).where(
                Category.user_id == user_id,
                func.lower(Category.name) == name.strip().lower(),
            )
        )
        return result.scalars().first()

    async def get_other(self, user_id: UUID) -> Category | None:
        """The user's system "Other" category: the default one, else by name."""
        result = await self.db.execute(
            select(Category).where(Category.user_id == user_id, Category.is_default.is_(True))
        )
        category = result.scalars().first()
        if category is not None:
            return category
        return await self.get_by_name(user_id, OTHER_CATEGORY_NAME)

    async def next_sort_order(self, user_id: UUID) -> int:
        result = await self.db.execute(
            select(func.max(Category.sort_order)).where(Category.user_id == user_id)
        )
        current = result.scalar_one_or_none()
        return 0 if current is None else current + 1
