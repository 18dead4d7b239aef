"""Budget repository (only what the category cascade needs)."""
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from aura.models.budget import Budget
from aura.repositories.base import BaseRepository


class BudgetRepository(BaseRepository[Budget]):
    def __init__(self, db: AsyncSession):
        super().__init__(db, Budget)

    async def list_by_category(self, category_id: UUID) -> list[Budget]:
        result = await self.db.execute(select(Budget).where(Budget.category_id == category_id))
        return list(result.scalars().all())

    async def delete_by_category(self, category_id: UUID) -> int:
        """Delete every budget period scoped to a category. Idempotent."""
        result = await self.db.execute(delete(Budget).where(Budget.category_id == category_id))
        await self.db.commit()
        return result.rowcount or 0
