"""Transaction repository with ownership, dedup and bulk reassignment queries."""
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from aura.core.enums import TransactionSource
from aura.models.transaction import Transaction
from aura.repositories.base import BaseRepository


class TransactionRepository(BaseRepository[Transaction]):
    """Repository for Transaction model."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Transaction)

    async def external_message_id_exists(self, external_message_id: str) -> bool:
        result = await self.db.execute(
            select(Transaction.id).where(Transaction.external_message_id == external_message_id)
        )
        return result.first() is not None

    def _user_filters(
        self,
        user_id: UUID,
        category_id: UUID | None = None,
        source: TransactionSource | None = None,
    ) -> list:
        filters = [Transaction.user_id == user_id]
        if category_id is not None:
            filters.append(Transaction.category_id == category_id)
        if source is not None:
            filters.append(Transaction.source == source)
        return filters

    async def get_by_user(
        self,
        user_id: UUID,
        skip: int = 0,
        limit: int = 50,
        category_id: UUID | None = None,
        source: TransactionSource | None = None,
    ) -> list[Transaction]:
        """Get a user's transactions, newest first, with optional filters."""
        result = await self.db.execute(
            select(Transaction)
            .where(*self._user_filters(user_id, category_id, source))
            .order_by(Transaction.txn_date.desc(), Transaction.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def count_by_user(
        self,
        user_id: UUID,
        category_id: UUID | None = None,
        source: TransactionSource | None = None,
    ) -> int:
        result = await self.db.execute(
            select(func.count(Transaction.id)).where(
                *self._user_filters(user_id, category_id, source)
            )
        )
        return int(result.scalar_one())

    async def reassign_category(
        self, user_id: UUID, from_category_id: UUID, to_category_id: UUID
    ) -> int:
        """Move every transaction of a category to another one. Idempotent.

        Only category_id changes; vendor and amount are untouched.
        """
        result = await self.db.execute(
            update(Transaction)
            .where(Transaction.user_id == user_id, Transaction.category_id == from_category_id)
            .values(category_id=to_category_id)
        )
        await self.db.commit()
        return result.rowcount or 0
