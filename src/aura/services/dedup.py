"""Idempotency check for inbound messages."""
from sqlalchemy.ext.asyncio import AsyncSession

from aura.repositories.transaction import TransactionRepository


class DeduplicationGuard:
    """Answers whether a transaction already carries an external message id.

    This is a fast pre-check, not a lock: the unique constraint on
    ``transactions.external_message_id`` settles concurrent deliveries.
    """

    def __init__(self, db: AsyncSession):
        self.txn_repo = TransactionRepository(db)

    async def is_duplicate(self, external_message_id: str | None) -> bool:
        if not external_message_id:
            return False
        return await self.txn_repo.external_message_id_exists(external_message_id)
