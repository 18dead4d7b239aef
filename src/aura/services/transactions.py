"""Manual transactions and recategorization (vendor cache write-through)."""
import logging
from datetime import date
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from aura.categorization.vendor import normalize_vendor
from aura.clients.interfaces import SemanticMemoryStore
from aura.core.enums import MANUAL_RESOLVER, Confidence, TransactionSource
from aura.core.exceptions import NotFoundError, ValidationError
from aura.models.category import Category
from aura.models.transaction import Transaction
from aura.repositories.category import CategoryRepository
from aura.repositories.transaction import TransactionRepository
from aura.repositories.vendor_cache import VendorCacheRepository

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = ("amount", "vendor", "category_id", "txn_date", "description")


class TransactionService:
    """Service layer for user-driven transaction changes.

    Whatever category the user picks for a vendor becomes that vendor's
    cached category, so the next alert from the same vendor resolves
    through the cache tier.
    """

    def __init__(self, db: AsyncSession, memory_store: SemanticMemoryStore | None = None):
        self.db = db
        self.txn_repo = TransactionRepository(db)
        self.category_repo = CategoryRepository(db)
        self.cache_repo = VendorCacheRepository(db)
        self.memory_store = memory_store

    async def _get_category(self, user_id: UUID, category_id: UUID) -> Category:
        category = await self.category_repo.get_for_user(user_id, category_id)
        if category is None:
            raise NotFoundError("API_001", {"category_id": str(category_id)})
        return category

    async def list_transactions(
        self,
        user_id: UUID,
        page: int = 1,
        limit: int = 20,
        category_id: UUID | None = None,
        source: TransactionSource | None = None,
    ) -> tuple[list[Transaction], int]:
        """Return one page of the user's transactions and the total count."""
        skip = (page - 1) * limit
        items = await self.txn_repo.get_by_user(user_id, skip, limit, category_id, source)
        total = await self.txn_repo.count_by_user(user_id, category_id, source)
        return items, total

    async def create_manual(
        self,
        user_id: UUID,
        amount: int,
        vendor: str,
        category_id: UUID,
        txn_date: date,
        description: str = "",
    ) -> Transaction:
        """Record a user-entered expense and seed the vendor cache.

        Raises:
            ValidationError: If amount is not positive or vendor is blank
            NotFoundError: If the category isn't the user's
        """
        if amount <= 0:
            raise ValidationError("VAL_002", {"amount": amount})
        vendor_key = normalize_vendor(vendor)
        if not vendor_key:
            raise ValidationError("VAL_001", {"field": "vendor"})
        await self._get_category(user_id, category_id)

        txn = await self.txn_repo.create(
            Transaction(
                user_id=user_id,
                category_id=category_id,
                amount=amount,
                vendor=vendor.strip(),
                vendor_key=vendor_key,
                description=description,
                txn_date=txn_date,
                confidence=Confidence.HIGH,
                source=TransactionSource.MANUAL,
                resolved_by=MANUAL_RESOLVER,
            )
        )
        _, created = await self.cache_repo.create_if_absent(user_id, vendor, category_id)
        logger.info(
            "Manual transaction created",
            extra={"transaction_id": str(txn.id), "cache_entry_created": created},
        )
        return txn

    async def update(self, user_id: UUID, transaction_id: UUID, changes: dict) -> Transaction:
        """Apply a partial update.

        A category change rewrites the vendor's cache entry (creating it when
        missing) and is remembered as a correction in the memory store.

        Raises:
            NotFoundError: If the transaction or new category isn't the user's
            ValidationError: If the new amount is not positive
        """
        txn = await self.txn_repo.get_for_user(user_id, transaction_id)
        if txn is None:
            raise NotFoundError("API_002", {"transaction_id": str(transaction_id)})

        data = {k: v for k, v in changes.items() if k in _UPDATABLE_FIELDS and v is not None}
        if "amount" in data and data["amount"] <= 0:
            raise ValidationError("VAL_002", {"amount": data["amount"]})
        if "vendor" in data:
            data["vendor_key"] = normalize_vendor(data["vendor"])
            if not data["vendor_key"]:
                raise ValidationError("VAL_001", {"field": "vendor"})

        new_category = None
        if "category_id" in data and data["category_id"] != txn.category_id:
            new_category = await self._get_category(user_id, data["category_id"])
            data["confidence"] = Confidence.HIGH
            data["resolved_by"] = MANUAL_RESOLVER

        txn = await self.txn_repo.update(txn, data)

        if new_category is not None:
            await self._remember_category(user_id, txn.vendor, new_category)
        return txn

    async def _remember_category(self, user_id: UUID, vendor: str, category: Category) -> None:
        entry, created = await self.cache_repo.create_if_absent(user_id, vendor, category.id)
        if not created and entry.category_id != category.id:
            await self.cache_repo.reassign_category(entry.id, category.id)

        logger.info(
            "Vendor recategorized",
            extra={"vendor": normalize_vendor(vendor), "category": category.name},
        )
        if self.memory_store is not None:
            await self.memory_store.add(
                f"{normalize_vendor(vendor)} should be categorized as {category.name}.",
                user_id,
            )

    async def delete(self, user_id: UUID, transaction_id: UUID) -> None:
        txn = await self.txn_repo.get_for_user(user_id, transaction_id)
        if txn is None:
            raise NotFoundError("API_002", {"transaction_id": str(transaction_id)})
        await self.txn_repo.delete(txn)
