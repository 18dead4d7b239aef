"""Vendor cache repository: per-user vendor -> category memory."""
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from aura.categorization.vendor import normalize_vendor
from aura.core.exceptions import NotFoundError, ValidationError
from aura.models.vendor_cache import VendorCacheEntry
from aura.repositories.base import BaseRepository


class VendorCacheRepository(BaseRepository[VendorCacheEntry]):
    """Vendor keys are always normalized here, so callers pass raw vendor text."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, VendorCacheEntry)

    async def lookup(self, user_id: UUID, vendor_raw: str | None) -> VendorCacheEntry | None:
        key = normalize_vendor(vendor_raw)
        if not key:
            return None
        result = await self.db.execute(
            select(VendorCacheEntry).where(
                VendorCacheEntry.user_id == user_id,
                VendorCacheEntry.vendor_name == key,
            )
        )
        return result.scalar_one_or_none()

    async def create_entry(
        self, user_id: UUID, vendor_raw: str, category_id: UUID
    ) -> VendorCacheEntry:
        """Create an entry with hit_count 1."""
        key = normalize_vendor(vendor_raw)
        if not key:
            raise ValidationError("VAL_001", {"field": "vendor", "reason": "empty vendor"})
        entry = VendorCacheEntry(
            user_id=user_id, vendor_name=key, category_id=category_id, hit_count=1
        )
        return await self.create(entry)

    async def create_if_absent(
        self, user_id: UUID, vendor_raw: str, category_id: UUID
    ) -> tuple[VendorCacheEntry, bool]:
        """Return (entry, created). An existing entry is left untouched."""
        existing = await self.lookup(user_id, vendor_raw)
        if existing is not None:
            return existing, False
        try:
            return await self.create_entry(user_id, vendor_raw, category_id), True
        except IntegrityError:
            # Lost a race with a concurrent insert of the same vendor.
            await self.db.rollback()
            existing = await self.lookup(user_id, vendor_raw)
            if existing is None:
                raise
            return existing, False

    async def increment_hit(self, entry_id: UUID) -> None:
        """Atomically add one to hit_count (single UPDATE, no read-modify-write)."""
        result = await self.db.execute(
            update(VendorCacheEntry)
            .where(VendorCacheEntry.id == entry_id)
            .values(
                hit_count=VendorCacheEntry.hit_count + 1,
                updated_at=datetime.now(timezone.utc),
            )
        )
        if not result.rowcount:
            await self.db.rollback()
            raise NotFoundError("API_003", {"entry_id": str(entry_id)})
        await self.db.commit()

    async def reassign_category(self, entry_id: UUID, category_id: UUID) -> None:
        result = await self.db.execute(
            update(VendorCacheEntry)
            .where(VendorCacheEntry.id == entry_id)
            .values(category_id=category_id, updated_at=datetime.now(timezone.utc))
        )
        if not result.rowcount:
            await self.db.rollback()
            raise NotFoundError("API_003", {"entry_id": str(entry_id)})
        await self.db.commit()

    async def delete_by_category(self, category_id: UUID) -> int:
        """Delete every entry pointing at a category. Idempotent."""
        result = await self.db.execute(
            delete(VendorCacheEntry)
            .where(VendorCacheEntry.category_id == category_id)
        )
        await self.db.commit()
        return result.rowcount or 0

    async def list_by_user(
        self, user_id: UUID, skip: int = 0, limit: int = 100
    ) -> list[VendorCacheEntry]:
        result = await self.db.execute(
            select(VendorCacheEntry)
            .where(VendorCacheEntry.user_id == user_id)
            .order_by(VendorCacheEntry.hit_count.desc(), VendorCacheEntry.vendor_name)
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all())
