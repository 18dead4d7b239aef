"""Generic repository over one model.

Every write commits immediately; services that need several writes to land
together order them so each step is safe to repeat.
"""
from typing import Generic, Type, TypeVar
from uuid import UUID

from sqlalchemy import inspect, select
from sqlalchemy.ext.asyncio import AsyncSession

from aura.models.base import BaseModel

T = TypeVar("T", bound=BaseModel)


class BaseRepository(Generic[T]):
    def __init__(self, db: AsyncSession, model: Type[T]):
        self.db = db
        self.model = model

    async def get_by_id(self, id: UUID) -> T | None:
        return await self.db.get(self.model, id)

    async def get_for_user(self, user_id: UUID, id: UUID) -> T | None:
        """Fetch a row only when ``user_id`` owns it; other users' rows look missing."""
        result = await self.db.execute(
            select(self.model).where(self.model.id == id, self.model.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def create(self, obj: T) -> T:
        self.db.add(obj)
        await self.db.commit()
        await self.db.refresh(obj)
        return obj

    async def create_many(self, objs: list[T]) -> list[T]:
        """Insert several rows in one commit."""
        self.db.add_all(objs)
        await self.db.commit()
        for obj in objs:
            await self.db.refresh(obj)
        return objs

    async def update(self, obj: T, data: dict) -> T:
        """Set mapped columns from ``data``; unknown keys are ignored."""
        columns = inspect(self.model).columns.keys()
        for key, value in data.items():
            if key in columns:
                setattr(obj, key, value)
        await self.db.commit()
        await self.db.refresh(obj)
        return obj

    async def delete(self, obj: T) -> None:
        await self.db.delete(obj)
        await self.db.commit()
