"""Async engine and request-scoped sessions."""
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from aura.config import settings


def _engine_options(database_url: str) -> dict:
    # SQL echo can print alert text bound as parameters; development only.
    options: dict = {
        "echo": settings.db_echo and settings.app_env.lower() == "development",
    }
    if not database_url.startswith("sqlite"):
        options.update(pool_pre_ping=True, pool_size=5, max_overflow=10)
    return options


async_engine = create_async_engine(settings.database_url, **_engine_options(settings.database_url))

AsyncSessionLocal = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncIterator[AsyncSession]:
    """One session per request; uncommitted work is rolled back on exit."""
    async with AsyncSessionLocal() as session:
        yield session


async def dispose_engine() -> None:
    await async_engine.dispose()
