import os
import sys
from pathlib import Path

# Settings are read at import time; point them at the test database and a
# known webhook secret before anything from aura is imported.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("WEBHOOK_SECRET", "whsec_MfKQ9r8GKYqrTwjUPD8ILPZIo2LaLaSw")
os.environ.setdefault("WEBHOOK_VERIFY_SIGNATURES", "true")
for _key in ("RESEND_API_KEY", "OPENAI_API_KEY", "SEARCH_API_KEY", "MEMORY_API_KEY"):
    os.environ.pop(_key, None)

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

sys.path.append(str(Path(__file__).parents[1] / "src"))

from aura.db.session import get_db
from aura.main import app

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite://")

_engine_kwargs = {"echo": False}
if TEST_DATABASE_URL.startswith("sqlite"):
    # One shared in-memory database for every session in a test.
    _engine_kwargs.update(
        connect_args={"check_same_thread": False}, poolclass=StaticPool
    )

test_engine = create_async_engine(TEST_DATABASE_URL, **_engine_kwargs)
TestSessionLocal = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture(scope="function")
async def setup_database():
    """Create tables for tests that need the database, and drop them after.

    This fixture is intentionally NOT autouse so pure unit tests can run
    without touching a database.
    """
    from aura.models.base import Base

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    # The pooled connection belongs to this test's event loop.
    await test_engine.dispose()


@pytest.fixture
async def db_session(setup_database):
    """Provide test database session with fresh connection per test."""
    async with TestSessionLocal() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def test_user(db_session: AsyncSession):
    """Create a test user with the default categories."""
    from aura.core.security import hash_password
    from aura.models.user import User
    from aura.repositories.user import UserRepository
    from aura.services.categories import CategoryService

    user = await UserRepository(db_session).create(
        User(
            email="testuser@example.com",
            password_hash=hash_password("password123"),
            full_name="Test User",
            inbound_email="user-test@inbound.aura.app",
        )
    )
    await CategoryService(db_session).seed_defaults(user.id)
    return user


@pytest.fixture
async def another_user(db_session: AsyncSession):
    """A second user for ownership checks."""
    from aura.models.user import User
    from aura.repositories.user import UserRepository
    from aura.services.categories import CategoryService

    user = await UserRepository(db_session).create(
        User(
            email="another@example.com",
            password_hash="hashed_password",
            full_name="Another User",
            inbound_email="user-another@inbound.aura.app",
        )
    )
    await CategoryService(db_session).seed_defaults(user.id)
    return user


@pytest.fixture
async def categories(db_session: AsyncSession, test_user):
    """The test user's categories keyed by name."""
    from aura.repositories.category import CategoryRepository

    return {c.name: c for c in await CategoryRepository(db_session).list_by_user(test_user.id)}


@pytest.fixture
async def auth_headers(test_user):
    """Provide authentication headers with valid JWT token."""
    from aura.core.security import create_access_token

    token = create_access_token(user_id=test_user.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def client(db_session: AsyncSession):
    """Provide test client with database override."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
