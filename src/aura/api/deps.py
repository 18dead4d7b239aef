"""FastAPI dependency injection for authentication, database and collaborators.

External clients are created once in the app lifespan and kept on
``app.state``; a client that isn't configured is stored as None and the
matching categorization tier is left out of the chain.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from aura.clients.interfaces import (
    MessageContentFetcher,
    ReasoningOracle,
    SemanticMemoryStore,
    WebSearchOracle,
)
from aura.core.security import get_user_id_from_token
from aura.db.session import get_db
from aura.models.user import User
from aura.repositories.user import UserRepository
from aura.services.auth import AuthService
from aura.services.categories import CategoryLifecycleCoordinator, CategoryService
from aura.services.ingestion import IngestionPipeline
from aura.services.transactions import TransactionService

# OAuth2 bearer token scheme
security = HTTPBearer()


async def get_user_repository(
    db: AsyncSession = Depends(get_db),
) -> UserRepository:
    return UserRepository(db)


async def get_auth_service(
    user_repo: UserRepository = Depends(get_user_repository),
) -> AuthService:
    return AuthService(user_repo)


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    user_repo: UserRepository = Depends(get_user_repository),
) -> User:
    """
    Extract and validate user from JWT token.

    Raises:
        HTTPException: If token is invalid, expired, or user not found
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        user_id = get_user_id_from_token(credentials.credentials)
    except (JWTError, ValueError):
        raise credentials_exception

    user = await user_repo.get_by_id(user_id)
    if user is None:
        raise credentials_exception

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is deactivated",
        )

    return user


def get_message_fetcher(request: Request) -> MessageContentFetcher | None:
    return getattr(request.app.state, "message_fetcher", None)


def get_reasoning_oracle(request: Request) -> ReasoningOracle | None:
    return getattr(request.app.state, "reasoning_oracle", None)


def get_web_search(request: Request) -> WebSearchOracle | None:
    return getattr(request.app.state, "web_search", None)


def get_memory_store(request: Request) -> SemanticMemoryStore | None:
    return getattr(request.app.state, "memory_store", None)


async def get_ingestion_pipeline(
    db: AsyncSession = Depends(get_db),
    fetcher: MessageContentFetcher | None = Depends(get_message_fetcher),
    oracle: ReasoningOracle | None = Depends(get_reasoning_oracle),
    search: WebSearchOracle | None = Depends(get_web_search),
    memory_store: SemanticMemoryStore | None = Depends(get_memory_store),
) -> IngestionPipeline:
    return IngestionPipeline(
        db, fetcher, oracle=oracle, search=search, memory_store=memory_store
    )


async def get_category_service(db: AsyncSession = Depends(get_db)) -> CategoryService:
    return CategoryService(db)


async def get_category_coordinator(
    db: AsyncSession = Depends(get_db),
) -> CategoryLifecycleCoordinator:
    return CategoryLifecycleCoordinator(db)


async def get_transaction_service(
    db: AsyncSession = Depends(get_db),
    memory_store: SemanticMemoryStore | None = Depends(get_memory_store),
) -> TransactionService:
    return TransactionService(db, memory_store=memory_store)
