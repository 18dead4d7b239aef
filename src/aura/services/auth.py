"""Authentication service with business logic."""

from uuid import UUID, uuid4

from fastapi import HTTPException, status
from jose import JWTError

from aura.config import settings
from aura.core.security import (
    REFRESH_TOKEN,
    create_access_token,
    create_refresh_token,
    get_user_id_from_token,
    hash_password,
    verify_password,
)
from aura.models.user import User
from aura.repositories.user import UserRepository
from aura.schemas.auth import TokenPair
from aura.services.categories import CategoryService


def inbound_address_for(user_id: UUID, domain: str | None = None) -> str:
    """The address a user forwards bank alerts to."""
    return f"user-{user_id.hex}@{domain or settings.inbound_email_domain}"


class AuthService:
    """Service for authentication operations."""

    def __init__(self, user_repo: UserRepository):
        """
        Initialize authentication service.

        Args:
            user_repo: User repository for database operations
        """
        self.user_repo = user_repo

    def _issue_tokens(self, user: User) -> TokenPair:
        return TokenPair(
            access_token=create_access_token(user.id),
            refresh_token=create_refresh_token(user.id),
        )

    def _ensure_active(self, user: User) -> None:
        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="User account is deactivated",
            )

    async def register(self, email: str, password: str, full_name: str) -> User:
        """
        Register a new user with an inbound address and default categories.

        Args:
            email: User email address
            password: Plain text password
            full_name: User's full name

        Returns:
            Created user object

        Raises:
            HTTPException: If email already exists
        """
        if await self.user_repo.email_exists(email):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email already registered",
            )

        user_id = uuid4()
        user = User(
            id=user_id,
            email=email.strip().lower(),
            password_hash=hash_password(password),
            full_name=full_name,
            inbound_email=inbound_address_for(user_id),
        )
        created_user = await self.user_repo.create(user)

        await CategoryService(self.user_repo.db).seed_defaults(created_user.id)
        return created_user

    async def login(self, email: str, password: str) -> TokenPair:
        """
        Authenticate user and return JWT tokens.

        Raises:
            HTTPException: If credentials are invalid or the account is inactive
        """
        user = await self.user_repo.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Incorrect email or password",
            )
        self._ensure_active(user)
        return self._issue_tokens(user)

    async def refresh_tokens(self, refresh_token: str) -> TokenPair:
        """
        Generate new token pair using refresh token.

        Raises:
            HTTPException: If refresh token is invalid
        """
        try:
            user_id = get_user_id_from_token(refresh_token, expected_type=REFRESH_TOKEN)
        except (JWTError, ValueError):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid or expired refresh token",
            )

        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="User not found",
            )
        self._ensure_active(user)
        return self._issue_tokens(user)
