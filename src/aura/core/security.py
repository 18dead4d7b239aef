"""Password hashing (Argon2) and JWT bearer tokens.

Two token types share one signing key and differ only in their ``type``
claim and lifetime: short-lived ``access`` tokens for API calls and
long-lived ``refresh`` tokens that can only be exchanged for a new pair.
"""

from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

from jose import JWTError, jwt
from passlib.context import CryptContext

from aura.config import settings

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def _encode(user_id: UUID, token_type: str, lifetime: timedelta) -> str:
    claims = {
        "sub": str(user_id),
        "type": token_type,
        "exp": datetime.now(timezone.utc) + lifetime,
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def create_access_token(user_id: UUID, expires_delta: timedelta | None = None) -> str:
    """Access token; lifetime defaults to ``jwt_access_expire_minutes``."""
    lifetime = expires_delta or timedelta(minutes=settings.jwt_access_expire_minutes)
    return _encode(user_id, ACCESS_TOKEN, lifetime)


def create_refresh_token(user_id: UUID) -> str:
    return _encode(user_id, REFRESH_TOKEN, timedelta(days=settings.jwt_refresh_expire_days))


def decode_token(token: str) -> dict[str, Any]:
    """Verify signature and expiry.

    Raises:
        JWTError: If the token is invalid or expired
    """
    return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])


def get_user_id_from_token(token: str, expected_type: str = ACCESS_TOKEN) -> UUID:
    """Return the subject of a valid token of the expected type.

    Raises:
        JWTError: Invalid, expired, wrong type, or no subject
        ValueError: Subject is not a UUID
    """
    claims = decode_token(token)
    if claims.get("type") != expected_type:
        raise JWTError(f"Expected a {expected_type} token")
    subject = claims.get("sub")
    if not subject:
        raise JWTError("Token has no subject")
    return UUID(subject)
