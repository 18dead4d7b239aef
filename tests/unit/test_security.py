"""Unit tests for security utilities (password hashing and JWT tokens)."""

from datetime import timedelta
from uuid import uuid4

import pytest
from jose import JWTError

from aura.core.security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    get_user_id_from_token,
    hash_password,
    verify_password,
)


class TestPasswordHashing:
    """Test password hashing functions."""

    def test_hash_password(self):
        """Test that password is hashed with Argon2."""
        hashed = hash_password("MySecurePassword123!")

        assert hashed != "MySecurePassword123!"
        assert hashed.startswith("$argon2")

    def test_verify_password(self):
        hashed = hash_password("MySecurePassword123!")

        assert verify_password("MySecurePassword123!", hashed) is True
        assert verify_password("WrongPassword", hashed) is False


class TestJWTTokens:
    """Test JWT token creation and validation."""

    def test_access_token_round_trip(self):
        user_id = uuid4()
        token = create_access_token(user_id)

        payload = decode_token(token)
        assert payload["sub"] == str(user_id)
        assert payload["type"] == "access"
        assert get_user_id_from_token(token) == user_id

    def test_refresh_token_type(self):
        user_id = uuid4()
        token = create_refresh_token(user_id)

        assert get_user_id_from_token(token, expected_type="refresh") == user_id

    def test_refresh_token_rejected_as_access(self):
        token = create_refresh_token(uuid4())

        with pytest.raises(JWTError):
            get_user_id_from_token(token)

    def test_expired_token(self):
        token = create_access_token(uuid4(), expires_delta=timedelta(seconds=-1))

        with pytest.raises(JWTError):
            decode_token(token)

    def test_tampered_token(self):
        token = create_access_token(uuid4())

        with pytest.raises(JWTError):
            decode_token(token[:-2] + ("aa" if not token.endswith("aa") else "bb"))
