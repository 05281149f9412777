# tests/v1/test_security.py
"""Tests for bearer token verification."""

from datetime import timedelta

import pytest
from jose import jwt

from fiction_chat.core.errors import AuthError
from fiction_chat.core.security import create_access_token, verify_token
from fiction_chat.core.settings import settings


class TestVerifyToken:
    def test_returns_user_id_as_string(self):
        token = create_access_token(2)

        assert verify_token(token) == "2"

    def test_missing_token(self):
        with pytest.raises(AuthError) as exc_info:
            verify_token(None)
        assert exc_info.value.message == "Token not provided"

    def test_wrong_secret(self):
        token = create_access_token("2", secret="other-secret")

        with pytest.raises(AuthError):
            verify_token(token)

    def test_expired(self):
        token = create_access_token("2", expires_delta=timedelta(seconds=-1))

        with pytest.raises(AuthError):
            verify_token(token)

    def test_garbage(self):
        with pytest.raises(AuthError):
            verify_token("definitely.not.a-jwt")

    def test_missing_claim(self):
        token = jwt.encode({"sub": "2"}, settings.jwt_secret, algorithm=settings.jwt_algorithm)

        with pytest.raises(AuthError):
            verify_token(token)

    def test_configurable_claim(self):
        token = create_access_token("42", claim="user_id")

        assert verify_token(token, claim="user_id") == "42"
        with pytest.raises(AuthError):
            verify_token(token)

    def test_all_failures_share_one_status(self):
        assert AuthError().status_code == 401
        assert AuthError().to_payload() == {
            "error": {"code": "unauthorized", "message": "Could not validate credentials"}
        }
