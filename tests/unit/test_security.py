"""
Tests for token handling and password hashing.
"""

from datetime import timedelta

import pytest
from joserfc import jwt as jose_jwt

from timetracker.core.exceptions import NotAuthenticated
from timetracker.core.security import (
    _jwt_key,
    create_access_token,
    create_refresh_token,
    get_password_hash,
    verify_password,
    verify_token,
)


def test_access_token_round_trip():
    token = create_access_token(subject="user-123")

    assert verify_token(token, token_type="access") == "user-123"


def test_refresh_token_is_not_an_access_token():
    token = create_refresh_token(subject="user-123")

    assert verify_token(token, token_type="refresh") == "user-123"
    with pytest.raises(NotAuthenticated):
        verify_token(token, token_type="access")


def test_expired_token_is_rejected():
    token = create_access_token(subject="user-123", expires_delta=timedelta(seconds=-5))

    with pytest.raises(NotAuthenticated):
        verify_token(token)


def test_garbage_token_is_rejected():
    with pytest.raises(NotAuthenticated) as exc_info:
        verify_token("not-a-jwt")

    assert exc_info.value.status_code == 401


def test_role_claims_are_never_embedded():
    token = create_access_token(
        subject="user-123",
        additional_claims={"email": "a@example.com", "role": "admin", "permissions": ["*"]},
    )

    claims = jose_jwt.decode(token, _jwt_key).claims
    assert claims["email"] == "a@example.com"
    assert "role" not in claims
    assert "permissions" not in claims


def test_password_hashing():
    hashed = get_password_hash("correct horse battery staple")

    assert hashed != "correct horse battery staple"
    assert verify_password("correct horse battery staple", hashed) is True
    assert verify_password("wrong", hashed) is False


def test_accounts_without_password_never_match():
    assert verify_password("anything", None) is False
