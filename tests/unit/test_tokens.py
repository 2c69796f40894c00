"""Tests for token issuing and verification."""
import time
from datetime import timedelta

import pytest

from artifact_server.auth.tokens import TokenService
from artifact_server.utils.exceptions import ExpiredTokenError, InvalidTokenError


@pytest.fixture
def tokens():
    return TokenService("unit-secret", default_expires_in=timedelta(hours=5))


def test_issue_and_verify(tokens):
    token = tokens.issue({"sub": "42", "email": "a@b.c"})
    claims = tokens.verify(token)
    assert claims["sub"] == "42"
    assert claims["email"] == "a@b.c"
    assert claims["exp"] - claims["iat"] == 5 * 3600


def test_expired_token(tokens):
    token = tokens.issue({"sub": "42"}, expires_in=timedelta(seconds=-10))
    with pytest.raises(ExpiredTokenError) as exc_info:
        tokens.verify(token)
    assert exc_info.value.message == "Token expired"


def test_wrong_secret(tokens):
    forged = TokenService("another-secret").issue({"sub": "42"})
    with pytest.raises(InvalidTokenError) as exc_info:
        tokens.verify(forged)
    assert exc_info.value.message == "Invalid token signature"


def test_garbage_token(tokens):
    with pytest.raises(InvalidTokenError):
        tokens.verify("not-a-jwt")


def test_one_second_token_expires():
    token = TokenService("unit-secret").issue({"sub": "42"}, expires_in=timedelta(seconds=1))
    time.sleep(2)
    with pytest.raises(ExpiredTokenError):
        TokenService("unit-secret").verify(token)
