from datetime import timedelta

import jwt
import pytest

from app.domain.errors import InvalidTokenError
from app.domain.models import User
from app.services.token_service import TokenIssuer

from conftest import ACCESS_SECRET, REFRESH_SECRET


@pytest.fixture
def user() -> User:
    return User(
        id="64b7f0c2a1e4c3d2b1a09f8e",
        username="alice",
        email="alice@example.com",
        full_name="Alice Liddell",
        avatar="https://media.example.test/avatar.png",
    )


def test_issue_pair_embeds_identity(token_issuer, user):
    tokens = token_issuer.issue_pair(user)

    access = token_issuer.verify_access(tokens.access_token)
    refresh = token_issuer.verify_refresh(tokens.refresh_token)

    assert access["sub"] == user.id
    assert access["username"] == "alice"
    assert access["email"] == "alice@example.com"
    assert access["fullName"] == "Alice Liddell"
    assert refresh["sub"] == user.id
    assert "email" not in refresh


def test_refresh_tokens_differ_within_same_instant(token_issuer, user):
    first = token_issuer.create_refresh_token(user)
    second = token_issuer.create_refresh_token(user)
    assert first != second


def test_access_token_expires_after_ttl(token_issuer, clock, user):
    token = token_issuer.create_access_token(user)
    clock.advance(minutes=14)
    token_issuer.verify_access(token)

    clock.advance(minutes=2)
    with pytest.raises(InvalidTokenError):
        token_issuer.verify_access(token)


def test_refresh_token_outlives_access_token(token_issuer, clock, user):
    tokens = token_issuer.issue_pair(user)
    clock.advance(days=9)

    with pytest.raises(InvalidTokenError):
        token_issuer.verify_access(tokens.access_token)
    assert token_issuer.verify_refresh(tokens.refresh_token)["sub"] == user.id

    clock.advance(days=2)
    with pytest.raises(InvalidTokenError):
        token_issuer.verify_refresh(tokens.refresh_token)


def test_tokens_are_not_interchangeable(token_issuer, user):
    tokens = token_issuer.issue_pair(user)
    with pytest.raises(InvalidTokenError):
        token_issuer.verify_access(tokens.refresh_token)
    with pytest.raises(InvalidTokenError):
        token_issuer.verify_refresh(tokens.access_token)


def test_shared_secret_still_checks_token_type(clock, user):
    issuer = TokenIssuer(access_secret="same", refresh_secret="same", clock=clock)
    tokens = issuer.issue_pair(user)
    with pytest.raises(InvalidTokenError):
        issuer.verify_access(tokens.refresh_token)


def test_rejects_foreign_signature(token_issuer, clock, user):
    forged = jwt.encode(
        {"sub": user.id, "type": "refresh", "exp": clock() + timedelta(days=1)},
        "not-the-secret",
        algorithm="HS256",
    )
    with pytest.raises(InvalidTokenError):
        token_issuer.verify_refresh(forged)


@pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
def test_rejects_malformed_tokens(token_issuer, token):
    with pytest.raises(InvalidTokenError):
        token_issuer.verify_access(token)


def test_requires_secrets():
    with pytest.raises(RuntimeError):
        TokenIssuer(access_secret="", refresh_secret=REFRESH_SECRET)
    with pytest.raises(RuntimeError):
        TokenIssuer(access_secret=ACCESS_SECRET, refresh_secret="")
