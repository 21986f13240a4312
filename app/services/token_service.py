"""Issues and verifies signed access and refresh tokens."""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

import jwt

from ..domain.errors import InvalidTokenError
from ..domain.models import User

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


@dataclass(frozen=True, slots=True)
class TokenPair:
    access_token: str
    refresh_token: str


class TokenIssuer:
    """
    Mints short-lived access tokens and long-lived refresh tokens.

    Both tokens carry the user id in ``sub`` and a ``type`` claim, so a
    refresh token is never accepted where an access token is expected even
    when both are signed with the same secret.
    """

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_ttl: timedelta = timedelta(minutes=15),
        refresh_ttl: timedelta = timedelta(days=10),
        algorithm: str = "HS256",
        clock: Optional[Clock] = None,
    ) -> None:
        if not access_secret or not refresh_secret:
            raise RuntimeError("Token secrets must be configured.")
        self._access_secret = access_secret
        self._refresh_secret = refresh_secret
        self._access_ttl = access_ttl
        self._refresh_ttl = refresh_ttl
        self._algorithm = algorithm
        self._clock = clock or _utcnow

    @property
    def access_ttl(self) -> timedelta:
        return self._access_ttl

    @property
    def refresh_ttl(self) -> timedelta:
        return self._refresh_ttl

    def issue_pair(self, user: User) -> TokenPair:
        return TokenPair(
            access_token=self.create_access_token(user),
            refresh_token=self.create_refresh_token(user),
        )

    def create_access_token(self, user: User) -> str:
        now = self._clock()
        payload = {
            "sub": user.id,
            "username": user.username,
            "email": user.email,
            "fullName": user.full_name,
            "type": ACCESS_TOKEN_TYPE,
            "iat": now,
            "exp": now + self._access_ttl,
        }
        return jwt.encode(payload, self._access_secret, algorithm=self._algorithm)

    def create_refresh_token(self, user: User) -> str:
        now = self._clock()
        payload = {
            "sub": user.id,
            "type": REFRESH_TOKEN_TYPE,
            "jti": secrets.token_urlsafe(16),
            "iat": now,
            "exp": now + self._refresh_ttl,
        }
        return jwt.encode(payload, self._refresh_secret, algorithm=self._algorithm)

    def verify_access(self, token: str) -> Dict[str, Any]:
        return self._decode(token, self._access_secret, ACCESS_TOKEN_TYPE)

    def verify_refresh(self, token: str) -> Dict[str, Any]:
        return self._decode(token, self._refresh_secret, REFRESH_TOKEN_TYPE)

    def _decode(self, token: str, secret: str, expected_type: str) -> Dict[str, Any]:
        # Expiry is checked against the injected clock rather than PyJWT's wall clock.
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp"], "verify_exp": False, "verify_iat": False},
            )
        except jwt.InvalidTokenError as exc:
            raise InvalidTokenError(str(exc)) from exc

        if payload.get("type") != expected_type:
            raise InvalidTokenError(f"Expected a {expected_type} token")
        try:
            expires_at = float(payload["exp"])
        except (TypeError, ValueError) as exc:
            raise InvalidTokenError("Malformed expiry claim") from exc
        if expires_at <= self._clock().timestamp():
            raise InvalidTokenError("Signature has expired")
        if not isinstance(payload["sub"], str) or not payload["sub"]:
            raise InvalidTokenError("Malformed subject claim")
        return payload
