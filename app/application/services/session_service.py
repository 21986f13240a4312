from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from ...domain.errors import AuthError, InvalidTokenError, NotFoundError, ValidationError
from ...domain.models import User, UserUpdate
from ...domain.ports.persistence import UserRepository
from ...domain.ports.security import PasswordHasher
from ...services.token_service import TokenIssuer, TokenPair

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LoginResult:
    user: User
    tokens: TokenPair


def extract_refresh_token(cookie_value: Optional[str], body_value: Optional[str]) -> Optional[str]:
    """Pick the refresh token from the cookie, falling back to the request body."""
    for candidate in (cookie_value, body_value):
        if candidate and candidate.strip():
            return candidate.strip()
    return None


class SessionService:
    """Logs users in and out and rotates their refresh tokens.

    Each user holds at most one refresh token. Issuing a new pair
    overwrites the stored token, so any token issued earlier stops working
    the moment it is superseded.
    """

    def __init__(
        self,
        users: UserRepository,
        hasher: PasswordHasher,
        tokens: TokenIssuer,
    ) -> None:
        self._users = users
        self._hasher = hasher
        self._tokens = tokens

    async def login(
        self,
        password: Optional[str],
        username: Optional[str] = None,
        email: Optional[str] = None,
    ) -> LoginResult:
        username = (username or "").strip().lower() or None
        email = (email or "").strip() or None
        if not username and not email:
            raise ValidationError("Username or email is required")
        # Checked before the lookup: a blank password must not reveal whether the account exists.
        if not password or not password.strip():
            raise ValidationError("Password is required", status_code=401)

        user = await self._users.find_by_identity(username=username, email=email)
        if user is None:
            logger.info("Rejected login for %s: no such user", username or email)
            raise NotFoundError("User does not exist")
        if not await asyncio.to_thread(self._hasher.verify, password, user.password_hash):
            logger.info("Rejected login for %s: wrong password", username or email)
            raise AuthError("Invalid user credentials")

        tokens = await self._rotate(user)
        logged_in = await self._users.find_by_id(user.id)
        if logged_in is None:
            raise AuthError("Invalid user credentials")
        logger.info("User %s logged in", user.id)
        return LoginResult(user=logged_in, tokens=tokens)

    async def logout(self, user_id: str) -> None:
        await self._users.update_by_id(user_id, UserUpdate(refresh_token=""))
        logger.info("User %s logged out", user_id)

    async def refresh(self, incoming_token: Optional[str]) -> TokenPair:
        if not incoming_token:
            raise AuthError("Unauthorized request")
        try:
            payload = self._tokens.verify_refresh(incoming_token)
        except InvalidTokenError as exc:
            logger.info("Rejected refresh token: %s", exc)
            raise AuthError("Invalid refresh token") from exc

        user = await self._users.find_by_id(payload["sub"], include_secrets=True)
        if user is None:
            raise AuthError("Invalid refresh token")

        if incoming_token != user.refresh_token:
            # Both causes share one client-facing message; only the log tells them apart.
            if user.has_active_session:
                logger.warning("Refresh token replay for user %s: token was superseded", user.id)
            else:
                logger.info("Refresh attempt for user %s after logout", user.id)
            raise AuthError("Refresh token is expired or used")

        tokens = await self._rotate(user)
        logger.info("Rotated refresh token for user %s", user.id)
        return tokens

    async def change_password(self, user_id: str, old_password: Optional[str], new_password: Optional[str]) -> None:
        if not new_password or not new_password.strip():
            raise ValidationError("New password is required")
        user = await self._users.find_by_id(user_id, include_secrets=True)
        if user is None:
            raise NotFoundError("User does not exist")
        if not old_password:
            raise AuthError("Invalid old password")
        if not await asyncio.to_thread(self._hasher.verify, old_password, user.password_hash):
            raise AuthError("Invalid old password")
        try:
            password_hash = await asyncio.to_thread(self._hasher.hash, new_password)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
        await self._users.update_by_id(user_id, UserUpdate(password_hash=password_hash))
        logger.info("User %s changed password", user_id)

    async def _rotate(self, user: User) -> TokenPair:
        tokens = self._tokens.issue_pair(user)
        await self._users.update_by_id(user.id, UserUpdate(refresh_token=tokens.refresh_token))
        return tokens
