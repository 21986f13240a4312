"""User domain model for account registration and session management."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Optional


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


@dataclass(slots=True)
class User:
    """
    User account entity.

    Attributes:
        id: Unique identifier assigned by the store
        username: Unique login name, stored lowercase
        email: Unique email address
        full_name: Display name
        avatar: URL of the stored avatar image (required)
        cover_image: URL of the stored cover image, empty when absent
        password_hash: One-way hash of the password, empty when not loaded
        refresh_token: Last refresh token issued, empty when no session is active
        created_at: Account creation timestamp
        updated_at: Last update timestamp
    """

    id: str
    username: str
    email: str
    full_name: str
    avatar: str
    cover_image: str = ""
    password_hash: str = field(default="", repr=False)
    refresh_token: str = field(default="", repr=False)
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @property
    def has_active_session(self) -> bool:
        return bool(self.refresh_token)

    def without_secrets(self) -> User:
        """Return a copy with the password hash and refresh token blanked."""
        return replace(self, password_hash="", refresh_token="")


@dataclass(slots=True)
class NewUser:
    """Fields required to create a user record."""

    username: str
    email: str
    full_name: str
    avatar: str
    password_hash: str
    cover_image: str = ""


@dataclass(slots=True)
class UserUpdate:
    """Partial update; only fields that are not ``None`` are written."""

    full_name: Optional[str] = None
    email: Optional[str] = None
    avatar: Optional[str] = None
    cover_image: Optional[str] = None
    password_hash: Optional[str] = None
    refresh_token: Optional[str] = None

    def as_fields(self) -> dict:
        values = {
            "full_name": self.full_name,
            "email": self.email,
            "avatar": self.avatar,
            "cover_image": self.cover_image,
            "password_hash": self.password_hash,
            "refresh_token": self.refresh_token,
        }
        return {key: value for key, value in values.items() if value is not None}
