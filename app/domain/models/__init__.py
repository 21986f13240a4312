"""Domain models for the accounts service."""

from .media import MediaFile
from .user import NewUser, User, UserUpdate

__all__ = [
    "MediaFile",
    "NewUser",
    "User",
    "UserUpdate",
]
