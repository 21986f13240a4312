from __future__ import annotations

import asyncio
import logging
from typing import Optional

from ...domain.errors import ConflictError, InternalError, NotFoundError, UploadError, ValidationError
from ...domain.models import MediaFile, NewUser, User, UserUpdate
from ...domain.ports.media import MediaStorage
from ...domain.ports.persistence import UserRepository
from ...domain.ports.security import PasswordHasher

logger = logging.getLogger(__name__)


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class ProfileService:
    """Registers accounts and applies profile changes."""

    def __init__(
        self,
        users: UserRepository,
        hasher: PasswordHasher,
        media: MediaStorage,
    ) -> None:
        self._users = users
        self._hasher = hasher
        self._media = media

    async def register(
        self,
        full_name: Optional[str],
        username: Optional[str],
        email: Optional[str],
        password: Optional[str],
        avatar: Optional[MediaFile],
        cover_image: Optional[MediaFile] = None,
    ) -> User:
        if any(_blank(value) for value in (full_name, username, email, password)):
            raise ValidationError("All fields are required")
        username = username.strip().lower()
        email = email.strip()

        existing = await self._users.find_by_identity(username=username, email=email)
        if existing is not None:
            raise ConflictError("User with the email or username already exists")

        if avatar is None or avatar.is_empty:
            raise ValidationError("Avatar image is required")

        try:
            password_hash = await asyncio.to_thread(self._hasher.hash, password)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc

        avatar_url = await self._media.upload(avatar)
        if not avatar_url:
            raise UploadError("Avatar upload failed")
        cover_url = ""
        if cover_image is not None and not cover_image.is_empty:
            cover_url = await self._media.upload(cover_image) or ""
            if not cover_url:
                logger.warning("Cover image upload failed for %s; continuing without it", username)

        created = await self._users.create(
            NewUser(
                username=username,
                email=email,
                full_name=full_name.strip(),
                avatar=avatar_url,
                cover_image=cover_url,
                password_hash=password_hash,
            )
        )
        registered = await self._users.find_by_id(created.id)
        if registered is None:
            raise InternalError("Something went wrong while registering the user")
        logger.info("Registered user %s (%s)", registered.id, registered.username)
        return registered

    async def update_profile(
        self,
        user_id: str,
        full_name: Optional[str] = None,
        email: Optional[str] = None,
    ) -> User:
        update = UserUpdate(
            full_name=None if _blank(full_name) else full_name.strip(),
            email=None if _blank(email) else email.strip(),
        )
        if not update.as_fields():
            return await self._require(user_id)
        updated = await self._users.update_by_id(user_id, update)
        if updated is None:
            raise NotFoundError("User does not exist")
        return updated

    async def update_avatar(self, user_id: str, avatar: Optional[MediaFile]) -> User:
        if avatar is None or avatar.is_empty:
            raise ValidationError("Avatar file is missing")
        url = await self._media.upload(avatar)
        if not url:
            raise UploadError("Error while uploading avatar")
        return await self._store_media(user_id, UserUpdate(avatar=url))

    async def update_cover_image(self, user_id: str, cover_image: Optional[MediaFile]) -> User:
        if cover_image is None or cover_image.is_empty:
            raise ValidationError("Cover image file is missing")
        url = await self._media.upload(cover_image)
        if not url:
            raise UploadError("Error while uploading cover image")
        return await self._store_media(user_id, UserUpdate(cover_image=url))

    @staticmethod
    def get_current_user(user: User) -> User:
        """The request context already holds the authenticated user."""
        return user.without_secrets()

    async def _store_media(self, user_id: str, update: UserUpdate) -> User:
        updated = await self._users.update_by_id(user_id, update)
        if updated is None:
            raise NotFoundError("User does not exist")
        return updated

    async def _require(self, user_id: str) -> User:
        user = await self._users.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User does not exist")
        return user
