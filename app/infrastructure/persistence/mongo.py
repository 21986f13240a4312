from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from ...domain.errors import ConflictError
from ...domain.models import NewUser, User, UserUpdate
from ...domain.ports.persistence import UserRepository

logger = logging.getLogger(__name__)

_SECRET_FIELDS = {"password_hash": 0, "refresh_token": 0}
_DUPLICATE_MESSAGE = "User with the email or username already exists"


class MongoUserRepository(UserRepository):
    """MongoDB-backed implementation of the user repository."""

    def __init__(self, database: AsyncIOMotorDatabase, collection_name: str = "users") -> None:
        self._collection = database[collection_name]

    async def ensure_indexes(self) -> None:
        await self._collection.create_index([("username", ASCENDING)], unique=True)
        await self._collection.create_index([("email", ASCENDING)], unique=True)

    async def find_by_identity(
        self,
        username: Optional[str] = None,
        email: Optional[str] = None,
    ) -> Optional[User]:
        clauses: List[Dict[str, Any]] = []
        if username:
            clauses.append({"username": username})
        if email:
            clauses.append({"email": email})
        if not clauses:
            return None
        document = await self._collection.find_one({"$or": clauses})
        return self._document_to_user(document) if document else None

    async def find_by_id(self, user_id: str, *, include_secrets: bool = False) -> Optional[User]:
        object_id = self._object_id(user_id)
        if object_id is None:
            return None
        projection = None if include_secrets else _SECRET_FIELDS
        document = await self._collection.find_one({"_id": object_id}, projection)
        return self._document_to_user(document) if document else None

    async def create(self, new_user: NewUser) -> User:
        now = _utcnow()
        document = {
            "username": new_user.username,
            "email": new_user.email,
            "full_name": new_user.full_name,
            "avatar": new_user.avatar,
            "cover_image": new_user.cover_image,
            "password_hash": new_user.password_hash,
            "refresh_token": "",
            "created_at": now,
            "updated_at": now,
        }
        try:
            result = await self._collection.insert_one(document)
        except DuplicateKeyError as exc:
            raise ConflictError(_DUPLICATE_MESSAGE) from exc
        document["_id"] = result.inserted_id
        return self._document_to_user(document)

    async def update_by_id(self, user_id: str, update: UserUpdate) -> Optional[User]:
        object_id = self._object_id(user_id)
        if object_id is None:
            return None
        fields = update.as_fields()
        fields["updated_at"] = _utcnow()
        try:
            document = await self._collection.find_one_and_update(
                {"_id": object_id},
                {"$set": fields},
                projection=_SECRET_FIELDS,
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError as exc:
            raise ConflictError(_DUPLICATE_MESSAGE) from exc
        return self._document_to_user(document) if document else None

    @staticmethod
    def _object_id(user_id: str) -> Optional[ObjectId]:
        try:
            return ObjectId(user_id)
        except (InvalidId, TypeError):
            logger.debug("Ignoring malformed user id %r", user_id)
            return None

    @staticmethod
    def _document_to_user(document: Dict[str, Any]) -> User:
        return User(
            id=str(document["_id"]),
            username=document["username"],
            email=document["email"],
            full_name=document.get("full_name", ""),
            avatar=document.get("avatar", ""),
            cover_image=document.get("cover_image") or "",
            password_hash=document.get("password_hash", ""),
            refresh_token=document.get("refresh_token") or "",
            created_at=_as_utc(document.get("created_at")),
            updated_at=_as_utc(document.get("updated_at")),
        )


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def _as_utc(value: Optional[datetime]) -> datetime:
    # Mongo hands datetimes back naive unless the client is tz_aware.
    if value is None:
        return _utcnow()
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
