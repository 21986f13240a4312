"""Shared fixtures: an in-memory user store, a recording media store and a wired app."""

from __future__ import annotations

import itertools
import uuid
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from app.application.services.profile_service import ProfileService
from app.application.services.session_service import SessionService
from app.core.app_factory import create_application
from app.core.config import Settings
from app.core.container import ApplicationContainer
from app.domain.errors import ConflictError
from app.domain.models import MediaFile, NewUser, User, UserUpdate
from app.infrastructure.security.passwords import BcryptPasswordHasher
from app.services.token_service import TokenIssuer

ACCESS_SECRET = "test-access-secret"
REFRESH_SECRET = "test-refresh-secret"


class InMemoryUserRepository:
    """Dictionary-backed user store honouring the same uniqueness rules as Mongo."""

    def __init__(self) -> None:
        self.records: Dict[str, User] = {}
        self.lookups = 0

    async def find_by_identity(self, username: Optional[str] = None, email: Optional[str] = None) -> Optional[User]:
        self.lookups += 1
        for user in self.records.values():
            if (username and user.username == username) or (email and user.email == email):
                return replace(user)
        return None

    async def find_by_id(self, user_id: str, *, include_secrets: bool = False) -> Optional[User]:
        user = self.records.get(user_id)
        if user is None:
            return None
        return replace(user) if include_secrets else user.without_secrets()

    async def create(self, new_user: NewUser) -> User:
        for user in self.records.values():
            if user.username == new_user.username or user.email == new_user.email:
                raise ConflictError("User with the email or username already exists")
        user = User(
            id=uuid.uuid4().hex,
            username=new_user.username,
            email=new_user.email,
            full_name=new_user.full_name,
            avatar=new_user.avatar,
            cover_image=new_user.cover_image,
            password_hash=new_user.password_hash,
        )
        self.records[user.id] = user
        return replace(user)

    async def update_by_id(self, user_id: str, update: UserUpdate) -> Optional[User]:
        user = self.records.get(user_id)
        if user is None:
            return None
        fields = update.as_fields()
        email = fields.get("email")
        if email and any(other.email == email for other in self.records.values() if other.id != user_id):
            raise ConflictError("User with the email or username already exists")
        updated = replace(user, updated_at=datetime.now(tz=timezone.utc), **fields)
        self.records[user_id] = updated
        return updated.without_secrets()

    def stored(self, user_id: str) -> User:
        return self.records[user_id]


class RecordingMediaStorage:
    """Pretends to upload files; filenames listed in ``failing`` yield no URL."""

    def __init__(self) -> None:
        self.uploads: List[MediaFile] = []
        self.failing: set = set()
        self._counter = itertools.count(1)

    async def upload(self, media: MediaFile) -> Optional[str]:
        self.uploads.append(media)
        if media.filename in self.failing:
            return None
        return f"https://media.example.test/{next(self._counter)}/{media.filename}"


class FrozenClock:
    def __init__(self, start: Optional[datetime] = None) -> None:
        self.now = start or datetime.now(tz=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def avatar_file(name: str = "avatar.png") -> MediaFile:
    return MediaFile(filename=name, content=b"\x89PNG fake image", content_type="image/png")


@pytest.fixture
def settings(monkeypatch) -> Settings:
    monkeypatch.setenv("ACCESS_TOKEN_SECRET", ACCESS_SECRET)
    monkeypatch.setenv("REFRESH_TOKEN_SECRET", REFRESH_SECRET)
    monkeypatch.setenv("ACCESS_TOKEN_EXPIRY_MINUTES", "15")
    monkeypatch.setenv("REFRESH_TOKEN_EXPIRY_DAYS", "10")
    monkeypatch.setenv("COOKIE_SECURE", "true")
    monkeypatch.delenv("CORS_ALLOW_ORIGINS", raising=False)
    return Settings()


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def hasher() -> BcryptPasswordHasher:
    return BcryptPasswordHasher(rounds=4)


@pytest.fixture
def token_issuer(clock) -> TokenIssuer:
    return TokenIssuer(
        access_secret=ACCESS_SECRET,
        refresh_secret=REFRESH_SECRET,
        access_ttl=timedelta(minutes=15),
        refresh_ttl=timedelta(days=10),
        clock=clock,
    )


@pytest.fixture
def users() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def media() -> RecordingMediaStorage:
    return RecordingMediaStorage()


@pytest.fixture
def session_service(users, hasher, token_issuer) -> SessionService:
    return SessionService(users, hasher, token_issuer)


@pytest.fixture
def profile_service(users, hasher, media) -> ProfileService:
    return ProfileService(users, hasher, media)


@pytest.fixture
async def alice(profile_service) -> User:
    return await profile_service.register(
        full_name="Alice Liddell",
        username="Alice",
        email="alice@example.com",
        password="wonderland",
        avatar=avatar_file(),
    )


@pytest.fixture
def container(settings, users, media, token_issuer, session_service, profile_service) -> ApplicationContainer:
    return ApplicationContainer(
        settings=settings,
        users=users,
        media_storage=media,
        token_issuer=token_issuer,
        session_service=session_service,
        profile_service=profile_service,
    )


@pytest.fixture
def app(container):
    return create_application(container=container)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app, base_url="https://testserver")
