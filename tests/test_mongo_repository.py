import pytest
from mongomock_motor import AsyncMongoMockClient

from app.domain.errors import ConflictError
from app.domain.models import NewUser, UserUpdate
from app.infrastructure.persistence.mongo import MongoUserRepository


@pytest.fixture
def repository() -> MongoUserRepository:
    client = AsyncMongoMockClient()
    return MongoUserRepository(client["accounts_test"])


def _new_user(**overrides) -> NewUser:
    fields = dict(
        username="alice",
        email="alice@example.com",
        full_name="Alice Liddell",
        avatar="https://media.example.test/avatar.png",
        password_hash="$2b$04$hash",
    )
    fields.update(overrides)
    return NewUser(**fields)


async def test_create_and_find_by_id_hides_secrets(repository):
    created = await repository.create(_new_user())

    loaded = await repository.find_by_id(created.id)
    with_secrets = await repository.find_by_id(created.id, include_secrets=True)

    assert loaded.username == "alice"
    assert loaded.password_hash == ""
    assert loaded.refresh_token == ""
    assert with_secrets.password_hash == "$2b$04$hash"
    assert loaded.cover_image == ""


async def test_find_by_identity_matches_either_field(repository):
    created = await repository.create(_new_user())

    by_username = await repository.find_by_identity(username="alice")
    by_email = await repository.find_by_identity(email="alice@example.com")
    by_either = await repository.find_by_identity(username="nobody", email="alice@example.com")

    assert by_username.id == by_email.id == by_either.id == created.id
    assert by_username.password_hash == "$2b$04$hash"
    assert await repository.find_by_identity(username="nobody") is None
    assert await repository.find_by_identity() is None


async def test_update_by_id_returns_post_update_record(repository):
    created = await repository.create(_new_user())

    updated = await repository.update_by_id(created.id, UserUpdate(refresh_token="token-1", full_name="Alice"))

    assert updated.full_name == "Alice"
    assert updated.refresh_token == ""
    stored = await repository.find_by_id(created.id, include_secrets=True)
    assert stored.refresh_token == "token-1"

    await repository.update_by_id(created.id, UserUpdate(refresh_token=""))
    cleared = await repository.find_by_id(created.id, include_secrets=True)
    assert cleared.refresh_token == ""


async def test_malformed_and_unknown_ids(repository):
    assert await repository.find_by_id("not-an-object-id") is None
    assert await repository.update_by_id("not-an-object-id", UserUpdate(full_name="x")) is None
    assert await repository.find_by_id("64b7f0c2a1e4c3d2b1a09f8e") is None


async def test_unique_indexes_turn_duplicates_into_conflicts(repository):
    await repository.ensure_indexes()
    alice = await repository.create(_new_user())
    bob = await repository.create(_new_user(username="bob", email="bob@example.com"))

    with pytest.raises(ConflictError) as excinfo:
        await repository.create(_new_user(email="other@example.com"))
    assert excinfo.value.status_code == 409

    with pytest.raises(ConflictError):
        await repository.update_by_id(bob.id, UserUpdate(email=alice.email))

    unchanged = await repository.find_by_id(bob.id)
    assert unchanged.email == "bob@example.com"
