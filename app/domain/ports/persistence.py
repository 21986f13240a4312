from __future__ import annotations

from typing import Optional, Protocol

from ..models import NewUser, User, UserUpdate


class UserRepository(Protocol):
    """Persistence functions related to user accounts.

    The store offers no atomic "insert if absent": callers check for an
    existing username or email before calling ``create``. Implementations
    still raise ``ConflictError`` if a uniqueness constraint trips.
    """

    async def find_by_identity(
        self,
        username: Optional[str] = None,
        email: Optional[str] = None,
    ) -> Optional[User]:
        ...

    async def find_by_id(self, user_id: str, *, include_secrets: bool = False) -> Optional[User]:
        ...

    async def create(self, new_user: NewUser) -> User:
        ...

    async def update_by_id(self, user_id: str, update: UserUpdate) -> Optional[User]:
        ...
