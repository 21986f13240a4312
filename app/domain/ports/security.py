from __future__ import annotations

from typing import Protocol


class PasswordHasher(Protocol):
    """One-way password hashing with a verify operation."""

    def hash(self, password: str) -> str:
        ...

    def verify(self, password: str, password_hash: str) -> bool:
        ...
