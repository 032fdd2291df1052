"""Key/value port — abstract interface for durable blob storage.

Stores depend on this protocol, never on a specific backend.
"""

from __future__ import annotations

from typing import Protocol


class PersistenceError(Exception):
    """Raised when a key/value backend operation fails."""


class KeyValuePort(Protocol):
    """Async key → serialized-blob storage used by the entity stores."""

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...

    async def remove(self, key: str) -> None: ...
