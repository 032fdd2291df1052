"""In-process key/value adapter — implements KeyValuePort.

Nothing survives the process; useful for previews and tests.
"""

from __future__ import annotations


class MemoryKeyValueStore:
    """Dict-backed implementation of KeyValuePort."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        """Return a copy of everything stored."""
        return dict(self._data)
