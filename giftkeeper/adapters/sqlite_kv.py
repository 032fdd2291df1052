"""SQLite key/value adapter — implements KeyValuePort.

Uses the stdlib sqlite3 module (sync) wrapped with asyncio.to_thread for
async compatibility. Each call opens its own connection, so the adapter is
safe to use from the persistence writer thread.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path

from giftkeeper.ports.kv_port import PersistenceError

logger = logging.getLogger(__name__)


class SQLiteKeyValueStore:
    """SQLite implementation of KeyValuePort."""

    def __init__(self, db_path: str | None = None) -> None:
        if db_path is None:
            from giftkeeper.config import settings
            db_path = settings.DATABASE_PATH

        self._db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        """Create the kv_store table if it doesn't exist."""
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS kv_store (
                    key         TEXT PRIMARY KEY,
                    value       TEXT NOT NULL,
                    updated_at  TEXT NOT NULL
                )
            """)
        logger.debug("kv_store table initialized at %s", self._db_path)

    # -- sync helpers, run off the event loop -------------------------------

    def _get_sync(self, key: str) -> str | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT value FROM kv_store WHERE key = ?", (key,)
            ).fetchone()
        if row is None:
            return None
        return row["value"]

    def _set_sync(self, key: str, value: str) -> None:
        now = datetime.now(timezone.utc).isoformat()
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, value, now),
            )

    def _remove_sync(self, key: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))

    # -- KeyValuePort -------------------------------------------------------

    async def get(self, key: str) -> str | None:
        try:
            return await asyncio.to_thread(self._get_sync, key)
        except sqlite3.Error as exc:
            raise PersistenceError(f"Failed to read {key!r}: {exc}") from exc

    async def set(self, key: str, value: str) -> None:
        try:
            await asyncio.to_thread(self._set_sync, key, value)
        except sqlite3.Error as exc:
            raise PersistenceError(f"Failed to write {key!r}: {exc}") from exc
        logger.debug("Wrote %d bytes under %s", len(value), key)

    async def remove(self, key: str) -> None:
        try:
            await asyncio.to_thread(self._remove_sync, key)
        except sqlite3.Error as exc:
            raise PersistenceError(f"Failed to remove {key!r}: {exc}") from exc
        logger.debug("Removed %s", key)
