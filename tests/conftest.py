"""Shared test fixtures and configuration.

Sets fake environment variables before any giftkeeper import so settings
are deterministic, and provides stores, a temp SQLite key/value store and a
stepping clock.
"""

import os

# Patch env vars BEFORE any giftkeeper imports
os.environ.setdefault("DATABASE_PATH", ":memory:")
os.environ.setdefault("DEFAULT_CURRENCY", "USD")
os.environ.setdefault("DEFAULT_REMINDER_DAYS", "14")
os.environ.setdefault("UPCOMING_WINDOW_DAYS", "30")

from datetime import datetime, timedelta, timezone

import pytest


class StepClock:
    """Deterministic clock: each call returns a time one second later."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        value = self.current
        self.current += timedelta(seconds=1)
        return value


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def tmp_db_path(tmp_path):
    """Return a temporary SQLite DB path."""
    return str(tmp_path / "test_giftkeeper.db")


@pytest.fixture
def kv_store(tmp_db_path):
    """Return a SQLiteKeyValueStore backed by a temp file."""
    from giftkeeper.adapters.sqlite_kv import SQLiteKeyValueStore
    return SQLiteKeyValueStore(db_path=tmp_db_path)


@pytest.fixture
def memory_kv():
    from giftkeeper.adapters.memory_kv import MemoryKeyValueStore
    return MemoryKeyValueStore()


@pytest.fixture
def writer(memory_kv):
    """A SnapshotWriter over an in-memory port, closed after the test."""
    from giftkeeper.data.persistence import SnapshotWriter
    w = SnapshotWriter(memory_kv)
    yield w
    w.close()


@pytest.fixture
def people_store(clock):
    """In-memory PeopleStore (no persistence)."""
    from giftkeeper.data.stores import PeopleStore
    return PeopleStore(clock=clock)


@pytest.fixture
def gift_store(clock):
    """In-memory GiftStore (no persistence)."""
    from giftkeeper.data.stores import GiftStore
    return GiftStore(clock=clock)


@pytest.fixture
def occasion_store(clock):
    """In-memory OccasionStore (no persistence)."""
    from giftkeeper.data.stores import OccasionStore
    return OccasionStore(clock=clock)


@pytest.fixture
def tracker(kv_store, clock):
    """A GiftTracker over a temp SQLite file, closed after the test."""
    from giftkeeper.core.tracker import GiftTracker
    t = GiftTracker(port=kv_store, clock=clock)
    t.hydrate()
    yield t
    t.close()
