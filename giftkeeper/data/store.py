"""
GiftKeeper — Generic entity store.

One EntityStore owns one homogeneous collection. Every mutation runs under
a single-writer lock, replaces the immutable StoreState, queues a
serialized snapshot for the background writer, then notifies subscribers.
Storage is best-effort: the in-memory state is the source of truth for the
session and is never rolled back when a write fails.

Missing ids are never an error: update/delete/get on an unknown id are
silent no-ops.
"""

from __future__ import annotations

import json
import logging
import operator
import threading
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Callable, ClassVar, Generic, Iterable, TypeVar

from pydantic import TypeAdapter

from giftkeeper.core import views
from giftkeeper.core.observation import Equality, Listener, Observable, Selector, Subscription
from giftkeeper.data.models import Currency

if TYPE_CHECKING:
    from giftkeeper.data.persistence import SnapshotWriter

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class StoreState(Generic[T]):
    """Everything a subscriber can observe about one store."""

    items: tuple[T, ...] = ()
    is_loading: bool = False
    error: str | None = None
    filters: Any = None
    sort_options: Any = None


class EntityStore(Observable[StoreState[T]], Generic[T]):
    """CRUD, filter/sort state and persistence for one entity type.

    Subclasses set the class attributes below and implement ``_build`` and
    ``_apply_patch``.
    """

    storage_key: ClassVar[str]
    entity_type: ClassVar[type]
    filters_type: ClassVar[type]
    sort_type: ClassVar[type]
    label: ClassVar[str] = "Entity"

    def __init__(
        self,
        writer: SnapshotWriter | None = None,
        default_currency: Currency | str | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        super().__init__()
        if default_currency is None:
            from giftkeeper.config import settings
            default_currency = settings.DEFAULT_CURRENCY

        self._writer = writer
        self._default_currency = Currency(default_currency)
        self._clock = clock or _utc_now
        self._lock = threading.RLock()
        self._items_adapter = TypeAdapter(tuple[self.entity_type, ...])
        self._sort_adapter = TypeAdapter(self.sort_type)
        self._state: StoreState[T] = self._initial_state()

    def _initial_state(self) -> StoreState[T]:
        return StoreState(filters=self.filters_type(), sort_options=self.sort_type())

    # -- snapshot access ------------------------------------------------------

    def _current_state(self) -> StoreState[T]:
        return self._state

    @property
    def state(self) -> StoreState[T]:
        return self._state

    @property
    def items(self) -> tuple[T, ...]:
        return self._state.items

    @property
    def default_currency(self) -> Currency:
        return self._default_currency

    def subscribe(
        self,
        listener: Listener,
        selector: Selector | None = None,
        equality: Equality = operator.eq,
    ) -> Subscription:
        with self._lock:
            return super().subscribe(listener, selector, equality)

    # -- hooks for subclasses -------------------------------------------------

    def _build(self, form: Any, entity_id: str, now: str) -> T:
        raise NotImplementedError

    def _apply_patch(self, entity: T, patch: Any, now: str) -> T:
        raise NotImplementedError

    # -- internals ------------------------------------------------------------

    def _now(self) -> str:
        return self._clock().isoformat()

    def _commit(self, persist: bool = True, **changes: Any) -> None:
        """Replace state, queue persistence, notify. Caller holds the lock."""
        self._state = replace(self._state, **changes)
        if persist:
            self._persist()
        self._publish(self._state)

    def _index_of(self, entity_id: str) -> int | None:
        for index, entity in enumerate(self._state.items):
            if entity.id == entity_id:
                return index
        return None

    def _modify(self, entity_id: str, change: Callable[[T, str], T]) -> T | None:
        """Replace one entity with ``change(entity, now)``; None if absent."""
        with self._lock:
            index = self._index_of(entity_id)
            if index is None:
                logger.debug("%s %s not found, nothing to change", self.label, entity_id)
                return None
            updated = change(self._state.items[index], self._now())
            items = self._state.items
            self._commit(items=items[:index] + (updated,) + items[index + 1:])
            return updated

    def _remove_where(self, predicate: Callable[[T], bool]) -> int:
        with self._lock:
            kept = tuple(e for e in self._state.items if not predicate(e))
            removed = len(self._state.items) - len(kept)
            if removed:
                self._commit(items=kept)
            return removed

    # -- persistence ----------------------------------------------------------

    def encode(self) -> str:
        """Serialize the persisted slice of state (items + sort, never filters)."""
        return json.dumps({
            "items": self._items_adapter.dump_python(self._state.items, mode="json"),
            "sort_options": self._sort_adapter.dump_python(
                self._state.sort_options, mode="json",
            ),
        })

    def decode(self, raw: str) -> tuple[tuple[T, ...], Any]:
        """Parse a persisted payload. Raises ValueError if it is malformed."""
        payload = json.loads(raw)
        if not isinstance(payload, dict):
            raise ValueError(f"Expected a JSON object, got {type(payload).__name__}")
        items = self._items_adapter.validate_python(payload.get("items", []))
        sort_raw = payload.get("sort_options")
        sort_options = (
            self._sort_adapter.validate_python(sort_raw)
            if sort_raw is not None else self.sort_type()
        )
        return items, sort_options

    def _persist(self) -> None:
        if self._writer is None:
            return
        self._writer.write(self.storage_key, self.encode(), on_error=self._on_persist_error)

    def _on_persist_error(self, exc: Exception) -> None:
        self.set_error(f"Could not save {self.label.lower()} data: {exc}")

    def hydrate(self) -> None:
        """Load the persisted snapshot. Call once at startup, before rendering.

        Read failures and malformed payloads leave the store empty.
        """
        if self._writer is None:
            return
        self.set_loading(True)
        try:
            raw = self._writer.read(self.storage_key)
        except Exception as exc:
            logger.warning("%s store: failed to load %s: %s", self.label, self.storage_key, exc)
            with self._lock:
                self._commit(persist=False, is_loading=False, error=f"Could not load data: {exc}")
            return

        if raw is None:
            self.set_loading(False)
            return

        try:
            items, sort_options = self.decode(raw)
        except ValueError as exc:
            logger.warning(
                "%s store: discarding malformed data under %s: %s",
                self.label, self.storage_key, exc,
            )
            self.set_loading(False)
            return

        with self._lock:
            self._commit(
                persist=False, items=items, sort_options=sort_options, is_loading=False,
            )
        logger.info("%s store: loaded %d item(s)", self.label, len(items))

    # -- CRUD -----------------------------------------------------------------

    def add(self, form: Any) -> T:
        """Create an entity from form data, append it and return it."""
        with self._lock:
            now = self._now()
            entity = self._build(form, str(uuid.uuid4()), now)
            self._commit(items=self._state.items + (entity,))
        logger.info("%s added: %s '%s'", self.label, entity.id, getattr(entity, "name", ""))
        return entity

    def update(self, entity_id: str, patch: Any) -> None:
        """Merge ``patch`` into the entity and bump updated_at."""
        updated = self._modify(entity_id, lambda e, now: self._apply_patch(e, patch, now))
        if updated is not None:
            logger.info("%s updated: %s", self.label, entity_id)

    def delete(self, entity_id: str) -> None:
        if self._remove_where(lambda e: e.id == entity_id):
            logger.info("%s deleted: %s", self.label, entity_id)
        else:
            logger.debug("%s %s not found, nothing to delete", self.label, entity_id)

    def get(self, entity_id: str) -> T | None:
        for entity in self._state.items:
            if entity.id == entity_id:
                return entity
        return None

    def import_items(self, items: Iterable[T]) -> None:
        """Append already-built entities as-is (restore/import path)."""
        incoming = tuple(items)
        if not incoming:
            return
        with self._lock:
            self._commit(items=self._state.items + incoming)
        logger.info("%s store: imported %d item(s)", self.label, len(incoming))

    # -- query state ----------------------------------------------------------

    def set_filters(self, filters: Any) -> None:
        with self._lock:
            self._commit(persist=False, filters=filters)

    def set_sort_options(self, sort_options: Any) -> None:
        with self._lock:
            self._commit(sort_options=sort_options)

    def clear_filters(self) -> None:
        with self._lock:
            self._commit(persist=False, filters=self.filters_type())

    def get_filtered(self) -> list[T]:
        state = self._state
        return views.project(state.items, state.filters, state.sort_options)

    # -- housekeeping ---------------------------------------------------------

    def set_loading(self, is_loading: bool) -> None:
        with self._lock:
            self._commit(persist=False, is_loading=is_loading)

    def set_error(self, error: str | None) -> None:
        with self._lock:
            self._commit(persist=False, error=error)

    def reset(self) -> None:
        """Back to the empty initial state, and forget the persisted copy."""
        with self._lock:
            initial = self._initial_state()
            self._commit(
                persist=False,
                items=initial.items,
                is_loading=initial.is_loading,
                error=initial.error,
                filters=initial.filters,
                sort_options=initial.sort_options,
            )
            if self._writer is not None:
                self._writer.remove(self.storage_key, on_error=self._on_persist_error)
        logger.info("%s store reset", self.label)
