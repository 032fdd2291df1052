"""
GiftKeeper — Application wiring.

GiftTracker builds the three stores around one SnapshotWriter, hydrates them
at startup and performs the caller-side orchestration the stores
deliberately leave out, such as cascading a person's deletion.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Callable

from giftkeeper.core import aggregator
from giftkeeper.data.persistence import SnapshotWriter
from giftkeeper.data.stores import GiftStore, OccasionStore, PeopleStore

if TYPE_CHECKING:
    from giftkeeper.data.models import BudgetSummary, Occasion, Person, SpendingReport
    from giftkeeper.ports.kv_port import KeyValuePort

logger = logging.getLogger(__name__)


class GiftTracker:
    """Owns the people, gift and occasion stores for one user."""

    def __init__(
        self,
        port: KeyValuePort | None = None,
        default_currency: str | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if port is None:
            from giftkeeper.adapters.sqlite_kv import SQLiteKeyValueStore
            port = SQLiteKeyValueStore()

        self.writer = SnapshotWriter(port)
        self.people = PeopleStore(self.writer, default_currency, clock)
        self.gifts = GiftStore(self.writer, default_currency, clock)
        self.occasions = OccasionStore(self.writer, default_currency, clock)

    def hydrate(self) -> None:
        """Load all three stores from storage. Call once before first use."""
        for store in (self.people, self.gifts, self.occasions):
            store.hydrate()
        logger.info(
            "GiftTracker ready: %d people, %d gifts, %d occasions",
            len(self.people.items), len(self.gifts.items), len(self.occasions.items),
        )

    def delete_person(self, person_id: str) -> None:
        """Delete a person together with their gifts and occasions."""
        self.gifts.delete_gifts_for_person(person_id)
        self.occasions.delete_occasions_for_person(person_id)
        self.people.delete_person(person_id)

    def reset(self) -> None:
        """Wipe every store and its persisted copy."""
        for store in (self.people, self.gifts, self.occasions):
            store.reset()

    # -- cross-store queries ----------------------------------------------------

    def total_spent_for_person(self, person_id: str) -> float:
        return aggregator.total_spent_for_person(self.gifts.items, person_id)

    def next_occasion_for_person(
        self, person_id: str, now: datetime | None = None,
    ) -> Occasion | None:
        return aggregator.next_occasion_for_person(self.occasions.items, person_id, now)

    def budget_summary_for_person(self, person_id: str) -> BudgetSummary | None:
        person = self.people.get(person_id)
        if person is None:
            return None
        return aggregator.budget_summary_for_person(person, self.gifts.items)

    def people_by_next_occasion(self, now: datetime | None = None) -> list[Person]:
        return aggregator.people_by_next_occasion(
            self.people.get_filtered(), self.occasions.items, now,
        )

    def spending_report(self, period: str = "year", now: datetime | None = None) -> SpendingReport:
        return aggregator.spending_report(
            self.people.items,
            self.gifts.items,
            self.occasions.items,
            period=period,
            currency=self.gifts.default_currency,
            now=now,
        )

    # -- lifecycle ------------------------------------------------------------

    def flush(self) -> None:
        """Wait until every queued write has reached storage."""
        self.writer.flush()

    def close(self) -> None:
        self.writer.close()

    def __enter__(self) -> GiftTracker:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
