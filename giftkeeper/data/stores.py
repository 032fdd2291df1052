"""
GiftKeeper — People, gift and occasion stores.

Each store owns its collection exclusively. Cross-store work (cascading a
person's deletion to their gifts and occasions, spend totals, countdowns)
is done by the caller with each store's own operations and the read-only
functions in giftkeeper.core.aggregator.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime

from giftkeeper.core import aggregator
from giftkeeper.data.models import (
    Gift,
    GiftFilters,
    GiftForm,
    GiftPatch,
    GiftReaction,
    GiftSortOptions,
    GiftStatus,
    Occasion,
    OccasionFilters,
    OccasionForm,
    OccasionPatch,
    OccasionSortOptions,
    OccasionType,
    Person,
    PersonFilters,
    PersonForm,
    PersonPatch,
    PersonSortOptions,
    RelationshipCategory,
    StatusHistoryEntry,
    apply_gift_patch,
    apply_occasion_patch,
    apply_person_patch,
)
from giftkeeper.data.store import EntityStore

logger = logging.getLogger(__name__)

PEOPLE_KEY = "gift-tracker-people"
GIFTS_KEY = "gift-tracker-gifts"
OCCASIONS_KEY = "gift-tracker-occasions"


class PeopleStore(EntityStore[Person]):
    """The people the user shops for."""

    storage_key = PEOPLE_KEY
    entity_type = Person
    filters_type = PersonFilters
    sort_type = PersonSortOptions
    label = "Person"

    def _build(self, form: PersonForm, entity_id: str, now: str) -> Person:
        return Person(
            id=entity_id,
            created_at=now,
            updated_at=now,
            name=form.name,
            relationship=form.relationship,
            custom_relationship=form.custom_relationship,
            photo_uri=form.photo_uri,
            dates=tuple(form.dates),
            notes=form.notes,
            sizes=form.sizes,
            interests=tuple(form.interests),
            allergies=tuple(form.allergies),
            budget_amount=form.budget_amount,
            budget_currency=form.budget_currency or self.default_currency,
        )

    def _apply_patch(self, entity: Person, patch: PersonPatch, now: str) -> Person:
        return apply_person_patch(entity, patch, now)

    def add_person(self, form: PersonForm) -> Person:
        return self.add(form)

    def update_person(self, person_id: str, patch: PersonPatch) -> None:
        self.update(person_id, patch)

    def delete_person(self, person_id: str) -> None:
        """Remove the person only.

        Callers also run GiftStore.delete_gifts_for_person and
        OccasionStore.delete_occasions_for_person (see GiftTracker.delete_person).
        """
        self.delete(person_id)

    def get_person(self, person_id: str) -> Person | None:
        return self.get(person_id)

    def get_filtered_people(self) -> list[Person]:
        return self.get_filtered()

    def people_by_relationship(self, relationship: RelationshipCategory) -> list[Person]:
        return [p for p in self.items if p.relationship == relationship]


class GiftStore(EntityStore[Gift]):
    """Gift ideas and their journey from idea to given.

    Status changes that must be recorded go through update_status() /
    mark_as_given(), which append to the gift's status history. The generic
    update_gift() stays permissive and can set any field, status included,
    without touching history. Neither path checks STATUS_TRANSITIONS; that
    is the caller's job.
    """

    storage_key = GIFTS_KEY
    entity_type = Gift
    filters_type = GiftFilters
    sort_type = GiftSortOptions
    label = "Gift"

    def _build(self, form: GiftForm, entity_id: str, now: str) -> Gift:
        return Gift(
            id=entity_id,
            created_at=now,
            updated_at=now,
            person_id=form.person_id,
            name=form.name,
            description=form.description,
            url=form.url,
            price=form.price,
            currency=form.currency or self.default_currency,
            priority=form.priority,
            category=form.category,
            source=form.source,
            status=form.status,
            status_history=(StatusHistoryEntry(status=form.status, date=now),),
            occasion_id=form.occasion_id,
            photos=tuple(form.photos),
            voice_notes=tuple(form.voice_notes),
            notes=form.notes,
            hiding_spot=form.hiding_spot,
            receipt_uri=form.receipt_uri,
            return_deadline=form.return_deadline,
            is_regift=form.is_regift,
        )

    def _apply_patch(self, entity: Gift, patch: GiftPatch, now: str) -> Gift:
        return apply_gift_patch(entity, patch, now)

    # -- CRUD -----------------------------------------------------------------

    def add_gift(self, form: GiftForm) -> Gift:
        return self.add(form)

    def update_gift(self, gift_id: str, patch: GiftPatch) -> None:
        self.update(gift_id, patch)

    def delete_gift(self, gift_id: str) -> None:
        self.delete(gift_id)

    def get_gift(self, gift_id: str) -> Gift | None:
        return self.get(gift_id)

    def get_filtered_gifts(self) -> list[Gift]:
        return self.get_filtered()

    # -- status management ----------------------------------------------------

    def update_status(self, gift_id: str, status: GiftStatus, notes: str | None = None) -> None:
        """Move a gift to ``status`` and record it in the history.

        The hiding spot is cleared unless the new status is HIDDEN.
        """
        def change(gift: Gift, now: str) -> Gift:
            return replace(
                gift,
                status=status,
                status_history=gift.status_history + (
                    StatusHistoryEntry(status=status, date=now, notes=notes),
                ),
                hiding_spot=gift.hiding_spot if status == GiftStatus.HIDDEN else None,
                updated_at=now,
            )

        if self._modify(gift_id, change) is not None:
            logger.info("Gift %s status -> %s", gift_id, GiftStatus(status).value)

    def set_hiding_spot(self, gift_id: str, hiding_spot: str) -> None:
        self._modify(
            gift_id, lambda gift, now: replace(gift, hiding_spot=hiding_spot, updated_at=now),
        )

    def mark_as_given(
        self,
        gift_id: str,
        date_given: str | None = None,
        reaction: GiftReaction | None = None,
    ) -> None:
        """Record the gift as given on ``date_given`` (default: now)."""
        def change(gift: Gift, now: str) -> Gift:
            return replace(
                gift,
                status=GiftStatus.GIVEN,
                status_history=gift.status_history + (
                    StatusHistoryEntry(status=GiftStatus.GIVEN, date=now),
                ),
                date_given=date_given or now,
                reaction=reaction,
                updated_at=now,
            )

        if self._modify(gift_id, change) is not None:
            logger.info("Gift %s marked as given", gift_id)

    def set_reaction(self, gift_id: str, reaction: GiftReaction) -> None:
        self._modify(
            gift_id, lambda gift, now: replace(gift, reaction=reaction, updated_at=now),
        )

    # -- bulk -----------------------------------------------------------------

    def delete_gifts_for_person(self, person_id: str) -> None:
        removed = self._remove_where(lambda g: g.person_id == person_id)
        logger.info("Deleted %d gift(s) for person %s", removed, person_id)

    # -- queries over this store's snapshot -----------------------------------

    def gifts_for_person(self, person_id: str) -> list[Gift]:
        return aggregator.gifts_for_person(self.items, person_id)

    def gift_history_for_person(self, person_id: str) -> list[Gift]:
        return aggregator.gift_history_for_person(self.items, person_id)

    def gifts_for_occasion(self, occasion_id: str) -> list[Gift]:
        return aggregator.gifts_for_occasion(self.items, occasion_id)

    def gifts_by_status(self, status: GiftStatus) -> list[Gift]:
        return aggregator.gifts_by_status(self.items, status)

    def total_spent_for_person(self, person_id: str) -> float:
        return aggregator.total_spent_for_person(self.items, person_id)


class OccasionStore(EntityStore[Occasion]):
    """Birthdays, holidays and other dated occasions."""

    storage_key = OCCASIONS_KEY
    entity_type = Occasion
    filters_type = OccasionFilters
    sort_type = OccasionSortOptions
    label = "Occasion"

    def __init__(self, *args, default_reminder_days: int | None = None, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        if default_reminder_days is None:
            from giftkeeper.config import settings
            default_reminder_days = settings.DEFAULT_REMINDER_DAYS
        self._default_reminder_days = default_reminder_days

    def _build(self, form: OccasionForm, entity_id: str, now: str) -> Occasion:
        reminder_days = form.reminder_days
        if reminder_days is None:
            reminder_days = self._default_reminder_days
        return Occasion(
            id=entity_id,
            created_at=now,
            updated_at=now,
            person_id=form.person_id,
            name=form.name,
            type=form.type,
            date=form.date,
            is_recurring=form.is_recurring,
            reminder_days=reminder_days,
            budget_amount=form.budget_amount,
            budget_currency=form.budget_currency or self.default_currency,
            notes=form.notes,
        )

    def _apply_patch(self, entity: Occasion, patch: OccasionPatch, now: str) -> Occasion:
        return apply_occasion_patch(entity, patch, now)

    def add_occasion(self, form: OccasionForm) -> Occasion:
        return self.add(form)

    def update_occasion(self, occasion_id: str, patch: OccasionPatch) -> None:
        self.update(occasion_id, patch)

    def delete_occasion(self, occasion_id: str) -> None:
        self.delete(occasion_id)

    def get_occasion(self, occasion_id: str) -> Occasion | None:
        return self.get(occasion_id)

    def get_filtered_occasions(self) -> list[Occasion]:
        return self.get_filtered()

    def delete_occasions_for_person(self, person_id: str) -> None:
        removed = self._remove_where(lambda o: o.person_id == person_id)
        logger.info("Deleted %d occasion(s) for person %s", removed, person_id)

    # -- queries over this store's snapshot -----------------------------------

    def occasions_for_person(self, person_id: str, now: datetime | None = None) -> list[Occasion]:
        return aggregator.occasions_for_person(self.items, person_id, now)

    def next_occasion_for_person(
        self, person_id: str, now: datetime | None = None,
    ) -> Occasion | None:
        return aggregator.next_occasion_for_person(self.items, person_id, now)

    def upcoming_occasions(self, days: int = 30, now: datetime | None = None) -> list[Occasion]:
        return aggregator.upcoming_occasions(self.items, days, now)

    def past_occasions(self, now: datetime | None = None) -> list[Occasion]:
        return aggregator.past_occasions(self.items, now)

    def occasions_by_type(self, type: OccasionType) -> list[Occasion]:
        return aggregator.occasions_by_type(self.items, type)
