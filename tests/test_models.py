"""Tests for giftkeeper.data.models — enums, entities and patches."""

from dataclasses import FrozenInstanceError, fields

import pytest

from giftkeeper.data.models import (
    GIFT_PATCH_FIELDS,
    OCCASION_PATCH_FIELDS,
    PERSON_PATCH_FIELDS,
    STATUS_TRANSITIONS,
    UNSET,
    Gift,
    GiftFilters,
    GiftPatch,
    GiftPriority,
    GiftStatus,
    Occasion,
    OccasionPatch,
    OccasionType,
    Person,
    PersonForm,
    PersonPatch,
    StatusHistoryEntry,
    allowed_transitions,
    apply_gift_patch,
    apply_occasion_patch,
    apply_person_patch,
    can_transition,
)


def _gift(**overrides) -> Gift:
    values = dict(
        id="g1", created_at="2026-01-01T00:00:00+00:00",
        updated_at="2026-01-01T00:00:00+00:00", person_id="p1", name="Book",
        price=20.0, hiding_spot="closet",
        status_history=(StatusHistoryEntry(GiftStatus.IDEA, "2026-01-01T00:00:00+00:00"),),
    )
    values.update(overrides)
    return Gift(**values)


class TestRanks:
    def test_status_rank_order(self):
        ordered = sorted(GiftStatus, key=lambda s: s.rank())
        assert ordered == [
            GiftStatus.IDEA, GiftStatus.PURCHASED, GiftStatus.WRAPPED,
            GiftStatus.HIDDEN, GiftStatus.GIVEN, GiftStatus.RETURNED,
        ]

    def test_priority_rank_order(self):
        assert GiftPriority.LOW.rank() < GiftPriority.MEDIUM.rank()
        assert GiftPriority.MEDIUM.rank() < GiftPriority.HIGH.rank()
        assert GiftPriority.HIGH.rank() < GiftPriority.MUST_HAVE.rank()

    def test_every_status_has_a_rank_and_transitions(self):
        for status in GiftStatus:
            assert isinstance(status.rank(), int)
            assert status in STATUS_TRANSITIONS


class TestTransitions:
    def test_idea_can_only_be_purchased(self):
        assert allowed_transitions(GiftStatus.IDEA) == (GiftStatus.PURCHASED,)

    def test_terminal_statuses(self):
        assert allowed_transitions(GiftStatus.GIVEN) == ()
        assert allowed_transitions(GiftStatus.RETURNED) == ()

    def test_can_transition(self):
        assert can_transition(GiftStatus.PURCHASED, GiftStatus.HIDDEN) is True
        assert can_transition(GiftStatus.IDEA, GiftStatus.RETURNED) is False


class TestEntities:
    def test_entities_are_frozen(self):
        gift = _gift()
        with pytest.raises(FrozenInstanceError):
            gift.name = "Other"

    def test_lists_are_coerced_to_tuples(self):
        person = Person(
            id="p1", created_at="t", updated_at="t", name="Alice",
            interests=["chess", "tea"],
        )
        assert person.interests == ("chess", "tea")

    def test_negative_person_budget_rejected(self):
        with pytest.raises(ValueError):
            Person(id="p1", created_at="t", updated_at="t", name="A", budget_amount=-1)

    def test_negative_form_budget_rejected(self):
        with pytest.raises(ValueError):
            PersonForm(name="A", budget_amount=-5)

    def test_negative_patch_budget_rejected(self):
        with pytest.raises(ValueError):
            PersonPatch(budget_amount=-0.01)

    def test_filters_coerce_lists(self):
        filters = GiftFilters(status=[GiftStatus.IDEA])
        assert filters == GiftFilters(status=(GiftStatus.IDEA,))


class TestPatches:
    def test_unset_is_falsy_singleton(self):
        assert not UNSET
        assert repr(UNSET) == "UNSET"
        assert type(UNSET)() is UNSET

    def test_patch_field_lists_cover_every_field(self):
        assert set(PERSON_PATCH_FIELDS) == {f.name for f in fields(PersonPatch)}
        assert set(GIFT_PATCH_FIELDS) == {f.name for f in fields(GiftPatch)}
        assert set(OCCASION_PATCH_FIELDS) == {f.name for f in fields(OccasionPatch)}

    def test_gift_patch_only_touches_provided_fields(self):
        gift = _gift()
        patched = apply_gift_patch(gift, GiftPatch(name="Novel"), "2026-02-01T00:00:00+00:00")
        assert patched.name == "Novel"
        assert patched.price == 20.0
        assert patched.hiding_spot == "closet"
        assert patched.updated_at == "2026-02-01T00:00:00+00:00"
        assert patched.created_at == gift.created_at
        assert gift.name == "Book"

    def test_none_clears_optional_field(self):
        patched = apply_gift_patch(_gift(), GiftPatch(price=None), "now")
        assert patched.price is None

    def test_generic_status_patch_leaves_history_alone(self):
        patched = apply_gift_patch(_gift(), GiftPatch(status=GiftStatus.RETURNED), "now")
        assert patched.status == GiftStatus.RETURNED
        assert len(patched.status_history) == 1

    def test_person_patch(self):
        person = Person(id="p1", created_at="t", updated_at="t", name="Alice")
        patched = apply_person_patch(person, PersonPatch(notes="likes tea", interests=["tea"]), "t2")
        assert patched.notes == "likes tea"
        assert patched.interests == ("tea",)
        assert patched.name == "Alice"

    def test_occasion_patch(self):
        occasion = Occasion(
            id="o1", created_at="t", updated_at="t", name="Birthday",
            type=OccasionType.BIRTHDAY, date="2026-05-01",
        )
        patched = apply_occasion_patch(occasion, OccasionPatch(is_recurring=True), "t2")
        assert patched.is_recurring is True
        assert patched.date == "2026-05-01"
        assert patched.updated_at == "t2"
