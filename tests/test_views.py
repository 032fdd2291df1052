"""Tests for giftkeeper.core.views — pure filter/sort projection."""

import pytest

from giftkeeper.core.views import collation_key, project
from giftkeeper.data.models import (
    Gift,
    GiftCategory,
    GiftFilters,
    GiftPriority,
    GiftSortField,
    GiftSortOptions,
    GiftStatus,
    Occasion,
    OccasionFilters,
    OccasionSortOptions,
    OccasionType,
    Person,
    PersonFilters,
    PersonSortField,
    PersonSortOptions,
    RelationshipCategory,
    SortDirection,
)


def _gift(gift_id: str, name: str = "Gift", **overrides) -> Gift:
    stamp = overrides.pop("created_at", "2026-01-01T00:00:00+00:00")
    return Gift(
        id=gift_id, created_at=stamp, updated_at=stamp,
        person_id=overrides.pop("person_id", "p1"), name=name, **overrides,
    )


def _names(items) -> list[str]:
    return [i.name for i in items]


class TestGiftFilters:
    def test_status_and_price_filters_are_conjunctive(self):
        gifts = [
            _gift("1", "Cheap idea", status=GiftStatus.IDEA, price=10),
            _gift("2", "Pricey idea", status=GiftStatus.IDEA, price=500),
            _gift("3", "Cheap bought", status=GiftStatus.PURCHASED, price=15),
            _gift("4", "Mid idea", status=GiftStatus.IDEA, price=50),
        ]
        filters = GiftFilters(status=(GiftStatus.IDEA,), price_min=10, price_max=50)
        result = project(gifts, filters, None)
        assert _names(result) == ["Cheap idea", "Mid idea"]
        for gift in result:
            assert gift.status == GiftStatus.IDEA
            assert 10 <= gift.price <= 50

    def test_multi_value_dimension_is_disjunctive(self):
        gifts = [
            _gift("1", "A", status=GiftStatus.IDEA),
            _gift("2", "B", status=GiftStatus.WRAPPED),
            _gift("3", "C", status=GiftStatus.GIVEN),
        ]
        filters = GiftFilters(status=(GiftStatus.IDEA, GiftStatus.GIVEN))
        assert _names(project(gifts, filters, None)) == ["A", "C"]

    def test_missing_price_excluded_once_a_bound_is_set(self):
        gifts = [_gift("1", "No price"), _gift("2", "Priced", price=5)]
        assert _names(project(gifts, GiftFilters(price_max=100), None)) == ["Priced"]
        assert _names(project(gifts, GiftFilters(), None)) == ["No price", "Priced"]

    def test_price_bounds_inclusive(self):
        gifts = [_gift("1", "Edge", price=25)]
        assert project(gifts, GiftFilters(price_min=25, price_max=25), None) == gifts

    def test_priority_and_category(self):
        gifts = [
            _gift("1", "A", priority=GiftPriority.HIGH, category=GiftCategory.BOOKS),
            _gift("2", "B", priority=GiftPriority.HIGH, category=GiftCategory.BEAUTY),
            _gift("3", "C", priority=GiftPriority.LOW, category=GiftCategory.BOOKS),
        ]
        filters = GiftFilters(priority=(GiftPriority.HIGH,), category=(GiftCategory.BOOKS,))
        assert _names(project(gifts, filters, None)) == ["A"]

    def test_search_is_case_insensitive_across_fields(self):
        gifts = [
            _gift("1", "Kindle"),
            _gift("2", "Scarf", description="Soft WOOL scarf"),
            _gift("3", "Mug", notes="wool-patterned"),
            _gift("4", "Lamp"),
        ]
        result = project(gifts, GiftFilters(search_query="wool"), None)
        assert _names(result) == ["Scarf", "Mug"]

    def test_empty_search_query_matches_everything(self):
        gifts = [_gift("1", "A"), _gift("2", "B")]
        assert len(project(gifts, GiftFilters(search_query=""), None)) == 2


class TestGiftSorting:
    def test_price_desc_and_asc(self):
        gifts = [_gift("1", price=50), _gift("2", price=100), _gift("3", price=25)]
        desc = project(gifts, None, GiftSortOptions(GiftSortField.PRICE, SortDirection.DESC))
        asc = project(gifts, None, GiftSortOptions(GiftSortField.PRICE, SortDirection.ASC))
        assert [g.price for g in desc] == [100, 50, 25]
        assert [g.price for g in asc] == [25, 50, 100]

    def test_missing_price_sorts_as_zero(self):
        gifts = [_gift("1", "Priced", price=5), _gift("2", "Free")]
        result = project(gifts, None, GiftSortOptions(GiftSortField.PRICE, SortDirection.ASC))
        assert _names(result) == ["Free", "Priced"]

    def test_priority_uses_rank_not_string_order(self):
        gifts = [
            _gift("1", "must", priority=GiftPriority.MUST_HAVE),
            _gift("2", "low", priority=GiftPriority.LOW),
            _gift("3", "high", priority=GiftPriority.HIGH),
            _gift("4", "medium", priority=GiftPriority.MEDIUM),
        ]
        result = project(gifts, None, GiftSortOptions(GiftSortField.PRIORITY, SortDirection.ASC))
        assert _names(result) == ["low", "medium", "high", "must"]

    def test_status_uses_rank(self):
        gifts = [
            _gift("1", "returned", status=GiftStatus.RETURNED),
            _gift("2", "idea", status=GiftStatus.IDEA),
            _gift("3", "hidden", status=GiftStatus.HIDDEN),
            _gift("4", "given", status=GiftStatus.GIVEN),
        ]
        result = project(gifts, None, GiftSortOptions(GiftSortField.STATUS, SortDirection.DESC))
        assert _names(result) == ["returned", "given", "hidden", "idea"]

    def test_created_at_compares_instants(self):
        gifts = [
            _gift("1", "later", created_at="2026-01-01T10:00:00+02:00"),
            _gift("2", "earlier", created_at="2026-01-01T09:00:00+00:00"),
        ]
        # 10:00+02:00 is 08:00 UTC, before 09:00 UTC
        result = project(gifts, None, GiftSortOptions(GiftSortField.CREATED_AT, SortDirection.ASC))
        assert _names(result) == ["later", "earlier"]

    def test_name_sort_ignores_case_and_accents(self):
        gifts = [_gift("1", "banana"), _gift("2", "Éclair"), _gift("3", "apple")]
        result = project(gifts, None, GiftSortOptions(GiftSortField.NAME, SortDirection.ASC))
        assert _names(result) == ["apple", "banana", "Éclair"]

    def test_equal_keys_keep_collection_order_both_directions(self):
        gifts = [_gift("1", "first", price=10), _gift("2", "second", price=10)]
        for direction in SortDirection:
            result = project(gifts, None, GiftSortOptions(GiftSortField.PRICE, direction))
            assert _names(result) == ["first", "second"]

    def test_source_is_not_mutated(self):
        gifts = [_gift("1", price=50), _gift("2", price=100), _gift("3", price=25)]
        snapshot = list(gifts)
        result = project(gifts, GiftFilters(), GiftSortOptions(GiftSortField.PRICE, SortDirection.ASC))
        assert gifts == snapshot
        assert result is not gifts

    def test_same_inputs_same_output(self):
        gifts = (_gift("1", "b", price=3), _gift("2", "a", price=3))
        options = GiftSortOptions(GiftSortField.NAME, SortDirection.ASC)
        assert project(gifts, GiftFilters(), options) == project(gifts, GiftFilters(), options)


class TestPeopleAndOccasions:
    def _person(self, person_id, name, relationship=RelationshipCategory.FRIEND, notes=""):
        return Person(
            id=person_id, created_at="2026-01-01T00:00:00+00:00",
            updated_at="2026-01-01T00:00:00+00:00", name=name,
            relationship=relationship, notes=notes,
        )

    def test_person_relationship_and_search(self):
        people = [
            self._person("1", "Alice", RelationshipCategory.FAMILY, notes="loves gardening"),
            self._person("2", "Bob", RelationshipCategory.FAMILY),
            self._person("3", "Carol", RelationshipCategory.FRIEND, notes="garden gnome fan"),
        ]
        filters = PersonFilters(relationship=(RelationshipCategory.FAMILY,), search_query="GARDEN")
        assert _names(project(people, filters, PersonSortOptions())) == ["Alice"]

    def test_next_occasion_sort_falls_back_to_name(self):
        people = [self._person("1", "Zed"), self._person("2", "Amy")]
        options = PersonSortOptions(PersonSortField.NEXT_OCCASION, SortDirection.ASC)
        assert _names(project(people, None, options)) == ["Amy", "Zed"]

    def test_occasion_filters_and_date_sort(self):
        def occ(oid, name, date, person_id=None, type=OccasionType.BIRTHDAY):
            return Occasion(
                id=oid, created_at="2026-01-01T00:00:00+00:00",
                updated_at="2026-01-01T00:00:00+00:00", name=name, type=type,
                date=date, person_id=person_id,
            )

        occasions = [
            occ("1", "Late", "2026-12-01", person_id="p1"),
            occ("2", "Early", "2026-02-01", person_id="p1"),
            occ("3", "Other", "2026-01-01", person_id="p2"),
            occ("4", "Xmas", "2026-12-25", person_id="p1", type=OccasionType.CHRISTMAS),
        ]
        filters = OccasionFilters(type=(OccasionType.BIRTHDAY,), person_id="p1")
        assert _names(project(occasions, filters, OccasionSortOptions())) == ["Early", "Late"]


class TestHelpers:
    def test_collation_key_handles_none(self):
        assert collation_key(None) == ("", "")

    def test_unknown_filters_type_rejected(self):
        with pytest.raises(TypeError):
            project([], object(), None)
