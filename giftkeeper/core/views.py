"""Derived views — filtered, sorted projections of a store's collection.

``project()`` is a pure function of (items, filters, sort options): it never
mutates its input and holds no state, so any caller may recompute it at
will.
"""

from __future__ import annotations

import logging
import unicodedata
from typing import Any, Callable, Sequence, TypeVar

from giftkeeper.core.dates import parse_instant, parse_occasion_date
from giftkeeper.data.models import (
    Gift,
    GiftFilters,
    GiftPriority,
    GiftSortOptions,
    GiftStatus,
    Occasion,
    OccasionFilters,
    OccasionSortOptions,
    Person,
    PersonFilters,
    PersonSortOptions,
    SortDirection,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

SortKey = Callable[[Any], Any]


def collation_key(text: str | None) -> tuple[str, str]:
    """Sort key for display strings: accents and case ignored first.

    Approximates locale-aware collation without depending on the host
    locale: "Éclair" sorts next to "eclair", not after "z".
    """
    text = text or ""
    decomposed = unicodedata.normalize("NFKD", text)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base.casefold(), text


def _contains(query: str, *fields: str | None) -> bool:
    """Case-insensitive substring match against any of the fields."""
    needle = query.casefold()
    return any(needle in field.casefold() for field in fields if field)


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------


def _person_matches(person: Person, filters: PersonFilters) -> bool:
    if filters.relationship and person.relationship not in filters.relationship:
        return False
    if filters.search_query and not _contains(
        filters.search_query, person.name, person.notes,
    ):
        return False
    return True


def _gift_matches(gift: Gift, filters: GiftFilters) -> bool:
    if filters.status and gift.status not in filters.status:
        return False
    if filters.priority and gift.priority not in filters.priority:
        return False
    if filters.category and gift.category not in filters.category:
        return False
    if filters.price_min is not None and (gift.price is None or gift.price < filters.price_min):
        return False
    if filters.price_max is not None and (gift.price is None or gift.price > filters.price_max):
        return False
    if filters.search_query and not _contains(
        filters.search_query, gift.name, gift.description, gift.notes,
    ):
        return False
    return True


def _occasion_matches(occasion: Occasion, filters: OccasionFilters) -> bool:
    if filters.type and occasion.type not in filters.type:
        return False
    if filters.person_id is not None and occasion.person_id != filters.person_id:
        return False
    if filters.search_query and not _contains(
        filters.search_query, occasion.name, occasion.notes,
    ):
        return False
    return True


_MATCHERS: dict[type, Callable[[Any, Any], bool]] = {
    PersonFilters: _person_matches,
    GiftFilters: _gift_matches,
    OccasionFilters: _occasion_matches,
}


# ---------------------------------------------------------------------------
# Sorting
# ---------------------------------------------------------------------------

_PERSON_SORT_KEYS: dict[str, SortKey] = {
    "name": lambda p: collation_key(p.name),
    "createdAt": lambda p: parse_instant(p.created_at),
    # The people store has no occasions; aggregator.people_by_next_occasion
    # provides the cross-store ordering.
    "nextOccasion": lambda p: collation_key(p.name),
}

_GIFT_SORT_KEYS: dict[str, SortKey] = {
    "name": lambda g: collation_key(g.name),
    "price": lambda g: g.price or 0,
    "priority": lambda g: GiftPriority(g.priority).rank(),
    "createdAt": lambda g: parse_instant(g.created_at),
    "status": lambda g: GiftStatus(g.status).rank(),
}

_OCCASION_SORT_KEYS: dict[str, SortKey] = {
    "date": lambda o: parse_occasion_date(o.date),
    "name": lambda o: collation_key(o.name),
    "createdAt": lambda o: parse_instant(o.created_at),
}

_SORT_KEYS: dict[type, dict[str, SortKey]] = {
    PersonSortOptions: _PERSON_SORT_KEYS,
    GiftSortOptions: _GIFT_SORT_KEYS,
    OccasionSortOptions: _OCCASION_SORT_KEYS,
}


def sort_key_for(sort_options: Any) -> SortKey | None:
    """Look up the key function for a sort options value, or None."""
    keys = _SORT_KEYS.get(type(sort_options), {})
    field = getattr(sort_options.field, "value", sort_options.field)
    return keys.get(field)


def project(items: Sequence[T], filters: Any, sort_options: Any) -> list[T]:
    """Return a new list of ``items`` that pass ``filters``, sorted.

    Filter dimensions combine with AND; values within one dimension with OR.
    Equal sort keys keep collection order in both directions.
    """
    result = list(items)

    if filters is not None:
        matcher = _MATCHERS.get(type(filters))
        if matcher is None:
            raise TypeError(f"Unsupported filters type: {type(filters).__name__}")
        result = [item for item in result if matcher(item, filters)]

    if sort_options is not None:
        key = sort_key_for(sort_options)
        if key is None:
            logger.debug("No sort key for %r, keeping collection order", sort_options)
        else:
            descending = SortDirection(sort_options.direction) is SortDirection.DESC
            result.sort(key=key, reverse=descending)

    return result
