"""
GiftKeeper — Data Models.

People, gifts and occasions are immutable values: every store mutation
replaces an entity with a new instance, so snapshots handed out earlier
never change underneath their holders.

Enums that drive sorting carry an explicit rank table, checked for
exhaustiveness when this module is imported.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class GiftStatus(str, Enum):
    IDEA = "idea"
    PURCHASED = "purchased"
    WRAPPED = "wrapped"
    HIDDEN = "hidden"
    GIVEN = "given"
    RETURNED = "returned"

    def rank(self) -> int:
        return _STATUS_RANK[self]


class GiftPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    MUST_HAVE = "must_have"

    def rank(self) -> int:
        return _PRIORITY_RANK[self]


class GiftCategory(str, Enum):
    CLOTHING = "clothing"
    ELECTRONICS = "electronics"
    BOOKS = "books"
    EXPERIENCES = "experiences"
    HOMEMADE = "homemade"
    HOME_DECOR = "home_decor"
    JEWELRY = "jewelry"
    TOYS_GAMES = "toys_games"
    SPORTS_OUTDOORS = "sports_outdoors"
    BEAUTY = "beauty"
    FOOD_DRINK = "food_drink"
    GIFT_CARD = "gift_card"
    OTHER = "other"


class GiftSource(str, Enum):
    MENTIONED = "mentioned"
    WISHLIST = "wishlist"
    ONLINE = "online"
    RECOMMENDATION = "recommendation"
    STORE = "store"
    OTHER = "other"


class GiftReaction(str, Enum):
    LOVED_IT = "loved_it"
    LIKED_IT = "liked_it"
    MEH = "meh"
    DIDNT_LIKE = "didnt_like"
    UNKNOWN = "unknown"


class RelationshipCategory(str, Enum):
    FAMILY = "family"
    FRIEND = "friend"
    COWORKER = "coworker"
    PARTNER = "partner"
    OTHER = "other"


class OccasionType(str, Enum):
    BIRTHDAY = "birthday"
    CHRISTMAS = "christmas"
    HANUKKAH = "hanukkah"
    ANNIVERSARY = "anniversary"
    VALENTINES_DAY = "valentines_day"
    MOTHERS_DAY = "mothers_day"
    FATHERS_DAY = "fathers_day"
    GRADUATION = "graduation"
    WEDDING = "wedding"
    BABY_SHOWER = "baby_shower"
    HOUSEWARMING = "housewarming"
    CUSTOM = "custom"


class Currency(str, Enum):
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    CAD = "CAD"
    AUD = "AUD"
    JPY = "JPY"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class PersonSortField(str, Enum):
    NAME = "name"
    CREATED_AT = "createdAt"
    NEXT_OCCASION = "nextOccasion"


class GiftSortField(str, Enum):
    NAME = "name"
    PRICE = "price"
    PRIORITY = "priority"
    CREATED_AT = "createdAt"
    STATUS = "status"


class OccasionSortField(str, Enum):
    DATE = "date"
    NAME = "name"
    CREATED_AT = "createdAt"


_STATUS_RANK: dict[GiftStatus, int] = {
    GiftStatus.IDEA: 1,
    GiftStatus.PURCHASED: 2,
    GiftStatus.WRAPPED: 3,
    GiftStatus.HIDDEN: 4,
    GiftStatus.GIVEN: 5,
    GiftStatus.RETURNED: 6,
}

_PRIORITY_RANK: dict[GiftPriority, int] = {
    GiftPriority.LOW: 1,
    GiftPriority.MEDIUM: 2,
    GiftPriority.HIGH: 3,
    GiftPriority.MUST_HAVE: 4,
}

# Advisory only: callers consult this before update_status(); stores never do.
STATUS_TRANSITIONS: dict[GiftStatus, tuple[GiftStatus, ...]] = {
    GiftStatus.IDEA: (GiftStatus.PURCHASED,),
    GiftStatus.PURCHASED: (GiftStatus.WRAPPED, GiftStatus.HIDDEN, GiftStatus.RETURNED),
    GiftStatus.WRAPPED: (GiftStatus.HIDDEN, GiftStatus.GIVEN),
    GiftStatus.HIDDEN: (GiftStatus.GIVEN,),
    GiftStatus.GIVEN: (),
    GiftStatus.RETURNED: (),
}


def _check_exhaustive(enum_cls: type[Enum], table: dict) -> None:
    missing = set(enum_cls) - set(table)
    if missing:
        names = sorted(m.name for m in missing)
        raise RuntimeError(f"{enum_cls.__name__} table is missing {names}")


_check_exhaustive(GiftStatus, _STATUS_RANK)
_check_exhaustive(GiftPriority, _PRIORITY_RANK)
_check_exhaustive(GiftStatus, STATUS_TRANSITIONS)


def allowed_transitions(status: GiftStatus) -> tuple[GiftStatus, ...]:
    """Statuses a gift may move to next, per the gift detail workflow."""
    return STATUS_TRANSITIONS[status]


def can_transition(current: GiftStatus, new: GiftStatus) -> bool:
    return new in STATUS_TRANSITIONS[current]


# ---------------------------------------------------------------------------
# Patch sentinel
# ---------------------------------------------------------------------------


class _Unset:
    """Marks a patch field the caller did not provide (distinct from None)."""

    _instance: _Unset | None = None

    def __new__(cls) -> _Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


def _check_budget(amount: float | None | _Unset) -> None:
    if isinstance(amount, (int, float)) and amount < 0:
        raise ValueError(f"Budget amount must be non-negative, got {amount}")


def _as_tuple(obj: object, *names: str) -> None:
    """Coerce list-valued fields of a frozen dataclass to tuples."""
    for name in names:
        value = getattr(obj, name)
        if isinstance(value, list):
            object.__setattr__(obj, name, tuple(value))


# ---------------------------------------------------------------------------
# People
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PersonSizes:
    shirt: str | None = None
    pants: str | None = None
    shoe: str | None = None
    ring: str | None = None


@dataclass(frozen=True)
class PersonDate:
    """A labelled date on a person's profile, e.g. "Birthday"."""

    id: str
    label: str
    date: str                   # ISO date YYYY-MM-DD
    is_recurring: bool = True


@dataclass(frozen=True)
class Person:
    """Someone the user buys gifts for."""

    id: str
    created_at: str
    updated_at: str
    name: str
    relationship: RelationshipCategory = RelationshipCategory.OTHER
    custom_relationship: str | None = None   # used when relationship is OTHER
    photo_uri: str | None = None
    dates: tuple[PersonDate, ...] = ()
    notes: str = ""
    sizes: PersonSizes = field(default_factory=PersonSizes)
    interests: tuple[str, ...] = ()
    allergies: tuple[str, ...] = ()
    budget_amount: float | None = None       # annual budget
    budget_currency: Currency = Currency.USD

    def __post_init__(self) -> None:
        _check_budget(self.budget_amount)
        _as_tuple(self, "dates", "interests", "allergies")


@dataclass
class PersonForm:
    """Fields a user fills in to create a person."""

    name: str
    relationship: RelationshipCategory = RelationshipCategory.OTHER
    custom_relationship: str | None = None
    photo_uri: str | None = None
    dates: tuple[PersonDate, ...] = ()
    notes: str = ""
    sizes: PersonSizes = field(default_factory=PersonSizes)
    interests: tuple[str, ...] = ()
    allergies: tuple[str, ...] = ()
    budget_amount: float | None = None
    budget_currency: Currency | None = None  # None → store default

    def __post_init__(self) -> None:
        _check_budget(self.budget_amount)


@dataclass(frozen=True)
class PersonPatch:
    name: str | _Unset = UNSET
    relationship: RelationshipCategory | _Unset = UNSET
    custom_relationship: str | None | _Unset = UNSET
    photo_uri: str | None | _Unset = UNSET
    dates: tuple[PersonDate, ...] | _Unset = UNSET
    notes: str | _Unset = UNSET
    sizes: PersonSizes | _Unset = UNSET
    interests: tuple[str, ...] | _Unset = UNSET
    allergies: tuple[str, ...] | _Unset = UNSET
    budget_amount: float | None | _Unset = UNSET
    budget_currency: Currency | _Unset = UNSET

    def __post_init__(self) -> None:
        _check_budget(self.budget_amount)


# ---------------------------------------------------------------------------
# Gifts
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GiftPhoto:
    id: str
    uri: str
    created_at: str
    thumbnail_uri: str | None = None


@dataclass(frozen=True)
class VoiceNote:
    id: str
    uri: str
    duration: float             # seconds
    created_at: str


@dataclass(frozen=True)
class StatusHistoryEntry:
    status: GiftStatus
    date: str                   # ISO timestamp of the transition
    notes: str | None = None


@dataclass(frozen=True)
class Gift:
    """A gift idea for one person, tracked from idea to given."""

    id: str
    created_at: str
    updated_at: str
    person_id: str
    name: str
    description: str | None = None
    url: str | None = None
    price: float | None = None
    currency: Currency = Currency.USD
    priority: GiftPriority = GiftPriority.MEDIUM
    category: GiftCategory = GiftCategory.OTHER
    source: GiftSource = GiftSource.OTHER
    status: GiftStatus = GiftStatus.IDEA
    status_history: tuple[StatusHistoryEntry, ...] = ()  # append-only
    occasion_id: str | None = None
    photos: tuple[GiftPhoto, ...] = ()
    voice_notes: tuple[VoiceNote, ...] = ()
    notes: str = ""
    hiding_spot: str | None = None           # meaningful only while HIDDEN
    receipt_uri: str | None = None
    return_deadline: str | None = None
    reaction: GiftReaction | None = None     # set after the gift is given
    date_given: str | None = None
    is_regift: bool = False

    def __post_init__(self) -> None:
        _as_tuple(self, "status_history", "photos", "voice_notes")


@dataclass
class GiftForm:
    """Fields a user fills in to create a gift."""

    person_id: str
    name: str
    status: GiftStatus = GiftStatus.IDEA
    description: str | None = None
    url: str | None = None
    price: float | None = None
    currency: Currency | None = None         # None → store default
    priority: GiftPriority = GiftPriority.MEDIUM
    category: GiftCategory = GiftCategory.OTHER
    source: GiftSource = GiftSource.OTHER
    occasion_id: str | None = None
    photos: tuple[GiftPhoto, ...] = ()
    voice_notes: tuple[VoiceNote, ...] = ()
    notes: str = ""
    hiding_spot: str | None = None
    receipt_uri: str | None = None
    return_deadline: str | None = None
    is_regift: bool = False


@dataclass(frozen=True)
class GiftPatch:
    """Generic field patch for a gift.

    Setting ``status`` here does not touch the status history; use
    GiftStore.update_status() for tracked transitions.
    """

    person_id: str | _Unset = UNSET
    name: str | _Unset = UNSET
    status: GiftStatus | _Unset = UNSET
    description: str | None | _Unset = UNSET
    url: str | None | _Unset = UNSET
    price: float | None | _Unset = UNSET
    currency: Currency | _Unset = UNSET
    priority: GiftPriority | _Unset = UNSET
    category: GiftCategory | _Unset = UNSET
    source: GiftSource | _Unset = UNSET
    occasion_id: str | None | _Unset = UNSET
    photos: tuple[GiftPhoto, ...] | _Unset = UNSET
    voice_notes: tuple[VoiceNote, ...] | _Unset = UNSET
    notes: str | _Unset = UNSET
    hiding_spot: str | None | _Unset = UNSET
    receipt_uri: str | None | _Unset = UNSET
    return_deadline: str | None | _Unset = UNSET
    is_regift: bool | _Unset = UNSET


# ---------------------------------------------------------------------------
# Occasions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Occasion:
    """A dated event, optionally tied to a person and recurring yearly."""

    id: str
    created_at: str
    updated_at: str
    name: str
    type: OccasionType
    date: str                   # ISO date YYYY-MM-DD
    person_id: str | None = None
    is_recurring: bool = False
    reminder_days: int = 14
    budget_amount: float | None = None
    budget_currency: Currency = Currency.USD
    notes: str | None = None


@dataclass
class OccasionForm:
    name: str
    type: OccasionType
    date: str
    person_id: str | None = None
    is_recurring: bool = False
    reminder_days: int | None = None         # None → settings default
    budget_amount: float | None = None
    budget_currency: Currency | None = None  # None → store default
    notes: str | None = None


@dataclass(frozen=True)
class OccasionPatch:
    name: str | _Unset = UNSET
    type: OccasionType | _Unset = UNSET
    date: str | _Unset = UNSET
    person_id: str | None | _Unset = UNSET
    is_recurring: bool | _Unset = UNSET
    reminder_days: int | _Unset = UNSET
    budget_amount: float | None | _Unset = UNSET
    budget_currency: Currency | _Unset = UNSET
    notes: str | None | _Unset = UNSET


# ---------------------------------------------------------------------------
# Patch application
# ---------------------------------------------------------------------------

PERSON_PATCH_FIELDS = (
    "name", "relationship", "custom_relationship", "photo_uri", "dates",
    "notes", "sizes", "interests", "allergies", "budget_amount",
    "budget_currency",
)

GIFT_PATCH_FIELDS = (
    "person_id", "name", "status", "description", "url", "price", "currency",
    "priority", "category", "source", "occasion_id", "photos", "voice_notes",
    "notes", "hiding_spot", "receipt_uri", "return_deadline", "is_regift",
)

OCCASION_PATCH_FIELDS = (
    "name", "type", "date", "person_id", "is_recurring", "reminder_days",
    "budget_amount", "budget_currency", "notes",
)


def _provided(patch: object, names: tuple[str, ...]) -> dict[str, Any]:
    changes: dict[str, Any] = {}
    for name in names:
        value = getattr(patch, name)
        if value is not UNSET:
            changes[name] = tuple(value) if isinstance(value, list) else value
    return changes


def apply_person_patch(person: Person, patch: PersonPatch, now: str) -> Person:
    return replace(person, **_provided(patch, PERSON_PATCH_FIELDS), updated_at=now)


def apply_gift_patch(gift: Gift, patch: GiftPatch, now: str) -> Gift:
    return replace(gift, **_provided(patch, GIFT_PATCH_FIELDS), updated_at=now)


def apply_occasion_patch(occasion: Occasion, patch: OccasionPatch, now: str) -> Occasion:
    return replace(occasion, **_provided(patch, OCCASION_PATCH_FIELDS), updated_at=now)


# ---------------------------------------------------------------------------
# Filters and sort options
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PersonFilters:
    relationship: tuple[RelationshipCategory, ...] = ()
    search_query: str | None = None

    def __post_init__(self) -> None:
        _as_tuple(self, "relationship")


@dataclass(frozen=True)
class PersonSortOptions:
    field: PersonSortField = PersonSortField.NAME
    direction: SortDirection = SortDirection.ASC


@dataclass(frozen=True)
class GiftFilters:
    status: tuple[GiftStatus, ...] = ()
    priority: tuple[GiftPriority, ...] = ()
    category: tuple[GiftCategory, ...] = ()
    price_min: float | None = None           # inclusive
    price_max: float | None = None           # inclusive
    search_query: str | None = None

    def __post_init__(self) -> None:
        _as_tuple(self, "status", "priority", "category")


@dataclass(frozen=True)
class GiftSortOptions:
    field: GiftSortField = GiftSortField.CREATED_AT
    direction: SortDirection = SortDirection.DESC


@dataclass(frozen=True)
class OccasionFilters:
    type: tuple[OccasionType, ...] = ()
    person_id: str | None = None
    search_query: str | None = None

    def __post_init__(self) -> None:
        _as_tuple(self, "type")


@dataclass(frozen=True)
class OccasionSortOptions:
    field: OccasionSortField = OccasionSortField.DATE
    direction: SortDirection = SortDirection.ASC


# ---------------------------------------------------------------------------
# Report shapes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BudgetSummary:
    budget_amount: float
    spent_amount: float
    remaining_amount: float
    currency: Currency
    is_over_budget: bool
    percent_used: float
    person_id: str | None = None
    occasion_id: str | None = None


@dataclass(frozen=True)
class PersonSpend:
    person_id: str
    person_name: str
    amount: float


@dataclass(frozen=True)
class CategorySpend:
    category: GiftCategory
    amount: float


@dataclass(frozen=True)
class OccasionSpend:
    occasion_id: str
    occasion_name: str
    amount: float


@dataclass(frozen=True)
class SpendingReport:
    period: str
    total_spent: float
    currency: Currency
    by_person: tuple[PersonSpend, ...] = ()
    by_category: tuple[CategorySpend, ...] = ()
    by_occasion: tuple[OccasionSpend, ...] = ()
