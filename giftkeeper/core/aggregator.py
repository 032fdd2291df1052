"""
GiftKeeper — Cross-store queries.

Read-only functions over snapshots of one or more stores: per-person gift
lists and spend, occasion countdowns, budgets and spending reports. Nothing
here mutates a store; callers pass in ``store.items`` (or any sequence of
entities) and get fresh lists back.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Sequence

from giftkeeper.core.dates import days_until, parse_instant, parse_occasion_date
from giftkeeper.data.models import (
    BudgetSummary,
    CategorySpend,
    Currency,
    Gift,
    GiftStatus,
    Occasion,
    OccasionSpend,
    OccasionType,
    Person,
    PersonSpend,
    SpendingReport,
)

logger = logging.getLogger(__name__)

# Statuses where money has actually been spent
_UNCOMMITTED = (GiftStatus.IDEA, GiftStatus.RETURNED)

REPORT_PERIODS = ("all", "year", "month")


# ---------------------------------------------------------------------------
# Gifts
# ---------------------------------------------------------------------------


def is_committed(gift: Gift) -> bool:
    """True once a gift has been paid for and not returned."""
    return gift.status not in _UNCOMMITTED


def gifts_for_person(gifts: Iterable[Gift], person_id: str) -> list[Gift]:
    """Active gifts for a person: everything not yet given."""
    return [
        g for g in gifts
        if g.person_id == person_id and g.status != GiftStatus.GIVEN
    ]


def gift_history_for_person(gifts: Iterable[Gift], person_id: str) -> list[Gift]:
    return [
        g for g in gifts
        if g.person_id == person_id and g.status == GiftStatus.GIVEN
    ]


def gifts_for_occasion(gifts: Iterable[Gift], occasion_id: str) -> list[Gift]:
    return [g for g in gifts if g.occasion_id == occasion_id]


def gifts_by_status(gifts: Iterable[Gift], status: GiftStatus) -> list[Gift]:
    return [g for g in gifts if g.status == status]


def total_spent_for_person(gifts: Iterable[Gift], person_id: str) -> float:
    """Sum of prices over committed gifts (missing price counts as 0)."""
    return sum(
        (g.price or 0 for g in gifts if g.person_id == person_id and is_committed(g)),
        0,
    )


def status_breakdown(gifts: Iterable[Gift]) -> dict[GiftStatus, int]:
    """Number of gifts in each status, every status present."""
    counts = {status: 0 for status in GiftStatus}
    for gift in gifts:
        counts[GiftStatus(gift.status)] += 1
    return counts


# ---------------------------------------------------------------------------
# Occasions
# ---------------------------------------------------------------------------


def days_until_occasion(occasion: Occasion, now: datetime | None = None) -> int:
    """Days until the occasion's next occurrence (see core.dates)."""
    return days_until(occasion.date, occasion.is_recurring, now)


def _countdowns(
    occasions: Iterable[Occasion], now: datetime | None,
) -> list[tuple[Occasion, int]]:
    """Pair each occasion with its days-until, skipping unparseable dates."""
    current = now or datetime.now()
    pairs: list[tuple[Occasion, int]] = []
    for occasion in occasions:
        try:
            pairs.append((occasion, days_until_occasion(occasion, current)))
        except ValueError as exc:
            logger.warning(
                "Skipping occasion %s with bad date %r: %s",
                occasion.id, occasion.date, exc,
            )
    return pairs


def occasions_for_person(
    occasions: Iterable[Occasion], person_id: str, now: datetime | None = None,
) -> list[Occasion]:
    """A person's occasions, soonest first (past one-off occasions lead)."""
    pairs = _countdowns((o for o in occasions if o.person_id == person_id), now)
    pairs.sort(key=lambda pair: pair[1])
    return [occasion for occasion, _ in pairs]


def next_occasion_for_person(
    occasions: Iterable[Occasion], person_id: str, now: datetime | None = None,
) -> Occasion | None:
    """The person's occasion with the smallest non-negative countdown.

    Ties go to the occasion that comes first in the collection.
    """
    best: tuple[Occasion, int] | None = None
    for occasion, days in _countdowns(
        (o for o in occasions if o.person_id == person_id), now,
    ):
        if days < 0:
            continue
        if best is None or days < best[1]:
            best = (occasion, days)
    return best[0] if best else None


def upcoming_occasions(
    occasions: Iterable[Occasion], within_days: int = 30, now: datetime | None = None,
) -> list[Occasion]:
    """Occasions whose countdown falls in [0, within_days], soonest first."""
    pairs = [
        (occasion, days) for occasion, days in _countdowns(occasions, now)
        if 0 <= days <= within_days
    ]
    pairs.sort(key=lambda pair: pair[1])
    return [occasion for occasion, _ in pairs]


def past_occasions(
    occasions: Iterable[Occasion], now: datetime | None = None,
) -> list[Occasion]:
    """One-off occasions that already happened, most recent first."""
    past = [
        occasion for occasion, days in _countdowns(
            (o for o in occasions if not o.is_recurring), now,
        )
        if days < 0
    ]
    past.sort(key=lambda o: parse_occasion_date(o.date), reverse=True)
    return past


def occasions_by_type(occasions: Iterable[Occasion], type: OccasionType) -> list[Occasion]:
    return [o for o in occasions if o.type == type]


def people_by_next_occasion(
    people: Iterable[Person],
    occasions: Sequence[Occasion],
    now: datetime | None = None,
) -> list[Person]:
    """People ordered by their nearest upcoming occasion.

    People without an upcoming occasion follow, in collection order.
    """
    ranked: list[tuple[int, Person]] = []
    rest: list[Person] = []
    for person in people:
        occasion = next_occasion_for_person(occasions, person.id, now)
        if occasion is None:
            rest.append(person)
        else:
            ranked.append((days_until_occasion(occasion, now), person))
    ranked.sort(key=lambda pair: pair[0])
    return [person for _, person in ranked] + rest


# ---------------------------------------------------------------------------
# Budgets and reports
# ---------------------------------------------------------------------------


def _summarize(
    budget: float, spent: float, currency: Currency,
    person_id: str | None = None, occasion_id: str | None = None,
) -> BudgetSummary:
    if budget > 0:
        percent = spent / budget * 100
    else:
        percent = 100.0 if spent > 0 else 0.0
    return BudgetSummary(
        budget_amount=budget,
        spent_amount=spent,
        remaining_amount=budget - spent,
        currency=currency,
        is_over_budget=spent > budget,
        percent_used=percent,
        person_id=person_id,
        occasion_id=occasion_id,
    )


def budget_summary_for_person(person: Person, gifts: Iterable[Gift]) -> BudgetSummary | None:
    """Budget progress for a person, or None when no budget is set."""
    if not person.budget_amount:
        return None
    spent = total_spent_for_person(gifts, person.id)
    return _summarize(
        person.budget_amount, spent, person.budget_currency, person_id=person.id,
    )


def budget_summary_for_occasion(
    occasion: Occasion, gifts: Iterable[Gift],
) -> BudgetSummary | None:
    """Budget progress for an occasion, or None when no budget is set."""
    if not occasion.budget_amount:
        return None
    spent = sum(
        (g.price or 0 for g in gifts_for_occasion(gifts, occasion.id) if is_committed(g)),
        0,
    )
    return _summarize(
        occasion.budget_amount, spent, occasion.budget_currency, occasion_id=occasion.id,
    )


def _in_period(gift: Gift, period: str, now: datetime) -> bool:
    if period == "all":
        return True
    stamp = parse_instant(gift.date_given or gift.created_at).astimezone()
    if stamp.year != now.year:
        return False
    return period == "year" or stamp.month == now.month


def spending_report(
    people: Iterable[Person],
    gifts: Iterable[Gift],
    occasions: Iterable[Occasion],
    period: str = "year",
    currency: Currency = Currency.USD,
    now: datetime | None = None,
) -> SpendingReport:
    """Spend on committed gifts, broken down by person, category and occasion.

    A gift belongs to the period of its date_given, or its created_at when
    it has not been given yet. Breakdowns are sorted by amount, largest
    first; people with a budget appear even when nothing was spent.
    """
    if period not in REPORT_PERIODS:
        raise ValueError(f"Unknown report period {period!r}, expected one of {REPORT_PERIODS}")
    current = now or datetime.now()
    spent = [g for g in gifts if is_committed(g) and _in_period(g, period, current)]

    people_by_id = {p.id: p for p in people}
    per_person: dict[str, float] = {
        p.id: 0 for p in people_by_id.values() if p.budget_amount
    }
    per_category: dict = {}
    per_occasion: dict[str, float] = {}
    for gift in spent:
        price = gift.price or 0
        if gift.person_id in people_by_id:
            per_person[gift.person_id] = per_person.get(gift.person_id, 0) + price
        per_category[gift.category] = per_category.get(gift.category, 0) + price
        if gift.occasion_id:
            per_occasion[gift.occasion_id] = per_occasion.get(gift.occasion_id, 0) + price

    occasion_names = {o.id: o.name for o in occasions}
    by_person = sorted(
        (PersonSpend(pid, people_by_id[pid].name, amount) for pid, amount in per_person.items()),
        key=lambda s: s.amount, reverse=True,
    )
    by_category = sorted(
        (CategorySpend(category, amount) for category, amount in per_category.items()),
        key=lambda s: s.amount, reverse=True,
    )
    by_occasion = sorted(
        (
            OccasionSpend(oid, occasion_names.get(oid, "(deleted occasion)"), amount)
            for oid, amount in per_occasion.items()
        ),
        key=lambda s: s.amount, reverse=True,
    )

    return SpendingReport(
        period=period,
        total_spent=sum((g.price or 0 for g in spent), 0),
        currency=currency,
        by_person=tuple(by_person),
        by_category=tuple(by_category),
        by_occasion=tuple(by_occasion),
    )
