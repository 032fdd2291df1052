"""Occasion date math — pure business logic.

Occasion dates are calendar dates (YYYY-MM-DD) interpreted at local
midnight. A recurring occasion repeats every year on the same month/day;
its countdown targets this year's date, or next year's once this year's
local midnight has passed.

No I/O: this module only transforms data.
"""

from __future__ import annotations

import math
from datetime import date, datetime, time, timedelta, timezone

_DAY = timedelta(days=1)


def parse_occasion_date(value: str) -> date:
    """Parse the date portion of an ISO date or datetime string.

    Raises ValueError on malformed input.
    """
    return date.fromisoformat(value.strip()[:10])


def parse_instant(value: str) -> datetime:
    """Parse an ISO timestamp into an aware datetime (naive → UTC)."""
    parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _local_now(now: datetime | None) -> datetime:
    if now is None:
        return datetime.now()
    if now.tzinfo is not None:
        return now.astimezone().replace(tzinfo=None)
    return now


def _anniversary(when: date, year: int) -> date:
    try:
        return when.replace(year=year)
    except ValueError:
        # Feb 29 outside a leap year rolls over to Mar 1
        return date(year, 3, 1)


def next_occurrence(
    date_str: str, is_recurring: bool, now: datetime | None = None,
) -> datetime:
    """Return local midnight of the occasion's next (or only) occurrence."""
    when = parse_occasion_date(date_str)
    if not is_recurring:
        return datetime.combine(when, time.min)

    current = _local_now(now)
    candidate = datetime.combine(_anniversary(when, current.year), time.min)
    if candidate < current:
        candidate = datetime.combine(_anniversary(when, current.year + 1), time.min)
    return candidate


def days_until(date_str: str, is_recurring: bool, now: datetime | None = None) -> int:
    """Whole days (rounded up) from now until the next occurrence.

    Negative for non-recurring occasions in the past; never negative for
    recurring ones.
    """
    current = _local_now(now)
    delta = next_occurrence(date_str, is_recurring, current) - current
    return math.ceil(delta / _DAY)
