"""
GiftKeeper — Upcoming occasions briefing.

Builds the plain-text overview printed by ``python main.py``: occasions in
the configured window, who they are for, how many gift ideas are still
open for that person, and their budget progress.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING

from giftkeeper.core import aggregator

if TYPE_CHECKING:
    from giftkeeper.core.tracker import GiftTracker

logger = logging.getLogger(__name__)


def _countdown_text(days: int) -> str:
    if days == 0:
        return "today"
    if days == 1:
        return "tomorrow"
    return f"in {days} days"


def build_briefing(
    tracker: GiftTracker,
    within_days: int | None = None,
    now: datetime | None = None,
) -> str:
    """Summarize the next ``within_days`` days of occasions as text."""
    if within_days is None:
        from giftkeeper.config import settings
        within_days = settings.UPCOMING_WINDOW_DAYS

    now = now or datetime.now()
    upcoming = aggregator.upcoming_occasions(tracker.occasions.items, within_days, now)
    if not upcoming:
        return f"No occasions in the next {within_days} days."

    lines = [f"Upcoming occasions (next {within_days} days):"]
    for occasion in upcoming:
        days = aggregator.days_until_occasion(occasion, now)
        line = f"  - {occasion.name} ({occasion.date}) {_countdown_text(days)}"

        person = tracker.people.get(occasion.person_id) if occasion.person_id else None
        if person is not None:
            open_ideas = len(aggregator.gifts_for_person(tracker.gifts.items, person.id))
            line += f" for {person.name}, {open_ideas} open gift idea(s)"
            budget = aggregator.budget_summary_for_person(person, tracker.gifts.items)
            if budget is not None:
                line += (
                    f", spent {budget.spent_amount:.0f} of "
                    f"{budget.budget_amount:.0f} {budget.currency.value}"
                )
                if budget.is_over_budget:
                    line += " (over budget)"
        elif occasion.person_id:
            logger.debug("Occasion %s points at missing person %s", occasion.id, occasion.person_id)

        if 0 < occasion.reminder_days and days <= occasion.reminder_days:
            line += " [reminder window]"
        lines.append(line)

    return "\n".join(lines)
