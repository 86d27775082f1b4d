"""Date generation for historical backfill runs."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterator

_MONDAY = 0


def first_monday(start: date) -> date:
    """Return ``start`` if it is a Monday, otherwise the Monday after it."""
    offset = (_MONDAY - start.weekday()) % 7
    return start + timedelta(days=offset)


def backfill_dates(start: date, today: date) -> Iterator[date]:
    """Yield one Monday per week from ``start`` through ``today`` inclusive."""
    current = first_monday(start)
    while current <= today:
        yield current
        current += timedelta(days=7)
