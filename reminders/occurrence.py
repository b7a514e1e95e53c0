from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from typing import Optional, Union

from records import EventRecord, RECURRING_TYPES

MAX_ADVANCE_STEPS = 100_000

DateLike = Union[date, datetime]


class OccurrenceSearchError(RuntimeError):
    pass


def as_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def _add_months(base: date, months: int) -> date:
    if months == 0:
        return base
    month = base.month - 1 + months
    year = base.year + month // 12
    month = month % 12 + 1
    day = min(base.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def _add_years(base: date, years: int) -> date:
    try:
        return base.replace(year=base.year + years)
    except ValueError:
        return base.replace(month=2, day=28, year=base.year + years)


def advance(base: date, recurring_type: str, steps: int = 1) -> date:
    if recurring_type == "weekly":
        return base + timedelta(weeks=steps)
    if recurring_type == "monthly":
        return _add_months(base, steps)
    if recurring_type == "yearly":
        return _add_years(base, steps)
    raise ValueError(f"Unsupported recurring type: {recurring_type}")


def recurrence_unit(event: EventRecord) -> Optional[str]:
    """Return the event's recurrence unit, or None when it should be treated as one-off.

    A recurring flag without a recognised unit falls back to non-recurring.
    """
    if not event.is_recurring:
        return None
    if event.recurring_type not in RECURRING_TYPES:
        return None
    return event.recurring_type


def next_occurrence(event: EventRecord, today: DateLike) -> date:
    today = as_date(today)
    start = as_date(event.event_date)
    unit = recurrence_unit(event)
    if unit is None or start >= today:
        return start
    candidate = start
    if unit == "weekly":
        # Whole weeks add exactly, so jumping lands where single steps would.
        candidate = start + timedelta(weeks=(today - start).days // 7)
    # Month and year steps clamp the day, so each one builds on the previous date.
    for _ in range(MAX_ADVANCE_STEPS):
        if candidate >= today:
            return candidate
        candidate = advance(candidate, unit)
    raise OccurrenceSearchError(
        f"No occurrence of event {event.id} on or after {today.isoformat()} "
        f"within {MAX_ADVANCE_STEPS} {unit} steps"
    )
