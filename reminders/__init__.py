from .feed import (
    EventWithOccurrence,
    ReminderFeedItem,
    build_reminder_feed,
    day_text,
    days_until,
    reminder_message,
    upcoming_reminders,
    with_occurrence,
)
from .occurrence import (
    MAX_ADVANCE_STEPS,
    OccurrenceSearchError,
    advance,
    as_date,
    next_occurrence,
    recurrence_unit,
)

__all__ = [
    "EventWithOccurrence",
    "MAX_ADVANCE_STEPS",
    "OccurrenceSearchError",
    "ReminderFeedItem",
    "advance",
    "as_date",
    "build_reminder_feed",
    "day_text",
    "days_until",
    "next_occurrence",
    "recurrence_unit",
    "reminder_message",
    "upcoming_reminders",
    "with_occurrence",
]
