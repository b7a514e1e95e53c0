from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

from records import ContactRecord, EventRecord

from .occurrence import DateLike, as_date, next_occurrence

MESSAGE_DATE_FMT = "%b %d"


@dataclass(frozen=True, slots=True)
class EventWithOccurrence:
    event: EventRecord
    next_occurrence: date
    days_until: int

    @property
    def id(self) -> int:
        return self.event.id

    @property
    def title(self) -> str:
        return self.event.title

    @property
    def contact_id(self) -> Optional[int]:
        return self.event.contact_id


@dataclass(frozen=True, slots=True)
class ReminderFeedItem:
    reminder: EventWithOccurrence
    contact_name: Optional[str]

    @property
    def label(self) -> str:
        return day_text(self.reminder.days_until)

    @property
    def message(self) -> str:
        return reminder_message(self.reminder, self.contact_name)


def days_until(occurrence: DateLike, today: DateLike) -> int:
    return (as_date(occurrence) - as_date(today)).days


def with_occurrence(event: EventRecord, today: DateLike) -> EventWithOccurrence:
    occurrence = next_occurrence(event, today)
    return EventWithOccurrence(
        event=event,
        next_occurrence=occurrence,
        days_until=days_until(occurrence, today),
    )


def _in_reminder_window(item: EventWithOccurrence) -> bool:
    return 0 <= item.days_until <= item.event.effective_reminder_days


def upcoming_reminders(events: Iterable[EventRecord], today: DateLike) -> Iterator[EventWithOccurrence]:
    """Yield the events whose next occurrence falls inside their own reminder window.

    Entries come out ordered by next occurrence; events sharing a date keep
    their input order. Every call recomputes from scratch.
    """
    today = as_date(today)
    due = [item for item in (with_occurrence(event, today) for event in events) if _in_reminder_window(item)]
    due.sort(key=lambda item: item.next_occurrence)
    yield from due


def day_text(days: int) -> str:
    if days == 0:
        return "today"
    if days == 1:
        return "tomorrow"
    return f"{days} days from now"


def reminder_message(item: EventWithOccurrence, contact_name: Optional[str] = None) -> str:
    body = f"{day_text(item.days_until)} ({item.next_occurrence.strftime(MESSAGE_DATE_FMT)})"
    if contact_name:
        body += f" - with {contact_name}"
    return body


def build_reminder_feed(
    events: Sequence[EventRecord],
    contacts: Sequence[ContactRecord],
    today: DateLike,
) -> List[ReminderFeedItem]:
    names: Dict[int, str] = {contact.id: contact.name for contact in contacts}
    return [
        ReminderFeedItem(reminder=item, contact_name=names.get(item.contact_id))
        for item in upcoming_reminders(events, today)
    ]
