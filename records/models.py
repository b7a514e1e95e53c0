from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Tuple

EVENT_TYPES: Tuple[str, ...] = ("birthday", "anniversary", "meeting", "reminder", "other")
RECURRING_TYPES: Tuple[str, ...] = ("weekly", "monthly", "yearly")
DEFAULT_REMINDER_DAYS = 7


@dataclass(slots=True)
class ContactRecord:
    id: int
    name: str
    relationship: Optional[str]
    phone: Optional[str]
    email: Optional[str]
    birthday: Optional[date]
    notes: Optional[str]
    avatar_url: Optional[str]
    created_at: datetime
    updated_at: datetime


@dataclass(slots=True)
class EventRecord:
    id: int
    title: str
    description: Optional[str]
    event_date: date
    event_type: str
    is_recurring: bool
    recurring_type: Optional[str]
    reminder_days: Optional[int]
    contact_id: Optional[int]
    created_at: datetime
    updated_at: datetime

    @property
    def effective_reminder_days(self) -> int:
        if self.reminder_days is None:
            return DEFAULT_REMINDER_DAYS
        return self.reminder_days

    @property
    def recurrence_text(self) -> Optional[str]:
        if not self.is_recurring or not self.recurring_type:
            return None
        return f"repeats {self.recurring_type}"
