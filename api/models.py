from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, constr, model_validator

from records import ContactRecord, EventRecord, RelationshipGroup, SearchResult, group_label
from reminders import ReminderFeedItem, with_occurrence


class EventType(str, Enum):
    birthday = "birthday"
    anniversary = "anniversary"
    meeting = "meeting"
    reminder = "reminder"
    other = "other"


class RecurringType(str, Enum):
    weekly = "weekly"
    monthly = "monthly"
    yearly = "yearly"


class ContactBase(BaseModel):
    name: constr(min_length=1, max_length=128)
    relationship: Optional[constr(max_length=64)] = None
    phone: Optional[constr(max_length=64)] = None
    email: Optional[constr(max_length=256)] = None
    birthday: Optional[date] = None
    notes: Optional[constr(max_length=4096)] = None
    avatar_url: Optional[constr(max_length=2048)] = None


class ContactCreateRequest(ContactBase):
    pass


class ContactUpdateRequest(BaseModel):
    name: Optional[constr(min_length=1, max_length=128)] = None
    relationship: Optional[constr(max_length=64)] = None
    phone: Optional[constr(max_length=64)] = None
    email: Optional[constr(max_length=256)] = None
    birthday: Optional[date] = None
    notes: Optional[constr(max_length=4096)] = None
    avatar_url: Optional[constr(max_length=2048)] = None


class ContactResponse(BaseModel):
    id: int
    name: str
    relationship: Optional[str]
    group_label: str
    phone: Optional[str]
    email: Optional[str]
    birthday: Optional[date]
    notes: Optional[str]
    avatar_url: Optional[str]
    created_at: datetime
    updated_at: datetime


class EventBase(BaseModel):
    title: constr(min_length=1, max_length=128)
    description: Optional[constr(max_length=2048)] = None
    event_date: date
    event_type: EventType = EventType.other
    is_recurring: bool = False
    recurring_type: Optional[RecurringType] = None
    reminder_days: Optional[int] = Field(7, ge=0)
    contact_id: Optional[int] = None

    @model_validator(mode="after")
    def check_recurrence(self) -> "EventBase":
        if self.is_recurring and self.recurring_type is None:
            raise ValueError("recurring_type is required when is_recurring is true")
        if not self.is_recurring:
            self.recurring_type = None
        return self


class EventCreateRequest(EventBase):
    pass


class EventUpdateRequest(BaseModel):
    title: Optional[constr(min_length=1, max_length=128)] = None
    description: Optional[constr(max_length=2048)] = None
    event_date: Optional[date] = None
    event_type: Optional[EventType] = None
    is_recurring: Optional[bool] = None
    recurring_type: Optional[RecurringType] = None
    reminder_days: Optional[int] = Field(None, ge=0)
    contact_id: Optional[int] = None


class EventResponse(BaseModel):
    id: int
    title: str
    description: Optional[str]
    event_date: date
    event_type: EventType
    is_recurring: bool
    recurring_type: Optional[RecurringType]
    reminder_days: Optional[int]
    contact_id: Optional[int]
    next_occurrence: date
    days_until: int
    created_at: datetime
    updated_at: datetime


class ReminderResponse(BaseModel):
    event: EventResponse
    contact_name: Optional[str]
    label: str
    message: str


class SearchResultResponse(BaseModel):
    type: Literal["contact", "event"]
    contact: Optional[ContactResponse] = None
    event: Optional[EventResponse] = None


class GroupResponse(BaseModel):
    value: str
    label: str
    icon: str


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: constr(max_length=8000)


class ChatRequest(BaseModel):
    messages: List[ChatMessage] = Field(..., min_length=1)


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
    server_time: int
    server_id: str


def contact_to_response(record: ContactRecord) -> ContactResponse:
    return ContactResponse(
        id=record.id,
        name=record.name,
        relationship=record.relationship,
        group_label=group_label(record.relationship),
        phone=record.phone,
        email=record.email,
        birthday=record.birthday,
        notes=record.notes,
        avatar_url=record.avatar_url,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def event_to_response(record: EventRecord, today: Optional[date] = None) -> EventResponse:
    item = with_occurrence(record, today or date.today())
    return EventResponse(
        id=record.id,
        title=record.title,
        description=record.description,
        event_date=record.event_date,
        event_type=EventType(record.event_type),
        is_recurring=record.is_recurring,
        recurring_type=RecurringType(record.recurring_type) if record.recurring_type else None,
        reminder_days=record.reminder_days,
        contact_id=record.contact_id,
        next_occurrence=item.next_occurrence,
        days_until=item.days_until,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def reminder_to_response(item: ReminderFeedItem, today: date) -> ReminderResponse:
    return ReminderResponse(
        event=event_to_response(item.reminder.event, today),
        contact_name=item.contact_name,
        label=item.label,
        message=item.message,
    )


def group_to_response(group: RelationshipGroup) -> GroupResponse:
    return GroupResponse(value=group.value, label=group.label, icon=group.icon)


def search_result_to_response(result: SearchResult, today: Optional[date] = None) -> SearchResultResponse:
    if result.kind == "contact":
        return SearchResultResponse(type="contact", contact=contact_to_response(result.contact))
    return SearchResultResponse(type="event", event=event_to_response(result.event, today))
