from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from .models import ContactRecord, EventRecord
from .store import DEFAULT_DB_PATH, list_contacts, list_events


@dataclass(frozen=True, slots=True)
class SearchResult:
    kind: str
    contact: Optional[ContactRecord] = None
    event: Optional[EventRecord] = None


def _matches(term: str, values: Iterable[Optional[str]]) -> bool:
    return any(value and term in value.lower() for value in values)


def _contact_fields(contact: ContactRecord):
    return (contact.name, contact.relationship, contact.email, contact.phone, contact.notes)


def _event_fields(event: EventRecord):
    return (event.title, event.description, event.event_type)


def search_records(
    query: str,
    contacts: Sequence[ContactRecord],
    events: Sequence[EventRecord],
) -> List[SearchResult]:
    """Case-insensitive substring search over contacts and events.

    Matching contacts come first, then matching events, each in input order.
    A blank query matches nothing.
    """
    if not query or not query.strip():
        return []
    term = query.lower()
    results = [SearchResult("contact", contact=c) for c in contacts if _matches(term, _contact_fields(c))]
    results.extend(SearchResult("event", event=e) for e in events if _matches(term, _event_fields(e)))
    return results


def search_database(query: str, db_path: Path = DEFAULT_DB_PATH) -> List[SearchResult]:
    if not query or not query.strip():
        return []
    return search_records(query, list_contacts(db_path), list_events(db_path))
