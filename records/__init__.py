from .groups import RELATIONSHIP_GROUPS, RelationshipGroup, group_icon, group_label
from .models import (
    DEFAULT_REMINDER_DAYS,
    EVENT_TYPES,
    RECURRING_TYPES,
    ContactRecord,
    EventRecord,
)
from .store import (
    DATA_DIR,
    DEFAULT_DB_PATH,
    UNSET,
    create_contact,
    create_event,
    delete_contact,
    delete_event,
    get_contact,
    get_event,
    initialize_database,
    list_contacts,
    list_events,
    list_events_for_contact,
    sync_birthday_event,
    update_contact,
    update_event,
)
from .search import SearchResult, search_database, search_records

__all__ = [
    "ContactRecord",
    "DATA_DIR",
    "DEFAULT_DB_PATH",
    "DEFAULT_REMINDER_DAYS",
    "EVENT_TYPES",
    "EventRecord",
    "RECURRING_TYPES",
    "RELATIONSHIP_GROUPS",
    "RelationshipGroup",
    "SearchResult",
    "UNSET",
    "create_contact",
    "create_event",
    "delete_contact",
    "delete_event",
    "get_contact",
    "get_event",
    "group_icon",
    "group_label",
    "initialize_database",
    "list_contacts",
    "list_events",
    "list_events_for_contact",
    "search_database",
    "search_records",
    "sync_birthday_event",
    "update_contact",
    "update_event",
]
