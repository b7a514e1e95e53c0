from __future__ import annotations

import logging
import sqlite3
import threading
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from .models import (
    DEFAULT_REMINDER_DAYS,
    EVENT_TYPES,
    RECURRING_TYPES,
    ContactRecord,
    EventRecord,
)

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent.parent
DATA_DIR = BASE_DIR / "data_files"
DEFAULT_DB_PATH = DATA_DIR / "kinship.db"
DATE_FMT = "%Y-%m-%d"
TS_FMT = "%Y-%m-%dT%H:%M:%S"

_db_lock = threading.RLock()

_CONTACT_COLUMNS = (
    "id, name, relationship, phone, email, birthday, notes, avatar_url, created_at, updated_at"
)
_EVENT_COLUMNS = (
    "id, title, description, event_date, event_type, is_recurring, recurring_type, "
    "reminder_days, contact_id, created_at, updated_at"
)

# Sentinel for "leave unchanged" where None is a meaningful new value.
UNSET = object()


def _connect(db_path: Path = DEFAULT_DB_PATH) -> sqlite3.Connection:
    conn = sqlite3.connect(db_path, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)


def _serialize_date(value: Optional[date]) -> Optional[str]:
    return value.strftime(DATE_FMT) if value else None


def _serialize_datetime(value: datetime) -> str:
    return value.strftime(TS_FMT)


def _parse_date(raw: Optional[str]) -> Optional[date]:
    return datetime.strptime(raw, DATE_FMT).date() if raw else None


def _parse_required_date(raw: str) -> date:
    return datetime.strptime(raw, DATE_FMT).date()


def _parse_datetime(raw: str) -> datetime:
    return datetime.strptime(raw, TS_FMT)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned if cleaned else None


def _row_to_contact(row: sqlite3.Row) -> ContactRecord:
    return ContactRecord(
        id=row["id"],
        name=row["name"],
        relationship=row["relationship"],
        phone=row["phone"],
        email=row["email"],
        birthday=_parse_date(row["birthday"]),
        notes=row["notes"],
        avatar_url=row["avatar_url"],
        created_at=_parse_datetime(row["created_at"]),
        updated_at=_parse_datetime(row["updated_at"]),
    )


def _row_to_event(row: sqlite3.Row) -> EventRecord:
    return EventRecord(
        id=row["id"],
        title=row["title"],
        description=row["description"],
        event_date=_parse_required_date(row["event_date"]),
        event_type=row["event_type"],
        is_recurring=bool(row["is_recurring"]),
        recurring_type=row["recurring_type"],
        reminder_days=row["reminder_days"],
        contact_id=row["contact_id"],
        created_at=_parse_datetime(row["created_at"]),
        updated_at=_parse_datetime(row["updated_at"]),
    )


def initialize_database(db_path: Path = DEFAULT_DB_PATH) -> None:
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    with _db_lock, _connect(db_path) as conn:
        conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS contacts (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                relationship TEXT,
                phone TEXT,
                email TEXT,
                birthday TEXT,
                notes TEXT,
                avatar_url TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS events (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                title TEXT NOT NULL,
                description TEXT,
                event_date TEXT NOT NULL,
                event_type TEXT NOT NULL CHECK (
                    event_type IN ('birthday','anniversary','meeting','reminder','other')
                ),
                is_recurring INTEGER NOT NULL DEFAULT 0,
                recurring_type TEXT CHECK (
                    recurring_type IS NULL OR recurring_type IN ('weekly','monthly','yearly')
                ),
                reminder_days INTEGER CHECK (reminder_days IS NULL OR reminder_days >= 0),
                contact_id INTEGER,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                FOREIGN KEY (contact_id) REFERENCES contacts(id) ON DELETE SET NULL
            );

            CREATE INDEX IF NOT EXISTS idx_events_contact_id
                ON events(contact_id, event_type);
            """
        )
        conn.commit()


def _validate_event_fields(
    event_type: str,
    is_recurring: bool,
    recurring_type: Optional[str],
    reminder_days: Optional[int],
) -> None:
    if event_type not in EVENT_TYPES:
        raise ValueError(f"Event type must be one of {EVENT_TYPES}")
    if recurring_type is not None and recurring_type not in RECURRING_TYPES:
        raise ValueError(f"Recurring type must be one of {RECURRING_TYPES}")
    if is_recurring and recurring_type is None:
        raise ValueError("Recurring events need a recurring type")
    if reminder_days is not None and reminder_days < 0:
        raise ValueError("Reminder days must not be negative")


# Contacts


def list_contacts(db_path: Path = DEFAULT_DB_PATH) -> List[ContactRecord]:
    with _db_lock, _connect(db_path) as conn:
        rows = conn.execute(
            f"SELECT {_CONTACT_COLUMNS} FROM contacts ORDER BY name COLLATE NOCASE ASC, id ASC"
        ).fetchall()
    return [_row_to_contact(row) for row in rows]


def get_contact(contact_id: int, db_path: Path = DEFAULT_DB_PATH) -> Optional[ContactRecord]:
    with _db_lock, _connect(db_path) as conn:
        row = conn.execute(
            f"SELECT {_CONTACT_COLUMNS} FROM contacts WHERE id = ?",
            (contact_id,),
        ).fetchone()
    return _row_to_contact(row) if row else None


def create_contact(
    name: str,
    *,
    relationship: Optional[str] = None,
    phone: Optional[str] = None,
    email: Optional[str] = None,
    birthday: Optional[date] = None,
    notes: Optional[str] = None,
    avatar_url: Optional[str] = None,
    db_path: Path = DEFAULT_DB_PATH,
) -> ContactRecord:
    if not name or not name.strip():
        raise ValueError("Contact name must not be empty")
    now = _serialize_datetime(_utcnow())
    with _db_lock, _connect(db_path) as conn:
        cur = conn.execute(
            """
            INSERT INTO contacts (
                name, relationship, phone, email, birthday, notes, avatar_url,
                created_at, updated_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                name.strip(),
                _clean(relationship),
                _clean(phone),
                _clean(email),
                _serialize_date(birthday),
                _clean(notes),
                _clean(avatar_url),
                now,
                now,
            ),
        )
        contact_id = cur.lastrowid
        conn.commit()
    if birthday is not None:
        sync_birthday_event(contact_id, db_path)
    record = get_contact(contact_id, db_path)
    if record is None:
        raise RuntimeError("Failed to create contact")
    return record


def update_contact(
    contact_id: int,
    *,
    name: Optional[str] = None,
    relationship=UNSET,
    phone=UNSET,
    email=UNSET,
    birthday=UNSET,
    notes=UNSET,
    avatar_url=UNSET,
    db_path: Path = DEFAULT_DB_PATH,
) -> ContactRecord:
    record = get_contact(contact_id, db_path)
    if record is None:
        raise ValueError(f"Contact {contact_id} does not exist")
    fields = []
    values: List[object] = []
    if name is not None:
        if not name.strip():
            raise ValueError("Contact name must not be empty")
        fields.append("name = ?")
        values.append(name.strip())
    for column, value in (
        ("relationship", relationship),
        ("phone", phone),
        ("email", email),
        ("notes", notes),
        ("avatar_url", avatar_url),
    ):
        if value is not UNSET:
            fields.append(f"{column} = ?")
            values.append(_clean(value))
    if birthday is not UNSET:
        fields.append("birthday = ?")
        values.append(_serialize_date(birthday))
    if not fields:
        return record
    fields.append("updated_at = ?")
    values.append(_serialize_datetime(_utcnow()))
    values.append(contact_id)
    with _db_lock, _connect(db_path) as conn:
        conn.execute(
            f"UPDATE contacts SET {', '.join(fields)} WHERE id = ?",
            values,
        )
        conn.commit()
    # Name changes rename the mirrored event too.
    if birthday is not UNSET or name is not None:
        sync_birthday_event(contact_id, db_path)
    updated = get_contact(contact_id, db_path)
    if updated is None:
        raise RuntimeError("Failed to fetch updated contact")
    return updated


def delete_contact(contact_id: int, db_path: Path = DEFAULT_DB_PATH) -> None:
    with _db_lock, _connect(db_path) as conn:
        conn.execute(
            "DELETE FROM events WHERE contact_id = ? AND event_type = 'birthday'",
            (contact_id,),
        )
        conn.execute("DELETE FROM contacts WHERE id = ?", (contact_id,))
        conn.commit()


# Events


def list_events(db_path: Path = DEFAULT_DB_PATH) -> List[EventRecord]:
    with _db_lock, _connect(db_path) as conn:
        rows = conn.execute(
            f"""
            SELECT {_EVENT_COLUMNS}
            FROM events
            ORDER BY event_date ASC, title COLLATE NOCASE ASC, id ASC
            """
        ).fetchall()
    return [_row_to_event(row) for row in rows]


def list_events_for_contact(contact_id: int, db_path: Path = DEFAULT_DB_PATH) -> List[EventRecord]:
    with _db_lock, _connect(db_path) as conn:
        rows = conn.execute(
            f"""
            SELECT {_EVENT_COLUMNS}
            FROM events
            WHERE contact_id = ?
            ORDER BY event_date ASC, id ASC
            """,
            (contact_id,),
        ).fetchall()
    return [_row_to_event(row) for row in rows]


def get_event(event_id: int, db_path: Path = DEFAULT_DB_PATH) -> Optional[EventRecord]:
    with _db_lock, _connect(db_path) as conn:
        row = conn.execute(
            f"SELECT {_EVENT_COLUMNS} FROM events WHERE id = ?",
            (event_id,),
        ).fetchone()
    return _row_to_event(row) if row else None


def _find_birthday_event(conn: sqlite3.Connection, contact_id: int) -> Optional[sqlite3.Row]:
    return conn.execute(
        """
        SELECT id FROM events
        WHERE contact_id = ? AND event_type = 'birthday'
        ORDER BY id ASC
        LIMIT 1
        """,
        (contact_id,),
    ).fetchone()


def create_event(
    title: str,
    event_date: date,
    *,
    event_type: str = "other",
    description: Optional[str] = None,
    is_recurring: bool = False,
    recurring_type: Optional[str] = None,
    reminder_days: Optional[int] = DEFAULT_REMINDER_DAYS,
    contact_id: Optional[int] = None,
    db_path: Path = DEFAULT_DB_PATH,
) -> EventRecord:
    if not title or not title.strip():
        raise ValueError("Event title must not be empty")
    if not is_recurring:
        recurring_type = None
    _validate_event_fields(event_type, is_recurring, recurring_type, reminder_days)
    if contact_id is not None and get_contact(contact_id, db_path) is None:
        raise ValueError(f"Contact {contact_id} does not exist")
    now = _serialize_datetime(_utcnow())
    with _db_lock, _connect(db_path) as conn:
        cur = conn.execute(
            """
            INSERT INTO events (
                title, description, event_date, event_type, is_recurring,
                recurring_type, reminder_days, contact_id, created_at, updated_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                title.strip(),
                _clean(description),
                event_date.strftime(DATE_FMT),
                event_type,
                int(is_recurring),
                recurring_type,
                reminder_days,
                contact_id,
                now,
                now,
            ),
        )
        event_id = cur.lastrowid
        conn.commit()
    record = get_event(event_id, db_path)
    if record is None:
        raise RuntimeError("Failed to create event")
    return record


def update_event(
    event_id: int,
    *,
    title: Optional[str] = None,
    description=UNSET,
    event_date: Optional[date] = None,
    event_type: Optional[str] = None,
    is_recurring: Optional[bool] = None,
    recurring_type=UNSET,
    reminder_days=UNSET,
    contact_id=UNSET,
    db_path: Path = DEFAULT_DB_PATH,
) -> EventRecord:
    record = get_event(event_id, db_path)
    if record is None:
        raise ValueError(f"Event {event_id} does not exist")
    new_is_recurring = record.is_recurring if is_recurring is None else is_recurring
    new_recurring_type = record.recurring_type if recurring_type is UNSET else recurring_type
    if not new_is_recurring:
        new_recurring_type = None
    new_event_type = record.event_type if event_type is None else event_type
    new_reminder_days = record.reminder_days if reminder_days is UNSET else reminder_days
    _validate_event_fields(new_event_type, new_is_recurring, new_recurring_type, new_reminder_days)
    if contact_id not in (UNSET, None) and get_contact(contact_id, db_path) is None:
        raise ValueError(f"Contact {contact_id} does not exist")

    fields = []
    values: List[object] = []
    if title is not None:
        if not title.strip():
            raise ValueError("Event title must not be empty")
        fields.append("title = ?")
        values.append(title.strip())
    if description is not UNSET:
        fields.append("description = ?")
        values.append(_clean(description))
    if event_date is not None:
        fields.append("event_date = ?")
        values.append(event_date.strftime(DATE_FMT))
    if event_type is not None:
        fields.append("event_type = ?")
        values.append(event_type)
    if is_recurring is not None or recurring_type is not UNSET:
        fields.append("is_recurring = ?")
        values.append(int(new_is_recurring))
        fields.append("recurring_type = ?")
        values.append(new_recurring_type)
    if reminder_days is not UNSET:
        fields.append("reminder_days = ?")
        values.append(reminder_days)
    if contact_id is not UNSET:
        fields.append("contact_id = ?")
        values.append(contact_id)
    if not fields:
        return record
    fields.append("updated_at = ?")
    values.append(_serialize_datetime(_utcnow()))
    values.append(event_id)
    with _db_lock, _connect(db_path) as conn:
        conn.execute(
            f"UPDATE events SET {', '.join(fields)} WHERE id = ?",
            values,
        )
        conn.commit()
    updated = get_event(event_id, db_path)
    if updated is None:
        raise RuntimeError("Failed to fetch updated event")
    return updated


def delete_event(event_id: int, db_path: Path = DEFAULT_DB_PATH) -> None:
    with _db_lock, _connect(db_path) as conn:
        conn.execute("DELETE FROM events WHERE id = ?", (event_id,))
        conn.commit()


def sync_birthday_event(contact_id: int, db_path: Path = DEFAULT_DB_PATH) -> bool:
    """Mirror a contact's birthday into a yearly recurring birthday event.

    Creates the event when the contact gains a birthday, rewrites it when the
    birthday or name changes and deletes it when the birthday is cleared.
    Returns True only when a new event was created.
    """
    contact = get_contact(contact_id, db_path)
    if contact is None:
        raise ValueError(f"Contact {contact_id} does not exist")
    values: Dict[str, object] = {
        "title": f"{contact.name}'s birthday",
        "description": f"Birthday reminder for {contact.name}",
        "event_date": _serialize_date(contact.birthday),
        "event_type": "birthday",
        "is_recurring": 1,
        "recurring_type": "yearly",
        "reminder_days": DEFAULT_REMINDER_DAYS,
        "contact_id": contact_id,
    }
    now = _serialize_datetime(_utcnow())
    with _db_lock, _connect(db_path) as conn:
        existing = _find_birthday_event(conn, contact_id)
        if contact.birthday is None:
            if existing is not None:
                conn.execute("DELETE FROM events WHERE id = ?", (existing["id"],))
                conn.commit()
                logger.info("Removed birthday event %s for contact %s", existing["id"], contact_id)
            return False
        if existing is not None:
            assignments = ", ".join(f"{column} = ?" for column in values)
            conn.execute(
                f"UPDATE events SET {assignments}, updated_at = ? WHERE id = ?",
                (*values.values(), now, existing["id"]),
            )
            conn.commit()
            return False
        columns = ", ".join(values)
        placeholders = ", ".join("?" for _ in values)
        conn.execute(
            f"INSERT INTO events ({columns}, created_at, updated_at) VALUES ({placeholders}, ?, ?)",
            (*values.values(), now, now),
        )
        conn.commit()
    logger.info("Created birthday event for contact %s", contact_id)
    return True
