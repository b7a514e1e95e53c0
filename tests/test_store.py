"""Tests for the SQLite contact and event store."""

import sqlite3
from datetime import date

import pytest

from records import (
    create_contact,
    create_event,
    delete_contact,
    delete_event,
    get_contact,
    get_event,
    list_contacts,
    list_events,
    list_events_for_contact,
    sync_birthday_event,
    update_contact,
    update_event,
)


class TestEvents:
    def test_create_and_get(self, db_path):
        record = create_event(
            "  Anniversary ",
            date(2020, 5, 20),
            event_type="anniversary",
            is_recurring=True,
            recurring_type="yearly",
            reminder_days=14,
            db_path=db_path,
        )
        fetched = get_event(record.id, db_path)
        assert fetched == record
        assert fetched.title == "Anniversary"
        assert fetched.is_recurring is True
        assert fetched.recurring_type == "yearly"
        assert fetched.reminder_days == 14

    def test_list_orders_by_date(self, db_path):
        create_event("Later", date(2025, 3, 1), db_path=db_path)
        create_event("Earlier", date(2025, 1, 1), db_path=db_path)
        assert [e.title for e in list_events(db_path)] == ["Earlier", "Later"]

    def test_recurring_requires_type(self, db_path):
        with pytest.raises(ValueError):
            create_event("Broken", date(2025, 1, 1), is_recurring=True, db_path=db_path)

    def test_one_off_drops_recurring_type(self, db_path):
        record = create_event("Once", date(2025, 1, 1), recurring_type="weekly", db_path=db_path)
        assert record.recurring_type is None

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"event_type": "party"},
            {"is_recurring": True, "recurring_type": "daily"},
            {"reminder_days": -1},
        ],
    )
    def test_rejects_invalid_fields(self, db_path, kwargs):
        with pytest.raises(ValueError):
            create_event("Bad", date(2025, 1, 1), db_path=db_path, **kwargs)

    def test_rejects_unknown_contact(self, db_path):
        with pytest.raises(ValueError):
            create_event("Lunch", date(2025, 1, 1), contact_id=42, db_path=db_path)

    def test_update_fields(self, db_path):
        record = create_event("Meet", date(2025, 1, 1), description="coffee", db_path=db_path)
        updated = update_event(
            record.id,
            title="Meet Bob",
            description=None,
            is_recurring=True,
            recurring_type="monthly",
            reminder_days=None,
            db_path=db_path,
        )
        assert updated.title == "Meet Bob"
        assert updated.description is None
        assert updated.recurring_type == "monthly"
        assert updated.reminder_days is None
        assert updated.effective_reminder_days == 7

    def test_turning_off_recurrence_clears_type(self, db_path):
        record = create_event(
            "Standup", date(2025, 1, 6), is_recurring=True, recurring_type="weekly", db_path=db_path
        )
        updated = update_event(record.id, is_recurring=False, db_path=db_path)
        assert updated.is_recurring is False
        assert updated.recurring_type is None

    def test_update_without_fields_returns_record(self, db_path):
        record = create_event("Same", date(2025, 1, 1), db_path=db_path)
        assert update_event(record.id, db_path=db_path) == record

    def test_update_missing_event(self, db_path):
        with pytest.raises(ValueError):
            update_event(999, title="x", db_path=db_path)

    def test_delete(self, db_path):
        record = create_event("Gone", date(2025, 1, 1), db_path=db_path)
        delete_event(record.id, db_path)
        assert get_event(record.id, db_path) is None


class TestContacts:
    def test_list_sorted_case_insensitively(self, db_path):
        create_contact("bob", db_path=db_path)
        create_contact("Alice", db_path=db_path)
        assert [c.name for c in list_contacts(db_path)] == ["Alice", "bob"]

    def test_blank_fields_are_stored_as_null(self, db_path):
        record = create_contact("Carol", phone="  ", notes="", db_path=db_path)
        assert record.phone is None
        assert record.notes is None

    def test_rejects_empty_name(self, db_path):
        with pytest.raises(ValueError):
            create_contact("   ", db_path=db_path)

    def test_update_clears_optional_field(self, db_path):
        record = create_contact("Dan", email="dan@example.com", db_path=db_path)
        updated = update_contact(record.id, email=None, relationship="colleague", db_path=db_path)
        assert updated.email is None
        assert updated.relationship == "colleague"

    def test_update_missing_contact(self, db_path):
        with pytest.raises(ValueError):
            update_contact(123, name="Nobody", db_path=db_path)


class TestBirthdayMirroring:
    def test_birthday_creates_yearly_event(self, db_path):
        contact = create_contact("Alice", birthday=date(1990, 4, 12), db_path=db_path)
        events = list_events_for_contact(contact.id, db_path)
        assert len(events) == 1
        event = events[0]
        assert event.title == "Alice's birthday"
        assert event.event_type == "birthday"
        assert event.is_recurring is True
        assert event.recurring_type == "yearly"
        assert event.reminder_days == 7
        assert event.event_date == date(1990, 4, 12)

    def test_no_birthday_no_event(self, db_path):
        contact = create_contact("Bob", db_path=db_path)
        assert list_events_for_contact(contact.id, db_path) == []

    def test_birthday_change_updates_event(self, db_path):
        contact = create_contact("Alice", birthday=date(1990, 4, 12), db_path=db_path)
        update_contact(contact.id, birthday=date(1990, 4, 13), name="Alicia", db_path=db_path)
        events = list_events_for_contact(contact.id, db_path)
        assert len(events) == 1
        assert events[0].event_date == date(1990, 4, 13)
        assert events[0].title == "Alicia's birthday"

    def test_clearing_birthday_removes_event(self, db_path):
        contact = create_contact("Alice", birthday=date(1990, 4, 12), db_path=db_path)
        update_contact(contact.id, birthday=None, db_path=db_path)
        assert list_events_for_contact(contact.id, db_path) == []

    def test_sync_reports_creation_only(self, db_path):
        contact = create_contact("Eve", db_path=db_path)
        # Birthday written behind the store's back, then mirrored.
        with sqlite3.connect(db_path) as conn:
            conn.execute("UPDATE contacts SET birthday = '1985-09-01' WHERE id = ?", (contact.id,))
        assert sync_birthday_event(contact.id, db_path) is True
        assert sync_birthday_event(contact.id, db_path) is False
        assert len(list_events_for_contact(contact.id, db_path)) == 1

    def test_sync_unknown_contact(self, db_path):
        with pytest.raises(ValueError):
            sync_birthday_event(77, db_path)

    def test_delete_contact_removes_birthday_and_unlinks_events(self, db_path):
        contact = create_contact("Alice", birthday=date(1990, 4, 12), db_path=db_path)
        lunch = create_event("Lunch", date(2025, 2, 1), contact_id=contact.id, db_path=db_path)
        delete_contact(contact.id, db_path)
        assert get_contact(contact.id, db_path) is None
        remaining = list_events(db_path)
        assert [e.id for e in remaining] == [lunch.id]
        assert remaining[0].contact_id is None
