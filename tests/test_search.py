"""Tests for searching contacts and events."""

from datetime import date

import pytest

from records import create_contact, create_event, search_database, search_records


@pytest.fixture
def people(db_path):
    alice = create_contact(
        "Alice Martin",
        relationship="colleague",
        email="alice@Example.com",
        phone="555-0142",
        notes="Loves hiking",
        db_path=db_path,
    )
    bob = create_contact("Bob", relationship="family", db_path=db_path)
    return alice, bob


class TestSearchRecords:
    def test_blank_query_matches_nothing(self, people, make_event):
        events = [make_event(title="Anything")]
        assert search_records("", list(people), events) == []
        assert search_records("   ", list(people), events) == []

    def test_matches_any_contact_field_ignoring_case(self, people):
        alice, bob = people
        for query in ("MARTIN", "Colleague", "example.COM", "0142", "hiking"):
            results = search_records(query, [alice, bob], [])
            assert [r.contact for r in results] == [alice], query

    def test_matches_event_title_description_and_type(self, make_event):
        dinner = make_event(1, title="Team Dinner", event_type="meeting")
        call = make_event(2, title="Call", description="Ask about the Dinner menu", event_type="reminder")
        assert [r.event.id for r in search_records("dinner", [], [dinner, call])] == [1, 2]
        assert [r.event.id for r in search_records("MEETING", [], [dinner, call])] == [1]
        assert [r.event.id for r in search_records("REMIND", [], [dinner, call])] == [2]

    def test_contacts_come_before_events(self, people, make_event):
        alice, bob = people
        event = make_event(title="Bob's birthday", event_type="birthday")
        results = search_records("bob", [alice, bob], [event])
        assert [r.kind for r in results] == ["contact", "event"]
        assert results[0].contact == bob
        assert results[1].event == event

    def test_missing_optional_fields_are_skipped(self, people):
        _, bob = people
        assert search_records("hiking", [bob], []) == []


def test_search_database_reads_the_store(db_path, people):
    create_event(
        "Hiking trip",
        date(2025, 5, 1),
        description="Weekend away",
        event_type="other",
        db_path=db_path,
    )
    results = search_database("hik", db_path)
    assert [r.kind for r in results] == ["contact", "event"]
    assert results[0].contact.name == "Alice Martin"
    assert results[1].event.title == "Hiking trip"


def test_search_database_blank_query(db_path, people):
    assert search_database(" ", db_path) == []
