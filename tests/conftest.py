"""
Pytest configuration and shared fixtures.
"""

from datetime import date, datetime

import pytest
from fastapi.testclient import TestClient

from api import app
from records import EventRecord, initialize_database

TOKEN = "test-token"
CREATED = datetime(2024, 1, 1, 12, 0, 0)


@pytest.fixture
def db_path(tmp_path):
    """Fresh SQLite database for each test."""
    path = tmp_path / "kinship.db"
    initialize_database(path)
    return path


@pytest.fixture
def make_event():
    """Factory for in-memory event records."""

    def factory(
        event_id=1,
        event_date=date(2024, 1, 10),
        *,
        title="Event",
        description=None,
        event_type="other",
        is_recurring=False,
        recurring_type=None,
        reminder_days=7,
        contact_id=None,
    ):
        return EventRecord(
            id=event_id,
            title=title,
            description=description,
            event_date=event_date,
            event_type=event_type,
            is_recurring=is_recurring,
            recurring_type=recurring_type,
            reminder_days=reminder_days,
            contact_id=contact_id,
            created_at=CREATED,
            updated_at=CREATED,
        )

    return factory


@pytest.fixture
def client(db_path):
    """API client bound to the test database; the lifespan is not run."""
    app.state.db_path = db_path
    app.state.token = TOKEN
    app.state.server_id = "test-server"
    test_client = TestClient(app)
    test_client.headers.update({"Authorization": f"Bearer {TOKEN}"})
    yield test_client
    app.state.token = None
