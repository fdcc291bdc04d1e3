"""
Shared test fixtures.
"""

import os
import sys
from pathlib import Path

# Add backend directory to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Settings are loaded at import time; tests never reach a real project
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")

import pytest
from unittest.mock import patch
from datetime import datetime, timezone
from typing import Generator, List

from models.trends import InventoryEvent, VisitEvent
from tests.factories import InMemoryEventStore

# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data: list = None, count: int = None):
        self.data = data or []
        self.count = count if count is not None else len(self.data)


class MockSupabaseQuery:
    """Mock Supabase query builder with chainable methods."""

    def __init__(self, data: list = None, count: int = None, log: list = None):
        self._data = data or []
        self._count = count
        self._log = log if log is not None else []

    def _record(self, name, *args):
        self._log.append((name, args))
        return self

    def select(self, *args, **kwargs):
        return self._record("select", *args)

    def insert(self, data):
        if isinstance(data, dict):
            data = [data]
        self._data = data
        return self._record("insert", data)

    def eq(self, column, value):
        return self._record("eq", column, value)

    def gte(self, column, value):
        return self._record("gte", column, value)

    def lte(self, column, value):
        return self._record("lte", column, value)

    def lt(self, column, value):
        return self._record("lt", column, value)

    def is_(self, column, value):
        return self._record("is_", column, value)

    def order(self, column, **kwargs):
        return self._record("order", column)

    def range(self, start, end):
        self._data = self._data[start:end + 1]
        return self._record("range", start, end)

    def limit(self, count):
        return self._record("limit", count)

    def execute(self) -> MockSupabaseResponse:
        return MockSupabaseResponse(
            data=self._data,
            count=self._count if self._count is not None else len(self._data)
        )


class MockSupabaseTable:
    """Mock Supabase table with configurable responses."""

    def __init__(self, data: list = None, count: int = None, log: list = None, error: Exception = None):
        self._data = data or []
        self._count = count
        self._log = log
        self._error = error

    def _query(self) -> MockSupabaseQuery:
        if self._error is not None:
            raise self._error
        return MockSupabaseQuery(self._data.copy(), self._count, self._log)

    def select(self, *args, **kwargs):
        return self._query().select(*args, **kwargs)

    def insert(self, data):
        return self._query().insert(data)


class MockSupabaseClient:
    """Mock Supabase client."""

    def __init__(self):
        self._tables = {}
        self.calls: dict = {}

    def set_table_data(self, table_name: str, data: list, count: int = None):
        """Configure mock data for a table."""
        self._tables[table_name] = {"data": data, "count": count, "error": None}

    def set_table_error(self, table_name: str, error: Exception):
        """Make every query against a table raise `error`."""
        self._tables[table_name] = {"data": [], "count": None, "error": error}

    def table(self, name: str) -> MockSupabaseTable:
        """Get mock table."""
        config = self._tables.get(name, {"data": [], "count": None, "error": None})
        log = self.calls.setdefault(name, [])
        return MockSupabaseTable(config["data"], config["count"], log, config["error"])


# ===================
# FIXTURES
# ===================

@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("product_trends", [
                {"product_id": 1, "action": "added", ...}
            ])
    """
    return MockSupabaseClient()


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """
    Patch the database client with mock.

    Any code using get_supabase_client() gets the mock.
    """
    with patch("config.database.get_supabase_client", return_value=mock_supabase):
        with patch("services.trend_service.get_supabase_client", return_value=mock_supabase):
            with patch("services.visitor_log_service.get_supabase_client", return_value=mock_supabase):
                with patch("services.visitor_log_service.get_admin_client", return_value=None):
                    yield mock_supabase


@pytest.fixture
def fixed_now() -> datetime:
    """Clock value used by services under test."""
    return datetime(2025, 9, 4, 15, 30, tzinfo=timezone.utc)


@pytest.fixture
def seed_inventory_events() -> List[InventoryEvent]:
    """product_trends rows from the demo seed."""
    return [
        InventoryEvent(entity_id="1", action="added", count=1,
                       occurred_at=datetime(2025, 9, 1, 10, tzinfo=timezone.utc)),
        InventoryEvent(entity_id="2", action="added", count=1,
                       occurred_at=datetime(2025, 9, 1, 11, tzinfo=timezone.utc)),
        InventoryEvent(entity_id="1", action="removed", count=1,
                       occurred_at=datetime(2025, 9, 3, 9, tzinfo=timezone.utc)),
        InventoryEvent(entity_id="3", action="added", count=1,
                       occurred_at=datetime(2025, 9, 4, 12, tzinfo=timezone.utc)),
    ]


@pytest.fixture
def seed_visit_events() -> List[VisitEvent]:
    """visitor_logs rows from the demo seed."""
    return [
        VisitEvent(session_id="sess1", occurred_at=datetime(2025, 9, 1, 8, tzinfo=timezone.utc)),
        VisitEvent(session_id="sess2", occurred_at=datetime(2025, 9, 1, 9, tzinfo=timezone.utc)),
        VisitEvent(session_id="sess1", occurred_at=datetime(2025, 9, 2, 14, tzinfo=timezone.utc)),
        VisitEvent(session_id="sess3", occurred_at=datetime(2025, 9, 3, 10, tzinfo=timezone.utc)),
    ]


@pytest.fixture
def seed_store(seed_inventory_events, seed_visit_events) -> InMemoryEventStore:
    """In-memory store loaded with the demo seed and an empty baseline."""
    return InMemoryEventStore(
        inventory=seed_inventory_events,
        visits=seed_visit_events,
        baseline=0,
    )


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client():
    """
    Create FastAPI test client.

    Usage:
        def test_endpoint(test_client):
            response = test_client.get("/api/dashboard/products")
            assert response.status_code == 200
    """
    from fastapi.testclient import TestClient
    from main import app

    return TestClient(app)
