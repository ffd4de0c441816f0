"""
Shared test fixtures.
"""

import os
import sys
from pathlib import Path

# Add backend directory to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Settings are loaded at import time; give them something to validate
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")
os.environ.setdefault("SHOPIFY_STORE_DOMAIN", "test-shop.myshopify.com")
os.environ.setdefault("SHOPIFY_ACCESS_TOKEN", "shpat_test")
os.environ.setdefault("DRAFT_ORDER_SERVICE_URL", "https://orders.example.test/draft-order-create")

import pytest
from unittest.mock import patch
from datetime import datetime
from typing import Generator

from tests.fakes import FakeCatalog, FakeHistory, FakeOrderCreator


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

    def __init__(self, data: list = None, count: int = None, calls: list = None):
        self._data = data or []
        self._count = count
        self.calls = calls if calls is not None else []

    def select(self, *args, **kwargs):
        self.calls.append(("select", args))
        return self

    def insert(self, data):
        # Simulate insert - add serial id and timestamp
        if isinstance(data, dict):
            data = [data]
        inserted = []
        for i, item in enumerate(data, start=1):
            row = dict(item)
            row["id"] = i
            row["created_at"] = datetime.utcnow().isoformat() + "Z"
            inserted.append(row)
        self.calls.append(("insert", inserted))
        self._data = inserted
        return self

    def eq(self, column, value):
        self.calls.append(("eq", column, value))
        return self

    def order(self, column, **kwargs):
        self.calls.append(("order", column, kwargs))
        return self

    def limit(self, count):
        self.calls.append(("limit", count))
        return self

    def execute(self) -> MockSupabaseResponse:
        return MockSupabaseResponse(
            data=self._data,
            count=self._count if self._count is not None else len(self._data)
        )


class MockSupabaseTable:
    """Mock Supabase table with configurable responses."""

    def __init__(self, data: list = None, count: int = None, calls: list = None):
        self._data = data or []
        self._count = count
        self.calls = calls if calls is not None else []

    def select(self, *args, **kwargs):
        return MockSupabaseQuery(self._data.copy(), self._count, self.calls).select(*args)

    def insert(self, data):
        query = MockSupabaseQuery(self._data.copy(), self._count, self.calls)
        return query.insert(data)


class MockSupabaseClient:
    """Mock Supabase client that records calls per table."""

    def __init__(self):
        self._tables = {}
        self.calls: dict[str, list] = {}

    def set_table_data(self, table_name: str, data: list, count: int = None):
        """Configure mock data for a table."""
        self._tables[table_name] = {"data": data, "count": count}

    def table(self, name: str) -> MockSupabaseTable:
        """Get mock table."""
        config = self._tables.get(name, {"data": [], "count": None})
        calls = self.calls.setdefault(name, [])
        return MockSupabaseTable(config["data"], config["count"], calls)


# ===================
# FIXTURES
# ===================

@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("bulk_order_uploads", [...])
    """
    return MockSupabaseClient()


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """Patch the database client with mock."""
    with patch("config.database.get_supabase_client", return_value=mock_supabase):
        with patch("services.order_history_service.get_supabase_client", return_value=mock_supabase):
            yield mock_supabase


@pytest.fixture
def fake_catalog() -> FakeCatalog:
    return FakeCatalog()


@pytest.fixture
def fake_order_creator() -> FakeOrderCreator:
    return FakeOrderCreator()


@pytest.fixture
def fake_history() -> FakeHistory:
    return FakeHistory()


@pytest.fixture
def sample_history_rows() -> list:
    """History rows as returned by Supabase."""
    return [
        {
            "id": 2,
            "shop_id": "5550001",
            "customer_id": "42",
            "customer_name": "Bloom Florist",
            "order_id": "gid://shopify/DraftOrder/9002",
            "order_legacy_id": "9002",
            "order_name": "#D25",
            "total_quantity": 12,
            "created_at": "2025-12-07T15:00:00Z",
        },
        {
            "id": 1,
            "shop_id": "5550001",
            "customer_id": "42",
            "customer_name": "Bloom Florist",
            "order_id": "gid://shopify/DraftOrder/9001",
            "order_legacy_id": "9001",
            "order_name": "#D24",
            "total_quantity": 5,
            "created_at": "2025-12-06T11:00:00Z",
        },
    ]


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client():
    """
    Create FastAPI test client.

    Usage:
        def test_endpoint(test_client):
            response = test_client.get("/")
            assert response.status_code == 200
    """
    from fastapi.testclient import TestClient
    from main import app

    return TestClient(app)
