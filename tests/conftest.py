"""Shared fixtures: an in-memory stand-in for the Supabase table API."""

import threading
from pathlib import Path
from unittest.mock import MagicMock

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def load_fixture(name: str) -> str:
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


class _Query:
    """Mimics the postgrest builder chain used by HistoryStore."""

    def __init__(self, table: "FakeTable"):
        self._table = table
        self._op = None
        self._payload = None
        self._order = None

    def insert(self, row):
        self._op, self._payload = "insert", row
        return self

    def select(self, columns):
        self._op = "select"
        return self

    def order(self, column, desc=False):
        self._order = (column, desc)
        return self

    def execute(self):
        if self._op == "insert":
            return MagicMock(data=[self._table.add(self._payload)])
        rows = list(self._table.rows)
        if self._order:
            column, desc = self._order
            rows.sort(key=lambda r: r[column], reverse=desc)
        return MagicMock(data=rows)


class FakeTable:
    def __init__(self):
        self.rows: list[dict] = []
        self._next_id = 1
        self._lock = threading.Lock()

    def add(self, row: dict) -> dict:
        with self._lock:
            stored = {"id": self._next_id, **row}
            self._next_id += 1
            self.rows.append(stored)
            return stored


class FakeSupabaseClient:
    def __init__(self):
        self.tables: dict[tuple[str, str], FakeTable] = {}
        self._schema = "public"

    def schema(self, name):
        self._schema = name
        return self

    def table(self, name):
        table = self.tables.setdefault((self._schema, name), FakeTable())
        return _Query(table)


@pytest.fixture
def fake_supabase():
    return FakeSupabaseClient()


@pytest.fixture
def bing_html():
    return load_fixture("bing_results.html")


@pytest.fixture
def google_html():
    return load_fixture("google_results.html")
