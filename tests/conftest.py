import sqlite3
from typing import Any

import pytest

from structfilter.config import FilterSettings, get_settings, set_settings


class RecordingQuery:
    """Query double that records every where() call."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    def where(self, clause: str, *params: Any) -> "RecordingQuery":
        self.calls.append((clause, params))
        return self


@pytest.fixture(autouse=True)
def default_settings():
    """Run every test with default settings, restoring the previous ones afterwards."""
    original_settings = get_settings()
    set_settings(FilterSettings())

    yield

    set_settings(original_settings)


@pytest.fixture
def query() -> RecordingQuery:
    return RecordingQuery()


@pytest.fixture
def users_db():
    """In-memory sqlite database with a small users table."""
    conn = sqlite3.connect(":memory:")
    conn.execute("CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT, age INTEGER, created TEXT)")
    conn.executemany(
        "INSERT INTO users (id, name, age, created) VALUES (?, ?, ?, ?)",
        [
            (1, "John", 20, "2024-01-01 08:30:00"),
            (2, "Johnny", 35, "2024-01-31 22:00:00"),
            (3, "Alice", 20, "2024-02-01 00:00:00"),
            (4, "Bob", 41, "2023-12-31 23:59:59"),
        ],
    )
    conn.commit()
    yield conn
    conn.close()
