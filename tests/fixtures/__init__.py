"""Test fixtures: sample DDL and seed rows for the integration suite."""

from __future__ import annotations

from pathlib import Path

_FIXTURES_DIR = Path(__file__).parent

#: What the mocked executor returns for every statement.
MOCK_ROWS = [{"id": 1, "name": "Test"}]

USERS = [
    {"id": 1, "name": "Ann", "email": "ann@example.com", "role": "admin", "active": True, "age": 34},
    {"id": 2, "name": "Bob", "email": None, "role": "user", "active": True, "age": 17},
    {"id": 3, "name": "Cid", "email": "cid@example.com", "role": "user", "active": False, "age": 45},
    {"id": 4, "name": "O'Brien", "email": "ob@example.com", "role": "moderator", "active": True, "age": 29},
]

ORDERS = [
    {"id": 1, "user_id": 1, "amount": 120.0, "created_at": "2024-01-05T10:00:00.000"},
    {"id": 2, "user_id": 1, "amount": 80.0, "created_at": "2024-02-01T09:30:00.000"},
    {"id": 3, "user_id": 3, "amount": 500.0, "created_at": "2024-02-14T18:45:00.000"},
    {"id": 4, "user_id": 4, "amount": 20.0, "created_at": "2024-03-01T12:00:00.000"},
]


def load_ddl() -> list[str]:
    """Return the SQLite DDL as a list of single statements."""
    text = (_FIXTURES_DIR / "ddl_sqlite.sql").read_text()
    return [stmt.strip() for stmt in text.split(";") if stmt.strip()]
