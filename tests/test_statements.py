"""Unit tests for StatementFactory and INSERT / UPDATE / DELETE statements."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from duckql import (
    DataError,
    DeleteStatement,
    InsertStatement,
    QueryBuilder,
    StatementFactory,
    UpdateStatement,
)
from duckql.query import ConditionsMixin
from duckql.statements import Statement
from tests.fixtures import MOCK_ROWS


# ---------------------------------------------------------------------------
# INSERT
# ---------------------------------------------------------------------------


def test_insert_single_row(db):
    stmt = db.insert("users").values({"id": 1, "name": "Ann"})
    assert isinstance(stmt, InsertStatement)
    assert stmt.build() == "INSERT INTO users (id, name) VALUES (1, 'Ann')"


def test_insert_many_rows_use_first_row_columns(db):
    stmt = db.insert("users").values(
        [
            {"id": 1, "name": "Ann", "active": True},
            {"id": 2, "active": False, "extra": "ignored"},
        ]
    )
    assert stmt.build() == (
        "INSERT INTO users (id, name, active) VALUES (1, 'Ann', TRUE), (2, NULL, FALSE)"
    )


def test_insert_formats_values(db):
    when = datetime(2024, 1, 1, tzinfo=timezone.utc)
    stmt = db.insert("events").values({"note": "it's", "at": when, "n": None})
    assert stmt.build() == (
        "INSERT INTO events (note, at, n) VALUES ('it''s', '2024-01-01T00:00:00.000Z', NULL)"
    )


def test_insert_returning(db):
    stmt = db.insert("users").values({"name": "Ann"}).returning("id", "created_at")
    assert stmt.build() == "INSERT INTO users (name) VALUES ('Ann') RETURNING id, created_at"


def test_insert_empty_rows_raises_before_execution(db, executor):
    with pytest.raises(DataError, match="No data to insert") as exc_info:
        db.insert("users").values([])
    assert exc_info.value.code == "DATA_EMPTY"
    assert exc_info.value.to_error_response() == {
        "error": "DATA_EMPTY",
        "message": "No data to insert",
        "details": {"operation": "insert"},
    }
    executor.execute.assert_not_called()


@pytest.mark.asyncio
async def test_insert_without_values_raises_on_execute(db, executor):
    with pytest.raises(DataError, match="No data to insert"):
        await db.insert("users")
    executor.execute.assert_not_called()


@pytest.mark.asyncio
async def test_await_insert_executes_once(db, executor):
    result = await db.insert("users").values({"id": 1})
    assert result == MOCK_ROWS
    executor.execute.assert_awaited_once_with("INSERT INTO users (id) VALUES (1)")


# ---------------------------------------------------------------------------
# UPDATE
# ---------------------------------------------------------------------------


def test_update_set_where(db):
    stmt = db.update("users").set({"active": False, "name": "Bo"}).where("id", 1)
    assert isinstance(stmt, UpdateStatement)
    assert stmt.build() == "UPDATE users SET active = FALSE, name = 'Bo' WHERE id = 1"


def test_update_without_where(db):
    assert db.update("users").set({"active": True}).build() == "UPDATE users SET active = TRUE"


def test_update_where_uses_select_grouping(db):
    stmt = (
        db.update("users")
        .set({"flagged": True})
        .where("role", "guest")
        .where("age", "<", 13)
        .or_where_null("email")
    )
    assert stmt.build() == (
        "UPDATE users SET flagged = TRUE WHERE ((role = 'guest' AND age < 13) OR email IS NULL)"
    )


def test_update_where_exists_subquery(db):
    stmt = (
        db.update("users")
        .set({"banned": True})
        .where_exists(lambda q: q.select("1").from_("bans").where_raw("bans.user_id = users.id"))
    )
    assert stmt.build() == (
        "UPDATE users SET banned = TRUE "
        "WHERE EXISTS (SELECT 1\nFROM bans\nWHERE bans.user_id = users.id)"
    )


@pytest.mark.asyncio
async def test_update_with_empty_data_raises_on_execute(db, executor):
    with pytest.raises(DataError, match="No data to update"):
        await db.update("users").set({}).where("id", 1)
    executor.execute.assert_not_called()


@pytest.mark.asyncio
async def test_update_execute_method(db, executor):
    await db.update("users").set({"a": 1}).where("id", 2).execute()
    executor.execute.assert_awaited_once_with("UPDATE users SET a = 1 WHERE id = 2")


# ---------------------------------------------------------------------------
# DELETE
# ---------------------------------------------------------------------------


def test_delete_without_where(db):
    stmt = db.delete("logs")
    assert isinstance(stmt, DeleteStatement)
    assert stmt.build() == "DELETE FROM logs"


def test_delete_where_in_returning(db):
    stmt = db.delete("users").where_in("id", [2, 3]).returning("id")
    assert stmt.build() == "DELETE FROM users WHERE id IN (2, 3) RETURNING id"


def test_delete_empty_in_matches_nothing(db):
    assert db.delete("users").where_in("id", []).build() == "DELETE FROM users WHERE 1 = 0"


@pytest.mark.asyncio
async def test_await_delete(db, executor):
    result = await db.delete("users").where("id", ">", 10)
    assert result == MOCK_ROWS
    executor.execute.assert_awaited_once_with("DELETE FROM users WHERE id > 10")


# ---------------------------------------------------------------------------
# Execution semantics
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_executor_errors_propagate_unchanged(db, executor):
    error = RuntimeError("connection lost")
    executor.execute.side_effect = error
    with pytest.raises(RuntimeError) as exc_info:
        await db.delete("users")
    assert exc_info.value is error


@pytest.mark.asyncio
async def test_sync_executor_is_supported():
    executor = MagicMock()
    executor.execute.return_value = [{"n": 1}]
    db = StatementFactory(executor)

    assert await db.insert("t").values({"n": 1}) == [{"n": 1}]
    executor.execute.assert_called_once_with("INSERT INTO t (n) VALUES (1)")


@pytest.mark.asyncio
async def test_any_object_with_execute_is_an_executor():
    class ListExecutor:
        def __init__(self):
            self.seen = []

        def execute(self, sql):
            self.seen.append(sql)
            return [{"ok": True}]

    executor = ListExecutor()
    db = StatementFactory(executor)
    assert await db.delete("t").where("id", 1) == [{"ok": True}]
    assert executor.seen == ["DELETE FROM t WHERE id = 1"]


@pytest.mark.asyncio
async def test_fetch_runs_built_select(db, executor):
    rows = await db.fetch(db.select("id", "name").from_("users").where("active", True))
    assert rows == MOCK_ROWS
    executor.execute.assert_awaited_once_with(
        "SELECT id, name\nFROM users\nWHERE active = TRUE"
    )


@pytest.mark.asyncio
async def test_first_returns_first_row_with_limit_one(db, executor):
    row = await db.first(db.select("id", "name").from_("users").order_by("id"))
    assert row == MOCK_ROWS[0]
    executor.execute.assert_awaited_once_with(
        "SELECT id, name\nFROM users\nORDER BY id ASC\nLIMIT 1"
    )


@pytest.mark.asyncio
async def test_first_returns_none_without_rows(db, executor):
    executor.execute.return_value = []
    assert await db.first(db.from_("users").where("id", 99)) is None


@pytest.mark.asyncio
async def test_first_leaves_query_unchanged(db):
    q = db.from_("users").limit(10)
    await db.first(q)
    assert q.build() == "SELECT *\nFROM users\nLIMIT 10"


@pytest.mark.asyncio
async def test_execution_is_logged(db, caplog):
    caplog.set_level(logging.DEBUG, logger="duckql.statements")
    await db.delete("users").where("id", 1)
    assert "Executing DELETE statement: DELETE FROM users WHERE id = 1" in caplog.text


# ---------------------------------------------------------------------------
# Base classes
# ---------------------------------------------------------------------------


def test_statement_base_is_abstract(executor):
    with pytest.raises(TypeError):
        Statement(executor, "users", QueryBuilder().dialect)


def test_conditions_mixin_is_abstract():
    with pytest.raises(TypeError):
        ConditionsMixin()


# ---------------------------------------------------------------------------
# Factory builders and table() shortcuts
# ---------------------------------------------------------------------------


def test_factory_builders(db):
    assert isinstance(db.query(), QueryBuilder)
    assert db.select("id").from_("users").build() == "SELECT id\nFROM users"
    assert db.from_("users", "u").build() == "SELECT *\nFROM users AS u"


def test_factory_dialect_applies_to_builders(executor):
    db = StatementFactory(executor, dialect="postgres")
    assert db.from_("users").where("id", 1).to_sql().sql.endswith("WHERE id = $1")


def test_table_select(db):
    sql = db.table("users").select("id", "name").where("active", "=", True).build()
    assert sql == "SELECT id, name\nFROM users\nWHERE active = TRUE"


def test_table_where_shortcut(db):
    assert db.table("users").where("id", ">", 10).build() == "SELECT *\nFROM users\nWHERE id > 10"
    assert db.table("users").where("id", 3).build() == "SELECT *\nFROM users\nWHERE id = 3"


def test_table_statements(db):
    users = db.table("users")
    assert users.insert([{"id": 1}]).build() == "INSERT INTO users (id) VALUES (1)"
    assert users.update({"name": "x"}).where("id", 1).build() == (
        "UPDATE users SET name = 'x' WHERE id = 1"
    )
    assert users.delete().where("id", 1).build() == "DELETE FROM users WHERE id = 1"


@pytest.mark.asyncio
async def test_table_insert_executes(db, executor):
    await db.table("users").insert({"id": 7})
    executor.execute.assert_awaited_once_with("INSERT INTO users (id) VALUES (7)")
