"""INSERT / UPDATE / DELETE sugar bound to an executor.

``StatementFactory`` wraps anything with an ``execute(sql)`` method (the
:class:`Executor` protocol).  The executor may be synchronous or return an
awaitable; the factory awaits only when it has to.  Whatever the executor
raises reaches the caller unchanged.

Usage::

    db = StatementFactory(executor)

    await db.insert("users").values([{"id": 1, "name": "Ann"}])
    await db.update("users").set({"active": False}).where("id", 1)
    await db.delete("users").where_in("id", [2, 3])
    rows = await db.fetch(db.select("id").from_("users"))
    row = await db.first(db.from_("users").where("id", 1))

Statement values are inlined with the same literal rules as
:meth:`duckql.query.QueryBuilder.build`, and WHERE conditions are grouped
exactly as they are for SELECT.
"""
from __future__ import annotations

import inspect
import logging
from abc import ABC, abstractmethod
from collections.abc import Generator, Iterable, Mapping
from typing import Any, Protocol, Self

from duckql.compile.base import SQLDialect
from duckql.compile.builder import QueryCompiler
from duckql.compile.conditions import ConditionGrouper, PredicateBuilder
from duckql.compile.registry import resolve_dialect
from duckql.compile.values import ValueFormatter
from duckql.errors import DataError
from duckql.query import ConditionsMixin, QueryBuilder, _UNSET, coerce_value
from duckql.schema.query_state import Condition

logger = logging.getLogger(__name__)


class Executor(Protocol):
    """Anything that can run a SQL string and hand back rows."""

    def execute(self, sql: str) -> Any:
        """Run ``sql``; return rows, or an awaitable resolving to rows."""
        ...


async def run(executor: Executor, sql: str) -> Any:
    """Execute ``sql``, awaiting the result if the executor is async."""
    result = executor.execute(sql)
    if inspect.isawaitable(result):
        result = await result
    return result


# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------


class Statement(ABC):
    """Base for executable data-modifying statements.

    A statement renders on :meth:`build` and executes on ``await stmt`` or
    ``await stmt.execute()``.
    """

    kind = "STATEMENT"

    def __init__(self, executor: Executor, table: str, dialect: SQLDialect) -> None:
        self._executor = executor
        self._table = table
        self._dialect = dialect
        self._returning: list[str] = []

    def returning(self, *columns: str) -> Self:
        self._returning.extend(columns)
        return self

    @abstractmethod
    def build(self) -> str:
        """Render the statement as inlined SQL."""

    def _values(self) -> ValueFormatter:
        return ValueFormatter(QueryCompiler(self._dialect).render_inlined)

    def _returning_sql(self) -> str:
        if not self._returning:
            return ""
        return f" RETURNING {', '.join(self._returning)}"

    async def execute(self) -> Any:
        sql = self.build()
        logger.debug("Executing %s statement: %s", self.kind, sql)
        return await run(self._executor, sql)

    def __await__(self) -> Generator[Any, None, Any]:
        return self.execute().__await__()

    def __str__(self) -> str:
        return self.build()


class InsertStatement(Statement):
    """``INSERT INTO table (cols) VALUES (...), (...)``.

    Columns are taken from the first row, in its key order.  Keys missing
    from a later row render as ``NULL``; extra keys are ignored.
    """

    kind = "INSERT"

    def __init__(self, executor: Executor, table: str, dialect: SQLDialect) -> None:
        super().__init__(executor, table, dialect)
        self._rows: list[Mapping[str, Any]] = []

    def values(self, rows: Mapping[str, Any] | Iterable[Mapping[str, Any]]) -> Self:
        """Set the rows to insert.

        Raises:
            DataError: If ``rows`` is empty.
        """
        records = [rows] if isinstance(rows, Mapping) else list(rows)
        if not records:
            raise DataError.empty_data("insert")
        self._rows = records
        return self

    def build(self) -> str:
        if not self._rows:
            raise DataError.empty_data("insert")
        columns = list(self._rows[0])
        if not columns:
            raise DataError.empty_data("insert")
        fmt = self._values().format
        tuples = [
            f"({', '.join(fmt(coerce_value(row.get(col))) for col in columns)})"
            for row in self._rows
        ]
        return (
            f"INSERT INTO {self._table} ({', '.join(columns)}) "
            f"VALUES {', '.join(tuples)}{self._returning_sql()}"
        )


class _FilteredStatement(ConditionsMixin, Statement):
    """A statement with an optional WHERE clause."""

    def __init__(self, executor: Executor, table: str, dialect: SQLDialect) -> None:
        super().__init__(executor, table, dialect)
        self._where: list[Condition] = []

    def _where_conditions(self) -> list[Condition]:
        return self._where

    def _where_sql(self, values: ValueFormatter) -> str:
        if not self._where:
            return ""
        grouped = ConditionGrouper(PredicateBuilder(values)).build(self._where)
        return f" WHERE {grouped}"


class UpdateStatement(_FilteredStatement):
    """``UPDATE table SET col = val, ... [WHERE ...]``."""

    kind = "UPDATE"

    def __init__(self, executor: Executor, table: str, dialect: SQLDialect) -> None:
        super().__init__(executor, table, dialect)
        self._data: dict[str, Any] = {}

    def set(self, data: Mapping[str, Any]) -> Self:
        self._data.update(data)
        return self

    def build(self) -> str:
        if not self._data:
            raise DataError.empty_data("update")
        values = self._values()
        assignments = ", ".join(
            f"{col} = {values.format(coerce_value(val))}" for col, val in self._data.items()
        )
        return (
            f"UPDATE {self._table} SET {assignments}"
            f"{self._where_sql(values)}{self._returning_sql()}"
        )


class DeleteStatement(_FilteredStatement):
    """``DELETE FROM table [WHERE ...]``."""

    kind = "DELETE"

    def build(self) -> str:
        return (
            f"DELETE FROM {self._table}"
            f"{self._where_sql(self._values())}{self._returning_sql()}"
        )


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


class TableStatements:
    """Shortcuts scoped to one table, returned by :meth:`StatementFactory.table`."""

    def __init__(self, factory: StatementFactory, name: str) -> None:
        self._factory = factory
        self._name = name

    def select(self, *columns: str) -> QueryBuilder:
        return self._factory.query().select(*columns).from_(self._name)

    def where(self, column: str, operator: Any, value: Any = _UNSET) -> QueryBuilder:
        return self._factory.query().from_(self._name).where(column, operator, value)

    def insert(
        self, data: Mapping[str, Any] | Iterable[Mapping[str, Any]]
    ) -> InsertStatement:
        return self._factory.insert(self._name).values(data)

    def update(self, data: Mapping[str, Any]) -> UpdateStatement:
        return self._factory.update(self._name).set(data)

    def delete(self) -> DeleteStatement:
        return self._factory.delete(self._name)


class StatementFactory:
    """Creates builders and executable statements bound to one executor.

    Args:
        executor: Object with an ``execute(sql)`` method, sync or async.
        dialect: Dialect for builders created by this factory.
    """

    def __init__(self, executor: Executor, dialect: SQLDialect | str | None = None) -> None:
        self._executor = executor
        self._dialect = resolve_dialect(dialect)

    @property
    def executor(self) -> Executor:
        return self._executor

    def query(self) -> QueryBuilder:
        return QueryBuilder(self._dialect)

    def select(self, *columns: str) -> QueryBuilder:
        return self.query().select(*columns)

    def from_(self, table: str, alias: str | None = None) -> QueryBuilder:
        return self.query().from_(table, alias)

    def table(self, name: str) -> TableStatements:
        return TableStatements(self, name)

    def insert(self, table: str) -> InsertStatement:
        return InsertStatement(self._executor, table, self._dialect)

    def update(self, table: str) -> UpdateStatement:
        return UpdateStatement(self._executor, table, self._dialect)

    def delete(self, table: str) -> DeleteStatement:
        return DeleteStatement(self._executor, table, self._dialect)

    async def fetch(self, query: QueryBuilder) -> Any:
        """Execute a SELECT builder's inlined SQL and return the rows."""
        sql = query.build()
        logger.debug("Executing SELECT statement: %s", sql)
        return await run(self._executor, sql)

    async def first(self, query: QueryBuilder) -> Any:
        """Execute ``query`` with ``LIMIT 1`` and return its first row, or ``None``.

        ``query`` itself is left unchanged.
        """
        sql = query.clone().limit(1).build()
        logger.debug("Executing SELECT statement: %s", sql)
        rows = await run(self._executor, sql)
        return rows[0] if rows else None
