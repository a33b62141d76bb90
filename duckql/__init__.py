"""duckql – Fluent SQL query building for DuckDB.

Build SQL with chained calls instead of string concatenation.

Public API
----------
``query`` / ``select`` / ``from_``
    Start a new :class:`QueryBuilder`.

``raw``
    Wrap trusted SQL text so it is emitted without escaping.

``create_query_builder``
    Bind builders and INSERT / UPDATE / DELETE statements to an executor.

Example::

    import duckql

    sql = (
        duckql.select("id", "name")
        .from_("users")
        .where("active", True)
        .order_by("name")
        .limit(10)
        .build()
    )

Extensibility
-------------
Placeholder styles for :meth:`QueryBuilder.build_with_bindings` come from
registered dialects::

    from duckql.compile.registry import DialectFactory

    @DialectFactory.register("sqlite")
    class SQLiteDialect(SQLDialect):
        ...
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from duckql.compile.base import CompiledSQL, SQLDialect
from duckql.compile.builder import QueryCompiler
from duckql.compile.duckdb import DuckDBDialect
from duckql.compile.postgres import PostgresDialect
from duckql.compile.registry import DialectFactory
from duckql.errors import CompilationError, DataError, DuckQLError
from duckql.query import QueryBuilder, as_fragment
from duckql.schema.fragments import RawSQL
from duckql.schema.query_state import QueryState
from duckql.statements import (
    DeleteStatement,
    Executor,
    InsertStatement,
    StatementFactory,
    TableStatements,
    UpdateStatement,
)

__all__ = [
    # Entry points
    "query",
    "select",
    "from_",
    "raw",
    "create_query_builder",
    # Builders
    "QueryBuilder",
    "QueryState",
    "RawSQL",
    # Statements
    "Executor",
    "StatementFactory",
    "TableStatements",
    "InsertStatement",
    "UpdateStatement",
    "DeleteStatement",
    # Compilation
    "CompiledSQL",
    "QueryCompiler",
    "SQLDialect",
    "DialectFactory",
    "DuckDBDialect",
    "PostgresDialect",
    # Errors
    "DuckQLError",
    "DataError",
    "CompilationError",
]


def query(dialect: SQLDialect | str | None = None) -> QueryBuilder:
    """Return an empty :class:`QueryBuilder`."""
    return QueryBuilder(dialect)


def select(*columns: str) -> QueryBuilder:
    """Return a new :class:`QueryBuilder` selecting ``columns``."""
    return QueryBuilder().select(*columns)


def from_(table: str, alias: str | None = None) -> QueryBuilder:
    """Return a new :class:`QueryBuilder` reading from ``table``."""
    return QueryBuilder().from_(table, alias)


def raw(sql: str, bindings: Iterable[Any] | None = None) -> RawSQL:
    """Wrap trusted SQL text.

    The result can be used anywhere a value is accepted; it is emitted
    verbatim, with each ``?`` filled from ``bindings`` in order.
    """
    return as_fragment(sql, bindings)


def create_query_builder(
    executor: Executor, dialect: SQLDialect | str | None = None
) -> StatementFactory:
    """Return a :class:`StatementFactory` bound to ``executor``."""
    return StatementFactory(executor, dialect)
