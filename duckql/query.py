"""Fluent SELECT builder.

``QueryBuilder`` is a mutable builder: every call mutates the instance's
:class:`~duckql.schema.query_state.QueryState` and returns the same instance,
so calls chain::

    sql = (
        QueryBuilder()
        .select("id", "name")
        .from_("users")
        .where("age", ">", 18)
        .where_in("city", ["Tokyo", "Osaka"])
        .build()
    )

``build()`` is a pure read; calling it twice without mutating in between
returns the same string.  Use ``clone()`` to branch: the copy shares no
mutable state with the original.

Nested queries (subqueries, CTE bodies, union members) may be passed as a
``QueryBuilder`` or as a callable that receives a fresh builder and returns
it.  Either way the nested query is snapshotted when it is attached, so later
changes to the passed builder do not affect this one.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from typing import Any, Self, Union

from duckql.compile.base import CompiledSQL, SQLDialect
from duckql.compile.builder import QueryCompiler
from duckql.compile.registry import resolve_dialect
from duckql.schema.fragments import RawSQL
from duckql.schema.query_state import (
    BetweenPredicate,
    ComparisonPredicate,
    Condition,
    Connective,
    CTEClause,
    ExistsPredicate,
    FromClause,
    InPredicate,
    JoinClause,
    JoinKind,
    NullPredicate,
    OrderByItem,
    Predicate,
    QueryState,
    RawPredicate,
    SelectItem,
    SetOpClause,
)

#: A nested query: a builder, or a callable that fills in a fresh one.
QueryLike = Union["QueryBuilder", Callable[["QueryBuilder"], "QueryBuilder"]]

_UNSET: Any = object()


# ---------------------------------------------------------------------------
# Operand coercion helpers
# ---------------------------------------------------------------------------


def snapshot_query(query: QueryLike) -> QueryState:
    """Return an independent copy of a nested query's state."""
    if isinstance(query, QueryBuilder):
        return query.snapshot()
    fresh = QueryBuilder()
    filled = query(fresh)
    return (filled if isinstance(filled, QueryBuilder) else fresh).snapshot()


def coerce_value(value: Any) -> Any:
    """Replace a builder used as a value by its state snapshot."""
    if isinstance(value, QueryBuilder):
        return value.snapshot()
    return value


def as_fragment(sql: str | RawSQL, bindings: Iterable[Any] | None = None) -> RawSQL:
    """Wrap trusted text as a :class:`RawSQL` fragment."""
    if isinstance(sql, RawSQL):
        return sql
    return RawSQL(sql=sql, bindings=[coerce_value(b) for b in bindings or ()])


def _in_values(values: Any) -> list[Any] | QueryState:
    if isinstance(values, QueryBuilder) or callable(values):
        return snapshot_query(values)
    if isinstance(values, (str, bytes, RawSQL)) or not isinstance(values, Iterable):
        return [coerce_value(values)]
    return [coerce_value(v) for v in values]


def comparison(column: str, operator: Any, value: Any = _UNSET) -> Predicate:
    """Build the predicate for ``where(column, operator, value)``.

    The two-argument form ``(column, value)`` compares with ``=``.  The
    list-shaped operators (``IN``, ``NOT IN``, ``BETWEEN``, ``NOT BETWEEN``)
    and the ``IS [NOT] NULL`` tests are routed to their dedicated predicates.
    """
    if value is _UNSET:
        operator, value = "=", operator
    op = " ".join(str(operator or "=").split()).upper()

    if op in ("IN", "NOT IN"):
        return InPredicate(column=column, values=_in_values(value), negated=op == "NOT IN")
    if op in ("IS NULL", "IS NOT NULL"):
        return NullPredicate(column=column, negated=op == "IS NOT NULL")
    if op in ("BETWEEN", "NOT BETWEEN"):
        if isinstance(value, (list, tuple)) and len(value) == 2:
            low, high = value
        else:
            low = high = value
        return BetweenPredicate(
            column=column,
            low=coerce_value(low),
            high=coerce_value(high),
            negated=op == "NOT BETWEEN",
        )
    return ComparisonPredicate(column=column, operator=op, value=coerce_value(value))


# ---------------------------------------------------------------------------
# WHERE family (shared with UPDATE / DELETE statements)
# ---------------------------------------------------------------------------


class ConditionsMixin(ABC):
    """``where`` / ``or_where`` and their typed variants.

    Subclasses provide ``_where_conditions()``, the list the conditions are
    appended to.  Each method records one condition and returns ``self``.
    """

    @abstractmethod
    def _where_conditions(self) -> list[Condition]:
        """The condition list WHERE methods append to."""

    def _add_where(self, predicate: Predicate, connective: Connective = "AND") -> Self:
        self._where_conditions().append(Condition(connective=connective, predicate=predicate))
        return self

    def where(self, column: str, operator: Any, value: Any = _UNSET) -> Self:
        return self._add_where(comparison(column, operator, value))

    def or_where(self, column: str, operator: Any, value: Any = _UNSET) -> Self:
        return self._add_where(comparison(column, operator, value), "OR")

    def where_in(self, column: str, values: Any) -> Self:
        return self._add_where(InPredicate(column=column, values=_in_values(values)))

    def or_where_in(self, column: str, values: Any) -> Self:
        return self._add_where(InPredicate(column=column, values=_in_values(values)), "OR")

    def where_not_in(self, column: str, values: Any) -> Self:
        return self._add_where(
            InPredicate(column=column, values=_in_values(values), negated=True)
        )

    def or_where_not_in(self, column: str, values: Any) -> Self:
        return self._add_where(
            InPredicate(column=column, values=_in_values(values), negated=True), "OR"
        )

    def where_null(self, column: str) -> Self:
        return self._add_where(NullPredicate(column=column))

    def or_where_null(self, column: str) -> Self:
        return self._add_where(NullPredicate(column=column), "OR")

    def where_not_null(self, column: str) -> Self:
        return self._add_where(NullPredicate(column=column, negated=True))

    def or_where_not_null(self, column: str) -> Self:
        return self._add_where(NullPredicate(column=column, negated=True), "OR")

    def where_between(self, column: str, low: Any, high: Any) -> Self:
        return self._add_where(comparison(column, "BETWEEN", (low, high)))

    def or_where_between(self, column: str, low: Any, high: Any) -> Self:
        return self._add_where(comparison(column, "BETWEEN", (low, high)), "OR")

    def where_not_between(self, column: str, low: Any, high: Any) -> Self:
        return self._add_where(comparison(column, "NOT BETWEEN", (low, high)))

    def or_where_not_between(self, column: str, low: Any, high: Any) -> Self:
        return self._add_where(comparison(column, "NOT BETWEEN", (low, high)), "OR")

    def where_exists(self, query: QueryLike) -> Self:
        return self._add_where(ExistsPredicate(query=snapshot_query(query)))

    def or_where_exists(self, query: QueryLike) -> Self:
        return self._add_where(ExistsPredicate(query=snapshot_query(query)), "OR")

    def where_not_exists(self, query: QueryLike) -> Self:
        return self._add_where(ExistsPredicate(query=snapshot_query(query), negated=True))

    def or_where_not_exists(self, query: QueryLike) -> Self:
        return self._add_where(
            ExistsPredicate(query=snapshot_query(query), negated=True), "OR"
        )

    def where_raw(self, sql: str, bindings: Iterable[Any] | None = None) -> Self:
        """Add a trusted predicate; ``sql`` is emitted without escaping."""
        return self._add_where(RawPredicate(fragment=as_fragment(sql, bindings)))

    def or_where_raw(self, sql: str, bindings: Iterable[Any] | None = None) -> Self:
        return self._add_where(RawPredicate(fragment=as_fragment(sql, bindings)), "OR")


# ---------------------------------------------------------------------------
# SELECT builder
# ---------------------------------------------------------------------------


class QueryBuilder(ConditionsMixin):
    """Fluent builder for a single SELECT statement.

    Args:
        dialect: Dialect instance or registered name; controls the
            placeholder style of :meth:`build_with_bindings`.  Defaults to
            ``"duckdb"``.
    """

    def __init__(self, dialect: SQLDialect | str | None = None) -> None:
        self._dialect = resolve_dialect(dialect)
        self._state = QueryState()

    def _where_conditions(self) -> list[Condition]:
        return self._state.where

    # ------------------------------------------------------------------
    # CTE
    # ------------------------------------------------------------------

    def with_(
        self,
        name: str,
        query: QueryLike | RawSQL | str,
        columns: list[str] | None = None,
    ) -> Self:
        """Add a CTE.  A ``str`` body is trusted SQL, emitted verbatim."""
        return self._add_cte(name, query, columns, recursive=False)

    def with_recursive(
        self,
        name: str,
        query: QueryLike | RawSQL | str,
        columns: list[str] | None = None,
    ) -> Self:
        return self._add_cte(name, query, columns, recursive=True)

    def _add_cte(
        self,
        name: str,
        query: QueryLike | RawSQL | str,
        columns: list[str] | None,
        recursive: bool,
    ) -> Self:
        if isinstance(query, (str, RawSQL)):
            body: QueryState | RawSQL = as_fragment(query)
        else:
            body = snapshot_query(query)
        self._state.ctes.append(
            CTEClause(
                name=name,
                columns=list(columns) if columns else None,
                query=body,
                recursive=recursive,
            )
        )
        return self

    # ------------------------------------------------------------------
    # SELECT
    # ------------------------------------------------------------------

    def select(self, *columns: str) -> Self:
        self._state.select.extend(SelectItem(expr=c) for c in columns)
        return self

    def select_raw(self, sql: str, bindings: Iterable[Any] | None = None) -> Self:
        """Append a trusted SELECT expression, emitted without escaping."""
        self._state.select.append(SelectItem(expr=as_fragment(sql, bindings)))
        return self

    def distinct(self) -> Self:
        self._state.distinct = True
        return self

    def count(self, column: str = "*", alias: str | None = None) -> Self:
        return self._aggregate("COUNT", column, alias)

    def sum(self, column: str, alias: str | None = None) -> Self:
        return self._aggregate("SUM", column, alias)

    def avg(self, column: str, alias: str | None = None) -> Self:
        return self._aggregate("AVG", column, alias)

    def min(self, column: str, alias: str | None = None) -> Self:
        return self._aggregate("MIN", column, alias)

    def max(self, column: str, alias: str | None = None) -> Self:
        return self._aggregate("MAX", column, alias)

    def _aggregate(self, func: str, column: str, alias: str | None) -> Self:
        self._state.select.append(SelectItem(expr=f"{func}({column})", alias=alias))
        return self

    # ------------------------------------------------------------------
    # FROM
    # ------------------------------------------------------------------

    def from_(self, table: str, alias: str | None = None) -> Self:
        self._state.from_ = FromClause(table=table, alias=alias)
        return self

    def from_subquery(self, query: QueryLike, alias: str) -> Self:
        self._state.from_ = FromClause(subquery=snapshot_query(query), alias=alias)
        return self

    # ------------------------------------------------------------------
    # JOIN
    # ------------------------------------------------------------------

    def join(
        self, table: str | QueryLike, on: str | RawSQL | None = None, alias: str | None = None
    ) -> Self:
        return self._add_join("INNER", table, on, alias)

    def left_join(
        self, table: str | QueryLike, on: str | RawSQL | None = None, alias: str | None = None
    ) -> Self:
        return self._add_join("LEFT", table, on, alias)

    def right_join(
        self, table: str | QueryLike, on: str | RawSQL | None = None, alias: str | None = None
    ) -> Self:
        return self._add_join("RIGHT", table, on, alias)

    def full_join(
        self, table: str | QueryLike, on: str | RawSQL | None = None, alias: str | None = None
    ) -> Self:
        return self._add_join("FULL", table, on, alias)

    def cross_join(self, table: str | QueryLike, alias: str | None = None) -> Self:
        return self._add_join("CROSS", table, None, alias)

    def _add_join(
        self,
        kind: JoinKind,
        table: str | QueryLike,
        on: str | RawSQL | None,
        alias: str | None,
    ) -> Self:
        target = table if isinstance(table, str) else snapshot_query(table)
        self._state.joins.append(
            JoinClause(
                kind=kind,
                table=target,
                alias=alias,
                on=as_fragment(on) if on is not None else None,
            )
        )
        return self

    # ------------------------------------------------------------------
    # GROUP BY / HAVING
    # ------------------------------------------------------------------

    def group_by(self, *columns: str | int) -> Self:
        self._state.group_by.extend(str(c) for c in columns)
        return self

    def group_by_raw(self, sql: str, bindings: Iterable[Any] | None = None) -> Self:
        self._state.group_by.append(as_fragment(sql, bindings))
        return self

    def having(self, column: str, operator: Any, value: Any = _UNSET) -> Self:
        return self._add_having(comparison(column, operator, value))

    def or_having(self, column: str, operator: Any, value: Any = _UNSET) -> Self:
        return self._add_having(comparison(column, operator, value), "OR")

    def having_raw(self, sql: str, bindings: Iterable[Any] | None = None) -> Self:
        return self._add_having(RawPredicate(fragment=as_fragment(sql, bindings)))

    def or_having_raw(self, sql: str, bindings: Iterable[Any] | None = None) -> Self:
        return self._add_having(RawPredicate(fragment=as_fragment(sql, bindings)), "OR")

    def _add_having(self, predicate: Predicate, connective: Connective = "AND") -> Self:
        self._state.having.append(Condition(connective=connective, predicate=predicate))
        return self

    # ------------------------------------------------------------------
    # ORDER BY / LIMIT / OFFSET
    # ------------------------------------------------------------------

    def order_by(self, column: str, direction: str | None = "ASC") -> Self:
        self._state.order_by.append(
            OrderByItem(expr=column, direction=(direction or "ASC").upper())
        )
        return self

    def order_by_raw(self, sql: str, bindings: Iterable[Any] | None = None) -> Self:
        self._state.order_by.append(
            OrderByItem(expr=as_fragment(sql, bindings), direction=None)
        )
        return self

    def limit(self, limit: int) -> Self:
        self._state.limit = limit
        return self

    def offset(self, offset: int) -> Self:
        self._state.offset = offset
        return self

    # ------------------------------------------------------------------
    # Set operations
    # ------------------------------------------------------------------

    def union(self, query: QueryLike) -> Self:
        self._state.set_ops.append(SetOpClause(op="UNION", query=snapshot_query(query)))
        return self

    def union_all(self, query: QueryLike) -> Self:
        self._state.set_ops.append(SetOpClause(op="UNION_ALL", query=snapshot_query(query)))
        return self

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def build(self) -> str:
        """Render the statement with all values inlined as SQL literals."""
        return QueryCompiler(self._dialect).render_inlined(self._state)

    def build_with_bindings(self) -> CompiledSQL:
        """Render the statement with placeholders and a bindings list."""
        return QueryCompiler(self._dialect).render_parameterized(self._state)

    def to_sql(self) -> CompiledSQL:
        """Alias of :meth:`build_with_bindings`."""
        return self.build_with_bindings()

    def bindings(self) -> list[Any]:
        """The values :meth:`build_with_bindings` would bind, in order."""
        return self.build_with_bindings().bindings

    def __str__(self) -> str:
        return self.build()

    # ------------------------------------------------------------------
    # Copying
    # ------------------------------------------------------------------

    @property
    def dialect(self) -> SQLDialect:
        return self._dialect

    def snapshot(self) -> QueryState:
        """Return a deep copy of the current state."""
        return self._state.model_copy(deep=True)

    def clone(self) -> QueryBuilder:
        """Return an independent builder with a deep copy of this state."""
        cloned = QueryBuilder(self._dialect)
        cloned._state = self.snapshot()
        return cloned
