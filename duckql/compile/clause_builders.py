"""Clause-level SQL builders.

Each class handles exactly one SQL clause.  ``CteBuilder``, ``SetOpBuilder``,
``FromClauseBuilder`` and ``JoinClauseBuilder`` receive a *shared build
function* (``Callable[[QueryState], str]``) for nested queries, so every nested
state is rendered with the **same** value renderer as the outer query and
bindings stay in placeholder order.

Classes
-------
SelectClauseBuilder   — ``SELECT [DISTINCT] <items>``
FromClauseBuilder     — ``FROM <table | (subquery)> [AS alias]``
JoinClauseBuilder     — ``<KIND> JOIN <table> [AS alias] [ON expr]``
OrderByBuilder        — ``ORDER BY <expr dir>, ...``
CteBuilder            — ``WITH [RECURSIVE] <ctes>``
SetOpBuilder          — ``UNION [ALL]\\n<member>``
"""
from __future__ import annotations

from collections.abc import Sequence

from duckql.compile.values import SubqueryBuildFn, ValueFormatter
from duckql.errors import CompilationError
from duckql.schema.fragments import RawSQL
from duckql.schema.query_state import (
    CTEClause,
    FromClause,
    JoinClause,
    OrderByItem,
    QueryState,
    SelectItem,
    SetOpClause,
)


def render_expr(expr: str | RawSQL, values: ValueFormatter) -> str:
    """Render a column name or trusted fragment."""
    if isinstance(expr, RawSQL):
        return values.render_raw(expr)
    return expr


class SelectClauseBuilder:
    """Builds the ``SELECT [DISTINCT] …`` clause."""

    def __init__(self, values: ValueFormatter) -> None:
        self._values = values

    def build(self, state: QueryState) -> str:
        prefix = "SELECT DISTINCT" if state.distinct else "SELECT"
        if not state.select:
            return f"{prefix} *"
        items = [self._build_item(item) for item in state.select]
        return f"{prefix} {', '.join(items)}"

    def _build_item(self, item: SelectItem) -> str:
        expr_sql = render_expr(item.expr, self._values)
        if item.alias:
            return f"{expr_sql} AS {item.alias}"
        return expr_sql


class FromClauseBuilder:
    """Builds the ``<table | (subquery)> [AS alias]`` fragment after FROM."""

    def __init__(self, build_fn: SubqueryBuildFn) -> None:
        self._build_fn = build_fn

    def build(self, frm: FromClause) -> str:
        if frm.subquery is not None:
            target = f"({self._build_fn(frm.subquery)})"
        elif frm.table:
            target = frm.table
        else:
            raise CompilationError("FROM clause has no table or subquery.", clause="FROM")
        if frm.alias:
            return f"{target} AS {frm.alias}"
        return target


class JoinClauseBuilder:
    """Builds a single ``<KIND> JOIN …`` line."""

    def __init__(self, values: ValueFormatter, build_fn: SubqueryBuildFn) -> None:
        self._values = values
        self._build_fn = build_fn

    def build(self, join: JoinClause) -> str:
        if isinstance(join.table, QueryState):
            table_sql = f"({self._build_fn(join.table)})"
        else:
            table_sql = join.table
        if join.alias:
            table_sql = f"{table_sql} AS {join.alias}"
        sql = f"{join.kind} JOIN {table_sql}"
        if join.kind != "CROSS" and join.on is not None:
            sql += f" ON {self._values.render_raw(join.on)}"
        return sql


class OrderByBuilder:
    """Builds the ``ORDER BY`` clause; raw entries carry no direction."""

    def __init__(self, values: ValueFormatter) -> None:
        self._values = values

    def build(self, items: Sequence[OrderByItem]) -> str:
        parts: list[str] = []
        for item in items:
            expr_sql = render_expr(item.expr, self._values)
            parts.append(f"{expr_sql} {item.direction}" if item.direction else expr_sql)
        return f"ORDER BY {', '.join(parts)}"


class CteBuilder:
    """Builds the ``WITH [RECURSIVE] name [(cols)] AS (…), …`` line.

    CTE bodies are rendered using ``build_fn`` so they share the outer value
    renderer.  A single recursive CTE switches the keyword for the whole list.
    """

    def __init__(self, values: ValueFormatter, build_fn: SubqueryBuildFn) -> None:
        self._values = values
        self._build_fn = build_fn

    def build(self, ctes: Sequence[CTEClause]) -> str:
        recursive = any(c.recursive for c in ctes)
        keyword = "WITH RECURSIVE" if recursive else "WITH"
        cte_parts: list[str] = []
        for cte in ctes:
            if isinstance(cte.query, RawSQL):
                body = self._values.render_raw(cte.query)
            else:
                body = self._build_fn(cte.query)
            columns = f" ({', '.join(cte.columns)})" if cte.columns else ""
            cte_parts.append(f"{cte.name}{columns} AS ({body})")
        return f"{keyword} {', '.join(cte_parts)}"


class SetOpBuilder:
    """Builds a ``UNION [ALL]\\n<member>`` fragment.

    The member is rendered with ``build_fn`` and shares the outer value
    renderer; bindings of both branches stay in textual order.
    """

    def __init__(self, build_fn: SubqueryBuildFn) -> None:
        self._build_fn = build_fn

    def build(self, set_op: SetOpClause) -> str:
        keyword = set_op.op.replace("_", " ")
        return f"{keyword}\n{self._build_fn(set_op.query)}"
