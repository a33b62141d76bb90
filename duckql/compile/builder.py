"""Core QueryState → SQL rendering.

``QueryCompiler`` is the clause assembler.  It wires together the clause-level
and predicate-level sub-builders around one value renderer, then emits one
line per populated clause in fixed order::

    [WITH ...]
    SELECT [DISTINCT] ...
    [FROM ...]
    [JOIN ...]*
    [WHERE ...]
    [GROUP BY ...]
    [HAVING ...]
    [UNION [ALL]\\n<member>]*
    [ORDER BY ...]
    [LIMIT n]
    [OFFSET n]

ORDER BY / LIMIT / OFFSET come after the set-operation members, so they apply
to the whole chain rather than to its last member.

Emission modes
--------------
``render_inlined`` formats values as SQL literals.  ``render_parameterized``
emits dialect placeholders and returns the values separately.  Both are pure
reads of the same state; the only difference is which value renderer the
sub-builder graph is wired with.
"""

from __future__ import annotations

import logging

from duckql.compile.base import CompiledSQL, SQLDialect
from duckql.compile.clause_builders import (
    CteBuilder,
    FromClauseBuilder,
    JoinClauseBuilder,
    OrderByBuilder,
    SelectClauseBuilder,
    SetOpBuilder,
    render_expr,
)
from duckql.compile.conditions import ConditionGrouper, PredicateBuilder
from duckql.compile.context import CompilationContext, RuntimeContext
from duckql.compile.values import ParameterBinder, ValueFormatter
from duckql.schema.query_state import QueryState

logger = logging.getLogger(__name__)


class QueryCompiler:
    """Renders a :class:`~duckql.schema.query_state.QueryState` to SQL.

    Args:
        dialect: Dialect used for bound-parameter placeholders.
    """

    def __init__(self, dialect: SQLDialect) -> None:
        self._ctx = CompilationContext(dialect=dialect)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def render_inlined(self, state: QueryState) -> str:
        """Render ``state`` with every value inlined as a literal."""
        sub_builders = self._make_sub_builders(runtime=None)
        return self._build_full(state, sub_builders)

    def render_parameterized(self, state: QueryState) -> CompiledSQL:
        """Render ``state`` with placeholders and a separate bindings list."""
        runtime = RuntimeContext()
        sub_builders = self._make_sub_builders(runtime=runtime)
        sql = self._build_full(state, sub_builders)
        return CompiledSQL(
            sql=sql,
            bindings=runtime.bindings,
            dialect=self._ctx.dialect.dialect_name,
        )

    # ------------------------------------------------------------------
    # Statement assembly
    # ------------------------------------------------------------------

    def _build_full(self, state: QueryState, sub_builders: dict) -> str:
        values = sub_builders["values"]
        parts: list[str] = []

        if state.ctes:
            parts.append(sub_builders["cte"].build(state.ctes))

        parts.append(sub_builders["select"].build(state))

        if state.from_ is not None:
            parts.append(f"FROM {sub_builders['from'].build(state.from_)}")
        else:
            logger.debug("Rendering SELECT without a FROM target")

        for join in state.joins:
            parts.append(sub_builders["join"].build(join))

        if state.where:
            parts.append(f"WHERE {sub_builders['conditions'].build(state.where)}")

        if state.group_by:
            exprs = ", ".join(render_expr(e, values) for e in state.group_by)
            parts.append(f"GROUP BY {exprs}")

        if state.having:
            parts.append(f"HAVING {sub_builders['conditions'].build(state.having)}")

        for set_op in state.set_ops:
            parts.append(sub_builders["set_op"].build(set_op))

        if state.order_by:
            parts.append(sub_builders["order"].build(state.order_by))

        if state.limit is not None:
            parts.append(f"LIMIT {state.limit}")

        if state.offset is not None:
            parts.append(f"OFFSET {state.offset}")

        return "\n".join(parts)

    # ------------------------------------------------------------------
    # Sub-builder wiring
    # ------------------------------------------------------------------

    def _make_sub_builders(self, runtime: RuntimeContext | None) -> dict:
        """Construct and wire the sub-builder graph for one render.

        Nested states (subqueries, CTE bodies, set-operation members) go
        through ``build_fn``, which reuses this same graph, so a single
        ``runtime`` collects bindings for the whole statement.
        """
        sub_builders: dict = {}

        def build_fn(state: QueryState) -> str:
            return self._build_full(state, sub_builders)

        values: ValueFormatter
        if runtime is None:
            values = ValueFormatter(build_fn)
        else:
            values = ParameterBinder(self._ctx, runtime, build_fn)

        sub_builders.update(
            {
                "values": values,
                "conditions": ConditionGrouper(PredicateBuilder(values)),
                "select": SelectClauseBuilder(values),
                "from": FromClauseBuilder(build_fn),
                "join": JoinClauseBuilder(values, build_fn),
                "order": OrderByBuilder(values),
                "cte": CteBuilder(values, build_fn),
                "set_op": SetOpBuilder(build_fn),
            }
        )
        return sub_builders
