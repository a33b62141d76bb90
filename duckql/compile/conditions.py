"""WHERE / HAVING rendering.

``PredicateBuilder`` renders a single predicate to text; ``ConditionGrouper``
turns an ordered condition list into correctly parenthesized boolean text.

Precedence model
----------------
Conditions are kept as a flat, ordered list of ``(connective, predicate)``
pairs rather than a boolean tree.  Every ``OR`` starts a new group, every
``AND`` extends the current one, so the output is a two-level OR-of-ANDs::

    a                       ->  a
    a AND b AND c           ->  (a AND b AND c)
    a AND b OR c            ->  ((a AND b) OR c)
    a OR b AND c OR d       ->  (a OR (b AND c) OR d)

The connective stored on the first condition is never consulted.
"""
from __future__ import annotations

from collections.abc import Sequence

from duckql.compile.values import ValueFormatter
from duckql.errors import CompilationError
from duckql.schema.query_state import (
    BetweenPredicate,
    ComparisonPredicate,
    Condition,
    ExistsPredicate,
    InPredicate,
    NullPredicate,
    Predicate,
    QueryState,
    RawPredicate,
)

# Degenerate rewrites for IN lists with no members; ``IN ()`` is not valid SQL.
EMPTY_IN = "1 = 0"
EMPTY_NOT_IN = "1 = 1"


class PredicateBuilder:
    """Renders one predicate, formatting operands through ``values``.

    Args:
        values: Inline formatter or parameter binder for this render.
    """

    def __init__(self, values: ValueFormatter) -> None:
        self._values = values

    def build(self, predicate: Predicate) -> str:
        fmt = self._values.format

        if isinstance(predicate, ComparisonPredicate):
            return f"{predicate.column} {predicate.operator} {fmt(predicate.value)}"

        if isinstance(predicate, InPredicate):
            keyword = "NOT IN" if predicate.negated else "IN"
            if isinstance(predicate.values, QueryState):
                return f"{predicate.column} {keyword} {fmt(predicate.values)}"
            if not predicate.values:
                return EMPTY_NOT_IN if predicate.negated else EMPTY_IN
            members = ", ".join(fmt(v) for v in predicate.values)
            return f"{predicate.column} {keyword} ({members})"

        if isinstance(predicate, NullPredicate):
            keyword = "IS NOT NULL" if predicate.negated else "IS NULL"
            return f"{predicate.column} {keyword}"

        if isinstance(predicate, BetweenPredicate):
            keyword = "NOT BETWEEN" if predicate.negated else "BETWEEN"
            return (
                f"{predicate.column} {keyword} "
                f"{fmt(predicate.low)} AND {fmt(predicate.high)}"
            )

        if isinstance(predicate, ExistsPredicate):
            keyword = "NOT EXISTS" if predicate.negated else "EXISTS"
            return f"{keyword} {fmt(predicate.query)}"

        if isinstance(predicate, RawPredicate):
            return self._values.render_raw(predicate.fragment)

        raise CompilationError(
            f"Unknown predicate type: {type(predicate).__name__}", clause="WHERE"
        )


class ConditionGrouper:
    """Renders a condition list as flattened OR-of-ANDs text.

    Used identically for WHERE, HAVING, and the WHERE of UPDATE / DELETE.
    """

    def __init__(self, predicate_builder: PredicateBuilder) -> None:
        self._pred = predicate_builder

    def build(self, conditions: Sequence[Condition]) -> str:
        """Render ``conditions``; an empty list renders as ``""``."""
        return self.group(
            [(c.connective, self._pred.build(c.predicate)) for c in conditions]
        )

    @staticmethod
    def group(rendered: Sequence[tuple[str, str]]) -> str:
        """Group already-rendered ``(connective, text)`` pairs.

        1. Split into groups, opening a new one at every ``OR`` (the first
           pair always opens group 0).
        2. Join each group with ``AND``; wrap it when it has several members.
        3. Join the groups with ``OR``; wrap the whole when there are several.
        """
        groups: list[list[str]] = []
        for index, (connective, text) in enumerate(rendered):
            if index == 0 or connective == "OR":
                groups.append([text])
            else:
                groups[-1].append(text)

        parts = [
            f"({' AND '.join(members)})" if len(members) > 1 else members[0]
            for members in groups
        ]
        if len(parts) > 1:
            return f"({' OR '.join(parts)})"
        return parts[0] if parts else ""
