"""Value rendering for both emission modes.

``ValueFormatter`` turns a Python value into an inline SQL literal;
``ParameterBinder`` turns it into a placeholder and records the value in the
shared :class:`~duckql.compile.context.RuntimeContext`.  Both expose the same
``format(value) -> str`` contract so predicate and statement renderers never
need to know which mode they are in.

Two kinds of value are never treated as data:

* :class:`~duckql.schema.fragments.RawSQL` is emitted verbatim, with each
  ``?`` slot filled from its own bindings (formatted or bound, per mode).
* :class:`~duckql.schema.query_state.QueryState` is a nested subquery; it is
  rendered through the injected ``build_subquery`` function and parenthesized.
"""
from __future__ import annotations

import re
from collections.abc import Callable
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any

from duckql.compile.context import CompilationContext, RuntimeContext
from duckql.errors import CompilationError
from duckql.schema.fragments import RawSQL
from duckql.schema.query_state import QueryState

#: ``(state) -> sql`` used to render nested subqueries.
SubqueryBuildFn = Callable[[QueryState], str]

# Quoted literals and identifiers are matched whole so a ? inside them is
# never taken for a slot.
_PLACEHOLDER = re.compile(r"'(?:[^']|'')*'|\"(?:[^\"]|\"\")*\"|\?")
_UNSET = object()


def quote_string(text: str) -> str:
    """Single-quote ``text``, doubling embedded quotes (``O'Brien`` → ``'O''Brien'``)."""
    escaped = text.replace("'", "''")
    return f"'{escaped}'"


def format_datetime(value: datetime) -> str:
    """ISO-8601 with millisecond precision.

    Aware datetimes are normalised to UTC and suffixed with ``Z``; naive ones
    are emitted as-is, without a zone designator.
    """
    if value.tzinfo is None:
        return value.isoformat(timespec="milliseconds")
    utc = value.astimezone(timezone.utc).replace(tzinfo=None)
    return f"{utc.isoformat(timespec='milliseconds')}Z"


def format_literal(value: Any) -> str:
    """Render a plain Python value as a SQL literal.

    ``bool`` is checked before ``int`` because ``True`` is an ``int``.
    Unsupported types fall back to their quoted ``str()``.
    """
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    if isinstance(value, str):
        return quote_string(value)
    if isinstance(value, datetime):
        return quote_string(format_datetime(value))
    if isinstance(value, (date, time)):
        return quote_string(value.isoformat())
    return quote_string(str(value))


class ValueFormatter:
    """Renders values as inline SQL literals.

    Args:
        build_subquery: Renders a nested ``QueryState``.  Only needed when
            values may contain subqueries.
    """

    def __init__(self, build_subquery: SubqueryBuildFn | None = None) -> None:
        self._build_subquery = build_subquery

    def format(self, value: Any) -> str:
        """Render ``value`` for inclusion in SQL text."""
        if isinstance(value, RawSQL):
            return self.render_raw(value)
        if isinstance(value, QueryState):
            return f"({self.render_subquery(value)})"
        return format_literal(value)

    def render_raw(self, fragment: RawSQL) -> str:
        """Emit a trusted fragment, filling its ``?`` slots from its bindings.

        Only bare ``?`` marks count as slots; a ``?`` inside a quoted literal or
        identifier is kept as written.  Slots beyond the supplied bindings are
        left untouched.
        """
        if not fragment.bindings:
            return fragment.sql
        pending = iter(fragment.bindings)

        def _fill(match: re.Match[str]) -> str:
            if match.group(0) != "?":
                return match.group(0)
            value = next(pending, _UNSET)
            if value is _UNSET:
                return match.group(0)
            return self.format(value)

        return _PLACEHOLDER.sub(_fill, fragment.sql)

    def render_subquery(self, state: QueryState) -> str:
        """Render a nested query without surrounding parentheses."""
        if self._build_subquery is None:
            raise CompilationError("No subquery build function configured.")
        return self._build_subquery(state)


class ParameterBinder(ValueFormatter):
    """Renders values as dialect placeholders and collects their bindings.

    Args:
        ctx: Static compilation context (supplies the dialect).
        runtime: Shared bindings accumulator for this render.
        build_subquery: Renders a nested ``QueryState`` with the same binder.
    """

    def __init__(
        self,
        ctx: CompilationContext,
        runtime: RuntimeContext,
        build_subquery: SubqueryBuildFn | None = None,
    ) -> None:
        super().__init__(build_subquery)
        self._ctx = ctx
        self._runtime = runtime

    def format(self, value: Any) -> str:
        if isinstance(value, (RawSQL, QueryState)):
            return super().format(value)
        position = self._runtime.add_value(value)
        return self._ctx.dialect.param_placeholder(position)
