"""Pydantic models for the mutable state behind a ``QueryBuilder``.

A ``QueryBuilder`` owns exactly one ``QueryState``.  Every fluent call appends
to or replaces a field here, and rendering is a pure read of the tree.
Nested queries (subqueries, CTE bodies, set-operation members) are stored as
their own ``QueryState`` snapshots, so ``model_copy(deep=True)`` yields a
fully independent copy with no shared lists.

WHERE / HAVING predicates keep their operand *values* rather than rendered
text, so the same state can be emitted with inline literals or with
placeholders plus bindings.
"""
from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from duckql.schema.fragments import RawSQL

_FORBID = ConfigDict(extra="forbid")

Connective = Literal["AND", "OR"]
JoinKind = Literal["INNER", "LEFT", "RIGHT", "FULL", "CROSS"]
SetOpKind = Literal["UNION", "UNION_ALL"]


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


class ComparisonPredicate(BaseModel):
    """``column <operator> value``, e.g. ``age > 18``."""

    model_config = _FORBID

    kind: Literal["comparison"] = "comparison"
    column: str
    operator: str = "="
    value: Any = None


class InPredicate(BaseModel):
    """``column [NOT] IN (v1, v2, ...)`` or ``column [NOT] IN (subquery)``.

    Attributes:
        values: Literal list, or a ``QueryState`` for a subquery.
    """

    model_config = _FORBID

    kind: Literal["in"] = "in"
    column: str
    values: Union[list[Any], QueryState] = Field(default_factory=list)
    negated: bool = False


class NullPredicate(BaseModel):
    """``column IS [NOT] NULL``."""

    model_config = _FORBID

    kind: Literal["null"] = "null"
    column: str
    negated: bool = False


class BetweenPredicate(BaseModel):
    """``column [NOT] BETWEEN low AND high``."""

    model_config = _FORBID

    kind: Literal["between"] = "between"
    column: str
    low: Any = None
    high: Any = None
    negated: bool = False


class ExistsPredicate(BaseModel):
    """``[NOT] EXISTS (subquery)``."""

    model_config = _FORBID

    kind: Literal["exists"] = "exists"
    query: QueryState
    negated: bool = False


class RawPredicate(BaseModel):
    """A trusted predicate fragment, emitted verbatim."""

    model_config = _FORBID

    kind: Literal["raw"] = "raw"
    fragment: RawSQL


Predicate = Annotated[
    Union[
        ComparisonPredicate,
        InPredicate,
        NullPredicate,
        BetweenPredicate,
        ExistsPredicate,
        RawPredicate,
    ],
    Field(discriminator="kind"),
]


class Condition(BaseModel):
    """One entry of a WHERE / HAVING condition list.

    Attributes:
        connective: How this condition joins the one before it.  Ignored
            for the first condition of a list.
        predicate: The predicate to render.
    """

    model_config = _FORBID

    connective: Connective = "AND"
    predicate: Predicate


# ---------------------------------------------------------------------------
# Clauses
# ---------------------------------------------------------------------------


class SelectItem(BaseModel):
    """A single item in the SELECT list.

    Attributes:
        expr: Column name, aggregate call, or trusted fragment.
        alias: Optional ``AS`` alias.
    """

    model_config = _FORBID

    expr: Union[str, RawSQL]
    alias: str | None = None


class FromClause(BaseModel):
    """The FROM target: a table or an aliased subquery.

    Attributes:
        table: Table name (mutually exclusive with ``subquery``).
        subquery: Derived table state.
        alias: Optional alias (required in practice for subqueries).
    """

    model_config = _FORBID

    table: str | None = None
    subquery: QueryState | None = None
    alias: str | None = None


class JoinClause(BaseModel):
    """A single JOIN entry.

    Attributes:
        kind: SQL join type.
        table: Table name, or a derived-table state.
        alias: Optional alias for the joined table.
        on: Trusted ON expression; always absent for CROSS joins.
    """

    model_config = _FORBID

    kind: JoinKind = "INNER"
    table: Union[str, QueryState]
    alias: str | None = None
    on: RawSQL | None = None


class OrderByItem(BaseModel):
    """A single ORDER BY entry.

    Attributes:
        expr: Column or trusted expression.
        direction: ``ASC`` / ``DESC``; ``None`` for raw expressions, which
            are emitted verbatim.
    """

    model_config = _FORBID

    expr: Union[str, RawSQL]
    direction: str | None = "ASC"


class CTEClause(BaseModel):
    """A single ``name [(cols)] AS (body)`` definition.

    Attributes:
        name: CTE name referenced by the main query.
        columns: Optional column list.
        query: Body, as a nested state or a trusted fragment.
        recursive: If True, the WITH keyword becomes ``WITH RECURSIVE``.
    """

    model_config = _FORBID

    name: str
    columns: list[str] | None = None
    query: Union[QueryState, RawSQL]
    recursive: bool = False


class SetOpClause(BaseModel):
    """A set-operation member appended after the base statement."""

    model_config = _FORBID

    op: SetOpKind
    query: QueryState


class QueryState(BaseModel):
    """All clause state owned by one query builder.

    An empty ``select`` renders as ``*``.  ``order_by``, ``limit`` and
    ``offset`` apply to the whole set-operation chain when ``set_ops`` is
    non-empty.
    """

    model_config = _FORBID

    ctes: list[CTEClause] = Field(default_factory=list)
    distinct: bool = False
    select: list[SelectItem] = Field(default_factory=list)
    from_: FromClause | None = None
    joins: list[JoinClause] = Field(default_factory=list)
    where: list[Condition] = Field(default_factory=list)
    group_by: list[Union[str, RawSQL]] = Field(default_factory=list)
    having: list[Condition] = Field(default_factory=list)
    set_ops: list[SetOpClause] = Field(default_factory=list)
    order_by: list[OrderByItem] = Field(default_factory=list)
    limit: int | None = None
    offset: int | None = None


# Resolve forward references created by the recursive QueryState type.
InPredicate.model_rebuild()
ExistsPredicate.model_rebuild()
Condition.model_rebuild()
FromClause.model_rebuild()
JoinClause.model_rebuild()
CTEClause.model_rebuild()
SetOpClause.model_rebuild()
QueryState.model_rebuild()
