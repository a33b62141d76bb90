"""duckql schema layer: query state models and trusted fragments."""
from duckql.schema.fragments import RawSQL
from duckql.schema.query_state import (
    BetweenPredicate,
    ComparisonPredicate,
    Condition,
    CTEClause,
    ExistsPredicate,
    FromClause,
    InPredicate,
    JoinClause,
    NullPredicate,
    OrderByItem,
    Predicate,
    QueryState,
    RawPredicate,
    SelectItem,
    SetOpClause,
)

__all__ = [
    "RawSQL",
    "QueryState",
    "Condition",
    "Predicate",
    "ComparisonPredicate",
    "InPredicate",
    "NullPredicate",
    "BetweenPredicate",
    "ExistsPredicate",
    "RawPredicate",
    "SelectItem",
    "FromClause",
    "JoinClause",
    "OrderByItem",
    "CTEClause",
    "SetOpClause",
]
