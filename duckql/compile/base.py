"""Compiler abstractions: CompiledSQL and the SQLDialect ABC.

The Strategy pattern is used:
- ``SQLDialect`` defines the dialect-specific steps of rendering.
- ``DuckDBDialect`` and ``PostgresDialect`` override them (currently just the
  bound-parameter placeholder style; literal syntax is shared).
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass
class CompiledSQL:
    """The output of a parameterized render.

    Attributes:
        sql: SQL text with positional placeholders.
        bindings: Values for the placeholders, in placeholder order.
        dialect: The dialect the placeholders were rendered for.
    """

    sql: str
    bindings: list[Any] = field(default_factory=list)
    dialect: str = "duckdb"

    def __str__(self) -> str:
        return self.sql


class SQLDialect(ABC):
    """Abstract base for dialect-specific rendering steps."""

    @abstractmethod
    def param_placeholder(self, position: int) -> str:
        """Return the placeholder for the bound parameter at ``position``.

        Args:
            position: 1-based position of the parameter in the bindings list.

        Returns:
            Dialect-specific placeholder string.
        """

    @property
    @abstractmethod
    def dialect_name(self) -> str:
        """Return the canonical dialect name (e.g. ``'duckdb'``)."""
