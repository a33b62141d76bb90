"""Compilation context value objects.

``CompilationContext`` carries static configuration shared by every
sub-builder.  ``RuntimeContext`` accumulates bound parameters during a single
parameterized render; one instance is threaded through every nested subquery
so bindings come out in the same order as their placeholders.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from duckql.compile.base import SQLDialect


@dataclass(frozen=True)
class CompilationContext:
    """Immutable context for a render.

    Attributes:
        dialect: Dialect-specific rendering strategy.
    """

    dialect: SQLDialect


@dataclass
class RuntimeContext:
    """Accumulates bound values during a single parameterized render."""

    bindings: list[Any] = field(default_factory=list)

    def add_value(self, value: Any) -> int:
        """Store a value and return its 1-based position."""
        self.bindings.append(value)
        return len(self.bindings)
