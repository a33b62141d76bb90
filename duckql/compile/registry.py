"""Dialect registry (Open/Closed Principle).

``DialectFactory`` maps dialect names to :class:`~duckql.compile.base.SQLDialect`
implementations so builders can be configured by name, and new dialects can
be added without touching the builders.

Usage::

    from duckql.compile.registry import DialectFactory

    @DialectFactory.register("motherduck")
    class MotherDuckDialect(DuckDBDialect):
        ...
"""

from __future__ import annotations

from collections.abc import Callable
from typing import ClassVar

from duckql.compile.base import SQLDialect
from duckql.compile.duckdb import DuckDBDialect
from duckql.compile.postgres import PostgresDialect
from duckql.errors import CompilationError

#: Dialect used when a builder is created without one.
DEFAULT_DIALECT = "duckdb"


class DialectFactory:
    """Registry mapping dialect names to :class:`SQLDialect` classes.

    Example::

        @DialectFactory.register("mydb")
        class MyDialect(SQLDialect):
            ...

        dialect = DialectFactory.create("mydb")
    """

    _dialects: ClassVar[dict[str, type[SQLDialect]]] = {}

    @classmethod
    def register(cls, name: str) -> Callable[[type[SQLDialect]], type[SQLDialect]]:
        """Decorator that registers a dialect class under ``name``.

        Args:
            name: The dialect name (e.g. ``"duckdb"``).

        Returns:
            A decorator that registers and returns the dialect class.
        """

        def decorator(dialect_cls: type[SQLDialect]) -> type[SQLDialect]:
            cls._dialects[name] = dialect_cls
            return dialect_cls

        return decorator

    @classmethod
    def register_class(cls, name: str, dialect_cls: type[SQLDialect]) -> None:
        """Register a dialect class without using the decorator form."""
        cls._dialects[name] = dialect_cls

    @classmethod
    def create(cls, name: str) -> SQLDialect:
        """Instantiate the dialect registered for ``name``.

        Raises:
            CompilationError: If no dialect is registered for ``name``.
        """
        dialect_cls = cls._dialects.get(name)
        if dialect_cls is None:
            registered = sorted(cls._dialects)
            raise CompilationError(
                f"Unsupported dialect: '{name}'. Registered dialects: {registered}."
            )
        return dialect_cls()

    @classmethod
    def registered_targets(cls) -> list[str]:
        """Return the sorted list of registered dialect names."""
        return sorted(cls._dialects)


def resolve_dialect(dialect: SQLDialect | str | None) -> SQLDialect:
    """Return ``dialect`` as an instance, looking names up in the registry."""
    if dialect is None:
        return DialectFactory.create(DEFAULT_DIALECT)
    if isinstance(dialect, str):
        return DialectFactory.create(dialect)
    return dialect


DialectFactory.register_class("duckdb", DuckDBDialect)
DialectFactory.register_class("postgres", PostgresDialect)
