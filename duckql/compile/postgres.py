"""PostgreSQL-style numbered placeholders."""
from __future__ import annotations

from duckql.compile.base import SQLDialect


class PostgresDialect(SQLDialect):
    """Renders bound parameters as ``$1``, ``$2``, ...

    DuckDB accepts the same numbered style, so this dialect also suits
    drivers that only speak ``$n`` (asyncpg, DuckDB over the Postgres wire).
    """

    @property
    def dialect_name(self) -> str:
        return "postgres"

    def param_placeholder(self, position: int) -> str:
        return f"${position}"
