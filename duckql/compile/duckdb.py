"""DuckDB dialect."""
from __future__ import annotations

from duckql.compile.base import SQLDialect


class DuckDBDialect(SQLDialect):
    """DuckDB-flavoured SQL.

    Parameter style: ``?`` – the positional style accepted by DuckDB's
    prepared statements (parameters are bound 1-indexed, in order).
    """

    @property
    def dialect_name(self) -> str:
        return "duckdb"

    def param_placeholder(self, position: int) -> str:
        return "?"
