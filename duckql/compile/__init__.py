"""duckql compilation layer: QueryState → SQL (inlined or parameterized)."""
from duckql.compile.base import CompiledSQL, SQLDialect
from duckql.compile.builder import QueryCompiler
from duckql.compile.duckdb import DuckDBDialect
from duckql.compile.postgres import PostgresDialect
from duckql.compile.registry import DialectFactory

__all__ = [
    "CompiledSQL",
    "SQLDialect",
    "QueryCompiler",
    "DuckDBDialect",
    "PostgresDialect",
    "DialectFactory",
]
