"""Executors connecting :class:`~duckql.statements.StatementFactory` to real databases."""
