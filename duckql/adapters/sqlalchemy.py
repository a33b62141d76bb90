"""SQLAlchemy-backed executor.

:class:`SQLAlchemyExecutor` runs statements built by duckql on a SQLAlchemy
:class:`~sqlalchemy.engine.Engine` and returns rows as plain dicts.

Install the optional dependency before using this module::

    pip install "duckql[sqlalchemy]"

Example::

    from sqlalchemy import create_engine
    from duckql import create_query_builder
    from duckql.adapters.sqlalchemy import SQLAlchemyExecutor

    db = create_query_builder(SQLAlchemyExecutor(create_engine("sqlite://")))
    rows = await db.fetch(db.select("id").from_("users"))
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)


class SQLAlchemyExecutor:
    """Synchronous :class:`~duckql.statements.Executor` over an ``Engine``.

    Each call runs in its own transaction (``engine.begin()``), so data
    statements are committed when they succeed.  SQL is sent to the driver
    as-is through ``exec_driver_sql``; duckql output has inlined values, so
    no parameters are passed.

    Args:
        engine: The engine to execute against.

    Raises:
        ImportError: If ``sqlalchemy`` is not installed.
    """

    def __init__(self, engine: Engine) -> None:
        try:
            import sqlalchemy  # noqa: F401
        except ImportError as exc:
            raise ImportError(
                "SQLAlchemy is required for SQLAlchemyExecutor. "
                'Install it with: pip install "duckql[sqlalchemy]"'
            ) from exc
        self._engine = engine

    @property
    def engine(self) -> Engine:
        return self._engine

    def execute(self, sql: str) -> list[dict[str, Any]]:
        """Run ``sql`` and return its rows; statements without rows return ``[]``."""
        with self._engine.begin() as conn:
            result = conn.exec_driver_sql(sql)
            if not result.returns_rows:
                logger.debug("Statement affected %s row(s)", result.rowcount)
                return []
            return [dict(row) for row in result.mappings()]
