"""Trusted SQL fragments.

``RawSQL`` is the only way caller-supplied SQL text reaches the output
unescaped.  Keeping it a distinct type (rather than a plain ``str``) means a
string *value* can never be mistaken for SQL: strings are always quoted by the
value formatter, ``RawSQL`` never is.

Usage::

    from duckql import raw

    qb.where("created_at", ">", raw("NOW() - INTERVAL 1 DAY"))
    qb.where_raw("score > ? AND score < ?", [10, 20])
"""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RawSQL(BaseModel):
    """A pre-rendered SQL fragment injected verbatim.

    Attributes:
        sql: SQL text.  Each ``?`` is a positional slot for ``bindings``.
        bindings: Values for the ``?`` slots, in textual order.  When empty
            the text is emitted exactly as given.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    sql: str
    bindings: list[Any] = Field(default_factory=list)

    def __str__(self) -> str:
        return self.sql
