"""Custom exception hierarchy for duckql.

All public errors inherit from DuckQLError so callers can catch the base
class for any duckql-specific failure.  Errors raised by an executor while
running a statement are never wrapped; they reach the caller unchanged.
"""
from __future__ import annotations

from typing import Any


class DuckQLError(Exception):
    """Base exception for all duckql errors."""


class DataError(DuckQLError):
    """Raised when a data-modifying statement is given unusable data.

    Args:
        message: Human-readable description.
        code: Machine-readable error code (e.g. DATA_EMPTY).
        details: Extra context about the rejected input.
    """

    def __init__(
        self,
        message: str,
        code: str = "DATA_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.details: dict[str, Any] = details or {}

    @classmethod
    def empty_data(cls, operation: str) -> DataError:
        """Build the error raised when ``operation`` receives no rows/columns."""
        return cls(
            f"No data to {operation}",
            code="DATA_EMPTY",
            details={"operation": operation},
        )

    def to_error_response(self) -> dict[str, Any]:
        """Returns a structured error response suitable for API payloads."""
        return {
            "error": self.code,
            "message": str(self),
            "details": self.details,
        }


class CompilationError(DuckQLError):
    """Raised when SQL rendering fails for an unexpected reason.

    Args:
        message: Human-readable description.
        clause: The clause being rendered when the error occurred.
    """

    def __init__(self, message: str, clause: str | None = None) -> None:
        super().__init__(message)
        self.clause = clause
