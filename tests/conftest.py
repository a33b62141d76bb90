"""Shared pytest fixtures for duckql unit tests."""
from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from duckql import StatementFactory, create_query_builder
from tests.fixtures import MOCK_ROWS


@pytest.fixture()
def executor() -> MagicMock:
    """Async executor double that answers every statement with ``MOCK_ROWS``."""
    mock = MagicMock()
    mock.execute = AsyncMock(return_value=MOCK_ROWS)
    return mock


@pytest.fixture()
def db(executor: MagicMock) -> StatementFactory:
    return create_query_builder(executor)
