"""Mocked asyncmy connections for adapter unit tests."""

from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock, Mock, patch

import pytest
import pytest_asyncio

from sqlrequest.adapters.asyncmy import AsyncmyConnectionSet, AsyncmyRequestEngine


@pytest.fixture
def mock_cursor() -> AsyncMock:
    """Create a mock cursor with no result set."""
    cursor = AsyncMock()
    cursor.description = None
    cursor.rowcount = 1
    cursor.lastrowid = 0
    cursor.fetchall = AsyncMock(return_value=[])
    cursor.fetchone = AsyncMock(return_value=None)
    cursor.nextset = AsyncMock(return_value=False)
    return cursor


@pytest.fixture
def mock_connection(mock_cursor: AsyncMock) -> AsyncMock:
    """Create a mock asyncmy connection handing out the mock cursor."""
    connection = AsyncMock()
    connection.cursor = Mock(return_value=mock_cursor)
    connection.close = Mock()
    return connection


@pytest_asyncio.fixture
async def engine(mock_connection: AsyncMock) -> AsyncGenerator[AsyncmyRequestEngine, None]:
    """Create an opened engine over one mocked connection."""
    connections = AsyncmyConnectionSet({"host": "localhost"}, count=1)
    with patch("asyncmy.connect", AsyncMock(return_value=mock_connection)):
        engine = AsyncmyRequestEngine(connections)
        await engine.open()
    yield engine
    await engine.close()
