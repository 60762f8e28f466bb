"""Fixtures for asyncmy integration tests."""

from collections.abc import AsyncGenerator

import pytest_asyncio
from pytest_databases.docker.mysql import MySQLService

from sqlrequest.adapters.asyncmy import AsyncmyConfig, AsyncmyRequestEngine
from sqlrequest.requests import CustomCommandNotRetRequest

PEOPLE_TABLE = "test_people"


@pytest_asyncio.fixture
async def asyncmy_engine(mysql_service: MySQLService) -> AsyncGenerator[AsyncmyRequestEngine, None]:
    """Create an engine with a fresh ``test_people`` table."""
    config = AsyncmyConfig(
        connection_config={
            "host": mysql_service.host,
            "port": mysql_service.port,
            "user": mysql_service.user,
            "password": mysql_service.password,
            "database": mysql_service.db,
        },
        connection_count=2,
    )
    async with config.provide_engine() as engine:
        await CustomCommandNotRetRequest.run(engine, f"DROP TABLE IF EXISTS {PEOPLE_TABLE}")
        await CustomCommandNotRetRequest.run(
            engine,
            f"CREATE TABLE {PEOPLE_TABLE} ("
            "id INT AUTO_INCREMENT PRIMARY KEY, "
            "name VARCHAR(50) NULL UNIQUE, "
            "city VARCHAR(50) NULL, "
            "created_at DATETIME NULL)",
        )
        yield engine
        await CustomCommandNotRetRequest.run(engine, f"DROP TABLE IF EXISTS {PEOPLE_TABLE}")
