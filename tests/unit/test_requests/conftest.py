"""Fixtures for request tests: an in-memory engine that records commands."""

from __future__ import annotations

import asyncio
from collections.abc import Generator
from typing import Any

import pytest

from sqlrequest import observability
from sqlrequest.cancellation import CancellationToken
from sqlrequest.core.command import Command
from sqlrequest.core.result import TabularResult
from sqlrequest.driver import AsyncRequestEngineBase
from sqlrequest.observability import ErrorChannel, ErrorEvent
from sqlrequest.typing import IsolationLevel


class RecordingConnection:
    def __init__(self) -> None:
        self.is_open = True
        self.errors = ErrorChannel("recording-engine")


class RecordingTransaction:
    def __init__(self) -> None:
        self.is_active = True
        self.committed = False
        self.rolled_back = False

    async def commit(self) -> None:
        self.is_active = False
        self.committed = True

    async def rollback(self) -> None:
        self.is_active = False
        self.rolled_back = True


class RecordingEngine(AsyncRequestEngineBase):
    """Engine double that records every dispatched command and returns canned results."""

    def __init__(self, command_timeout: float = 20.0) -> None:
        super().__init__(command_timeout)
        self.connection = RecordingConnection()
        self.calls: list[tuple[str, Command, IsolationLevel]] = []
        self.reader_result: list[str] = []
        self.adapter_result = TabularResult()
        self.last_inserted_id = 0
        self.output_values: dict[str, Any] = {}
        self.error: Exception | None = None
        self.delay = 0.0
        self.transaction_factory: Any = RecordingTransaction

    @property
    def current_connection(self) -> RecordingConnection:
        return self.connection

    @property
    def last_command(self) -> Command:
        return self.calls[-1][1]

    async def _record(
        self, primitive: str, command: Command, token: CancellationToken, isolation_level: IsolationLevel
    ) -> None:
        token.throw_if_cancellation_requested()
        self.calls.append((primitive, command, isolation_level))
        if command.use_transaction:
            command.transaction = self.transaction_factory()
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        command.last_inserted_id = self.last_inserted_id
        for parameter in command.output_parameters:
            parameter.value = self.output_values.get(parameter.name)
        if command.transaction is not None:
            await command.transaction.commit()

    async def execute_non_query(
        self,
        command: Command,
        token: CancellationToken,
        isolation_level: IsolationLevel = IsolationLevel.READ_COMMITTED,
    ) -> None:
        await self._record("non_query", command, token, isolation_level)

    async def execute_reader(
        self,
        command: Command,
        token: CancellationToken,
        isolation_level: IsolationLevel = IsolationLevel.READ_COMMITTED,
    ) -> list[str]:
        await self._record("reader", command, token, isolation_level)
        return list(self.reader_result)

    async def execute_adapter(
        self,
        command: Command,
        token: CancellationToken,
        isolation_level: IsolationLevel = IsolationLevel.READ_COMMITTED,
    ) -> TabularResult:
        await self._record("adapter", command, token, isolation_level)
        return self.adapter_result

    async def close(self) -> None:
        self.connection.is_open = False


@pytest.fixture
def engine() -> RecordingEngine:
    """Create a recording engine with an open connection."""
    return RecordingEngine()


@pytest.fixture
def process_events() -> Generator[list[ErrorEvent], None, None]:
    """Collect events reported to the process-wide error channel."""
    events: list[ErrorEvent] = []
    observer = observability.error_channel.subscribe(events.append)
    yield events
    observability.error_channel.unsubscribe(observer)


@pytest.fixture
def engine_events(engine: RecordingEngine) -> list[ErrorEvent]:
    """Collect events reported to the engine-local error channel."""
    events: list[ErrorEvent] = []
    engine.current_connection.errors.subscribe(events.append)
    return events
