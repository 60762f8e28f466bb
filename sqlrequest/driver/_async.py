"""Asynchronous request engine base class."""

import asyncio
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Optional

from sqlrequest.cancellation import CancellationSource
from sqlrequest.exceptions import RequestCancelError
from sqlrequest.observability import ErrorEvent
from sqlrequest.typing import IsolationLevel
from sqlrequest.utils.logging import get_logger

if TYPE_CHECKING:
    from sqlrequest.cancellation import CancellationToken
    from sqlrequest.core.command import Command
    from sqlrequest.core.result import TabularResult
    from sqlrequest.driver.connection import RequestConnection

logger = get_logger("driver")

__all__ = ("DEFAULT_COMMAND_TIMEOUT", "MIN_COMMAND_TIMEOUT", "AsyncRequestEngineBase")

DEFAULT_COMMAND_TIMEOUT = 20.0
MIN_COMMAND_TIMEOUT = 3.0


class AsyncRequestEngineBase(ABC):
    """Executes commands built by requests.

    Concrete engines implement the three dispatch primitives and expose their
    connection state through :attr:`current_connection`. The engine owns a
    global cancellation source; every request links its own token with it, so
    :meth:`cancel_all` cancels whatever is in flight.
    """

    __slots__ = ("_command_timeout", "_loop", "global_cancellation")

    def __init__(self, command_timeout: float = DEFAULT_COMMAND_TIMEOUT) -> None:
        self._command_timeout = max(float(command_timeout), MIN_COMMAND_TIMEOUT)
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self.global_cancellation = CancellationSource()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(command_timeout={self._command_timeout})"

    @property
    def command_timeout(self) -> float:
        """Default request timeout in seconds, never below :data:`MIN_COMMAND_TIMEOUT`."""
        return self._command_timeout

    @property
    def loop(self) -> "Optional[asyncio.AbstractEventLoop]":
        """Event loop the engine's connections are bound to, once opened."""
        return self._loop

    def _bind_loop(self) -> None:
        self._loop = asyncio.get_running_loop()

    @property
    @abstractmethod
    def current_connection(self) -> "RequestConnection":
        """Connection state and engine-local error channel."""

    def cancel_all(self) -> None:
        """Cancel every request currently linked to the global source.

        The global source stays cancelled; later requests on this engine fail
        as cancelled until a new engine is created.

        Raises:
            RequestCancelError: If running the cancellation callbacks failed.
        """
        try:
            self.global_cancellation.cancel()
        except Exception as e:
            error = RequestCancelError("Failed to cancel all requests")
            self.current_connection.errors.emit(ErrorEvent(self, error, str(error)))
            raise error from e

    @abstractmethod
    async def execute_non_query(
        self,
        command: "Command",
        token: "CancellationToken",
        isolation_level: IsolationLevel = IsolationLevel.READ_COMMITTED,
    ) -> None:
        """Execute a command that returns no rows."""

    @abstractmethod
    async def execute_reader(
        self,
        command: "Command",
        token: "CancellationToken",
        isolation_level: IsolationLevel = IsolationLevel.READ_COMMITTED,
    ) -> "list[str]":
        """Execute a command and return the first row of its first result set as text.

        Returns:
            The row's fields in column order, or an empty list when there is no row.
        """

    @abstractmethod
    async def execute_adapter(
        self,
        command: "Command",
        token: "CancellationToken",
        isolation_level: IsolationLevel = IsolationLevel.READ_COMMITTED,
    ) -> "TabularResult":
        """Execute a command and return every result set it produced."""

    @abstractmethod
    async def close(self) -> None:
        """Release the engine's connections."""

    async def __aenter__(self) -> "AsyncRequestEngineBase":
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.close()
