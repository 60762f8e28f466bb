from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Generic, Optional, TypeVar, Union

from sqlrequest.driver import DEFAULT_COMMAND_TIMEOUT, AsyncRequestEngineBase
from sqlrequest.exceptions import ImproperConfigurationError
from sqlrequest.utils.logging import configure_logging, get_logger

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator


__all__ = ("AsyncEngineConfig", "EngineT")

EngineT = TypeVar("EngineT", bound=AsyncRequestEngineBase)

logger = get_logger("config")


class AsyncEngineConfig(ABC, Generic[EngineT]):
    """Base configuration for asynchronous request engines."""

    __slots__ = ("command_timeout", "connection_count", "log_level", "structured_logs")

    def __init__(
        self,
        command_timeout: float = DEFAULT_COMMAND_TIMEOUT,
        connection_count: int = 1,
        log_level: "Optional[Union[int, str]]" = None,
        structured_logs: bool = True,
    ) -> None:
        """Initialize the configuration.

        Args:
            command_timeout: Default request timeout in seconds. Engines clamp it to at least 3 seconds.
            connection_count: Number of connections the engine opens. Must be at least 1.
            log_level: When set, engines created from this configuration install
                the package log handler at this level.
            structured_logs: Emit JSON lines instead of plain text.

        Raises:
            ImproperConfigurationError: If ``connection_count`` is below 1.
        """
        if connection_count < 1:
            msg = f"connection_count must be at least 1, got {connection_count}"
            raise ImproperConfigurationError(msg)
        self.command_timeout = command_timeout
        self.connection_count = connection_count
        self.log_level = log_level
        self.structured_logs = structured_logs

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(command_timeout={self.command_timeout!r}, "
            f"connection_count={self.connection_count!r})"
        )

    @abstractmethod
    async def create_engine(self) -> EngineT:
        """Create an engine with its connections opened."""
        raise NotImplementedError

    def apply_logging(self) -> None:
        """Install the package log handler if a level is configured."""
        if self.log_level is not None:
            configure_logging(self.log_level, structured=self.structured_logs)

    @asynccontextmanager
    async def provide_engine(self) -> "AsyncGenerator[EngineT, None]":
        """Provide an engine that is closed when the context exits.

        Yields:
            An opened engine.
        """
        engine = await self.create_engine()
        try:
            yield engine
        finally:
            await engine.close()
