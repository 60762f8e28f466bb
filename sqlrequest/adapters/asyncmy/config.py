"""Asyncmy engine configuration using TypedDict for better maintainability."""

from typing import TYPE_CHECKING, Any, Optional, TypedDict, Union

from typing_extensions import NotRequired

from sqlrequest.adapters.asyncmy.connection import AsyncmyConnectionSet
from sqlrequest.adapters.asyncmy.driver import AsyncmyRequestEngine
from sqlrequest.config import AsyncEngineConfig
from sqlrequest.driver import DEFAULT_COMMAND_TIMEOUT
from sqlrequest.utils.logging import get_logger

if TYPE_CHECKING:
    from asyncmy.cursors import Cursor, DictCursor  # pyright: ignore

    from sqlrequest.observability import ErrorChannel


__all__ = ("AsyncmyConfig", "AsyncmyConnectionConfig")

logger = get_logger("adapters.asyncmy")


class AsyncmyConnectionConfig(TypedDict, total=False):
    """Asyncmy connection configuration as TypedDict.

    Basic connection parameters for asyncmy.connect().
    Based on asyncmy and PyMySQL documentation.
    """

    host: NotRequired[str]
    """Host where the database server is located."""

    user: NotRequired[str]
    """The username used to authenticate with the database."""

    password: NotRequired[str]
    """The password used to authenticate with the database."""

    database: NotRequired[str]
    """The database name to use."""

    port: NotRequired[int]
    """The TCP/IP port of the MySQL server."""

    unix_socket: NotRequired[str]
    """The location of the Unix socket file."""

    charset: NotRequired[str]
    """The character set to use for the connection. Defaults to ``utf8mb4``."""

    connect_timeout: NotRequired[float]
    """Timeout before throwing an error when connecting."""

    autocommit: NotRequired[bool]
    """Autocommit mode. Defaults to True; commands opt into a transaction through ``use_transaction``."""

    ssl: NotRequired[Any]
    """SSL connection parameters or boolean."""

    sql_mode: NotRequired[str]
    """Default SQL_MODE to use."""

    init_command: NotRequired[str]
    """Initial SQL statement to execute once connected."""

    cursor_cls: NotRequired["type[Union[Cursor, DictCursor]]"]
    """Custom cursor class to use."""


class AsyncmyConfig(AsyncEngineConfig[AsyncmyRequestEngine]):
    """Configuration for asyncmy request engines."""

    __slots__ = ("connection_config", "errors")

    def __init__(
        self,
        connection_config: "Optional[Union[AsyncmyConnectionConfig, dict[str, Any]]]" = None,
        command_timeout: float = DEFAULT_COMMAND_TIMEOUT,
        connection_count: int = 1,
        errors: "Optional[ErrorChannel]" = None,
        log_level: "Optional[Union[int, str]]" = None,
        structured_logs: bool = True,
    ) -> None:
        """Initialize Asyncmy configuration.

        Args:
            connection_config: Keyword arguments for ``asyncmy.connect()``.
            command_timeout: Default request timeout in seconds.
            connection_count: Number of connections the engine opens.
            errors: Engine-local error channel; a fresh one is created when omitted.
            log_level: Level of the package log handler installed by :meth:`create_engine`.
            structured_logs: Emit JSON lines instead of plain text.
        """
        super().__init__(
            command_timeout=command_timeout,
            connection_count=connection_count,
            log_level=log_level,
            structured_logs=structured_logs,
        )
        self.connection_config = dict(connection_config or {})
        self.errors = errors

    @property
    def connection_config_dict(self) -> "dict[str, Any]":
        """Return the connection configuration with defaults applied.

        Returns:
            A dictionary of ``asyncmy.connect()`` keyword arguments.
        """
        return {"charset": "utf8mb4", "autocommit": True, **self.connection_config}

    async def create_engine(self) -> AsyncmyRequestEngine:
        """Create an engine and open its connections.

        Returns:
            An opened asyncmy request engine.
        """
        self.apply_logging()
        connections = AsyncmyConnectionSet(self.connection_config_dict, self.connection_count, self.errors)
        engine = AsyncmyRequestEngine(connections, command_timeout=self.command_timeout)
        logger.debug("Creating asyncmy engine", extra={"extra_fields": {"connection_count": self.connection_count}})
        await engine.open()
        return engine
