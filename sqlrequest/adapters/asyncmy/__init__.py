from sqlrequest.adapters.asyncmy._types import AsyncmyConnection
from sqlrequest.adapters.asyncmy.config import AsyncmyConfig, AsyncmyConnectionConfig
from sqlrequest.adapters.asyncmy.connection import AsyncmyConnectionSet, ConnectionSlot
from sqlrequest.adapters.asyncmy.driver import (
    AsyncmyCursor,
    AsyncmyExceptionHandler,
    AsyncmyRequestEngine,
    AsyncmyTransaction,
)

__all__ = (
    "AsyncmyConfig",
    "AsyncmyConnection",
    "AsyncmyConnectionConfig",
    "AsyncmyConnectionSet",
    "AsyncmyCursor",
    "AsyncmyExceptionHandler",
    "AsyncmyRequestEngine",
    "AsyncmyTransaction",
    "ConnectionSlot",
)
