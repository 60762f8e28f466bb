"""Request engine contract."""

from sqlrequest.driver._async import DEFAULT_COMMAND_TIMEOUT, MIN_COMMAND_TIMEOUT, AsyncRequestEngineBase
from sqlrequest.driver.connection import RequestConnection

__all__ = ("DEFAULT_COMMAND_TIMEOUT", "MIN_COMMAND_TIMEOUT", "AsyncRequestEngineBase", "RequestConnection")
