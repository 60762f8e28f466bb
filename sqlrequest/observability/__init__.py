"""Public observability exports."""

from sqlrequest.observability._observer import (
    ErrorChannel,
    ErrorEvent,
    ErrorObserver,
    default_error_observer,
    error_channel,
    format_error_event,
)

__all__ = (
    "ErrorChannel",
    "ErrorEvent",
    "ErrorObserver",
    "default_error_observer",
    "error_channel",
    "format_error_event",
)
