"""Error observer primitives for request failures."""

from collections.abc import Callable
from dataclasses import dataclass, field
from time import time
from typing import Any, Optional

from sqlrequest.utils.logging import get_correlation_id, get_logger

__all__ = (
    "ErrorChannel",
    "ErrorEvent",
    "ErrorObserver",
    "default_error_observer",
    "error_channel",
    "format_error_event",
)


logger = get_logger("sqlrequest.observability")


@dataclass(slots=True)
class ErrorEvent:
    """Structured payload describing a failure reported by a request or engine."""

    sender: Any
    error: BaseException
    message: str
    sql: Optional[str] = None
    occurred_at: float = field(default_factory=time)
    correlation_id: Optional[str] = field(default_factory=get_correlation_id)

    @property
    def sender_name(self) -> str:
        return type(self.sender).__name__ if self.sender is not None else "unknown"

    def as_dict(self) -> "dict[str, Any]":
        """Return event payload as a dictionary."""

        return {
            "sender": self.sender_name,
            "error_type": type(self.error).__name__,
            "message": self.message,
            "sql": self.sql,
            "occurred_at": self.occurred_at,
            "correlation_id": self.correlation_id,
        }


ErrorObserver = Callable[[ErrorEvent], None]


def format_error_event(event: ErrorEvent) -> str:
    """Create a concise human-readable representation of an error event."""

    text = f"[{event.sender_name}] {type(event.error).__name__}: {event.message}"
    if event.sql:
        text = f"{text}\nSQL: {event.sql}"
    return text


def default_error_observer(event: ErrorEvent) -> None:
    """Log the error payload when no custom observer is subscribed."""

    logger.error(format_error_event(event), extra={"extra_fields": event.as_dict()})


class ErrorChannel:
    """Ordered list of observers notified about every reported failure.

    Requests report to two channels: the one injected at construction (by
    default the process-wide :data:`error_channel`) and the engine-local one
    exposed by ``engine.current_connection.errors``.
    """

    __slots__ = ("_observers", "fallback", "name")

    def __init__(self, name: str, fallback: "Optional[ErrorObserver]" = None) -> None:
        self.name = name
        self.fallback = fallback
        self._observers: list[ErrorObserver] = []

    def __len__(self) -> int:
        return len(self._observers)

    def __repr__(self) -> str:
        return f"ErrorChannel(name={self.name!r}, observers={len(self._observers)})"

    def subscribe(self, observer: "ErrorObserver") -> "ErrorObserver":
        """Register an observer. Returns it so the method works as a decorator."""
        self._observers.append(observer)
        return observer

    def unsubscribe(self, observer: "ErrorObserver") -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def clear(self) -> None:
        self._observers.clear()

    def emit(self, event: ErrorEvent) -> None:
        """Deliver ``event`` to every observer in subscription order.

        A failing observer is logged and skipped so that it cannot replace the
        error being reported.
        """
        observers = tuple(self._observers)
        if not observers:
            if self.fallback is not None:
                self.fallback(event)
            return
        for observer in observers:
            try:
                observer(event)
            except Exception:
                logger.exception("Error observer %r on channel %r failed", observer, self.name)


error_channel = ErrorChannel("sqlrequest", fallback=default_error_observer)
"""Process-wide channel; the default injected into every request."""
