"""Connection view exposed by request engines."""

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from sqlrequest.observability import ErrorChannel

__all__ = ("RequestConnection",)


@runtime_checkable
class RequestConnection(Protocol):
    """What a request needs to know about the engine's connection.

    Requests check ``is_open`` before dispatching and report failures to
    ``errors``, the engine-local error channel.
    """

    @property
    def is_open(self) -> bool: ...

    @property
    def errors(self) -> "ErrorChannel": ...
