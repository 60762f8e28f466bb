"""Cooperative cancellation sources and tokens.

A :class:`CancellationSource` owns the cancelled flag; a
:class:`CancellationToken` is the read-only view handed to code that should
observe it. :meth:`CancellationSource.linked` combines several tokens into a
source that cancels as soon as any of them does.
"""

import asyncio
from collections.abc import Callable
from typing import Optional

from sqlrequest.exceptions import OperationCancelledError

__all__ = ("CancellationRegistration", "CancellationSource", "CancellationToken", "LinkedCancellationSource")


class CancellationRegistration:
    """Handle returned by :meth:`CancellationToken.register`."""

    __slots__ = ("_callback", "_source")

    def __init__(self, source: "CancellationSource", callback: "Callable[[], None]") -> None:
        self._source: Optional[CancellationSource] = source
        self._callback = callback

    def dispose(self) -> None:
        if self._source is not None:
            self._source._unregister(self._callback)
            self._source = None


class CancellationToken:
    """Read-only view of a :class:`CancellationSource`."""

    __slots__ = ("_source",)

    def __init__(self, source: "CancellationSource") -> None:
        self._source = source

    @property
    def is_cancellation_requested(self) -> bool:
        return self._source.is_cancellation_requested

    def throw_if_cancellation_requested(self) -> None:
        """Raise :class:`OperationCancelledError` when cancellation was requested."""
        if self._source.is_cancellation_requested:
            raise OperationCancelledError

    def register(self, callback: "Callable[[], None]") -> CancellationRegistration:
        """Run ``callback`` on cancellation; immediately if already cancelled."""
        return self._source._register(callback)


class CancellationSource:
    """Owner of a cancellation flag and its callbacks."""

    __slots__ = ("_callbacks", "_cancelled", "_disposed")

    def __init__(self) -> None:
        self._cancelled = False
        self._disposed = False
        self._callbacks: list[Callable[[], None]] = []

    def __repr__(self) -> str:
        return f"{type(self).__name__}(cancelled={self._cancelled})"

    @property
    def is_cancellation_requested(self) -> bool:
        return self._cancelled

    @property
    def token(self) -> CancellationToken:
        return CancellationToken(self)

    def cancel(self) -> None:
        """Request cancellation and run the registered callbacks once.

        Callbacks run in registration order; an exception raised by one of
        them propagates after the flag has been set.
        """
        if self._cancelled:
            return
        self._cancelled = True
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()

    def cancel_after(self, delay: float) -> "asyncio.TimerHandle":
        """Schedule :meth:`cancel` on the running loop after ``delay`` seconds.

        Returns:
            The timer handle; cancel it to drop the deadline.
        """
        return asyncio.get_running_loop().call_later(max(delay, 0.0), self.cancel)

    def dispose(self) -> None:
        self._disposed = True
        self._callbacks.clear()

    def _register(self, callback: "Callable[[], None]") -> CancellationRegistration:
        if self._cancelled:
            callback()
        elif not self._disposed:
            self._callbacks.append(callback)
        return CancellationRegistration(self, callback)

    def _unregister(self, callback: "Callable[[], None]") -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    @classmethod
    def linked(cls, *tokens: CancellationToken) -> "LinkedCancellationSource":
        """Create a source that cancels when any of ``tokens`` cancels."""
        return LinkedCancellationSource(*tokens)


class LinkedCancellationSource(CancellationSource):
    """Source bound to parent tokens; unhooks from them on :meth:`dispose`."""

    __slots__ = ("_registrations",)

    def __init__(self, *tokens: CancellationToken) -> None:
        super().__init__()
        self._registrations = [token.register(self.cancel) for token in tokens]

    def dispose(self) -> None:
        for registration in self._registrations:
            registration.dispose()
        self._registrations = []
        super().dispose()
