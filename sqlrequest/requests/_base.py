"""Shared request lifecycle.

Every request kind renders one :class:`~sqlrequest.core.command.Command`
from its fields and hands it to one engine primitive. Everything around that
(precondition checks, the linked cancellation token, the deadline, error
reporting, rollback and copying) lives in :class:`Request`.
"""

import asyncio
import copy as copy_module
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING, Any, ClassVar, Generic, Optional

from sqlrequest import observability
from sqlrequest.cancellation import CancellationSource, LinkedCancellationSource
from sqlrequest.conditions import ConditionBuilder
from sqlrequest.exceptions import (
    ConnectionNotOpenError,
    MissingEngineError,
    OperationCancelledError,
    RequestCancelError,
    RequestPreconditionError,
    RequestTimeoutError,
)
from sqlrequest.observability import ErrorChannel, ErrorEvent
from sqlrequest.typing import MAX_ROW_COUNT, DispatchMode, IsolationLevel, ResultT, TimeoutValue
from sqlrequest.utils.logging import get_logger
from sqlrequest.utils.sync_tools import run_blocking

if TYPE_CHECKING:
    from typing_extensions import Self

    from sqlrequest.cancellation import CancellationToken
    from sqlrequest.core.command import Command
    from sqlrequest.driver import AsyncRequestEngineBase

__all__ = ("Request", "RequestOutcome", "normalize_window")

logger = get_logger("requests")

ROLLBACK_GRACE_PERIOD = 0.5
"""Longest time in seconds a failed request waits for its rollback."""


def normalize_window(start: int, count: int) -> "tuple[int, int]":
    """Translate a 1-based start row and a row count into ``LIMIT`` arguments.

    ``start`` 0 and 1 both mean the first row; ``count`` 0 means all
    remaining rows.

    Raises:
        RequestPreconditionError: If either value is negative.

    Returns:
        The ``(offset, row_count)`` pair.
    """
    if start < 0 or count < 0:
        msg = f"Row window cannot be negative (start={start}, count={count})"
        raise RequestPreconditionError(msg)
    offset = start - 1 if start > 1 else 0
    return offset, count or MAX_ROW_COUNT


def _duplicate(value: Any) -> Any:
    if isinstance(value, ConditionBuilder):
        return value.copy()
    return copy_module.deepcopy(value)


@dataclass
class RequestOutcome(Generic[ResultT]):
    """Value or error produced by :meth:`Request.try_execute`."""

    value: "Optional[ResultT]" = None
    error: "Optional[Exception]" = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> ResultT:
        """Return the value, raising the captured error instead if there is one."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


@dataclass
class _ExecutionState:
    command: "Optional[Command]" = None

    @property
    def sql(self) -> "Optional[str]":
        return self.command.text if self.command is not None else None


class Request(ABC, Generic[ResultT]):
    """Base class of every request kind.

    Subclasses declare their statement fields in ``__slots__`` (these are the
    fields :meth:`copy` duplicates and the keyword arguments their
    constructor accepts), set :attr:`dispatch_mode`, and implement
    :meth:`build_command` and :meth:`map_result`.
    """

    __slots__ = ("_cancellation", "_timeout", "engine", "error_channel", "isolation_level", "use_transaction")

    dispatch_mode: ClassVar[DispatchMode]

    def __init__(
        self,
        engine: "Optional[AsyncRequestEngineBase]",
        *,
        timeout: "Optional[TimeoutValue]" = None,
        isolation_level: IsolationLevel = IsolationLevel.READ_COMMITTED,
        error_channel: "Optional[ErrorChannel]" = None,
        use_transaction: bool = True,
    ) -> None:
        """Initialize the request.

        Args:
            engine: Engine the request runs on.
            timeout: Seconds or a timedelta; defaults to ``engine.command_timeout``.
            isolation_level: Isolation level of the command's transaction.
            error_channel: Channel failures are reported to besides the
                engine-local one; defaults to the process-wide channel.
            use_transaction: Run the command inside its own transaction.

        Raises:
            MissingEngineError: If ``engine`` is None. Reported to the error channel first.
        """
        self.error_channel = error_channel if error_channel is not None else observability.error_channel
        if engine is None:
            error = MissingEngineError()
            self.error_channel.emit(ErrorEvent(self, error, str(error)))
            raise error
        self.engine = engine
        self.isolation_level = isolation_level
        self.use_transaction = use_transaction
        self.timeout = timeout if timeout is not None else engine.command_timeout  # type: ignore[assignment]
        self._cancellation = CancellationSource()

    def __repr__(self) -> str:
        fields = ", ".join(f"{name}={getattr(self, name)!r}" for name in self._statement_fields())
        return f"{type(self).__name__}({fields})"

    @property
    def timeout(self) -> float:
        """Execution timeout in seconds."""
        return self._timeout

    @timeout.setter
    def timeout(self, value: TimeoutValue) -> None:
        seconds = value.total_seconds() if isinstance(value, timedelta) else float(value)
        if seconds <= 0:
            msg = f"Request timeout must be positive, got {seconds}s"
            raise RequestPreconditionError(msg)
        self._timeout = seconds

    @property
    def is_cancellation_requested(self) -> bool:
        return self._cancellation.is_cancellation_requested

    @classmethod
    def _statement_fields(cls) -> "tuple[str, ...]":
        fields: list[str] = []
        for klass in reversed(cls.__mro__):
            if klass is not Request and issubclass(klass, Request):
                fields.extend(klass.__dict__.get("__slots__", ()))
        return tuple(fields)

    @abstractmethod
    def build_command(self) -> "Command":
        """Render the statement text and parameters from the current fields."""

    @abstractmethod
    def map_result(self, raw: Any, command: "Command") -> ResultT:
        """Turn the engine's raw result into the request's return value."""

    def check_preconditions(self) -> None:
        """Validate fields before anything is dispatched.

        Raises:
            RequestPreconditionError: If the request cannot be executed as configured.
        """

    async def execute(self) -> ResultT:
        """Run the request once.

        Raises:
            ConnectionNotOpenError: If the engine's connection is not open.
            RequestPreconditionError: If the fields are invalid.
            RequestTimeoutError: If the request was cancelled or ran out of time.

        Returns:
            The kind-specific result.
        """
        if not self.engine.current_connection.is_open:
            error = ConnectionNotOpenError()
            self._report(error, str(error))
            raise error
        try:
            self.check_preconditions()
        except RequestPreconditionError as e:
            self._report(e, str(e))
            raise

        state = _ExecutionState()
        linked = LinkedCancellationSource(self._cancellation.token, self.engine.global_cancellation.token)
        deadline = linked.cancel_after(self._timeout)
        try:
            return await asyncio.wait_for(self._run(state, linked.token), self._timeout)
        except (OperationCancelledError, asyncio.TimeoutError) as e:
            error = RequestTimeoutError(self._timeout, sql=state.sql)
            self._report(error, str(error), state.sql)
            await self._rollback(state.command)
            raise error from e
        except Exception as e:
            self._report(e, f"MySQLRequest[{state.sql or 'unknown'}] execute error - {e}", state.sql)
            await self._rollback(state.command)
            raise
        finally:
            deadline.cancel()
            linked.dispose()

    async def try_execute(self) -> "RequestOutcome[ResultT]":
        """Run the request, capturing any failure in the returned outcome."""
        try:
            return RequestOutcome(value=await self.execute())
        except Exception as e:  # noqa: BLE001
            return RequestOutcome(error=e)

    def execute_sync(self) -> ResultT:
        """Run the request and block the calling thread until it finishes.

        Raises:
            RuntimeError: If called from inside a running event loop.
        """
        return run_blocking(self.execute(), loop=self.engine.loop)

    def cancel(self) -> None:
        """Cancel the request.

        The cancellation is sticky: this instance fails every later execution
        as cancelled. Use :meth:`copy` to get a fresh one.

        Raises:
            RequestCancelError: If running the cancellation callbacks failed.
        """
        try:
            self._cancellation.cancel()
        except Exception as e:
            error = RequestCancelError("Failed to cancel request")
            self._report(error, str(error))
            raise error from e

    def copy(self, engine: "Optional[AsyncRequestEngineBase]" = None) -> "Self":
        """Return an independent request of the same kind.

        Args:
            engine: Engine of the copy; defaults to this request's engine.
        """
        fields = {name: _duplicate(getattr(self, name)) for name in self._statement_fields()}
        return type(self)(
            engine if engine is not None else self.engine,
            timeout=self._timeout,
            isolation_level=self.isolation_level,
            error_channel=self.error_channel,
            use_transaction=self.use_transaction,
            **fields,
        )

    def __copy__(self) -> "Self":
        return self.copy()

    @classmethod
    async def run(cls, engine: "AsyncRequestEngineBase", *args: Any, **kwargs: Any) -> Any:
        """Construct a request of this kind and execute it once."""
        return await cls(engine, *args, **kwargs).execute()

    @classmethod
    def run_sync(cls, engine: "AsyncRequestEngineBase", *args: Any, **kwargs: Any) -> Any:
        """Blocking counterpart of :meth:`run`."""
        return cls(engine, *args, **kwargs).execute_sync()

    async def _run(self, state: _ExecutionState, token: "CancellationToken") -> ResultT:
        command = self.build_command()
        state.command = command
        token.throw_if_cancellation_requested()
        logger.debug(
            "Dispatching %s",
            type(self).__name__,
            extra={"extra_fields": {"sql": command.text, "dispatch": self.dispatch_mode.value}},
        )
        raw = await self._dispatch(command, token)
        return self.map_result(raw, command)

    async def _dispatch(self, command: "Command", token: "CancellationToken") -> Any:
        if self.dispatch_mode is DispatchMode.READER:
            return await self.engine.execute_reader(command, token, self.isolation_level)
        if self.dispatch_mode is DispatchMode.ADAPTER:
            return await self.engine.execute_adapter(command, token, self.isolation_level)
        return await self.engine.execute_non_query(command, token, self.isolation_level)

    def _report(self, error: BaseException, message: str, sql: "Optional[str]" = None) -> None:
        event = ErrorEvent(self, error, message, sql)
        self.error_channel.emit(event)
        self.engine.current_connection.errors.emit(event)

    async def _rollback(self, command: "Optional[Command]") -> None:
        transaction = command.transaction if command is not None else None
        if transaction is None or not transaction.is_active:
            return
        grace = min(self._timeout, ROLLBACK_GRACE_PERIOD)
        try:
            await asyncio.wait_for(transaction.rollback(), grace)
        except asyncio.TimeoutError:
            logger.warning("Rollback after failed %s gave up after %.2fs", type(self).__name__, grace)
        except Exception:
            logger.warning("Rollback after failed %s did not complete", type(self).__name__, exc_info=True)
