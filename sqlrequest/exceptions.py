from typing import Any, Optional

__all__ = (
    "CheckViolationError",
    "ConditionBuilderError",
    "ConditionFormatError",
    "ConnectionNotOpenError",
    "DataError",
    "DatabaseConnectionError",
    "ForeignKeyViolationError",
    "ImproperConfigurationError",
    "IntegrityError",
    "MissingDependencyError",
    "MissingEngineError",
    "NotNullViolationError",
    "OperationCancelledError",
    "RequestCancelError",
    "RequestPreconditionError",
    "RequestTimeoutError",
    "SQLParsingError",
    "SQLRequestError",
    "TransactionError",
    "UniqueViolationError",
)


class SQLRequestError(Exception):
    """Base exception class from which all sqlrequest exceptions inherit."""

    detail: str

    def __init__(self, *args: Any, detail: str = "") -> None:
        """Initialize ``SQLRequestError``.

        Args:
            *args: args are converted to :class:`str` before passing to :class:`Exception`
            detail: detail of the exception.
        """
        str_args = [str(arg) for arg in args if arg]
        if not detail:
            if str_args:
                detail, *str_args = str_args
            elif hasattr(self, "detail"):
                detail = self.detail
        self.detail = detail
        super().__init__(*str_args)

    def __repr__(self) -> str:
        if self.detail:
            return f"{self.__class__.__name__} - {self.detail}"
        return self.__class__.__name__

    def __str__(self) -> str:
        return " ".join((*self.args, self.detail)).strip()


class MissingDependencyError(SQLRequestError, ImportError):
    """Missing optional dependency.

    This exception is raised only when a module depends on a dependency that has not been installed.
    """

    def __init__(self, package: str, install_package: Optional[str] = None) -> None:
        super().__init__(
            f"Package {package!r} is not installed but required. You can install it by running "
            f"'pip install {install_package or package}' to install the package separately",
        )


class ImproperConfigurationError(SQLRequestError):
    """Improper Configuration error.

    Raised when an engine or adapter configuration cannot be used as given.
    """


# -- Request lifecycle errors --
class RequestPreconditionError(SQLRequestError, ValueError):
    """A request cannot be executed in its current state.

    Covers a missing engine, a closed connection and invalid request fields
    (empty required lists, negative row windows). Never retried.
    """


class MissingEngineError(RequestPreconditionError):
    """Raised when a request is constructed without an engine."""

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or "engine cannot be None")


class ConnectionNotOpenError(RequestPreconditionError):
    """Raised when the engine's current connection is not open."""

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or "MySQL connection is not open")


class OperationCancelledError(SQLRequestError):
    """Cooperative cancellation was observed on a cancellation token."""

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or "The operation was canceled")


class RequestTimeoutError(SQLRequestError, TimeoutError):
    """A request exceeded its timeout or was canceled before dispatch."""

    sql: Optional[str]
    timeout: float

    def __init__(self, timeout: float, sql: Optional[str] = None) -> None:
        super().__init__(f"MySQLRequest[{sql or 'unknown'}] waiting timeout[{timeout}s] or canceled")
        self.sql = sql
        self.timeout = timeout


class RequestCancelError(SQLRequestError):
    """Requesting cancellation itself failed."""


# -- Condition builder errors --
class ConditionBuilderError(SQLRequestError):
    """Invalid operation on a condition builder."""


class ConditionFormatError(ConditionBuilderError):
    """The condition string cannot be built in its current form."""

    sql: Optional[str]

    def __init__(self, message: str, sql: Optional[str] = None) -> None:
        detail_message = message
        if sql:
            detail_message = f"{message}\nSQL: {sql}"
        super().__init__(detail=detail_message)
        self.sql = sql


# -- Driver errors --
class DatabaseConnectionError(SQLRequestError):
    """Connection to the database failed or was lost."""


class SQLParsingError(SQLRequestError):
    """The server rejected the statement text."""

    def __init__(self, message: Optional[str] = None) -> None:
        if message is None:
            message = "Issues parsing SQL statement."
        super().__init__(message)


class IntegrityError(SQLRequestError):
    """Data integrity error."""


class UniqueViolationError(IntegrityError):
    """A unique constraint was violated."""


class ForeignKeyViolationError(IntegrityError):
    """A foreign key constraint was violated."""


class NotNullViolationError(IntegrityError):
    """A not-null constraint was violated."""


class CheckViolationError(IntegrityError):
    """A check constraint was violated."""


class DataError(SQLRequestError):
    """Invalid data for the target column (truncation, out of range, bad value)."""


class TransactionError(SQLRequestError):
    """Deadlock, lock wait timeout or another transaction failure."""
