"""AsyncMy MySQL request engine.

Runs request commands on a fixed set of asyncmy connections with
``@name`` placeholder conversion, batch splitting, per-command transactions
and error mapping.
"""

import asyncio
from typing import TYPE_CHECKING, Any, Optional

import asyncmy
import asyncmy.errors  # pyright: ignore
from asyncmy.cursors import Cursor  # pyright: ignore

from sqlrequest.core.parameters import to_pyformat
from sqlrequest.core.result import ResultTable, TabularResult, to_text
from sqlrequest.core.splitter import split_statements
from sqlrequest.driver import DEFAULT_COMMAND_TIMEOUT, AsyncRequestEngineBase
from sqlrequest.exceptions import (
    CheckViolationError,
    DatabaseConnectionError,
    DataError,
    ForeignKeyViolationError,
    IntegrityError,
    NotNullViolationError,
    SQLParsingError,
    SQLRequestError,
    TransactionError,
    UniqueViolationError,
)
from sqlrequest.typing import CommandType, IsolationLevel
from sqlrequest.utils.logging import get_logger

if TYPE_CHECKING:
    from sqlrequest.adapters.asyncmy._types import AsyncmyConnection
    from sqlrequest.adapters.asyncmy.connection import AsyncmyConnectionSet, ConnectionSlot
    from sqlrequest.cancellation import CancellationToken
    from sqlrequest.core.command import Command

logger = get_logger("adapters.asyncmy")

__all__ = ("AsyncmyCursor", "AsyncmyExceptionHandler", "AsyncmyRequestEngine", "AsyncmyTransaction")

MYSQL_ER_DUP_ENTRY = 1062
MYSQL_ER_NO_DEFAULT_FOR_FIELD = 1364
MYSQL_ER_CHECK_CONSTRAINT_VIOLATED = 3819


class AsyncmyCursor:
    """Context manager for AsyncMy cursor operations.

    Provides automatic cursor acquisition and cleanup for database operations.
    """

    __slots__ = ("connection", "cursor")

    def __init__(self, connection: "AsyncmyConnection") -> None:
        self.connection = connection
        self.cursor: Optional[Cursor] = None

    async def __aenter__(self) -> Cursor:
        self.cursor = self.connection.cursor()
        return self.cursor

    async def __aexit__(self, exc_type: Any, *_: Any) -> None:
        # A cancelled statement leaves unread packets; closing would wait on them.
        if self.cursor is not None and exc_type is not asyncio.CancelledError:
            await self.cursor.close()


class AsyncmyExceptionHandler:
    """Async context manager for handling asyncmy (MySQL) database exceptions.

    Maps MySQL error codes and SQLSTATE to specific sqlrequest exceptions
    for better error handling in application code.
    """

    __slots__ = ()

    async def __aenter__(self) -> None:
        return None

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if exc_type is None:
            return
        if issubclass(exc_type, asyncmy.errors.Error):
            self._map_mysql_exception(exc_val)

    def _map_mysql_exception(self, e: Any) -> None:
        """Map MySQL exception to sqlrequest exception.

        Args:
            e: MySQL error instance

        Raises:
            Specific sqlrequest exception based on error code
        """
        error_code = None
        if hasattr(e, "args") and len(e.args) >= 1 and isinstance(e.args[0], int):
            error_code = e.args[0]

        sqlstate = getattr(e, "sqlstate", None)

        if sqlstate == "23505" or error_code == MYSQL_ER_DUP_ENTRY:
            self._raise(e, sqlstate, error_code, UniqueViolationError, "unique constraint violation")
        elif sqlstate == "23503" or error_code in (1216, 1217, 1451, 1452):
            self._raise(e, sqlstate, error_code, ForeignKeyViolationError, "foreign key constraint violation")
        elif sqlstate == "23502" or error_code in (1048, MYSQL_ER_NO_DEFAULT_FOR_FIELD):
            self._raise(e, sqlstate, error_code, NotNullViolationError, "not-null constraint violation")
        elif sqlstate == "23514" or error_code == MYSQL_ER_CHECK_CONSTRAINT_VIOLATED:
            self._raise(e, sqlstate, error_code, CheckViolationError, "check constraint violation")
        elif sqlstate and sqlstate.startswith("23"):
            self._raise(e, sqlstate, error_code, IntegrityError, "integrity constraint violation")
        elif sqlstate and sqlstate.startswith("42"):
            self._raise(e, sqlstate, error_code, SQLParsingError, "SQL syntax error")
        elif sqlstate and sqlstate.startswith("08"):
            self._raise(e, sqlstate, error_code, DatabaseConnectionError, "connection error")
        elif sqlstate and sqlstate.startswith("40"):
            self._raise(e, sqlstate, error_code, TransactionError, "transaction error")
        elif sqlstate and sqlstate.startswith("22"):
            self._raise(e, sqlstate, error_code, DataError, "data error")
        elif error_code in (2002, 2003, 2005, 2006, 2013):
            self._raise(e, sqlstate, error_code, DatabaseConnectionError, "connection error")
        elif error_code in (1205, 1213):
            self._raise(e, sqlstate, error_code, TransactionError, "transaction error")
        elif error_code in range(1064, 1100):
            self._raise(e, sqlstate, error_code, SQLParsingError, "SQL syntax error")
        else:
            self._raise_generic_error(e, sqlstate, error_code)

    def _raise(
        self,
        e: Any,
        sqlstate: "Optional[str]",
        code: "Optional[int]",
        error_class: "type[SQLRequestError]",
        description: str,
    ) -> None:
        code_str = f"[{sqlstate or code}]"
        msg = f"MySQL {description} {code_str}: {e}"
        raise error_class(msg) from e

    def _raise_generic_error(self, e: Any, sqlstate: "Optional[str]", code: "Optional[int]") -> None:
        if sqlstate and code:
            msg = f"MySQL database error [{sqlstate}:{code}]: {e}"
        elif sqlstate or code:
            msg = f"MySQL database error [{sqlstate or code}]: {e}"
        else:
            msg = f"MySQL database error: {e}"
        raise SQLRequestError(msg) from e


class AsyncmyTransaction:
    """Transaction begun by the engine for one command.

    The engine commits it, or aborts it after a failure, while it still holds
    the connection lock, so no other command can run on the connection in
    between. ``rollback`` is for callers outside the engine and therefore
    takes the lock itself.
    """

    __slots__ = ("_active", "_slot")

    def __init__(self, slot: "ConnectionSlot") -> None:
        self._slot = slot
        self._active = True

    def __repr__(self) -> str:
        return f"AsyncmyTransaction(connection={self._slot.index}, active={self._active})"

    @property
    def is_active(self) -> bool:
        return self._active

    async def commit(self) -> None:
        """Commit the transaction.

        Raises:
            TransactionError: If the commit fails
        """
        try:
            await self._slot.connection.commit()
        except asyncmy.errors.MySQLError as e:
            msg = f"Failed to commit MySQL transaction: {e}"
            raise TransactionError(msg) from e
        self._active = False

    async def rollback(self) -> None:
        """Rollback the transaction.

        Raises:
            TransactionError: If the rollback fails
        """
        if not self._active:
            return
        async with self._slot.lock:
            await self.abort()

    async def abort(self) -> None:
        """Roll back with the connection lock already held.

        Raises:
            TransactionError: If the rollback fails
        """
        if not self._active:
            return
        try:
            await self._slot.connection.rollback()
        except asyncmy.errors.MySQLError as e:
            msg = f"Failed to rollback MySQL transaction: {e}"
            raise TransactionError(msg) from e
        finally:
            self._active = False

    def discard(self) -> None:
        """Mark the transaction finished without a round trip to the server."""
        self._active = False


class AsyncmyRequestEngine(AsyncRequestEngineBase):
    """Request engine over a fixed set of asyncmy connections.

    Every primitive takes the next connection, checks the token once under
    the connection lock, begins a transaction at the requested isolation
    level (unless the command opts out), executes and commits. A failed
    command is rolled back before the lock is released; a command cancelled
    mid-statement invalidates its connection, which is reopened on next use.
    """

    __slots__ = ("_connections",)

    def __init__(
        self, connections: "AsyncmyConnectionSet", command_timeout: float = DEFAULT_COMMAND_TIMEOUT
    ) -> None:
        super().__init__(command_timeout)
        self._connections = connections

    @property
    def current_connection(self) -> "AsyncmyConnectionSet":
        return self._connections

    def handle_database_exceptions(self) -> AsyncmyExceptionHandler:
        return AsyncmyExceptionHandler()

    async def open(self) -> None:
        """Open the connections and bind the engine to the running loop."""
        self._bind_loop()
        await self._connections.open()

    async def close(self) -> None:
        """Cancel in-flight requests and close the connections."""
        try:
            self.cancel_all()
        finally:
            await self._connections.close()

    async def execute_non_query(
        self,
        command: "Command",
        token: "CancellationToken",
        isolation_level: IsolationLevel = IsolationLevel.READ_COMMITTED,
    ) -> None:
        await self._execute(command, token, isolation_level)

    async def execute_reader(
        self,
        command: "Command",
        token: "CancellationToken",
        isolation_level: IsolationLevel = IsolationLevel.READ_COMMITTED,
    ) -> "list[str]":
        first = (await self._execute(command, token, isolation_level)).first
        if not first.rows:
            return []
        return [to_text(value) for value in first.rows[0]]

    async def execute_adapter(
        self,
        command: "Command",
        token: "CancellationToken",
        isolation_level: IsolationLevel = IsolationLevel.READ_COMMITTED,
    ) -> TabularResult:
        return await self._execute(command, token, isolation_level)

    async def _execute(
        self, command: "Command", token: "CancellationToken", isolation_level: IsolationLevel
    ) -> TabularResult:
        slot = self._connections.next_slot()
        async with slot.lock:
            token.throw_if_cancellation_requested()
            async with self.handle_database_exceptions():
                await self._connections.refresh(slot)
            try:
                tables = await self._run_on_slot(slot, command, isolation_level)
            except asyncio.CancelledError:
                # The statement was abandoned mid-flight; the connection no longer
                # matches the protocol state and cannot even be rolled back.
                self._discard(slot, command)
                raise
            except Exception:
                await self._abort(slot, command)
                raise
        return TabularResult(tables)

    async def _run_on_slot(
        self, slot: "ConnectionSlot", command: "Command", isolation_level: IsolationLevel
    ) -> "list[ResultTable]":
        async with self.handle_database_exceptions(), AsyncmyCursor(slot.connection) as cursor:
            if command.use_transaction:
                await cursor.execute(f"SET TRANSACTION ISOLATION LEVEL {isolation_level}")
                await cursor.execute("BEGIN")
                command.transaction = AsyncmyTransaction(slot)

            if command.command_type is CommandType.STORED_PROCEDURE:
                tables = await self._call_procedure(cursor, command)
            else:
                tables = await self._execute_statements(cursor, command)

            if command.transaction is not None:
                await command.transaction.commit()
        return tables

    async def _abort(self, slot: "ConnectionSlot", command: "Command") -> None:
        """Roll back a failed command's transaction before the lock is released."""
        transaction = command.transaction
        if not isinstance(transaction, AsyncmyTransaction) or not transaction.is_active:
            return
        try:
            await transaction.abort()
        except asyncio.CancelledError:
            self._discard(slot, command)
            raise
        except Exception:
            logger.warning("Rollback on MySQL connection %d failed", slot.index, exc_info=True)
            slot.invalidate()

    def _discard(self, slot: "ConnectionSlot", command: "Command") -> None:
        slot.invalidate()
        if isinstance(command.transaction, AsyncmyTransaction):
            command.transaction.discard()

    async def _execute_statements(self, cursor: Any, command: "Command") -> "list[ResultTable]":
        statements = split_statements(command.text) if command.is_batch else [command.text]
        parameters = command.input_parameters
        tables: list[ResultTable] = []
        for statement in statements:
            sql, arguments = to_pyformat(statement, parameters)
            logger.debug("Executing statement", extra={"extra_fields": {"sql": sql}})
            await cursor.execute(sql, arguments)
            self._record_execution(command, cursor)
            tables.extend(await self._collect_results(cursor))
        return tables

    async def _call_procedure(self, cursor: Any, command: "Command") -> "list[ResultTable]":
        """Run a ``CALL`` whose output parameters are session variables.

        Output variables are reset to NULL first so values from an earlier
        call on the same connection never leak, then read back into the
        command's parameters after the call.
        """
        outputs = command.output_parameters
        if outputs:
            await cursor.execute("SET " + ", ".join(f"{parameter.name} = NULL" for parameter in outputs))

        sql, arguments = to_pyformat(command.text, command.input_parameters)
        logger.debug("Calling procedure", extra={"extra_fields": {"sql": sql}})
        await cursor.execute(sql, arguments)
        self._record_execution(command, cursor)
        tables = await self._collect_results(cursor)

        if outputs:
            await cursor.execute("SELECT " + ", ".join(parameter.name for parameter in outputs))
            row = await cursor.fetchone() or ()
            for parameter, value in zip(outputs, row):
                parameter.value = value
        return tables

    async def _collect_results(self, cursor: Any) -> "list[ResultTable]":
        tables: list[ResultTable] = []
        while True:
            if cursor.description:
                columns = [column[0] for column in cursor.description]
                rows = await cursor.fetchall()
                tables.append(ResultTable(columns, [tuple(row) for row in rows or ()]))
            if not await cursor.nextset():
                return tables

    def _record_execution(self, command: "Command", cursor: Any) -> None:
        if isinstance(cursor.rowcount, int):
            command.rows_affected = cursor.rowcount
        last_id = getattr(cursor, "lastrowid", None)
        if isinstance(last_id, int) and last_id > 0:
            command.last_inserted_id = last_id
