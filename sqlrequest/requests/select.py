"""Row and column reads."""

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, NamedTuple, Optional

from sqlrequest.conditions import ConditionBuilder
from sqlrequest.core.command import CommandBuilder
from sqlrequest.core.result import to_text
from sqlrequest.exceptions import RequestPreconditionError
from sqlrequest.requests._base import Request, normalize_window
from sqlrequest.typing import DispatchMode

if TYPE_CHECKING:
    from sqlrequest.core.command import Command
    from sqlrequest.core.result import TabularResult
    from sqlrequest.driver import AsyncRequestEngineBase
    from sqlrequest.typing import ConditionPair

__all__ = (
    "ColumnQuery",
    "SelectColumnRequest",
    "SelectColumnsOneTableRequest",
    "SelectColumnsRequest",
    "SelectRequest",
)


class ColumnQuery(NamedTuple):
    """One column read of a :class:`SelectColumnsRequest`."""

    name: str
    table: str
    start: int = 0
    count: int = 0


class SelectRequest(Request["list[str]"]):
    """Read the first matching row.

    Renders ``SELECT <fields> FROM <table>`` followed by the condition
    fragment, and returns the first row's fields as text (an empty list when
    nothing matches).
    """

    __slots__ = ("conditions", "fields", "table")
    dispatch_mode = DispatchMode.READER

    def __init__(
        self,
        engine: "Optional[AsyncRequestEngineBase]",
        fields: "Optional[Sequence[str]]" = None,
        table: str = "",
        conditions: "Optional[ConditionBuilder]" = None,
        **options: Any,
    ) -> None:
        super().__init__(engine, **options)
        self.fields: list[str] = list(fields or ())
        self.table = table
        self.conditions = conditions if conditions is not None else ConditionBuilder.EMPTY.copy()

    def check_preconditions(self) -> None:
        if not self.fields:
            msg = "Count of fields names is 0"
            raise RequestPreconditionError(msg)

    def build_command(self) -> "Command":
        builder = CommandBuilder(use_transaction=self.use_transaction)
        builder.append("SELECT ", ", ".join(self.fields), " FROM ", self.table)
        builder.extend_conditions(self.conditions)
        return builder.build()

    def map_result(self, raw: "list[str]", command: "Command") -> "list[str]":
        return list(raw)


class SelectColumnRequest(Request["list[str]"]):
    """Read one column over a row window.

    ``conditions`` are ``(column, value)`` pairs joined with ``AND``.
    """

    __slots__ = ("column_name", "conditions", "count", "start", "table")
    dispatch_mode = DispatchMode.ADAPTER

    def __init__(
        self,
        engine: "Optional[AsyncRequestEngineBase]",
        column_name: str = "",
        table: str = "",
        conditions: "Optional[Sequence[ConditionPair]]" = None,
        start: int = 0,
        count: int = 0,
        **options: Any,
    ) -> None:
        super().__init__(engine, **options)
        self.column_name = column_name
        self.table = table
        self.conditions: list[ConditionPair] = [tuple(pair) for pair in conditions or ()]  # type: ignore[misc]
        self.start = start
        self.count = count

    def check_preconditions(self) -> None:
        normalize_window(self.start, self.count)

    def build_command(self) -> "Command":
        builder = CommandBuilder(use_transaction=self.use_transaction)
        builder.append("SELECT ", self.column_name, " FROM ", self.table)
        for index, (name, value) in enumerate(self.conditions):
            builder.append(" WHERE " if index == 0 else " AND ", name, " = ").bind(value, index)
        offset, count = normalize_window(self.start, self.count)
        builder.append(f" LIMIT {offset},{count}")
        return builder.build()

    def map_result(self, raw: "TabularResult", command: "Command") -> "list[str]":
        return [to_text(row[0]) for row in raw.first.rows]


class SelectColumnsRequest(Request["list[list[str]]"]):
    """Read several columns, possibly from different tables, in one batch.

    Each :class:`ColumnQuery` becomes its own ``SELECT ... LIMIT`` statement;
    the result holds one list of values per query, in order.
    """

    __slots__ = ("columns",)
    dispatch_mode = DispatchMode.ADAPTER

    def __init__(
        self,
        engine: "Optional[AsyncRequestEngineBase]",
        columns: "Optional[Sequence[Sequence[Any]]]" = None,
        **options: Any,
    ) -> None:
        super().__init__(engine, **options)
        self.columns: list[ColumnQuery] = [ColumnQuery(*column) for column in columns or ()]

    def check_preconditions(self) -> None:
        if not self.columns:
            msg = "Count of columns is 0"
            raise RequestPreconditionError(msg)
        for column in self.columns:
            normalize_window(column.start, column.count)

    def build_command(self) -> "Command":
        builder = CommandBuilder(use_transaction=self.use_transaction)
        for column in self.columns:
            offset, count = normalize_window(column.start, column.count)
            builder.append("SELECT ", column.name, " FROM ", column.table, f" LIMIT {offset},{count}; ")
        return builder.build(is_batch=True)

    def map_result(self, raw: "TabularResult", command: "Command") -> "list[list[str]]":
        return [[to_text(row[0]) for row in table.rows] for table in raw]


class SelectColumnsOneTableRequest(Request["list[list[str]]"]):
    """Read several columns of one table over a row window.

    The result is column-major: one list of values per requested column.
    """

    __slots__ = ("column_names", "count", "start", "table")
    dispatch_mode = DispatchMode.ADAPTER

    def __init__(
        self,
        engine: "Optional[AsyncRequestEngineBase]",
        column_names: "Optional[Sequence[str]]" = None,
        table: str = "",
        start: int = 0,
        count: int = 0,
        **options: Any,
    ) -> None:
        super().__init__(engine, **options)
        self.column_names: list[str] = list(column_names or ())
        self.table = table
        self.start = start
        self.count = count

    def check_preconditions(self) -> None:
        if not self.column_names:
            msg = "Count of columns names is 0"
            raise RequestPreconditionError(msg)
        normalize_window(self.start, self.count)

    def build_command(self) -> "Command":
        offset, count = normalize_window(self.start, self.count)
        builder = CommandBuilder(use_transaction=self.use_transaction)
        builder.append("SELECT ", ", ".join(self.column_names), " FROM ", self.table, f" LIMIT {offset},{count}")
        return builder.build()

    def map_result(self, raw: "TabularResult", command: "Command") -> "list[list[str]]":
        table = raw.first
        width = len(table.columns) or len(self.column_names)
        return [[to_text(row[index]) for row in table.rows] for index in range(width)]
