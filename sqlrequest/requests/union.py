"""Insert followed by a function call in one batch."""

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Optional

from sqlrequest.core.command import CommandBuilder
from sqlrequest.requests._base import Request
from sqlrequest.typing import DispatchMode

if TYPE_CHECKING:
    from sqlrequest.core.command import Command
    from sqlrequest.driver import AsyncRequestEngineBase

__all__ = ("UnionInsertSelectFuncRequest",)


class UnionInsertSelectFuncRequest(Request[str]):
    """Insert a row and evaluate a SQL function in the same batch.

    Renders ``INSERT INTO <insert_table> VALUES (...); SELECT
    <function_name>(...)[ FROM <function_table>];``. Placeholder numbering
    continues from the insert values into the function arguments, so
    ``LAST_INSERT_ID()`` and similar functions see the inserted row. Returns
    the first field of the function's result, ``""`` when it returned no row.
    """

    __slots__ = ("function_arguments", "function_name", "function_table", "insert_table", "insert_values")
    dispatch_mode = DispatchMode.READER

    def __init__(
        self,
        engine: "Optional[AsyncRequestEngineBase]",
        insert_values: "Optional[Sequence[Any]]" = None,
        insert_table: str = "",
        function_name: str = "",
        function_arguments: "Optional[Sequence[Any]]" = None,
        function_table: "Optional[str]" = None,
        **options: Any,
    ) -> None:
        super().__init__(engine, **options)
        self.insert_values: list[Any] = list(insert_values or ())
        self.insert_table = insert_table
        self.function_name = function_name
        self.function_arguments: list[Any] = list(function_arguments or ())
        self.function_table = function_table

    def build_command(self) -> "Command":
        builder = CommandBuilder(use_transaction=self.use_transaction)
        builder.append("INSERT INTO ", self.insert_table, " VALUES (")
        builder.bind_list(self.insert_values)
        builder.append("); SELECT ", self.function_name, "(")
        builder.bind_list(self.function_arguments, start=len(self.insert_values))
        builder.append(")")
        if self.function_table:
            builder.append(" FROM ", self.function_table)
        builder.append(";")
        return builder.build(is_batch=True)

    def map_result(self, raw: "list[str]", command: "Command") -> str:
        return raw[0] if raw else ""
