"""Row inserts."""

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, ClassVar, Optional

from sqlrequest.core.command import CommandBuilder
from sqlrequest.requests._base import Request
from sqlrequest.typing import DispatchMode

if TYPE_CHECKING:
    from sqlrequest.core.command import Command
    from sqlrequest.driver import AsyncRequestEngineBase

__all__ = ("InsertRequest", "ReplaceRequest")


class InsertRequest(Request[int]):
    """Insert one row given as positional column values.

    Returns the id generated for an ``AUTO_INCREMENT`` column, or 0.
    """

    __slots__ = ("table", "values")
    dispatch_mode = DispatchMode.NON_QUERY
    statement: ClassVar[str] = "INSERT"

    def __init__(
        self,
        engine: "Optional[AsyncRequestEngineBase]",
        values: "Optional[Sequence[Any]]" = None,
        table: str = "",
        **options: Any,
    ) -> None:
        super().__init__(engine, **options)
        self.values: list[Any] = list(values or ())
        self.table = table

    def build_command(self) -> "Command":
        builder = CommandBuilder(use_transaction=self.use_transaction)
        builder.append(self.statement, " INTO ", self.table, " VALUES (")
        builder.bind_list(self.values)
        builder.append(")")
        return builder.build()

    def map_result(self, raw: Any, command: "Command") -> int:
        return command.last_inserted_id


class ReplaceRequest(InsertRequest):
    """``REPLACE`` counterpart of :class:`InsertRequest`."""

    __slots__ = ()
    statement: ClassVar[str] = "REPLACE"
