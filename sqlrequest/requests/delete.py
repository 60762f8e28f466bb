"""Row deletes."""

from typing import TYPE_CHECKING, Any, Optional

from sqlrequest.conditions import ConditionBuilder
from sqlrequest.core.command import CommandBuilder
from sqlrequest.requests._base import Request
from sqlrequest.typing import DispatchMode

if TYPE_CHECKING:
    from sqlrequest.core.command import Command
    from sqlrequest.driver import AsyncRequestEngineBase

__all__ = ("DeleteRequest",)


class DeleteRequest(Request[None]):
    """Delete the rows matching a condition builder; all rows when it is empty."""

    __slots__ = ("conditions", "table")
    dispatch_mode = DispatchMode.NON_QUERY

    def __init__(
        self,
        engine: "Optional[AsyncRequestEngineBase]",
        table: str = "",
        conditions: "Optional[ConditionBuilder]" = None,
        **options: Any,
    ) -> None:
        super().__init__(engine, **options)
        self.table = table
        self.conditions = conditions if conditions is not None else ConditionBuilder.EMPTY.copy()

    def build_command(self) -> "Command":
        builder = CommandBuilder(use_transaction=self.use_transaction)
        builder.append("DELETE FROM ", self.table)
        builder.extend_conditions(self.conditions)
        return builder.build()

    def map_result(self, raw: Any, command: "Command") -> None:
        return None
