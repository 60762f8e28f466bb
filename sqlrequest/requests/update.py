"""Single-column updates."""

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Optional, Union

from sqlrequest.conditions import ConditionBuilder
from sqlrequest.core.command import CommandBuilder
from sqlrequest.requests._base import Request
from sqlrequest.typing import DispatchMode

if TYPE_CHECKING:
    from sqlrequest.core.command import Command
    from sqlrequest.driver import AsyncRequestEngineBase
    from sqlrequest.typing import ConditionPair

__all__ = ("UpdateRequest",)


class UpdateRequest(Request[None]):
    """Set one column of the matching rows.

    ``conditions`` is either a :class:`ConditionBuilder` or a sequence of
    ``(column, value)`` pairs joined with ``AND``. A NULL value in a pair
    renders ``column = NULL``, which matches no row.
    """

    __slots__ = ("column_name", "column_value", "conditions", "table")
    dispatch_mode = DispatchMode.NON_QUERY

    def __init__(
        self,
        engine: "Optional[AsyncRequestEngineBase]",
        column_name: str = "",
        column_value: Any = None,
        table: str = "",
        conditions: "Optional[Union[ConditionBuilder, Sequence[ConditionPair]]]" = None,
        **options: Any,
    ) -> None:
        super().__init__(engine, **options)
        self.column_name = column_name
        self.column_value = column_value
        self.table = table
        self.conditions: Union[ConditionBuilder, list[ConditionPair]]
        if conditions is None:
            self.conditions = ConditionBuilder.EMPTY.copy()
        elif isinstance(conditions, ConditionBuilder):
            self.conditions = conditions
        else:
            self.conditions = [tuple(pair) for pair in conditions]  # type: ignore[misc]

    def build_command(self) -> "Command":
        builder = CommandBuilder(use_transaction=self.use_transaction)
        builder.append("UPDATE ", self.table, " SET ", self.column_name, " = ").bind(self.column_value, 0)
        if isinstance(self.conditions, ConditionBuilder):
            builder.extend_conditions(self.conditions)
        else:
            for index, (name, value) in enumerate(self.conditions, start=1):
                builder.append(" WHERE " if index == 1 else " AND ", name, " = ").bind(value, index)
        return builder.build()

    def map_result(self, raw: Any, command: "Command") -> None:
        return None
