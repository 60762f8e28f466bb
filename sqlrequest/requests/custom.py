"""Caller-written SQL."""

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Optional

from sqlrequest.core.command import CommandBuilder
from sqlrequest.core.parameters import (
    function_fragment,
    normalize_parameter_name,
    normalize_value,
    replace_placeholders,
)
from sqlrequest.core.result import TabularResult
from sqlrequest.requests._base import Request
from sqlrequest.typing import DispatchMode, ResultT

if TYPE_CHECKING:
    from sqlrequest.core.command import Command
    from sqlrequest.driver import AsyncRequestEngineBase
    from sqlrequest.typing import ConditionPair

__all__ = ("CustomCommandNotRetRequest", "CustomCommandRequest")


class _CustomCommand(Request[ResultT]):
    __slots__ = ("parameters", "sql")

    def __init__(
        self,
        engine: "Optional[AsyncRequestEngineBase]",
        sql: str = "",
        parameters: "Optional[Sequence[ConditionPair]]" = None,
        **options: Any,
    ) -> None:
        super().__init__(engine, **options)
        self.sql = sql
        self.parameters: list[ConditionPair] = [tuple(pair) for pair in parameters or ()]  # type: ignore[misc]

    def build_command(self) -> "Command":
        builder = CommandBuilder(use_transaction=self.use_transaction)
        functions: dict[str, str] = {}
        for name, value in self.parameters:
            fragment = function_fragment(value)
            if fragment is not None:
                functions[normalize_parameter_name(name)] = fragment
            else:
                builder.add_parameter(name, normalize_value(value))
        builder.append(replace_placeholders(self.sql, functions) if functions else self.sql)
        return builder.build()


class CustomCommandRequest(_CustomCommand[TabularResult]):
    """Run arbitrary SQL and return every result set it produced.

    Parameters are ``(name, value)`` pairs; names may be given with or
    without the leading ``@``. The text is sent as one statement.
    """

    __slots__ = ()
    dispatch_mode = DispatchMode.ADAPTER

    def map_result(self, raw: TabularResult, command: "Command") -> TabularResult:
        return raw


class CustomCommandNotRetRequest(_CustomCommand[None]):
    """Run arbitrary SQL for its side effects."""

    __slots__ = ()
    dispatch_mode = DispatchMode.NON_QUERY

    def map_result(self, raw: Any, command: "Command") -> None:
        return None
