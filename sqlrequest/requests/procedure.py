"""Stored procedure calls."""

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, NamedTuple, Optional

from sqlrequest.core.command import CommandBuilder
from sqlrequest.core.parameters import function_fragment, normalize_parameter_name, normalize_value
from sqlrequest.core.result import to_text
from sqlrequest.exceptions import RequestPreconditionError
from sqlrequest.requests._base import Request
from sqlrequest.typing import CommandType, DispatchMode, ParameterDirection

if TYPE_CHECKING:
    from sqlrequest.core.command import Command
    from sqlrequest.driver import AsyncRequestEngineBase
    from sqlrequest.typing import ConditionPair

__all__ = ("RETURN_VALUE_PARAMETER", "ProcedureResult", "StoredProcedureRequest")

RETURN_VALUE_PARAMETER = "@r_cmd_return_value"


class ProcedureResult(NamedTuple):
    """Outcome of a stored procedure call."""

    return_value: int
    """Return value parameter, 0 when the server produced none."""
    output_values: "list[str]"
    """Output parameters as text, in declaration order; ``""`` for NULL."""


class StoredProcedureRequest(Request[ProcedureResult]):
    """Call a stored procedure with input and output parameters.

    Renders ``CALL <name>(<inputs...>, <outputs...>)``. Inputs are
    ``(name, value)`` pairs bound by name; outputs are MySQL user variables
    whose values are read back after the call.
    """

    __slots__ = ("input_parameters", "name", "output_names")
    dispatch_mode = DispatchMode.NON_QUERY

    def __init__(
        self,
        engine: "Optional[AsyncRequestEngineBase]",
        name: str = "",
        input_parameters: "Optional[Sequence[ConditionPair]]" = None,
        output_names: "Optional[Sequence[str]]" = None,
        **options: Any,
    ) -> None:
        super().__init__(engine, **options)
        self.name = name
        self.input_parameters: list[ConditionPair] = [tuple(pair) for pair in input_parameters or ()]  # type: ignore[misc]
        self.output_names: list[str] = list(output_names or ())

    def check_preconditions(self) -> None:
        if not self.name:
            msg = "Stored procedure name cannot be empty"
            raise RequestPreconditionError(msg)
        names = [normalize_parameter_name(name) for name, _ in self.input_parameters]
        names.extend(normalize_parameter_name(name) for name in self.output_names)
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            msg = f"Stored procedure parameter names must be unique, duplicated: {', '.join(duplicates)}"
            raise RequestPreconditionError(msg)
        if RETURN_VALUE_PARAMETER in names:
            msg = f"{RETURN_VALUE_PARAMETER} is reserved for the procedure return value"
            raise RequestPreconditionError(msg)

    def build_command(self) -> "Command":
        builder = CommandBuilder(CommandType.STORED_PROCEDURE, use_transaction=self.use_transaction)
        arguments: list[str] = []
        for name, value in self.input_parameters:
            fragment = function_fragment(value)
            if fragment is not None:
                arguments.append(fragment)
                continue
            arguments.append(builder.add_parameter(name, normalize_value(value)).name)
        for name in self.output_names:
            arguments.append(builder.add_parameter(name, direction=ParameterDirection.OUTPUT).name)
        builder.add_parameter(RETURN_VALUE_PARAMETER, direction=ParameterDirection.RETURN_VALUE)
        builder.append("CALL ", self.name, "(", ", ".join(arguments), ")")
        return builder.build()

    def map_result(self, raw: Any, command: "Command") -> ProcedureResult:
        returned = command.return_parameter
        return_value = int(returned.value) if returned is not None and returned.value is not None else 0
        return ProcedureResult(return_value, [to_text(parameter.value) for parameter in command.output_parameters])
