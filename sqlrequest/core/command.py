"""Command and parameter bundle built fresh for every request execution."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional, Protocol, runtime_checkable

from sqlrequest.core.parameters import function_fragment, normalize_parameter_name, normalize_value
from sqlrequest.typing import CommandType, ParameterDirection

if TYPE_CHECKING:
    from sqlrequest.conditions import ConditionBuilder

__all__ = ("Command", "CommandBuilder", "CommandParameter", "Transaction")


@runtime_checkable
class Transaction(Protocol):
    """Transaction an engine attached to a command while executing it."""

    @property
    def is_active(self) -> bool: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...


@dataclass
class CommandParameter:
    """One named parameter of a command."""

    name: str
    value: Any = None
    direction: ParameterDirection = ParameterDirection.INPUT


@dataclass
class Command:
    """Statement text plus its ordered parameters.

    The engine fills in ``transaction``, ``last_inserted_id`` and
    ``rows_affected`` while executing; output and return-value parameters
    receive their values in place.
    """

    text: str = ""
    parameters: "list[CommandParameter]" = field(default_factory=list)
    command_type: CommandType = CommandType.TEXT
    is_batch: bool = False
    use_transaction: bool = True
    transaction: Optional[Transaction] = None
    last_inserted_id: int = 0
    rows_affected: int = -1

    def add(
        self, name: str, value: Any = None, direction: ParameterDirection = ParameterDirection.INPUT
    ) -> CommandParameter:
        parameter = CommandParameter(normalize_parameter_name(name), value, direction)
        self.parameters.append(parameter)
        return parameter

    def __getitem__(self, name: str) -> CommandParameter:
        name = normalize_parameter_name(name)
        for parameter in self.parameters:
            if parameter.name == name:
                return parameter
        raise KeyError(name)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and any(p.name == normalize_parameter_name(name) for p in self.parameters)

    @property
    def input_parameters(self) -> "list[CommandParameter]":
        return [p for p in self.parameters if p.direction is ParameterDirection.INPUT]

    @property
    def output_parameters(self) -> "list[CommandParameter]":
        return [p for p in self.parameters if p.direction is ParameterDirection.OUTPUT]

    @property
    def return_parameter(self) -> Optional[CommandParameter]:
        return next((p for p in self.parameters if p.direction is ParameterDirection.RETURN_VALUE), None)

    @property
    def bundle(self) -> "list[tuple[str, Any]]":
        """Ordered ``(name, value)`` pairs bound to the statement."""
        return [(p.name, p.value) for p in self.input_parameters]


class CommandBuilder:
    """Accumulates statement text and parameters for one command."""

    __slots__ = ("_command", "_parts")

    def __init__(self, command_type: CommandType = CommandType.TEXT, *, use_transaction: bool = True) -> None:
        self._parts: list[str] = []
        self._command = Command(command_type=command_type, use_transaction=use_transaction)

    @property
    def text(self) -> str:
        return "".join(self._parts)

    def append(self, *fragments: Any) -> "CommandBuilder":
        self._parts.extend(str(fragment) for fragment in fragments)
        return self

    def bind(self, value: Any, index: int) -> "CommandBuilder":
        """Append the placeholder ``@param<index>`` bound to ``value``.

        Function markers are spliced into the text instead; the index is
        consumed either way so numbering stays positional.
        """
        fragment = function_fragment(value)
        if fragment is not None:
            return self.append(fragment)
        name = f"@param{index}"
        self._command.add(name, normalize_value(value))
        return self.append(name)

    def bind_list(self, values: "list[Any]", start: int = 0) -> "CommandBuilder":
        """Append comma-separated placeholders for ``values``, numbered from ``start``."""
        for offset, value in enumerate(values):
            if offset:
                self.append(", ")
            self.bind(value, start + offset)
        return self

    def add_parameter(
        self, name: str, value: Any = None, direction: ParameterDirection = ParameterDirection.INPUT
    ) -> CommandParameter:
        return self._command.add(name, value, direction)

    def extend_conditions(self, conditions: "ConditionBuilder") -> "CommandBuilder":
        """Append a compiled condition fragment and its parameters, if not empty.

        The builder is compiled from a copy so auto-completed brackets never
        leak back into the caller's builder.
        """
        if conditions.is_empty():
            return self
        sql, parameters = conditions.copy().build()
        self.append(sql)
        for parameter in parameters:
            self._command.add(parameter.name, parameter.value)
        return self

    def build(self, *, is_batch: bool = False) -> Command:
        self._command.text = self.text
        self._command.is_batch = is_batch
        return self._command
