"""Fluent builder for MySQL ``WHERE`` clauses.

Example:
    >>> conditions = (
    ...     ConditionBuilder.where()
    ...     .is_true("age", "18", ComparisonMode.GREATER_THAN_OR_EQUAL)
    ...     .and_()
    ...     .open_bracket()
    ...     .is_true("name", "Ann")
    ...     .or_()
    ...     .is_null("deleted_at")
    ... )
    >>> conditions.build()[0]
    ' WHERE age >= @param_condition0 AND (name = @param_condition1 OR deleted_at IS NULL)'
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Optional

from sqlrequest.exceptions import ConditionBuilderError, ConditionFormatError

__all__ = ("ComparisonMode", "ConditionBuilder", "ConditionParameter")

_CLOSING_TO_OPENING = {")": "(", "]": "[", "}": "{"}
_OPENING_TO_CLOSING = {opening: closing for closing, opening in _CLOSING_TO_OPENING.items()}
_WHERE = " WHERE"


class ComparisonMode(Enum):
    """Comparison operator used by :meth:`ConditionBuilder.is_true`."""

    EQUAL = "="
    EQUAL_NULL_SAFE = "<=>"
    NOT_EQUAL = "<>"
    NOT_EQUAL_NULL_SAFE = "NOT <=>"
    GREATER_THAN = ">"
    GREATER_THAN_OR_EQUAL = ">="
    LESS_THAN = "<"
    LESS_THAN_OR_EQUAL = "<="


_NULL_COMPARISON = {
    ComparisonMode.EQUAL: " IS NULL",
    ComparisonMode.EQUAL_NULL_SAFE: " IS NULL",
    ComparisonMode.GREATER_THAN_OR_EQUAL: " IS NULL",
    ComparisonMode.LESS_THAN_OR_EQUAL: " IS NULL",
    ComparisonMode.NOT_EQUAL: " IS NOT NULL",
    ComparisonMode.NOT_EQUAL_NULL_SAFE: " IS NOT NULL",
    ComparisonMode.GREATER_THAN: " IS NOT NULL",
    ComparisonMode.LESS_THAN: " IS NOT NULL",
}


@dataclass(frozen=True)
class ConditionParameter:
    """Bound value of a condition placeholder."""

    name: str
    value: Any


def _is_null(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.upper() == "NULL")


def _normalize(value: Any) -> Any:
    if _is_null(value):
        return None
    if isinstance(value, str) and value.upper() == "'NULL'":
        return value[1:-1]
    return value


class ConditionBuilder:
    """Accumulates predicate fragments and their parameters.

    Builders are created with :meth:`where`; every predicate method returns
    the builder so calls can be chained. :meth:`build` compiles the fragment
    (starting with ``" WHERE"``) and the parameter list. A locked builder
    rejects further predicates; :attr:`EMPTY` is a locked empty builder that
    requests copy when no conditions are given.
    """

    EMPTY: ClassVar["ConditionBuilder"]

    __slots__ = ("_locked", "_parameters", "_parentheses", "_sql", "parentheses_auto_complete")

    def __init__(self, parentheses_auto_complete: bool = True) -> None:
        self._sql: list[str] = []
        self._parameters: list[ConditionParameter] = []
        self._parentheses: list[tuple[str, int]] = []
        self._locked = False
        self.parentheses_auto_complete = parentheses_auto_complete

    @classmethod
    def where(cls, parentheses_auto_complete: bool = True) -> "ConditionBuilder":
        builder = cls(parentheses_auto_complete)
        builder._sql.append(_WHERE)
        return builder

    def __repr__(self) -> str:
        return f"ConditionBuilder({self.text!r}, parameters={len(self._parameters)}, locked={self._locked})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConditionBuilder):
            return NotImplemented
        return (
            self.text == other.text
            and self._parameters == other._parameters
            and self._parentheses == other._parentheses
            and self.parentheses_auto_complete == other.parentheses_auto_complete
        )

    __hash__ = None  # type: ignore[assignment]

    @property
    def text(self) -> str:
        """Current fragment without trailing whitespace."""
        return "".join(self._sql).rstrip()

    @property
    def is_locked(self) -> bool:
        return self._locked

    @property
    def parameters(self) -> "tuple[ConditionParameter, ...]":
        return tuple(self._parameters)

    def _last_char(self) -> str:
        text = "".join(self._sql)
        return text[-1] if text else " "

    def _separate(self) -> None:
        if self._last_char() not in "( ":
            self._sql.append(" ")

    def _trim_trailing_space(self) -> None:
        text = "".join(self._sql)
        if text.endswith(" "):
            self._sql = [text[:-1]]

    def _throw_if_locked(self) -> None:
        if self._locked:
            msg = f"The current ConditionBuilder[{self.text}] instance is locked"
            raise ConditionBuilderError(msg)

    def _require_name(self, name: str, operation: str) -> None:
        if not name:
            msg = f"name cannot be empty for inserting a condition {operation} in MySQL condition string [{self.text}]"
            raise ConditionBuilderError(msg)

    def _next_parameter(self, value: Any) -> ConditionParameter:
        return ConditionParameter(f"@param_condition{len(self._parameters)}", _normalize(value))

    def _complete_parentheses(self) -> None:
        while self._parentheses:
            opening, _ = self._parentheses.pop()
            self._trim_trailing_space()
            self._sql.append(_OPENING_TO_CLOSING[opening])

    def _not(self) -> "ConditionBuilder":
        self._throw_if_locked()
        self._separate()
        self._sql.append("NOT")
        return self

    def lock(self) -> "ConditionBuilder":
        self._locked = True
        return self

    def is_empty(self) -> bool:
        text = self.text
        if text.startswith(_WHERE):
            return len(text) <= len(_WHERE)
        return not text

    def build(self) -> "tuple[str, tuple[ConditionParameter, ...]]":
        """Compile the fragment and its parameters.

        Open brackets are closed when :attr:`parentheses_auto_complete` is
        set.

        Raises:
            ConditionFormatError: If brackets are left open and auto-complete
                is disabled.
        """
        if self._parentheses:
            if not self.parentheses_auto_complete:
                indexes = ", ".join(str(index) for _, index in self._parentheses)
                msg = f"Parentheses are not closed in MySQL condition string at start indexes [{indexes}]"
                raise ConditionFormatError(msg, self.text)
            self._complete_parentheses()
        return self.text, self.parameters

    def copy(self) -> "ConditionBuilder":
        """Unlocked copy with the same fragment, parameters and open brackets."""
        builder = ConditionBuilder(self.parentheses_auto_complete)
        builder._sql = [self.text]
        builder._parameters = list(self._parameters)
        builder._parentheses = list(self._parentheses)
        return builder

    def __copy__(self) -> "ConditionBuilder":
        return self.copy()

    def __str__(self) -> str:
        return self.build()[0]

    def open_bracket(self) -> "ConditionBuilder":
        self._throw_if_locked()
        self._separate()
        self._sql.append("(")
        self._parentheses.append(("(", len("".join(self._sql)) - 1))
        return self

    def close_bracket(self) -> "ConditionBuilder":
        self._throw_if_locked()
        if not self._parentheses or self._parentheses[-1][0] != _CLOSING_TO_OPENING[")"]:
            text = self.text + ")"
            msg = (
                "Free open parenthesis of this type for its closing was not found in MySQL condition "
                f"string [{text}] at start index [{len(text) - 1}]"
            )
            raise ConditionBuilderError(msg)
        self._parentheses.pop()
        self._trim_trailing_space()
        self._sql.append(")")
        return self

    def and_(self) -> "ConditionBuilder":
        self._throw_if_locked()
        self._separate()
        self._sql.append("AND")
        return self

    def or_(self) -> "ConditionBuilder":
        self._throw_if_locked()
        self._separate()
        self._sql.append("OR")
        return self

    def is_true(self, name: str, value: Any, comparison_mode: ComparisonMode = ComparisonMode.EQUAL) -> "ConditionBuilder":
        """Append ``name <op> @param_conditionN``.

        A NULL value renders ``IS NULL`` or ``IS NOT NULL`` depending on
        ``comparison_mode`` and binds nothing.
        """
        self._throw_if_locked()
        self._require_name(name, "is_true")
        self._separate()

        if _is_null(value):
            self._sql.extend((name, _NULL_COMPARISON[comparison_mode]))
            return self

        null_safe_negation = comparison_mode is ComparisonMode.NOT_EQUAL_NULL_SAFE
        if null_safe_negation:
            self._not().open_bracket()

        parameter = self._next_parameter(value)
        operator = "<=>" if null_safe_negation else comparison_mode.value
        self._sql.append(f"{name} {operator} {parameter.name}")

        if null_safe_negation:
            self.close_bracket()

        self._parameters.append(parameter)
        return self

    def is_false(
        self, name: str, value: Any, comparison_mode: ComparisonMode = ComparisonMode.EQUAL
    ) -> "ConditionBuilder":
        return self._not().open_bracket().is_true(name, value, comparison_mode).close_bracket()

    def is_null(self, name: str) -> "ConditionBuilder":
        return self.is_true(name, None, ComparisonMode.EQUAL)

    def is_not_null(self, name: str) -> "ConditionBuilder":
        return self.is_true(name, None, ComparisonMode.NOT_EQUAL)

    def like(self, name: str, value: Optional[str], escape_character: str = "\\") -> "ConditionBuilder":
        """Append ``name LIKE @param_conditionN ESCAPE '<escape>'``."""
        self._throw_if_locked()
        self._require_name(name, "like")
        self._separate()

        if _is_null(value):
            self._sql.extend((name, " IS NULL"))
            return self

        parameter = self._next_parameter(value)
        escape = escape_character * 2 if escape_character in {"\\", "'"} else escape_character
        self._sql.append(f"{name} LIKE {parameter.name} ESCAPE '{escape}'")
        self._parameters.append(parameter)
        return self

    def not_like(self, name: str, value: Optional[str], escape_character: str = "\\") -> "ConditionBuilder":
        return self._not().open_bracket().like(name, value, escape_character).close_bracket()


ConditionBuilder.EMPTY = ConditionBuilder.where().lock()
