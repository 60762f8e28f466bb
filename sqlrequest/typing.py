from datetime import timedelta
from enum import Enum
from typing import Any, Union

from typing_extensions import TypeAlias, TypeVar

__all__ = (
    "MAX_ROW_COUNT",
    "CommandType",
    "ConditionPair",
    "DispatchMode",
    "IsolationLevel",
    "ParameterDirection",
    "ResultT",
    "TimeoutValue",
)


MAX_ROW_COUNT = 18446744073709551615
"""Largest ``LIMIT`` row count MySQL accepts; stands for "all remaining rows"."""


ResultT = TypeVar("ResultT", default=Any)
"""Type of the value a request produces once executed."""

TimeoutValue: TypeAlias = Union[float, int, timedelta]
"""Request timeout in seconds or as a :class:`~datetime.timedelta`."""

ConditionPair: TypeAlias = tuple[str, Any]
"""``(column name, value)`` pair of an implicitly AND-ed equality condition."""


class IsolationLevel(str, Enum):
    """Transaction isolation level requested for a single statement."""

    READ_UNCOMMITTED = "READ UNCOMMITTED"
    READ_COMMITTED = "READ COMMITTED"
    REPEATABLE_READ = "REPEATABLE READ"
    SERIALIZABLE = "SERIALIZABLE"

    def __str__(self) -> str:
        return self.value


class CommandType(str, Enum):
    """How the command text is interpreted by the engine."""

    TEXT = "text"
    STORED_PROCEDURE = "stored_procedure"


class ParameterDirection(str, Enum):
    """Direction of a command parameter."""

    INPUT = "input"
    OUTPUT = "output"
    RETURN_VALUE = "return_value"


class DispatchMode(str, Enum):
    """Engine primitive a request is dispatched to."""

    NON_QUERY = "non_query"
    READER = "reader"
    ADAPTER = "adapter"
