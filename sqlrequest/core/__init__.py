"""Command, parameter, result and batch primitives shared by requests and engines."""

from sqlrequest.core.command import Command, CommandBuilder, CommandParameter, Transaction
from sqlrequest.core.parameters import (
    SQL_FUNCTION_MARKERS,
    find_placeholders,
    function_fragment,
    normalize_value,
    replace_placeholders,
    to_pyformat,
)
from sqlrequest.core.result import ResultTable, TabularResult, to_text
from sqlrequest.core.splitter import split_statements

__all__ = (
    "SQL_FUNCTION_MARKERS",
    "Command",
    "CommandBuilder",
    "CommandParameter",
    "ResultTable",
    "TabularResult",
    "Transaction",
    "find_placeholders",
    "function_fragment",
    "normalize_value",
    "replace_placeholders",
    "split_statements",
    "to_pyformat",
    "to_text",
)
