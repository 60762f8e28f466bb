"""sqlrequest: typed, cancelable request objects for MySQL."""

from sqlrequest import adapters, core, driver, exceptions, observability, requests, typing, utils
from sqlrequest.__metadata__ import __version__
from sqlrequest.cancellation import CancellationSource, CancellationToken
from sqlrequest.conditions import ComparisonMode, ConditionBuilder, ConditionParameter
from sqlrequest.config import AsyncEngineConfig
from sqlrequest.core import Command, CommandParameter, ResultTable, TabularResult
from sqlrequest.driver import AsyncRequestEngineBase
from sqlrequest.exceptions import (
    ConditionBuilderError,
    ConditionFormatError,
    ConnectionNotOpenError,
    MissingEngineError,
    RequestCancelError,
    RequestPreconditionError,
    RequestTimeoutError,
    SQLRequestError,
)
from sqlrequest.observability import ErrorChannel, ErrorEvent, error_channel
from sqlrequest.requests import (
    ColumnQuery,
    CustomCommandNotRetRequest,
    CustomCommandRequest,
    DeleteRequest,
    InsertRequest,
    ProcedureResult,
    ReplaceRequest,
    Request,
    RequestOutcome,
    SelectColumnRequest,
    SelectColumnsOneTableRequest,
    SelectColumnsRequest,
    SelectRequest,
    StoredProcedureRequest,
    UnionInsertSelectFuncRequest,
    UpdateRequest,
)
from sqlrequest.typing import MAX_ROW_COUNT, CommandType, IsolationLevel, ParameterDirection

__all__ = (
    "MAX_ROW_COUNT",
    "AsyncEngineConfig",
    "AsyncRequestEngineBase",
    "CancellationSource",
    "CancellationToken",
    "ColumnQuery",
    "Command",
    "CommandParameter",
    "CommandType",
    "ComparisonMode",
    "ConditionBuilder",
    "ConditionBuilderError",
    "ConditionFormatError",
    "ConditionParameter",
    "ConnectionNotOpenError",
    "CustomCommandNotRetRequest",
    "CustomCommandRequest",
    "DeleteRequest",
    "ErrorChannel",
    "ErrorEvent",
    "InsertRequest",
    "IsolationLevel",
    "MissingEngineError",
    "ParameterDirection",
    "ProcedureResult",
    "ReplaceRequest",
    "Request",
    "RequestCancelError",
    "RequestOutcome",
    "RequestPreconditionError",
    "RequestTimeoutError",
    "ResultTable",
    "SQLRequestError",
    "SelectColumnRequest",
    "SelectColumnsOneTableRequest",
    "SelectColumnsRequest",
    "SelectRequest",
    "StoredProcedureRequest",
    "TabularResult",
    "UnionInsertSelectFuncRequest",
    "UpdateRequest",
    "__version__",
    "adapters",
    "core",
    "driver",
    "error_channel",
    "exceptions",
    "observability",
    "requests",
    "typing",
    "utils",
)
