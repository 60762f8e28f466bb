"""Request kinds and the shared request lifecycle."""

from sqlrequest.requests._base import Request, RequestOutcome, normalize_window
from sqlrequest.requests.custom import CustomCommandNotRetRequest, CustomCommandRequest
from sqlrequest.requests.delete import DeleteRequest
from sqlrequest.requests.insert import InsertRequest, ReplaceRequest
from sqlrequest.requests.procedure import RETURN_VALUE_PARAMETER, ProcedureResult, StoredProcedureRequest
from sqlrequest.requests.select import (
    ColumnQuery,
    SelectColumnRequest,
    SelectColumnsOneTableRequest,
    SelectColumnsRequest,
    SelectRequest,
)
from sqlrequest.requests.union import UnionInsertSelectFuncRequest
from sqlrequest.requests.update import UpdateRequest

__all__ = (
    "RETURN_VALUE_PARAMETER",
    "ColumnQuery",
    "CustomCommandNotRetRequest",
    "CustomCommandRequest",
    "DeleteRequest",
    "InsertRequest",
    "ProcedureResult",
    "ReplaceRequest",
    "Request",
    "RequestOutcome",
    "SelectColumnRequest",
    "SelectColumnsOneTableRequest",
    "SelectColumnsRequest",
    "SelectRequest",
    "StoredProcedureRequest",
    "UnionInsertSelectFuncRequest",
    "UpdateRequest",
    "normalize_window",
)
