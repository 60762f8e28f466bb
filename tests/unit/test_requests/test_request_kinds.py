"""Properties shared by every request kind."""

from typing import Any

import pytest

from sqlrequest.conditions import ComparisonMode, ConditionBuilder
from sqlrequest.exceptions import MissingEngineError
from sqlrequest.requests import (
    CustomCommandNotRetRequest,
    CustomCommandRequest,
    DeleteRequest,
    InsertRequest,
    ReplaceRequest,
    SelectColumnRequest,
    SelectColumnsOneTableRequest,
    SelectColumnsRequest,
    SelectRequest,
    StoredProcedureRequest,
    UnionInsertSelectFuncRequest,
    UpdateRequest,
)


def _conditions() -> ConditionBuilder:
    return ConditionBuilder.where().is_true("age", 18, ComparisonMode.GREATER_THAN).or_().is_null("city")


REQUEST_KINDS = [
    pytest.param(SelectRequest, (["id", "name"], "users", _conditions()), id="select"),
    pytest.param(SelectColumnRequest, ("name", "users", [("city", "Oslo")], 2, 5), id="select-column"),
    pytest.param(SelectColumnsRequest, ([("a", "t1"), ("b", "t2", 3, 4)],), id="select-columns"),
    pytest.param(SelectColumnsOneTableRequest, (["id", "name"], "users", 1, 10), id="select-columns-one-table"),
    pytest.param(InsertRequest, ([None, "NULL", "CURRENT_TIMESTAMP", "x"], "t"), id="insert"),
    pytest.param(ReplaceRequest, ([1, "y"], "t"), id="replace"),
    pytest.param(UpdateRequest, ("x", "9", "t", _conditions()), id="update"),
    pytest.param(DeleteRequest, ("t", _conditions()), id="delete"),
    pytest.param(StoredProcedureRequest, ("sp_total", [("@city", "Oslo")], ["@total"]), id="procedure"),
    pytest.param(CustomCommandRequest, ("SELECT * FROM t WHERE id = @id", [("@id", 3)]), id="custom"),
    pytest.param(CustomCommandNotRetRequest, ("DELETE FROM t WHERE id = @id", [("@id", 3)]), id="custom-not-ret"),
    pytest.param(UnionInsertSelectFuncRequest, ([None, "a"], "t", "LAST_INSERT_ID", [], None), id="union"),
]


@pytest.mark.parametrize(("kind", "arguments"), REQUEST_KINDS)
def test_copy_renders_identical_command(engine: Any, kind: type, arguments: tuple) -> None:
    """Test that a copy renders the same SQL text and parameter bundle."""
    request = kind(engine, *arguments)
    duplicate = request.copy()

    original_command = request.build_command()
    copied_command = duplicate.build_command()

    assert type(duplicate) is kind
    assert copied_command.text == original_command.text
    assert copied_command.bundle == original_command.bundle


@pytest.mark.parametrize(("kind", "arguments"), REQUEST_KINDS)
def test_missing_engine_fails_and_reports_once(process_events: list, kind: type, arguments: tuple) -> None:
    """Test that every kind refuses a missing engine with exactly one report."""
    with pytest.raises(MissingEngineError):
        kind(None, *arguments)

    assert len(process_events) == 1
    assert isinstance(process_events[0].error, MissingEngineError)
    assert process_events[0].sender_name == kind.__name__
