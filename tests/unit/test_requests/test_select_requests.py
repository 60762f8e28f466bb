"""Unit tests for the read request kinds."""

from typing import Any

import pytest

from sqlrequest.conditions import ComparisonMode, ConditionBuilder
from sqlrequest.core.result import ResultTable, TabularResult
from sqlrequest.exceptions import RequestPreconditionError
from sqlrequest.requests import (
    ColumnQuery,
    SelectColumnRequest,
    SelectColumnsOneTableRequest,
    SelectColumnsRequest,
    SelectRequest,
)
from sqlrequest.typing import MAX_ROW_COUNT


@pytest.mark.asyncio
async def test_select_renders_fields_and_conditions(engine: Any) -> None:
    """Test SELECT rendering with a condition builder."""
    engine.reader_result = ["1", "Ann"]
    conditions = ConditionBuilder.where().is_true("age", 18, ComparisonMode.GREATER_THAN)

    result = await SelectRequest(engine, ["id", "name"], "users", conditions).execute()

    assert result == ["1", "Ann"]
    primitive, command, _ = engine.calls[0]
    assert primitive == "reader"
    assert command.text == "SELECT id, name FROM users WHERE age > @param_condition0"
    assert command.bundle == [("@param_condition0", 18)]


@pytest.mark.asyncio
async def test_select_without_conditions(engine: Any) -> None:
    """Test that an empty builder renders no WHERE clause."""
    result = await SelectRequest(engine, ["id"], "users").execute()

    assert result == []
    assert engine.last_command.text == "SELECT id FROM users"
    assert engine.last_command.bundle == []


@pytest.mark.asyncio
async def test_select_leaves_caller_builder_untouched(engine: Any) -> None:
    """Test that auto-completed brackets are not written back to the caller's builder."""
    conditions = ConditionBuilder.where().open_bracket().is_true("a", 1)

    await SelectRequest(engine, ["id"], "t", conditions).execute()

    assert engine.last_command.text == "SELECT id FROM t WHERE (a = @param_condition0)"
    assert conditions.text == " WHERE (a = @param_condition0"


@pytest.mark.asyncio
async def test_select_column_window_and_pairs(engine: Any) -> None:
    """Test SelectColumn rendering of equality pairs and the row window."""
    engine.adapter_result = TabularResult.from_rows(["name"], [("Ann",), (None,), (b"Bob",)])

    result = await SelectColumnRequest(
        engine, "name", "users", [("city", "Oslo"), ("active", 1)], start=3, count=2
    ).execute()

    assert result == ["Ann", "", "Bob"]
    primitive, command, _ = engine.calls[0]
    assert primitive == "adapter"
    assert command.text == "SELECT name FROM users WHERE city = @param0 AND active = @param1 LIMIT 2,2"
    assert command.bundle == [("@param0", "Oslo"), ("@param1", 1)]


@pytest.mark.asyncio
@pytest.mark.parametrize("start", [0, 1])
async def test_select_column_first_row_window(engine: Any, start: int) -> None:
    """Test that start 0 and 1 both read from the first row and count 0 reads everything."""
    await SelectColumnRequest(engine, "name", "users", start=start).execute()

    assert engine.last_command.text == f"SELECT name FROM users LIMIT 0,{MAX_ROW_COUNT}"


@pytest.mark.asyncio
async def test_select_column_rejects_negative_window(engine: Any) -> None:
    """Test that a negative start fails before dispatch."""
    with pytest.raises(RequestPreconditionError):
        await SelectColumnRequest(engine, "name", "users", start=-1).execute()

    assert engine.calls == []


@pytest.mark.asyncio
async def test_select_columns_batch(engine: Any) -> None:
    """Test that every column query becomes one statement of a batch."""
    engine.adapter_result = TabularResult(
        [ResultTable(["a"], [(1,), (2,)]), ResultTable(["b"], [("x",)])]
    )

    result = await SelectColumnsRequest(engine, [("a", "t1"), ColumnQuery("b", "t2", 2, 5)]).execute()

    assert result == [["1", "2"], ["x"]]
    command = engine.last_command
    assert command.is_batch
    assert command.text == f"SELECT a FROM t1 LIMIT 0,{MAX_ROW_COUNT}; SELECT b FROM t2 LIMIT 1,5; "
    assert command.bundle == []


@pytest.mark.asyncio
async def test_select_columns_requires_columns(engine: Any) -> None:
    """Test that an empty column list is rejected."""
    with pytest.raises(RequestPreconditionError, match="Count of columns is 0"):
        await SelectColumnsRequest(engine, []).execute()


@pytest.mark.asyncio
async def test_select_columns_one_table_is_column_major(engine: Any) -> None:
    """Test that the result holds one list per requested column."""
    engine.adapter_result = TabularResult.from_rows(["id", "name"], [(1, "Ann"), (2, None)])

    result = await SelectColumnsOneTableRequest(engine, ["id", "name"], "users", 1, 10).execute()

    assert result == [["1", "2"], ["Ann", ""]]
    assert engine.last_command.text == "SELECT id, name FROM users LIMIT 0,10"


@pytest.mark.asyncio
async def test_select_columns_one_table_empty_result(engine: Any) -> None:
    """Test that an empty result still yields one empty list per column."""
    result = await SelectColumnsOneTableRequest(engine, ["id", "name"], "users").execute()

    assert result == [[], []]


@pytest.mark.asyncio
async def test_select_columns_one_table_requires_columns(engine: Any) -> None:
    """Test that an empty column name list is rejected."""
    with pytest.raises(RequestPreconditionError, match="Count of columns names is 0"):
        await SelectColumnsOneTableRequest(engine, [], "users").execute()


def test_select_columns_accepts_plain_tuples(engine: Any) -> None:
    """Test coercion of plain tuples into column queries."""
    request = SelectColumnsRequest(engine, [("a", "t1", 1, 2)])

    assert request.columns == [ColumnQuery("a", "t1", 1, 2)]
    assert request.copy().columns == request.columns


@pytest.mark.asyncio
async def test_select_twice_renders_same_command(engine: Any) -> None:
    """Test that re-executing a request builds an identical command each time."""
    engine.reader_result = ["1"]
    request = SelectRequest(engine, ["id"], "t", ConditionBuilder.where().is_true("id", 1))

    first = await request.execute()
    second = await request.execute()

    assert first == second
    (_, one, _), (_, two, _) = engine.calls
    assert one is not two
    assert (one.text, one.bundle) == (two.text, two.bundle)
