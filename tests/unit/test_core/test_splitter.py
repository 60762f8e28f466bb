"""Tests for batch statement splitting."""

import pytest

from sqlrequest.core.splitter import split_statements
from sqlrequest.exceptions import SQLParsingError


def test_split_simple_batch() -> None:
    """Test splitting on top-level semicolons."""
    sql = "INSERT INTO t VALUES (@param0); SELECT f(@param1);"

    assert split_statements(sql) == ["INSERT INTO t VALUES (@param0)", "SELECT f(@param1)"]


def test_split_ignores_semicolons_in_literals() -> None:
    """Test that quoted semicolons never split a statement."""
    sql = "INSERT INTO t VALUES ('a;b'); SELECT `x;y` FROM t"

    assert split_statements(sql) == ["INSERT INTO t VALUES ('a;b')", "SELECT `x;y` FROM t"]


def test_split_drops_empty_statements() -> None:
    """Test that empty statements and trailing separators are dropped."""
    assert split_statements("SELECT 1;; ;SELECT 2; ") == ["SELECT 1", "SELECT 2"]
    assert split_statements("") == []


def test_split_unterminated_string() -> None:
    """Test that a batch that cannot be tokenized raises."""
    with pytest.raises(SQLParsingError, match="Unable to split SQL batch"):
        split_statements("SELECT 'abc")
