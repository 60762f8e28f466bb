"""Tests for parameter normalization and placeholder rewriting."""

import pytest

from sqlrequest.core.command import CommandParameter
from sqlrequest.core.parameters import (
    find_placeholders,
    function_fragment,
    normalize_parameter_name,
    normalize_value,
    replace_placeholders,
    to_pyformat,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, None),
        ("NULL", None),
        ("'NULL'", "NULL"),
        ("'CURRENT_TIMESTAMP'", "CURRENT_TIMESTAMP"),
        ("'quoted'", "'quoted'"),
        ("CURRENT_TIMESTAMP", "CURRENT_TIMESTAMP"),
        ("null", "null"),
        (0, 0),
        ("", ""),
    ],
)
def test_normalize_value(value: object, expected: object) -> None:
    """Test the NULL and quoted-function passes."""
    assert normalize_value(value) == expected


def test_function_fragment() -> None:
    """Test detection of niladic function markers."""
    assert function_fragment("UTC_DATE") == "UTC_DATE"
    assert function_fragment("'UTC_DATE'") is None
    assert function_fragment("utc_date") is None
    assert function_fragment(1) is None


@pytest.mark.parametrize(("name", "expected"), [("a", "@a"), ("@a", "@a"), ("@@a", "@a")])
def test_normalize_parameter_name(name: str, expected: str) -> None:
    """Test that parameter names get exactly one leading @."""
    assert normalize_parameter_name(name) == expected


def test_find_placeholders_skips_literals_and_comments() -> None:
    """Test placeholder discovery outside quoted text and comments."""
    sql = """
        SELECT @a, '@b', "@c", `@d`, @@version -- @e
        FROM t /* @f */ WHERE x = @g # @h
    """

    assert find_placeholders(sql) == ["@a", "@g"]


def test_replace_placeholders_only_known_names() -> None:
    """Test that unknown names stay user variables."""
    sql = "SET @total = @a + @b"

    assert replace_placeholders(sql, {"@a": "1"}) == "SET @total = 1 + @b"


def test_to_pyformat() -> None:
    """Test conversion to the driver's pyformat style."""
    sql = "SELECT * FROM t WHERE a = @a AND b LIKE '50%' AND c = @@version AND d = @user_var AND e = a % 2"
    parameters = [CommandParameter("@a", 1)]

    converted, arguments = to_pyformat(sql, parameters)

    assert converted == (
        "SELECT * FROM t WHERE a = %(a)s AND b LIKE '50%%' AND c = @@version AND d = @user_var AND e = a %% 2"
    )
    assert arguments == {"a": 1}


def test_to_pyformat_repeated_placeholder() -> None:
    """Test that a placeholder used twice binds one argument."""
    converted, arguments = to_pyformat("SELECT @x, @x", [CommandParameter("@x", None)])

    assert converted == "SELECT %(x)s, %(x)s"
    assert arguments == {"x": None}
