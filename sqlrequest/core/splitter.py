"""Split a multi-statement batch into individual statements."""

import sqlglot
from sqlglot.errors import TokenError
from sqlglot.tokens import TokenType

from sqlrequest.exceptions import SQLParsingError

__all__ = ("split_statements",)


def split_statements(sql: str, dialect: str = "mysql") -> "list[str]":
    """Split ``sql`` on top-level semicolons.

    Uses the sqlglot tokenizer so semicolons inside string literals, quoted
    identifiers and comments never split a statement. Empty statements are
    dropped and trailing semicolons removed.

    Args:
        sql: Batch text.
        dialect: sqlglot dialect used for tokenizing.

    Raises:
        SQLParsingError: If the batch cannot be tokenized.

    Returns:
        The statements in order.
    """
    try:
        tokens = sqlglot.tokenize(sql, read=dialect)
    except TokenError as e:
        msg = f"Unable to split SQL batch: {e}"
        raise SQLParsingError(msg) from e

    statements: list[str] = []
    begin = 0
    for token in tokens:
        if token.token_type is TokenType.SEMICOLON:
            statement = sql[begin : token.start].strip()
            if statement:
                statements.append(statement)
            begin = token.end + 1
    tail = sql[begin:].strip()
    if tail:
        statements.append(tail)
    return statements
