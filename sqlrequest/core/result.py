"""Tabular results returned by the engine's adapter primitive."""

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any

__all__ = ("ResultTable", "TabularResult", "to_text")


def to_text(value: Any) -> str:
    """Render a driver value the way MySQL's text protocol would show it.

    ``None`` becomes an empty string and byte strings are decoded as UTF-8.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    if isinstance(value, bool):
        return str(int(value))
    if isinstance(value, datetime):
        return value.isoformat(sep=" ")
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, timedelta):
        total = int(value.total_seconds())
        sign = "-" if total < 0 else ""
        hours, remainder = divmod(abs(total), 3600)
        minutes, seconds = divmod(remainder, 60)
        return f"{sign}{hours:02d}:{minutes:02d}:{seconds:02d}"
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


@dataclass
class ResultTable:
    """Rows of one result set with their column names."""

    columns: "list[str]" = field(default_factory=list)
    rows: "list[tuple[Any, ...]]" = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> "Iterator[tuple[Any, ...]]":
        return iter(self.rows)

    def column_index(self, name: str) -> int:
        """Resolve a column by name.

        Tries an exact match, then a case-insensitive one, then the bare name
        with any ``table.`` qualifier and backticks removed.

        Raises:
            KeyError: If no column matches.
        """
        if name in self.columns:
            return self.columns.index(name)
        folded = [column.casefold() for column in self.columns]
        for candidate in (name, name.rsplit(".", 1)[-1].strip("`")):
            if candidate.casefold() in folded:
                return folded.index(candidate.casefold())
        msg = f"Column {name!r} not found in result columns {self.columns!r}"
        raise KeyError(msg)

    def column(self, name: str) -> "list[Any]":
        index = self.column_index(name)
        return [row[index] for row in self.rows]

    def column_text(self, name: str) -> "list[str]":
        return [to_text(value) for value in self.column(name)]

    def as_dicts(self) -> "list[dict[str, Any]]":
        return [dict(zip(self.columns, row)) for row in self.rows]


@dataclass
class TabularResult:
    """Full result of a command: one table per result-producing statement."""

    tables: "list[ResultTable]" = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.tables)

    def __getitem__(self, index: int) -> ResultTable:
        return self.tables[index]

    def __iter__(self) -> "Iterator[ResultTable]":
        return iter(self.tables)

    @property
    def first(self) -> ResultTable:
        """First table, or an empty one when the command produced no result set."""
        return self.tables[0] if self.tables else ResultTable()

    @classmethod
    def from_rows(cls, columns: "Sequence[str]", rows: "Sequence[Sequence[Any]]") -> "TabularResult":
        return cls([ResultTable(list(columns), [tuple(row) for row in rows])])
