"""Parameter value normalization and ``@name`` placeholder rewriting.

Requests bind values to ``@name`` placeholders. Before binding, two passes
apply to every free-form value:

* NULL pass: ``None`` and the marker ``"NULL"`` become SQL NULL; the quoted
  marker ``"'NULL'"`` is bound as the literal string ``NULL``.
* Function pass: a niladic MySQL function marker such as
  ``CURRENT_TIMESTAMP`` is spliced into the command text instead of being
  bound; its quoted form binds the bare string.

At execution time :func:`to_pyformat` rewrites the bound ``@name``
placeholders into the ``%(name)s`` style expected by the driver.
"""

import re
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Final, Optional

if TYPE_CHECKING:
    from sqlrequest.core.command import CommandParameter

__all__ = (
    "NULL_MARKER",
    "QUOTED_NULL_MARKER",
    "SQL_FUNCTION_MARKERS",
    "find_placeholders",
    "function_fragment",
    "normalize_parameter_name",
    "normalize_value",
    "replace_placeholders",
    "to_pyformat",
)

NULL_MARKER: Final = "NULL"
QUOTED_NULL_MARKER: Final = "'NULL'"

SQL_FUNCTION_MARKERS: Final = frozenset(
    {
        "CURRENT_DATE",
        "CURRENT_TIME",
        "CURRENT_TIMESTAMP",
        "LOCALTIME",
        "LOCALTIMESTAMP",
        "UTC_DATE",
        "UTC_TIME",
        "UTC_TIMESTAMP",
    }
)

_PLACEHOLDER_REGEX: Final = re.compile(
    r"""
    (?P<dquote>"(?:[^"\\]|\\.)*") |
    (?P<squote>'(?:[^'\\]|\\.)*') |
    (?P<backtick>`(?:[^`]|``)*`) |
    (?P<line_comment>(?:--|\#)[^\r\n]*) |
    (?P<block_comment>/\*(?:[^*]|\*(?!/))*\*/) |
    (?P<system_variable>@@\w+) |
    (?P<named_at>@\w+) |
    (?P<percent>%)
    """,
    re.VERBOSE | re.MULTILINE | re.DOTALL,
)


def normalize_parameter_name(name: str) -> str:
    """Return ``name`` with exactly one leading ``@``."""
    return f"@{name.lstrip('@')}"


def normalize_value(value: Any) -> Any:
    """Apply the NULL and quoted-function passes to a single bound value.

    Args:
        value: Caller-supplied value.

    Returns:
        ``None`` for the NULL marker, the unquoted text for quoted markers,
        the value unchanged otherwise.
    """
    if value is None or value == NULL_MARKER:
        return None
    if value == QUOTED_NULL_MARKER:
        return NULL_MARKER
    if isinstance(value, str) and len(value) > 2 and value[0] == value[-1] == "'":  # noqa: PLR2004
        inner = value[1:-1]
        if inner in SQL_FUNCTION_MARKERS:
            return inner
    return value


def function_fragment(value: Any) -> Optional[str]:
    """Return the raw SQL fragment for a function marker, ``None`` otherwise."""
    if isinstance(value, str) and value in SQL_FUNCTION_MARKERS:
        return value
    return None


def replace_placeholders(sql: str, replacements: "Mapping[str, str]", *, escape_percent: bool = False) -> str:
    """Replace ``@name`` placeholders that appear in ``replacements``.

    String literals, quoted identifiers, comments and ``@@system`` variables
    are left untouched, as are ``@name`` tokens without a replacement (MySQL
    user variables).

    Args:
        sql: Statement text.
        replacements: Mapping of ``@name`` to the replacement text.
        escape_percent: Double every ``%`` outside replacements, as required
            when the text is later formatted with pyformat arguments.

    Returns:
        The rewritten statement text.
    """

    def _substitute(match: "re.Match[str]") -> str:
        kind = match.lastgroup
        text = match.group(0)
        if kind == "named_at":
            return replacements.get(text, text)
        if escape_percent:
            return text.replace("%", "%%")
        return text

    return _PLACEHOLDER_REGEX.sub(_substitute, sql)


def find_placeholders(sql: str) -> "list[str]":
    """List the ``@name`` placeholders of ``sql`` in order of appearance."""
    return [match.group(0) for match in _PLACEHOLDER_REGEX.finditer(sql) if match.lastgroup == "named_at"]


def to_pyformat(sql: str, parameters: "Sequence[CommandParameter]") -> "tuple[str, dict[str, Any]]":
    """Rewrite bound ``@name`` placeholders to ``%(name)s``.

    Only the given parameters are rewritten; every other ``@name`` stays a
    MySQL user variable. Literal ``%`` signs are doubled.

    Args:
        sql: Statement text with ``@name`` placeholders.
        parameters: Input parameters to bind.

    Returns:
        The driver-ready text and the matching argument mapping.
    """
    replacements: dict[str, str] = {}
    arguments: dict[str, Any] = {}
    for parameter in parameters:
        key = parameter.name.lstrip("@")
        replacements[parameter.name] = f"%({key})s"
        arguments[key] = parameter.value
    return replace_placeholders(sql, replacements, escape_percent=True), arguments
