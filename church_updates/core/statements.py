"""Pure SQL-text helpers: placeholder rewriting and statement classification.

Nothing here parses SQL. Every rule is a textual check, so a `?` inside a
quoted literal is rewritten like any other placeholder, and a `LIMIT 1`
inside a subquery marks the whole statement as single-row.
"""

from __future__ import annotations

import itertools
import re

from .types import StatementKind

_QMARK = re.compile(r"\?")
_LEADING_KEYWORD = re.compile(r"^\s*([A-Za-z]+)")
# `LIMIT 1, n` is SQLite's offset form and returns up to n rows.
_LIMIT_ONE = re.compile(r"\bLIMIT\s+1\b(?!\s*,)", re.IGNORECASE)
_RETURNING = re.compile(r"\bRETURNING\b", re.IGNORECASE)
_TRAILING_SEMICOLON = re.compile(r";\s*$")

READ_KEYWORDS = frozenset({"SELECT", "WITH"})


def translate_placeholders(sql: str) -> str:
    """Rewrite each `?` to `$1`, `$2`, ... in left-to-right order."""

    counter = itertools.count(1)
    return _QMARK.sub(lambda _match: f"${next(counter)}", sql)


def prepare_statement(sql: str, *, numbered: bool) -> str:
    """Trim a template and translate its placeholders when `numbered`."""

    trimmed = sql.strip()
    if numbered and "?" in trimmed:
        return translate_placeholders(trimmed)
    return trimmed


def leading_keyword(sql: str) -> str:
    """Return the first SQL keyword, upper-cased, or an empty string."""

    match = _LEADING_KEYWORD.match(sql)
    return match.group(1).upper() if match else ""


def is_single_row_select(sql: str) -> bool:
    return _LIMIT_ONE.search(sql) is not None


def classify_statement(sql: str) -> StatementKind:
    """Pick the embedded-engine native call for a statement.

    Reads (`SELECT`, `WITH`) containing `LIMIT 1` use the single-row call,
    other reads the multi-row call, and everything else the mutation call.
    A `WHERE` clause alone never makes a read single-row.
    """

    if leading_keyword(sql) not in READ_KEYWORDS:
        return StatementKind.MUTATION
    if is_single_row_select(sql):
        return StatementKind.SELECT_ONE
    return StatementKind.SELECT_MANY


def has_returning(sql: str) -> bool:
    return _RETURNING.search(sql) is not None


def ensure_returning_id(sql: str) -> str:
    """Append ` RETURNING id` unless the statement already returns something."""

    trimmed = sql.strip()
    if has_returning(trimmed):
        return trimmed
    return _TRAILING_SEMICOLON.sub("", trimmed) + " RETURNING id"
