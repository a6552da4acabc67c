"""Statement classification by leading keyword."""

from __future__ import annotations

import re
from enum import Enum

_LEADING_WORD = re.compile(r"^\s*(\w+)")


class StatementType(str, Enum):
    """Kind of statement, derived from its first word."""

    SELECT = "SELECT"
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    SHOW = "SHOW"
    DESC = "DESC"
    PRAGMA = "PRAGMA"
    OTHER = "OTHER"

    @property
    def returns_rows(self) -> bool:
        return self in _ROW_TYPES

    @property
    def returns_count(self) -> bool:
        return self in (StatementType.UPDATE, StatementType.DELETE)


_ROW_TYPES = frozenset(
    {StatementType.SELECT, StatementType.SHOW, StatementType.DESC, StatementType.PRAGMA}
)

_ALIASES = {
    "DESCRIBE": StatementType.DESC,
    "EXPLAIN": StatementType.DESC,
    "WITH": StatementType.SELECT,
    "REPLACE": StatementType.INSERT,
}


def classify(sql: str) -> StatementType:
    """Classify ``sql`` by its first word, case-insensitively.

    Blank text, or a first word that is not a known keyword, is ``OTHER``.
    """
    match = _LEADING_WORD.match(sql)
    if match is None:
        return StatementType.OTHER
    word = match.group(1).upper()
    if word in _ALIASES:
        return _ALIASES[word]
    try:
        return StatementType(word)
    except ValueError:
        return StatementType.OTHER


__all__ = ["StatementType", "classify"]
