"""Row mapping: cursor rows into ordered dicts or typed records.

Generic rows keep the driver's native values untouched. Typed mapping
matches columns to record fields by exact name and coerces values into the
field's semantic type, so a ``BIT(1)`` column (``b'\\x01'``), a SQLite
``0``/``1`` or an ISO datetime string all land as ``bool`` / ``datetime``.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Sequence
from datetime import date, datetime
from decimal import Decimal
from typing import Any, TypeVar

from simpledb.errors import ResultShapeError
from simpledb.shape import FieldType, record_shape

T = TypeVar("T")

ResultRow = dict[str, Any]

_ZERO_VALUES: dict[FieldType, Any] = {
    FieldType.STRING: "",
    FieldType.INTEGER: 0,
    FieldType.BOOLEAN: False,
    FieldType.FLOAT: 0.0,
    FieldType.DATETIME: None,
    FieldType.DATE: None,
}


def column_names(description: Sequence[Sequence[Any]] | None) -> list[str]:
    """Column names from a DB-API ``cursor.description``."""
    if not description:
        return []
    return [col[0] for col in description]


def to_row(columns: Sequence[str], values: Sequence[Any]) -> ResultRow:
    """Pair column names with one row's values.

    Column order follows ``columns``. Duplicate names are not disambiguated:
    the last one wins.
    """
    row: ResultRow = {}
    for name, value in zip(columns, values, strict=False):
        row[name] = value
    return row


def coerce_value(value: Any, field_type: FieldType) -> Any:
    """Convert a native driver value into ``field_type``.

    ``None`` passes through unchanged.

    Raises:
        ResultShapeError: If the value cannot represent ``field_type``.
    """
    if value is None:
        return None
    try:
        match field_type:
            case FieldType.BOOLEAN:
                return _to_bool(value)
            case FieldType.INTEGER:
                if isinstance(value, (bytes, bytearray)):
                    return int.from_bytes(value, "big")
                return int(value)
            case FieldType.FLOAT:
                return float(value)
            case FieldType.STRING:
                if isinstance(value, (bytes, bytearray)):
                    return value.decode()
                return value if isinstance(value, str) else str(value)
            case FieldType.DATETIME:
                return _to_datetime(value)
            case FieldType.DATE:
                if isinstance(value, datetime):
                    return value.date()
                if isinstance(value, date):
                    return value
                return date.fromisoformat(str(value))
    except (TypeError, ValueError, UnicodeDecodeError) as e:
        raise ResultShapeError(
            f"Cannot convert {value!r} to {field_type.value}", cause=e
        ) from e
    raise ResultShapeError(f"Unknown field type {field_type!r}")


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (bytes, bytearray)):
        return any(value)
    if isinstance(value, (int, Decimal)):
        return value != 0
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("1", "true", "t", "y", "yes"):
            return True
        if lowered in ("0", "false", "f", "n", "no", ""):
            return False
    raise ValueError(f"not a boolean: {value!r}")


def _to_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, (bytes, bytearray)):
        value = value.decode()
    return datetime.fromisoformat(str(value))


def to_typed(row: ResultRow, record_type: type[T]) -> T:
    """Build a ``record_type`` instance from a result row.

    Each field takes the same-named column (exact, case-sensitive match).
    A field with no column keeps its default, or the zero value of its type
    when it has none. Columns with no field are ignored.
    """
    shape = record_shape(record_type)
    kwargs: dict[str, Any] = {}
    late: dict[str, Any] = {}

    for f in dataclasses.fields(record_type):
        descriptor = shape.get(f.name)
        if descriptor is not None and f.name in row:
            value = coerce_value(row[f.name], descriptor.field_type)
        elif _has_default(f):
            continue
        elif descriptor is not None:
            value = _ZERO_VALUES[descriptor.field_type]
        else:
            value = None

        if f.init:
            kwargs[f.name] = value
        else:
            late[f.name] = value

    instance = record_type(**kwargs)
    for name, value in late.items():
        object.__setattr__(instance, name, value)
    return instance


def _has_default(f: dataclasses.Field) -> bool:
    return (
        f.default is not dataclasses.MISSING
        or f.default_factory is not dataclasses.MISSING
    )


__all__ = [
    "ResultRow",
    "column_names",
    "to_row",
    "coerce_value",
    "to_typed",
]
