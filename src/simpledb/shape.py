"""Record shapes: the field manifest of a dataclass record type.

A :class:`RecordShape` is built once per record class and reused for both
typed row mapping and DDL generation. It lists every persistent field with
its semantic :class:`FieldType`, in declaration order.

Examples:
    >>> @dataclass
    ... class Article:
    ...     id: int = 0
    ...     title: str = field(default="", metadata={"length": 100})
    ...     is_blind: bool = False
    >>> shape = record_shape(Article)
    >>> shape.names
    ('id', 'title', 'is_blind')
    >>> shape.table_name
    'article'
"""

from __future__ import annotations

import dataclasses
import types
import typing
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from functools import lru_cache
from typing import Any

from simpledb.errors import RecordShapeError

ID_FIELD = "id"


class FieldType(str, Enum):
    """Semantic type of a record field, independent of any backend."""

    STRING = "string"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    FLOAT = "float"
    DATETIME = "datetime"
    DATE = "date"


# bool before int: bool is an int subclass. datetime before date, same reason.
_PYTHON_TYPES: tuple[tuple[type, FieldType], ...] = (
    (bool, FieldType.BOOLEAN),
    (int, FieldType.INTEGER),
    (float, FieldType.FLOAT),
    (str, FieldType.STRING),
    (datetime, FieldType.DATETIME),
    (date, FieldType.DATE),
)


@dataclass(frozen=True)
class FieldDescriptor:
    """One persistent field of a record type."""

    name: str
    field_type: FieldType
    nullable: bool = False
    length: int | None = None

    @property
    def is_id(self) -> bool:
        return self.name == ID_FIELD


@dataclass(frozen=True)
class RecordShape:
    """Ordered field manifest of a record type."""

    record_type: type
    table_name: str
    fields: tuple[FieldDescriptor, ...]

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    @property
    def id_field(self) -> FieldDescriptor | None:
        for f in self.fields:
            if f.is_id:
                return f
        return None

    def get(self, name: str) -> FieldDescriptor | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def __len__(self) -> int:
        return len(self.fields)

    def __iter__(self):
        return iter(self.fields)


def _unwrap_optional(annotation: Any) -> tuple[Any, bool]:
    """Return ``(inner, nullable)`` for ``X | None`` / ``Optional[X]``."""
    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        args = [a for a in typing.get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            return args[0], True
    return annotation, False


def field_type_of(annotation: Any) -> FieldType:
    """Map a Python annotation to its :class:`FieldType`.

    Raises:
        RecordShapeError: If the annotation has no column mapping.
    """
    if isinstance(annotation, type) and typing.get_origin(annotation) is None:
        for python_type, field_type in _PYTHON_TYPES:
            if issubclass(annotation, python_type):
                return field_type
    raise RecordShapeError(f"No column type for annotation {annotation!r}")


def _is_persistent(f: dataclasses.Field) -> bool:
    # dataclasses.fields() already drops ClassVar and InitVar pseudo-fields
    return f.metadata.get("persistent", True) is not False


@lru_cache(maxsize=None)
def record_shape(record_type: type) -> RecordShape:
    """Build (once) and return the shape of a dataclass record type.

    Raises:
        RecordShapeError: If ``record_type`` is not a dataclass, or one of
            its persistent fields has an unsupported annotation.
    """
    if not (isinstance(record_type, type) and dataclasses.is_dataclass(record_type)):
        raise RecordShapeError(f"{record_type!r} is not a dataclass record type")

    try:
        hints = typing.get_type_hints(record_type)
    except NameError as e:
        raise RecordShapeError(
            f"Cannot resolve annotations of {record_type.__name__}: {e}", cause=e
        ) from e

    descriptors: list[FieldDescriptor] = []
    for f in dataclasses.fields(record_type):
        if not _is_persistent(f):
            continue
        annotation, nullable = _unwrap_optional(hints[f.name])
        try:
            field_type = field_type_of(annotation)
        except RecordShapeError as e:
            raise e.with_context(table=record_type.__name__, field=f.name)
        descriptors.append(
            FieldDescriptor(
                name=f.name,
                field_type=field_type,
                nullable=nullable,
                length=f.metadata.get("length"),
            )
        )

    table_name = getattr(record_type, "__tablename__", None) or record_type.__name__.lower()
    return RecordShape(record_type=record_type, table_name=table_name, fields=tuple(descriptors))


__all__ = [
    "ID_FIELD",
    "FieldType",
    "FieldDescriptor",
    "RecordShape",
    "field_type_of",
    "record_shape",
]
