"""Schema conversion between record shapes and live tables.

``SchemaConverter`` derives DDL from a :class:`~simpledb.shape.RecordShape`:
``CREATE TABLE`` for a fresh table, ``ALTER TABLE ... ADD COLUMN`` for the
fields a live table is missing, and the ``DROP`` / describe statements the
reconciliation policies need.

Manifesto:
    Reconciliation is additive only. A column that exists in the table but
    not in the record is left alone; a column whose type differs from the
    record's field is left alone. Nothing here ever drops or retypes a
    column of a live table.

Examples:
    >>> converter = SchemaConverter(get_dialect("mysql"))
    >>> print(converter.build_create(record_shape(Article), "article"))
    CREATE TABLE article (
        id INT UNSIGNED NOT NULL AUTO_INCREMENT,
        PRIMARY KEY(id),
        title VARCHAR(100) NOT NULL
    )
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from simpledb.errors import SchemaMismatchError
from simpledb.shape import FieldDescriptor, RecordShape

if TYPE_CHECKING:
    from simpledb.dialect import Dialect


@dataclass(frozen=True)
class ColumnDescriptor:
    """One column of a live table, as introspected."""

    name: str
    type: str
    nullable: bool
    primary_key: bool = False
    default: Any = None


class SchemaConverter:
    """Builds DDL for one dialect."""

    def __init__(self, dialect: Dialect):
        self._dialect = dialect

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    # -- Statements --------------------------------------------------------

    def build_create(self, shape: RecordShape, table_name: str | None = None) -> str:
        table = table_name or shape.table_name
        definitions = [self._definition(f) for f in shape]
        body = ",\n".join(_indent(d) for d in definitions)
        return f"CREATE TABLE {table} (\n{body}\n)"

    def build_drop(self, table_name: str) -> str:
        return f"DROP TABLE IF EXISTS {table_name}"

    def build_describe(self, table_name: str) -> str:
        return self._dialect.describe_table(table_name)

    def build_update(
        self,
        shape: RecordShape,
        columns: Sequence[ColumnDescriptor],
        table_name: str | None = None,
    ) -> list[str]:
        """ALTER statements adding every field the table lacks.

        Returns an empty list when nothing is missing. Dialects that accept
        several ``ADD COLUMN`` clauses get a single statement; the others get
        one statement per clause.
        """
        table = table_name or shape.table_name
        clauses = [self._add_column(f) for f in self.missing_fields(shape, columns)]
        if not clauses:
            return []
        if self._dialect.supports_multi_add_column:
            return [f"ALTER TABLE {table}\n" + ",\n".join(clauses)]
        return [f"ALTER TABLE {table} {clause}" for clause in clauses]

    # -- Comparison --------------------------------------------------------

    def missing_fields(
        self, shape: RecordShape, columns: Sequence[ColumnDescriptor]
    ) -> list[FieldDescriptor]:
        """``fields(shape) \\ names(columns)``, in field declaration order."""
        existing = {c.name for c in columns}
        return [f for f in shape if f.name not in existing]

    def validate(
        self,
        shape: RecordShape,
        columns: Sequence[ColumnDescriptor],
        table_name: str | None = None,
    ) -> None:
        """Compare field and column counts.

        This is a count-only check: a table with the right number of
        columns but different names or types passes.

        Raises:
            SchemaMismatchError: If the counts differ.
        """
        if len(shape) != len(columns):
            raise SchemaMismatchError(
                f"Record {shape.record_type.__name__} has {len(shape)} fields "
                f"but table {table_name or shape.table_name} has {len(columns)} columns",
                expected=len(shape),
                actual=len(columns),
            ).with_context(table=table_name or shape.table_name)

    # -- Rendering ---------------------------------------------------------

    def _definition(self, descriptor: FieldDescriptor) -> str:
        if descriptor.is_id:
            return self._dialect.id_column()
        return self._column(descriptor)

    def _column(self, descriptor: FieldDescriptor) -> str:
        column = f"{descriptor.name} {self._dialect.column_type(descriptor)}"
        if descriptor.nullable:
            return column
        return column + " NOT NULL"

    def _add_column(self, descriptor: FieldDescriptor) -> str:
        clause = "ADD COLUMN " + self._column(descriptor)
        if not descriptor.nullable:
            clause += self._dialect.added_column_default(descriptor.field_type)
        return clause


def _indent(definition: str) -> str:
    return "\n".join("    " + line for line in definition.splitlines())


__all__ = [
    "ColumnDescriptor",
    "SchemaConverter",
]
