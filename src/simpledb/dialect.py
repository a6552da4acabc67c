"""SQL dialect abstraction for backend-agnostic statement building.

Fragments are always written with ``?`` placeholders. A ``Dialect`` turns the
finalized text into the driver's native paramstyle, adapts parameter values
the driver cannot store natively, and owns every piece of backend-specific
DDL: the column-type mapping table, the ``id`` primary-key definition and the
introspection queries used by schema reconciliation.

Architecture::

    Sql fragments ("... WHERE id IN (?)")
              │
              ▼
    ┌──────────────────────┐     ┌──────────────────────┐
    │ SQLiteDialect        │     │ MySQLDialect         │
    │ ?  (qmark)           │     │ %s (format, % → %%)  │
    │ PRAGMA table_info    │     │ DESC <table>         │
    │ INTEGER PK AUTOINC   │     │ INT UNSIGNED AUTO_INC│
    └──────────────────────┘     └──────────────────────┘

Examples:
    >>> d = get_dialect("mysql")
    >>> d.render("SELECT * FROM t WHERE title LIKE '%x' AND id = ?", [1])
    "SELECT * FROM t WHERE title LIKE '%%x' AND id = %s"
    >>> get_dialect("sqlite").describe_table("article")
    'PRAGMA table_info(article)'
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime
from typing import Any, Protocol, runtime_checkable

from simpledb.errors import ConfigError
from simpledb.schema import ColumnDescriptor
from simpledb.shape import FieldDescriptor, FieldType


@runtime_checkable
class Dialect(Protocol):
    """SQL dialect contract."""

    @property
    def name(self) -> str:
        """Human-readable dialect name (e.g. ``'sqlite'``)."""
        ...

    @property
    def supports_multi_add_column(self) -> bool:
        """Whether one ``ALTER TABLE`` may carry several ``ADD COLUMN`` clauses."""
        ...

    # -- Parameters --------------------------------------------------------

    def render(self, sql: str, params: Sequence[Any]) -> str:
        """Rewrite ``?`` markers into the driver's native paramstyle."""
        ...

    def adapt(self, value: Any) -> Any:
        """Convert a bound value into something the driver stores natively."""
        ...

    # -- Expressions -------------------------------------------------------

    def now(self) -> str:
        """SQL expression for the current timestamp."""
        ...

    # -- DDL ---------------------------------------------------------------

    def id_column(self) -> str:
        """Column definition for the auto-incrementing ``id`` primary key."""
        ...

    def column_type(self, descriptor: FieldDescriptor) -> str:
        """Column type for a record field."""
        ...

    def added_column_default(self, field_type: FieldType) -> str:
        """Suffix required when a ``NOT NULL`` column is added to a live table."""
        ...

    # -- Introspection -----------------------------------------------------

    def describe_table(self, table: str) -> str:
        """Statement returning one row per column of ``table``."""
        ...

    def table_exists_query(self) -> str:
        """Query taking one ``?`` (table name), returning rows if it exists."""
        ...

    def list_tables_query(self) -> str:
        """Query returning one row per user table."""
        ...

    def column_from_row(self, row: dict[str, Any]) -> ColumnDescriptor:
        """Normalize one ``describe_table`` row."""
        ...


# =========================================================================
# Concrete Dialect Implementations
# =========================================================================


class SQLiteDialect:
    """SQLite dialect: ``?`` placeholders, ``datetime('now')``."""

    _TYPES = {
        FieldType.STRING: "TEXT",
        FieldType.INTEGER: "INTEGER",
        FieldType.BOOLEAN: "BOOLEAN",
        FieldType.FLOAT: "REAL",
        FieldType.DATETIME: "DATETIME",
        FieldType.DATE: "DATE",
    }

    _DEFAULTS = {
        FieldType.STRING: "''",
        FieldType.INTEGER: "0",
        FieldType.BOOLEAN: "0",
        FieldType.FLOAT: "0",
        FieldType.DATETIME: "'1970-01-01 00:00:00'",
        FieldType.DATE: "'1970-01-01'",
    }

    @property
    def name(self) -> str:
        return "sqlite"

    @property
    def supports_multi_add_column(self) -> bool:
        return False

    def render(self, sql: str, params: Sequence[Any]) -> str:  # noqa: ARG002
        return sql

    def adapt(self, value: Any) -> Any:
        # sqlite3's default datetime adapters are deprecated since 3.12
        if isinstance(value, datetime):
            return value.isoformat(sep=" ")
        if isinstance(value, date):
            return value.isoformat()
        return value

    def now(self) -> str:
        return "datetime('now', 'localtime')"

    def id_column(self) -> str:
        return "id INTEGER PRIMARY KEY AUTOINCREMENT"

    def column_type(self, descriptor: FieldDescriptor) -> str:
        if descriptor.field_type is FieldType.STRING and descriptor.length:
            return f"VARCHAR({descriptor.length})"
        return self._TYPES[descriptor.field_type]

    def added_column_default(self, field_type: FieldType) -> str:
        return f" DEFAULT {self._DEFAULTS[field_type]}"

    def describe_table(self, table: str) -> str:
        return f"PRAGMA table_info({table})"

    def table_exists_query(self) -> str:
        return "SELECT name FROM sqlite_master WHERE type = 'table' AND name = ?"

    def list_tables_query(self) -> str:
        return (
            "SELECT name FROM sqlite_master "
            "WHERE type = 'table' AND name NOT LIKE 'sqlite_%' ORDER BY name"
        )

    def column_from_row(self, row: dict[str, Any]) -> ColumnDescriptor:
        return ColumnDescriptor(
            name=row["name"],
            type=row["type"],
            nullable=not row["notnull"],
            primary_key=bool(row["pk"]),
            default=row["dflt_value"],
        )


class MySQLDialect:
    """MySQL dialect: ``%s`` placeholders, ``NOW()``.

    Compatible with ``mysql.connector`` (format paramstyle), so literal
    ``%`` characters are doubled when rendering.
    """

    _TYPES = {
        FieldType.STRING: "TEXT",
        FieldType.INTEGER: "BIGINT",
        FieldType.BOOLEAN: "BIT(1)",
        FieldType.FLOAT: "DOUBLE",
        FieldType.DATETIME: "DATETIME",
        FieldType.DATE: "DATE",
    }

    @property
    def name(self) -> str:
        return "mysql"

    @property
    def supports_multi_add_column(self) -> bool:
        return True

    def render(self, sql: str, params: Sequence[Any]) -> str:
        # the driver only interpolates (and unescapes %%) when params are given
        if not params:
            return sql
        return sql.replace("%", "%%").replace("?", "%s")

    def adapt(self, value: Any) -> Any:
        return value

    def now(self) -> str:
        return "NOW()"

    def id_column(self) -> str:
        return "id INT UNSIGNED NOT NULL AUTO_INCREMENT,\nPRIMARY KEY(id)"

    def column_type(self, descriptor: FieldDescriptor) -> str:
        if descriptor.field_type is FieldType.STRING and descriptor.length:
            return f"VARCHAR({descriptor.length})"
        return self._TYPES[descriptor.field_type]

    def added_column_default(self, field_type: FieldType) -> str:  # noqa: ARG002
        return ""

    def describe_table(self, table: str) -> str:
        return f"DESC {table}"

    def table_exists_query(self) -> str:
        return (
            "SELECT TABLE_NAME FROM INFORMATION_SCHEMA.TABLES "
            "WHERE TABLE_SCHEMA = DATABASE() AND TABLE_NAME = ?"
        )

    def list_tables_query(self) -> str:
        return "SHOW TABLES"

    def column_from_row(self, row: dict[str, Any]) -> ColumnDescriptor:
        column_type = row["Type"]
        if isinstance(column_type, (bytes, bytearray)):
            column_type = column_type.decode()
        return ColumnDescriptor(
            name=row["Field"],
            type=column_type,
            nullable=row["Null"] == "YES",
            primary_key=row["Key"] == "PRI",
            default=row["Default"],
        )


# =========================================================================
# Registry / Factory
# =========================================================================

_DIALECTS: dict[str, Dialect] = {
    "sqlite": SQLiteDialect(),
    "mysql": MySQLDialect(),
    "mariadb": MySQLDialect(),  # alias
}


def get_dialect(db_type: str) -> Dialect:
    """Get a dialect by database type name.

    Raises:
        ConfigError: If ``db_type`` is not recognised.
    """
    key = db_type.lower() if isinstance(db_type, str) else db_type.value
    if key not in _DIALECTS:
        raise ConfigError(
            f"Unknown dialect '{db_type}'. Supported: {sorted(set(_DIALECTS) - {'mariadb'})}"
        )
    return _DIALECTS[key]


def register_dialect(name: str, dialect: Dialect) -> None:
    """Register a custom dialect implementation (lookup key is lower-cased)."""
    _DIALECTS[name.lower()] = dialect


__all__ = [
    "Dialect",
    "SQLiteDialect",
    "MySQLDialect",
    "get_dialect",
    "register_dialect",
]
