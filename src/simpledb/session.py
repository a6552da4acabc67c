"""Connection session: statements, transactions and schema reconciliation.

``SimpleDb`` owns one adapter (and so one connection) for its lifetime.
It hands out :class:`~simpledb.sql.Sql` builders, runs ad hoc statements,
brackets units of work with explicit transaction calls, and brings a table
into line with a dataclass record under a :class:`ReconciliationPolicy`.

Examples:
    >>> db = SimpleDb("localhost", "app", "secret", "app_db")
    >>> db.set_dev_mode(True)
    >>> db.set_reconciliation_policy(ReconciliationPolicy.UPDATE)
    >>> db.reconcile(Article)
    >>> new_id = (db.gen_sql()
    ...     .append("INSERT INTO article")
    ...     .append("SET title = ?", "hello")
    ...     .insert())

Transactions are never rolled back implicitly. A caller that catches an
error inside ``start_transaction()`` must call ``rollback()`` itself.

A session is not safe for concurrent use; give each thread its own.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import Any

from simpledb.adapters import DatabaseAdapter, MySQLAdapter, SQLiteAdapter, get_adapter
from simpledb.binder import bind
from simpledb.dispatcher import QueryDispatcher
from simpledb.errors import ConfigError, TransactionError
from simpledb.logging import configure_library_logging, enable_statement_logging, get_logger
from simpledb.schema import ColumnDescriptor, SchemaConverter
from simpledb.settings import SimpleDbSettings
from simpledb.shape import RecordShape, record_shape
from simpledb.sql import Sql

logger = get_logger(__name__)


class ReconciliationPolicy(str, Enum):
    """How ``reconcile()`` brings a table into agreement with a record."""

    NONE = "none"
    VALIDATE = "validate"
    UPDATE = "update"
    CREATE = "create"
    CREATE_DROP = "create-drop"

    @classmethod
    def parse(cls, value: ReconciliationPolicy | str) -> ReconciliationPolicy:
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().replace("_", "-")
        try:
            return cls(key)
        except ValueError:
            raise ConfigError(
                f"Unknown reconciliation policy {value!r}. "
                f"Supported: {[p.value for p in cls]}"
            ) from None


DdlAuto = ReconciliationPolicy


class SimpleDb:
    """One database session.

    Args:
        host, username, password, database: MySQL connection parameters.
        port: MySQL port.
        adapter: Use this adapter instead of building a MySQL one.
        dev_mode: Log every statement at INFO.
        policy: Initial reconciliation policy.
    """

    def __init__(
        self,
        host: str | None = None,
        username: str | None = None,
        password: str | None = None,
        database: str = "",
        *,
        port: int = 3306,
        adapter: DatabaseAdapter | None = None,
        dev_mode: bool = False,
        policy: ReconciliationPolicy | str = ReconciliationPolicy.NONE,
    ):
        configure_library_logging()
        if adapter is None:
            if host is None:
                raise ConfigError("SimpleDb needs a host or an adapter")
            adapter = MySQLAdapter(
                host=host,
                port=port,
                database=database,
                username=username,
                password=password,
            )
        self._adapter = adapter
        self._converter = SchemaConverter(adapter.dialect)
        self._dispatcher: QueryDispatcher | None = None
        self._dev_mode = dev_mode
        self._policy = ReconciliationPolicy.parse(policy)
        self._in_transaction = False
        if dev_mode:
            enable_statement_logging()

    # -- Construction ------------------------------------------------------

    @classmethod
    def sqlite(cls, path: str = ":memory:", **kwargs: Any) -> SimpleDb:
        """Session over a SQLite database file (in-memory by default)."""
        return cls(adapter=SQLiteAdapter(path=path), **kwargs)

    @classmethod
    def from_settings(cls, settings: SimpleDbSettings | None = None) -> SimpleDb:
        """Session built from :class:`SimpleDbSettings` (env vars by default)."""
        settings = settings or SimpleDbSettings()
        if settings.db_type == "sqlite":
            adapter = get_adapter("sqlite", path=settings.path)
        else:
            adapter = get_adapter(
                settings.db_type,
                host=settings.host,
                port=settings.port,
                database=settings.database,
                username=settings.username,
                password=settings.password,
            )
        return cls(adapter=adapter, dev_mode=settings.dev_mode, policy=settings.ddl_auto)

    # -- Properties --------------------------------------------------------

    @property
    def adapter(self) -> DatabaseAdapter:
        return self._adapter

    @property
    def converter(self) -> SchemaConverter:
        return self._converter

    @property
    def dev_mode(self) -> bool:
        return self._dev_mode

    def set_dev_mode(self, enabled: bool) -> None:
        """Log every statement at INFO (DEBUG otherwise)."""
        self._dev_mode = enabled
        if enabled:
            enable_statement_logging()
        if self._dispatcher is not None:
            self._dispatcher.verbose = enabled

    @property
    def policy(self) -> ReconciliationPolicy:
        return self._policy

    @policy.setter
    def policy(self, value: ReconciliationPolicy | str) -> None:
        self._policy = ReconciliationPolicy.parse(value)

    def set_reconciliation_policy(self, policy: ReconciliationPolicy | str) -> None:
        self.policy = policy

    set_ddl_auto = set_reconciliation_policy

    @property
    def in_transaction(self) -> bool:
        return self._in_transaction

    # -- Statements --------------------------------------------------------

    def _get_dispatcher(self) -> QueryDispatcher:
        if self._dispatcher is None:
            self._dispatcher = QueryDispatcher(
                self._adapter.get_connection(),
                self._adapter.dialect,
                self._adapter.driver_errors,
                verbose=self._dev_mode,
            )
        return self._dispatcher

    def gen_sql(self) -> Sql:
        """A fresh statement builder bound to this session."""
        return Sql(self._get_dispatcher())

    def run(self, sql: str, *params: Any) -> Any:
        """Execute one statement directly and return the raw dispatcher result."""
        fragment = bind(sql, params)
        return self._get_dispatcher().execute(fragment.text, fragment.params)

    # -- Transactions ------------------------------------------------------

    def start_transaction(self) -> None:
        """Begin a unit of work.

        Raises:
            TransactionError: A transaction is already open.
        """
        if self._in_transaction:
            raise TransactionError("A transaction is already active on this session")
        self._adapter.begin()
        self._in_transaction = True
        logger.debug("transaction_started")

    def commit(self) -> None:
        """Persist everything issued since ``start_transaction()``."""
        self._require_transaction("commit")
        self._adapter.commit()
        self._in_transaction = False
        logger.debug("transaction_committed")

    def rollback(self) -> None:
        """Discard everything issued since ``start_transaction()``."""
        self._require_transaction("rollback")
        self._adapter.rollback()
        self._in_transaction = False
        logger.debug("transaction_rolled_back")

    def _require_transaction(self, operation: str) -> None:
        if not self._in_transaction:
            raise TransactionError(f"Cannot {operation}: no active transaction")

    # -- Introspection -----------------------------------------------------

    def describe(self, table_name: str) -> list[ColumnDescriptor]:
        """Columns of ``table_name`` as reported by the database."""
        rows = self.run(self._converter.build_describe(table_name))
        dialect = self._adapter.dialect
        return [dialect.column_from_row(row) for row in rows]

    def table_exists(self, table_name: str) -> bool:
        return bool(self.run(self._adapter.dialect.table_exists_query(), table_name))

    def list_tables(self) -> list[str]:
        rows = self.run(self._adapter.dialect.list_tables_query())
        return [next(iter(row.values())) for row in rows]

    # -- Reconciliation ----------------------------------------------------

    def reconcile(self, record_type: type, table_name: str | None = None) -> list[str]:
        """Apply the current policy to ``record_type``'s table.

        Returns the DDL statements that were executed.

        Raises:
            SchemaMismatchError: Under VALIDATE, when field and column
                counts differ.
        """
        shape = record_shape(record_type)
        table = table_name or shape.table_name
        policy = self._policy

        match policy:
            case ReconciliationPolicy.NONE:
                statements: list[str] = []
            case ReconciliationPolicy.CREATE:
                statements = self._create(shape, table)
            case ReconciliationPolicy.CREATE_DROP:
                statements = self._create(shape, table) + [self._converter.build_drop(table)]
            case ReconciliationPolicy.VALIDATE:
                self._converter.validate(shape, self._columns(table), table)
                statements = []
            case ReconciliationPolicy.UPDATE:
                if self.table_exists(table):
                    statements = self._converter.build_update(shape, self._columns(table), table)
                else:
                    statements = [self._converter.build_create(shape, table)]

        for statement in statements:
            self.run(statement)

        logger.info(
            "schema_reconciled",
            record=shape.record_type.__name__,
            table=table,
            policy=policy.value,
            statements=len(statements),
        )
        return statements

    def _create(self, shape: RecordShape, table: str) -> list[str]:
        return [self._converter.build_drop(table), self._converter.build_create(shape, table)]

    def _columns(self, table: str) -> Sequence[ColumnDescriptor]:
        if not self.table_exists(table):
            return []
        return self.describe(table)

    # -- Lifecycle ---------------------------------------------------------

    def close(self) -> None:
        """Close the connection. An open transaction is discarded by the driver."""
        self._dispatcher = None
        self._in_transaction = False
        self._adapter.disconnect()

    def __enter__(self) -> SimpleDb:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"SimpleDb({self._adapter.config.to_connection_string()!r}, "
            f"policy={self._policy.value}, dev_mode={self._dev_mode})"
        )


__all__ = [
    "ReconciliationPolicy",
    "DdlAuto",
    "SimpleDb",
]
