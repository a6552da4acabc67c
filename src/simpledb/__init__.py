"""simpledb -- a lightweight relational-database access layer.

Manifesto:
    Write SQL, not a query DSL. Fragments with ``?`` placeholders are bound,
    executed and shaped into scalars, dicts or dataclass records. Dataclass
    records double as table shapes, so a session can create, validate or
    additively update the table behind a record under a chosen policy.

Architecture::

    Layer 1 -- Errors, Logging, Settings
        errors.py       SimpleDbError hierarchy
        logging.py      structlog configuration
        settings.py     SimpleDbSettings (pydantic-settings)

    Layer 2 -- Statement engine
        binder.py       ``?`` binding with list expansion
        statement.py    StatementType classification
        mapper.py       Row -> dict / dataclass mapping
        dispatcher.py   Execution + per-type result strategy
        sql.py          Sql builder and terminal operations

    Layer 3 -- Schema
        shape.py        RecordShape of a dataclass
        schema.py       SchemaConverter (CREATE / ALTER / DROP / describe)
        dialect.py      SQLite + MySQL dialects

    Layer 4 -- Session
        adapters/       SQLite + MySQL connection adapters
        session.py      SimpleDb: transactions, reconciliation policies
        cli.py          ``simpledb`` command line
"""

from simpledb.errors import (
    BindingError,
    NoGeneratedKeyError,
    QueryExecutionError,
    RecordShapeError,
    ResultShapeError,
    SchemaMismatchError,
    SimpleDbError,
    TransactionError,
)
from simpledb.schema import ColumnDescriptor, SchemaConverter
from simpledb.session import DdlAuto, ReconciliationPolicy, SimpleDb
from simpledb.shape import FieldType, RecordShape, record_shape
from simpledb.sql import Sql
from simpledb.statement import StatementType

__version__ = "0.1.0"

__all__ = [
    "SimpleDb",
    "Sql",
    "ReconciliationPolicy",
    "DdlAuto",
    "StatementType",
    "RecordShape",
    "FieldType",
    "record_shape",
    "ColumnDescriptor",
    "SchemaConverter",
    "SimpleDbError",
    "BindingError",
    "QueryExecutionError",
    "ResultShapeError",
    "NoGeneratedKeyError",
    "RecordShapeError",
    "SchemaMismatchError",
    "TransactionError",
]
