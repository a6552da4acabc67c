"""Database adapters: one connection per session, behind a common interface.

Each adapter is **import-guarded**: the database driver is only required at
``connect()`` time, not at import time::

    pip install simpledb[mysql]   # mysql-connector-python

Architecture::

    DatabaseAdapter (base.py)        Abstract base: connect/begin/commit/rollback
        |-- SQLiteAdapter            stdlib sqlite3 (always available)
        |-- MySQLAdapter             mysql.connector (optional)

    AdapterRegistry (registry.py)    DatabaseType -> adapter class
    DatabaseConfig (types.py)        Connection parameters
    DatabaseType (types.py)          Enum of supported backends
"""

from .base import DatabaseAdapter
from .mysql import MySQLAdapter
from .registry import AdapterRegistry, adapter_registry, get_adapter
from .sqlite import SQLiteAdapter
from .types import DatabaseConfig, DatabaseType

__all__ = [
    "DatabaseType",
    "DatabaseConfig",
    "DatabaseAdapter",
    "SQLiteAdapter",
    "MySQLAdapter",
    "AdapterRegistry",
    "adapter_registry",
    "get_adapter",
]
