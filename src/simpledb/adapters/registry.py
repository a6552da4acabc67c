"""Adapter lookup by backend name.

``get_adapter()`` turns the ``db_type`` of a
:class:`~simpledb.settings.SimpleDbSettings` into a configured adapter, and
``list_adapters()`` is the set of names that settings accept.
"""

from __future__ import annotations

from typing import Any

from simpledb.errors import ConfigError

from .base import DatabaseAdapter
from .mysql import MySQLAdapter
from .sqlite import SQLiteAdapter
from .types import DatabaseType


class AdapterRegistry:
    """Backend name to adapter class.

    ``mariadb`` is an alias of ``mysql``: both speak the same protocol
    through ``mysql.connector``.
    """

    def __init__(self):
        self._factories: dict[str, type[DatabaseAdapter]] = {
            DatabaseType.SQLITE.value: SQLiteAdapter,
            DatabaseType.MYSQL.value: MySQLAdapter,
            "mariadb": MySQLAdapter,
        }

    def create(self, name: str, **kwargs: Any) -> DatabaseAdapter:
        """Create an adapter by name.

        Raises:
            ConfigError: If ``name`` is not a known backend.
        """
        key = name.lower()
        if key not in self._factories:
            raise ConfigError(
                f"Unknown database adapter '{name}'. Supported: {self.list_adapters()}"
            )
        return self._factories[key](**kwargs)

    def list_adapters(self) -> list[str]:
        """Backend names accepted by ``create()``."""
        return sorted(self._factories)


adapter_registry = AdapterRegistry()


def get_adapter(
    db_type: DatabaseType | str,
    **kwargs: Any,
) -> DatabaseAdapter:
    """
    Get a database adapter by type.

    Usage:
        adapter = get_adapter(DatabaseType.SQLITE, path="data.db")
        adapter = get_adapter("mysql", host="localhost", database="app")
    """
    name = db_type.value if isinstance(db_type, DatabaseType) else db_type
    return adapter_registry.create(name, **kwargs)


__all__ = [
    "AdapterRegistry",
    "adapter_registry",
    "get_adapter",
]
