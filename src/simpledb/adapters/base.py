"""Database adapter base class.

An adapter owns exactly one DB-API connection and the three transaction
primitives on it. Sessions talk to adapters only, so the statement engine
never imports a driver.

Features:
    - Abstract ``connect()``, ``disconnect()``, ``begin()``, ``commit()``, ``rollback()``
    - ``driver_errors``: exception types the driver raises for bad statements
    - Context-manager protocol for connection lifecycle
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from simpledb.dialect import Dialect, get_dialect

from .types import DatabaseConfig, DatabaseType


class DatabaseAdapter(ABC):
    """
    Abstract base class for database adapters.

    Outside ``begin()``/``commit()`` every statement is committed on its own.
    """

    def __init__(self, config: DatabaseConfig):
        self._config = config
        self._connected = False
        self._dialect: Dialect = get_dialect(config.db_type.value)

    @property
    def config(self) -> DatabaseConfig:
        return self._config

    @property
    def dialect(self) -> Dialect:
        """SQL dialect for this adapter's database type."""
        return self._dialect

    @property
    def db_type(self) -> DatabaseType:
        """Database type."""
        return self._config.db_type

    @property
    def is_connected(self) -> bool:
        """Whether adapter is connected."""
        return self._connected

    @property
    @abstractmethod
    def driver_errors(self) -> tuple[type[BaseException], ...]:
        """Exception types raised by the driver for rejected statements."""
        ...

    @property
    @abstractmethod
    def in_transaction(self) -> bool:
        """Whether the driver reports an open transaction."""
        ...

    @abstractmethod
    def connect(self) -> None:
        """Establish connection to database."""
        ...

    @abstractmethod
    def disconnect(self) -> None:
        """Close connection to database."""
        ...

    @abstractmethod
    def get_connection(self) -> Any:
        """The adapter's connection, connecting first if needed."""
        ...

    @abstractmethod
    def begin(self) -> None:
        """Start a transaction on the connection."""
        ...

    def commit(self) -> None:
        """Commit the open transaction."""
        self.get_connection().commit()

    def rollback(self) -> None:
        """Discard the open transaction."""
        self.get_connection().rollback()

    def __enter__(self) -> DatabaseAdapter:
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.disconnect()


__all__ = [
    "DatabaseAdapter",
]
