"""MySQL database adapter.

Uses ``mysql.connector`` from the ``mysql-connector-python`` package.

Install the driver::

    pip install mysql-connector-python
    # or:  pip install simpledb[mysql]

This adapter is import-guarded: if ``mysql.connector`` is not installed
a clear :class:`~simpledb.errors.ConfigError` is raised at ``connect()``
time.
"""

from __future__ import annotations

from typing import Any

from simpledb.errors import ConfigError, DatabaseConnectionError

from .base import DatabaseAdapter
from .types import DatabaseConfig, DatabaseType


class MySQLAdapter(DatabaseAdapter):
    """MySQL / MariaDB database adapter.

    The connection runs with autocommit on; ``begin()`` opens an explicit
    transaction that lasts until ``commit()`` or ``rollback()``.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 3306,
        database: str = "",
        username: str | None = None,
        password: str | None = None,
        *,
        charset: str = "utf8mb4",
        **kwargs: Any,
    ):
        config = DatabaseConfig(
            db_type=DatabaseType.MYSQL,
            host=host,
            port=port,
            database=database,
            username=username,
            password=password,
            options={**(kwargs or {}), "charset": charset},
        )
        super().__init__(config)
        self._conn: Any = None
        self._errors: tuple[type[BaseException], ...] = ()

    @property
    def driver_errors(self) -> tuple[type[BaseException], ...]:
        if not self._errors:
            self._errors = (self._driver().Error,)
        return self._errors

    @staticmethod
    def _driver() -> Any:
        try:
            import mysql.connector
        except ImportError:
            raise ConfigError(
                "mysql-connector-python is required for MySQL. "
                "Install with: pip install mysql-connector-python"
            ) from None
        return mysql.connector

    def connect(self) -> None:
        """Connect to MySQL database."""
        driver = self._driver()

        try:
            self._conn = driver.connect(
                host=self._config.host,
                port=self._config.port,
                database=self._config.database,
                user=self._config.username,
                password=self._config.password,
                charset=self._config.options.get("charset", "utf8mb4"),
                connect_timeout=self._config.connect_timeout,
                autocommit=True,
            )
            self._connected = True
        except driver.Error as e:
            raise DatabaseConnectionError(
                f"Failed to connect to MySQL: {e}",
                cause=e,
            ) from e

    def disconnect(self) -> None:
        """Close MySQL connection."""
        if self._conn:
            self._conn.close()
            self._conn = None
        self._connected = False

    def get_connection(self) -> Any:
        if not self._conn:
            self.connect()
        return self._conn

    def begin(self) -> None:
        self.get_connection().start_transaction()

    @property
    def in_transaction(self) -> bool:
        return bool(self._conn and self._conn.in_transaction)


__all__ = [
    "MySQLAdapter",
]
