"""Database types and connection configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from simpledb.errors import ConfigError


class DatabaseType(str, Enum):
    """Supported database types."""

    SQLITE = "sqlite"
    MYSQL = "mysql"


@dataclass
class DatabaseConfig:
    """
    Configuration for database connection.

    Different fields are used by different database types.
    """

    # Common
    db_type: DatabaseType = DatabaseType.SQLITE

    # SQLite
    path: str | None = None

    # MySQL
    host: str = "localhost"
    port: int = 3306
    database: str = ""
    username: str | None = None
    password: str | None = None

    # Options
    connect_timeout: int = 10
    readonly: bool = False

    # Extra options (driver-specific)
    options: dict[str, Any] = field(default_factory=dict)

    def to_connection_string(self) -> str:
        """Connection string for logs; the password is masked."""
        match self.db_type:
            case DatabaseType.SQLITE:
                return self.path or ":memory:"
            case DatabaseType.MYSQL:
                secret = ":***" if self.password else ""
                return f"mysql://{self.username or ''}{secret}@{self.host}:{self.port}/{self.database}"
            case _:
                raise ConfigError(f"Connection string not supported for: {self.db_type}")


__all__ = [
    "DatabaseType",
    "DatabaseConfig",
]
