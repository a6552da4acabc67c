"""Session configuration.

``SimpleDbSettings`` collects everything needed to open a session: which
backend, where it lives, the credentials, and the development toggles.
Values come from keyword arguments, ``SIMPLEDB_*`` environment variables or
a ``.env`` file, in that order of precedence.

Examples:
    >>> from simpledb.settings import SimpleDbSettings
    >>> s = SimpleDbSettings(db_type="mysql", host="db", database="app")
    >>> s.port
    3306
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from simpledb.adapters import adapter_registry


class SimpleDbSettings(BaseSettings):
    """Connection and behaviour settings for a :class:`~simpledb.session.SimpleDb`.

    Fields
    ──────
    db_type    : ``sqlite`` or ``mysql``
    host, port : MySQL server address
    username   : MySQL user
    password   : MySQL password
    database   : MySQL schema name
    path       : SQLite database file (``:memory:`` by default)
    dev_mode   : Log every statement at INFO instead of DEBUG
    log_level  : Structlog log level
    ddl_auto   : Default reconciliation policy for new sessions
    """

    model_config = SettingsConfigDict(
        env_prefix="SIMPLEDB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Backend ──────────────────────────────────────────────────
    db_type: str = "sqlite"

    # ── MySQL ────────────────────────────────────────────────────
    host: str = "localhost"
    port: int = 3306
    username: str | None = None
    password: str | None = None
    database: str = ""

    # ── SQLite ───────────────────────────────────────────────────
    path: str = Field(default=":memory:", description="SQLite database file")

    # ── Behaviour ────────────────────────────────────────────────
    dev_mode: bool = False
    log_level: str = "INFO"
    ddl_auto: str = "none"

    @field_validator("db_type", "ddl_auto")
    @classmethod
    def _lower(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("db_type")
    @classmethod
    def _known_backend(cls, value: str) -> str:
        supported = adapter_registry.list_adapters()
        if value not in supported:
            raise ValueError(f"unknown db_type {value!r}, expected one of {supported}")
        return value


__all__ = ["SimpleDbSettings"]
