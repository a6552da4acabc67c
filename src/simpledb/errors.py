"""
Structured error types for simpledb.

Every failure raised by the library is a :class:`SimpleDbError` carrying a
category, structured context (the offending SQL, its parameters, the table
being reconciled) and the chained driver exception when there is one.

Manifesto:
    - **Typed Error Hierarchy:** Binding, execution, shape and schema
      failures are distinct types so callers can catch exactly what they
      expect.
    - **Fail Fast:** Nothing is retried. Errors surface at the call that
      violated the contract.
    - **Error Chaining:** Driver exceptions are preserved as ``cause`` and
      ``__cause__``.

Architecture:
    ::

        SimpleDbError
        ├── ConfigError
        ├── DatabaseConnectionError
        ├── BindingError
        ├── QueryExecutionError
        ├── ResultShapeError
        │   └── NoGeneratedKeyError
        ├── RecordShapeError
        ├── SchemaMismatchError
        ├── TransactionError
        └── StatementStateError

Examples:
    >>> error = BindingError("2 placeholders but 3 values")
    >>> error.category
    <ErrorCategory.BINDING: 'BINDING'>
    >>> error.with_context(sql="SELECT ?").context.sql
    'SELECT ?'

Guardrails:
    ❌ DON'T: Swallow the driver exception
    ✅ DO: Pass it as ``cause=`` and ``raise ... from e``
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Error categories for classification and routing."""

    CONFIG = "CONFIG"
    CONNECTION = "CONNECTION"
    BINDING = "BINDING"
    EXECUTION = "EXECUTION"
    RESULT = "RESULT"
    SCHEMA = "SCHEMA"
    TRANSACTION = "TRANSACTION"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        sql: Finalized SQL text that was being executed
        params: Flattened parameters bound to ``sql``
        table: Table involved in a schema operation
        policy: Reconciliation policy in effect
        metadata: Additional key-value pairs
    """

    sql: str | None = None
    params: tuple[Any, ...] | None = None
    table: str | None = None
    policy: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result: dict[str, Any] = {}
        for key in ["sql", "params", "table", "policy"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class SimpleDbError(Exception):
    """
    Base exception for all simpledb errors.

    Subclasses set ``default_category``; the message is always human
    readable and ``to_dict()`` gives a structured form for logging.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> SimpleDbError:
        """
        Add context to this error (fluent API).

        Usage:
            raise BindingError("count mismatch").with_context(sql=text)
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION / CONNECTION
# =============================================================================


class ConfigError(SimpleDbError):
    """Invalid or missing configuration."""

    default_category = ErrorCategory.CONFIG


class DatabaseConnectionError(SimpleDbError):
    """The driver could not open a connection."""

    default_category = ErrorCategory.CONNECTION


# =============================================================================
# STATEMENT ERRORS
# =============================================================================


class BindingError(SimpleDbError):
    """Placeholder/value count mismatch, or an empty list parameter."""

    default_category = ErrorCategory.BINDING

    def __init__(
        self,
        message: str,
        *,
        placeholders: int | None = None,
        values: int | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.placeholders = placeholders
        self.values = values


class QueryExecutionError(SimpleDbError):
    """The driver rejected a statement. Carries the offending SQL."""

    default_category = ErrorCategory.EXECUTION

    def __init__(
        self,
        message: str,
        *,
        sql: str,
        params: tuple[Any, ...] = (),
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.sql = sql
        self.params = params
        self.context.sql = sql
        self.context.params = params

    def __str__(self) -> str:
        return f"{self.message} [sql: {self.sql}]"


class ResultShapeError(SimpleDbError):
    """The result does not fit the terminal operation's return contract."""

    default_category = ErrorCategory.RESULT


class NoGeneratedKeyError(ResultShapeError):
    """An insert that was required to produce a key produced none."""


class StatementStateError(SimpleDbError):
    """A consumed ``Sql`` builder was used again."""

    default_category = ErrorCategory.INTERNAL


# =============================================================================
# SCHEMA ERRORS
# =============================================================================


class RecordShapeError(SimpleDbError):
    """A record type cannot be described as a table shape."""

    default_category = ErrorCategory.SCHEMA


class SchemaMismatchError(SimpleDbError):
    """VALIDATE policy found a table that does not agree with the record."""

    default_category = ErrorCategory.SCHEMA

    def __init__(
        self,
        message: str,
        *,
        expected: int | None = None,
        actual: int | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.expected = expected
        self.actual = actual

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.expected is not None:
            result["expected"] = self.expected
        if self.actual is not None:
            result["actual"] = self.actual
        return result


# =============================================================================
# TRANSACTION ERRORS
# =============================================================================


class TransactionError(SimpleDbError):
    """Transaction boundary used out of order."""

    default_category = ErrorCategory.TRANSACTION


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "SimpleDbError",
    "ConfigError",
    "DatabaseConnectionError",
    "BindingError",
    "QueryExecutionError",
    "ResultShapeError",
    "NoGeneratedKeyError",
    "StatementStateError",
    "RecordShapeError",
    "SchemaMismatchError",
    "TransactionError",
]
