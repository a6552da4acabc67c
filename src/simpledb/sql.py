"""Statement builder.

``Sql`` accumulates fragments, each with its own bound values, and runs them
as one statement when a terminal operation is called.

Examples:
    >>> sql = db.gen_sql()
    >>> sql.append("SELECT COUNT(*)").append("FROM article")
    >>> sql.append("WHERE id BETWEEN ? AND ?", 1, 3)
    >>> sql.select_long()
    3

    >>> ids = [2, 3, 1]
    >>> (db.gen_sql()
    ...     .append("SELECT id FROM article")
    ...     .append_in("WHERE id IN (?)", ids)
    ...     .append_in("ORDER BY FIELD (id, ?)", ids)
    ...     .select_longs())
    [2, 3, 1]

Select operations take the first column of the first row (or of every row
for the plural forms). An empty result gives ``None`` / ``[]`` / ``{}``,
never an error.

A builder is single-use: once a terminal operation has run, acquire a new
one with ``gen_sql()``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime
from typing import TYPE_CHECKING, Any, TypeVar, overload

from simpledb.binder import Fragment, bind, join
from simpledb.errors import NoGeneratedKeyError, ResultShapeError, StatementStateError
from simpledb.mapper import ResultRow, coerce_value, to_typed
from simpledb.shape import FieldType
from simpledb.statement import StatementType, classify

if TYPE_CHECKING:
    from simpledb.dispatcher import QueryDispatcher

T = TypeVar("T")


class Sql:
    """One logical statement built from appended fragments."""

    def __init__(self, dispatcher: QueryDispatcher):
        self._dispatcher = dispatcher
        self._fragments: list[Fragment] = []
        self._consumed = False

    # -- Building ----------------------------------------------------------

    def append(self, text: str, *values: Any) -> Sql:
        """Append ``text``; each ``?`` in it takes one of ``values``.

        A list/tuple value expands its ``?`` into one marker per element.
        """
        self._check_open()
        self._fragments.append(bind(text, values))
        return self

    def append_in(self, text: str, values: Iterable[Any]) -> Sql:
        """Append ``text`` whose single ``?`` expands to all of ``values``."""
        return self.append(text, list(values))

    @property
    def statement(self) -> Fragment:
        """Finalized text and flattened parameters."""
        return join(self._fragments)

    @property
    def sql(self) -> str:
        return self.statement.text

    @property
    def params(self) -> tuple[Any, ...]:
        return self.statement.params

    @property
    def statement_type(self) -> StatementType:
        return classify(self.sql)

    # -- Terminal operations -----------------------------------------------

    def insert(self, *, require_key: bool = False) -> int | None:
        """Run an INSERT and return the generated primary key.

        Returns ``None`` when the driver reports no key, unless
        ``require_key`` is set.

        Raises:
            NoGeneratedKeyError: ``require_key`` and no key was generated.
        """
        result = self._run("insert", lambda kind: kind is StatementType.INSERT)
        if result is None and require_key:
            raise NoGeneratedKeyError("Insert produced no generated key").with_context(sql=self.sql)
        return result

    def update(self) -> int:
        """Run an UPDATE and return the affected-row count."""
        return self._count("update")

    def delete(self) -> int:
        """Run a DELETE and return the affected-row count."""
        return self._count("delete")

    def select_long(self) -> int | None:
        return self._first_value("select_long", FieldType.INTEGER)

    def select_longs(self) -> list[int]:
        return self._first_column("select_longs", FieldType.INTEGER)

    def select_string(self) -> str | None:
        return self._first_value("select_string", FieldType.STRING)

    def select_strings(self) -> list[str]:
        return self._first_column("select_strings", FieldType.STRING)

    def select_datetime(self) -> datetime | None:
        return self._first_value("select_datetime", FieldType.DATETIME)

    def select_boolean(self) -> bool | None:
        return self._first_value("select_boolean", FieldType.BOOLEAN)

    @overload
    def select_row(self) -> ResultRow: ...

    @overload
    def select_row(self, record_type: type[T]) -> T | None: ...

    def select_row(self, record_type: type[T] | None = None) -> ResultRow | T | None:
        """First row as a dict, or as ``record_type`` when given.

        An empty result gives ``{}`` (untyped) or ``None`` (typed).
        """
        rows = self._rows("select_row")
        if record_type is None:
            return rows[0] if rows else {}
        return to_typed(rows[0], record_type) if rows else None

    @overload
    def select_rows(self) -> list[ResultRow]: ...

    @overload
    def select_rows(self, record_type: type[T]) -> list[T]: ...

    def select_rows(self, record_type: type[T] | None = None) -> list[ResultRow] | list[T]:
        """Every row, as dicts or as ``record_type`` instances."""
        rows = self._rows("select_rows")
        if record_type is None:
            return rows
        return [to_typed(row, record_type) for row in rows]

    # -- Internals ---------------------------------------------------------

    def _check_open(self) -> None:
        if self._consumed:
            raise StatementStateError(
                "This Sql has already been executed; use gen_sql() for a new statement"
            )

    def _run(self, operation: str, accepts: Callable[[StatementType], bool]) -> Any:
        """Execute the statement if ``operation`` can shape its result.

        The kind is checked before anything reaches the database; a rejected
        call leaves the builder open.
        """
        self._check_open()
        statement = self.statement
        kind = classify(statement.text)
        if not accepts(kind):
            raise self._shape_error(operation, kind)
        self._consumed = True
        return self._dispatcher.execute(statement.text, statement.params, kind)

    def _count(self, operation: str) -> int:
        return self._run(operation, lambda kind: kind.returns_count)

    def _rows(self, operation: str) -> list[ResultRow]:
        return self._run(operation, lambda kind: kind.returns_rows)

    def _first_value(self, operation: str, field_type: FieldType) -> Any:
        rows = self._rows(operation)
        if not rows:
            return None
        return coerce_value(_first(rows[0]), field_type)

    def _first_column(self, operation: str, field_type: FieldType) -> list[Any]:
        rows = self._rows(operation)
        return [coerce_value(_first(row), field_type) for row in rows]

    def _shape_error(self, operation: str, kind: StatementType) -> ResultShapeError:
        return ResultShapeError(
            f"{operation}() cannot shape the result of a {kind.value} statement"
        ).with_context(sql=self.sql)

    def __repr__(self) -> str:
        state = "consumed" if self._consumed else "open"
        return f"Sql({self.sql!r}, params={self.params!r}, {state})"


def _first(row: ResultRow) -> Any:
    for value in row.values():
        return value
    return None


__all__ = ["Sql"]
