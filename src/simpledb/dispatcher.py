"""Statement execution and result shaping by statement type.

The strategy for each :class:`~simpledb.statement.StatementType` is resolved
from a table once the statement is classified:

    ======================  ==========================================
    INSERT                  generated key (``None`` when there is none)
    UPDATE / DELETE         affected-row count
    SELECT / SHOW / DESC /  list of ResultRow dicts
    PRAGMA
    OTHER                   ``True`` once the driver accepted it
    ======================  ==========================================

Every execution opens its own cursor and closes it on every exit path.
Driver errors are re-raised as :class:`~simpledb.errors.QueryExecutionError`
carrying the SQL that failed.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from contextlib import closing
from typing import Any

from simpledb.dialect import Dialect
from simpledb.errors import QueryExecutionError
from simpledb.logging import get_logger
from simpledb.mapper import ResultRow, column_names, to_row
from simpledb.statement import StatementType, classify

logger = get_logger(__name__)

Handler = Callable[[Any], Any]


def _generated_key(cursor: Any) -> int | None:
    # lastrowid is per connection on some drivers and survives a no-op insert
    if cursor.rowcount == 0:
        return None
    return cursor.lastrowid or None


def _affected_rows(cursor: Any) -> int:
    return max(cursor.rowcount, 0)


def _materialize(cursor: Any) -> list[ResultRow]:
    columns = column_names(cursor.description)
    return [to_row(columns, values) for values in cursor.fetchall()]


def _succeeded(cursor: Any) -> bool:  # noqa: ARG001
    return True


HANDLERS: dict[StatementType, Handler] = {
    StatementType.INSERT: _generated_key,
    StatementType.UPDATE: _affected_rows,
    StatementType.DELETE: _affected_rows,
    StatementType.SELECT: _materialize,
    StatementType.SHOW: _materialize,
    StatementType.DESC: _materialize,
    StatementType.PRAGMA: _materialize,
    StatementType.OTHER: _succeeded,
}


class QueryDispatcher:
    """Executes finalized statements against one connection.

    Args:
        connection: DB-API connection owned by the session.
        dialect: Renders ``?`` markers and adapts parameters.
        driver_errors: Exception types the driver raises for rejected
            statements; these become ``QueryExecutionError``.
        verbose: Log each statement at INFO instead of DEBUG.
    """

    def __init__(
        self,
        connection: Any,
        dialect: Dialect,
        driver_errors: tuple[type[BaseException], ...] = (Exception,),
        *,
        verbose: bool = False,
    ):
        self._connection = connection
        self._dialect = dialect
        self._driver_errors = driver_errors
        self.verbose = verbose

    def execute(
        self,
        sql: str,
        params: Sequence[Any] = (),
        statement_type: StatementType | None = None,
    ) -> Any:
        """Execute ``sql`` and shape the result for its statement type."""
        kind = statement_type or classify(sql)
        handler = HANDLERS[kind]
        adapted = tuple(self._dialect.adapt(p) for p in params)
        native = self._dialect.render(sql, adapted)

        started = time.perf_counter()
        try:
            with closing(self._connection.cursor()) as cursor:
                if adapted:
                    cursor.execute(native, adapted)
                else:
                    cursor.execute(native)
                result = handler(cursor)
        except self._driver_errors as e:
            logger.error("sql_failed", sql=sql, params=list(params), kind=kind.value, error=str(e))
            raise QueryExecutionError(
                f"Statement failed: {e}",
                sql=sql,
                params=tuple(params),
                cause=e,
            ) from e

        log = logger.info if self.verbose else logger.debug
        log(
            "sql_executed",
            sql=sql,
            params=list(params),
            kind=kind.value,
            elapsed_ms=round((time.perf_counter() - started) * 1000, 3),
        )
        return result


__all__ = [
    "HANDLERS",
    "QueryDispatcher",
]
