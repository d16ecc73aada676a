"""Statement execution for the database tools.

This module provides two small, dependency-injected executors that:
- Run the EXPLAIN gate when an intent is declared
- Execute via SQLAlchemy on the shared engine
- Normalize result cells to the ``Cell`` variant (query path)
- Summarize affected rows and generated ids (mutation path)

Raw SQL is passed to the driver untouched (``exec_driver_sql`` with ``no_parameters``) so colons
and percent signs in literals are never taken for bind parameters. Every call is
its own unit of work: queries are never committed, mutations always are.
"""

from __future__ import annotations

from collections.abc import Mapping
import time
from typing import TYPE_CHECKING

from fastmcp.utilities.logging import get_logger
import sqlalchemy as sa
from sqlalchemy.exc import SQLAlchemyError

from sqlgate_mcp.errors import ExecError, QueryError
from sqlgate_mcp.execute.models import (
    RAW_SQL_OPTIONS,
    QueryResult,
    ResultRow,
    StatementIntent,
    normalize_cell,
)
from sqlgate_mcp.execute.plan_guard import PlanGuard

if TYPE_CHECKING:
    from sqlgate_mcp.services.connection import ConnectionProvider

_logger = get_logger(__name__)


def _run(
    conn: sa.Connection, sql: str, params: Mapping[str, object] | None
) -> sa.CursorResult[object]:
    if params:
        return conn.execute(sa.text(sql), dict(params))
    return conn.exec_driver_sql(sql, execution_options=RAW_SQL_OPTIONS)


class QueryExecutor:
    """Run read queries and collect normalized rows."""

    def __init__(self, provider: ConnectionProvider, guard: PlanGuard) -> None:
        self._provider = provider
        self._guard = guard

    def query(
        self,
        sql: str,
        intent: StatementIntent = StatementIntent.NONE,
        params: Mapping[str, object] | None = None,
    ) -> QueryResult:
        """Execute ``sql`` and return every row with the engine's column order.

        Raises:
            PlanCheckError: If the declared intent is denied.
            DatabaseConnectionError: If the database cannot be reached.
            QueryError: If execution, column listing or row decoding fails.
        """
        if intent.is_checked:
            self._guard.check(sql, intent)

        engine = self._provider.acquire()
        start = time.perf_counter()
        try:
            with engine.connect() as conn:
                result = _run(conn, sql, params)
                if not result.returns_rows:
                    msg = "statement did not return rows"
                    raise QueryError(msg)
                columns = list(result.keys())
                rows: list[ResultRow] = [
                    {col: normalize_cell(value) for col, value in zip(columns, raw, strict=True)}
                    for raw in result
                ]
        except SQLAlchemyError as exc:
            _logger.warning("Query error: %s", exc)
            raise QueryError(str(exc)) from exc

        _logger.info(
            "Query finished (elapsed_ms=%.1f, rows=%d, columns=%d)",
            (time.perf_counter() - start) * 1000.0,
            len(rows),
            len(columns),
        )
        return QueryResult(rows=rows, columns=columns)


class MutationExecutor:
    """Run write, update, delete and DDL statements."""

    def __init__(self, provider: ConnectionProvider, guard: PlanGuard) -> None:
        self._provider = provider
        self._guard = guard

    def execute(self, sql: str, intent: StatementIntent = StatementIntent.NONE) -> str:
        """Execute ``sql`` in its own transaction and summarize the outcome.

        Returns ``"<n> rows affected"``, plus ``", last insert id: <id>"`` for
        inserts.

        Raises:
            PlanCheckError: If the declared intent is denied.
            DatabaseConnectionError: If the database cannot be reached.
            ExecError: If execution fails or the summary values are unavailable.
        """
        if intent.is_checked:
            self._guard.check(sql, intent)

        engine = self._provider.acquire()
        try:
            with engine.begin() as conn:
                result = conn.exec_driver_sql(sql, execution_options=RAW_SQL_OPTIONS)
                affected = result.rowcount
                # Dialects without postfetch_lastrowid (PostgreSQL) expose the
                # row OID as lastrowid, never a generated key.
                last_id = (
                    result.lastrowid
                    if intent is StatementIntent.INSERT and engine.dialect.postfetch_lastrowid
                    else None
                )
        except SQLAlchemyError as exc:
            _logger.warning("Exec error: %s", exc)
            raise ExecError(str(exc)) from exc

        if affected is None or affected < 0:
            if intent.is_checked:
                msg = "unable to determine the number of affected rows"
                raise ExecError(msg)
            # DDL on some drivers reports -1
            affected = 0

        _logger.info("Exec finished (intent=%s, rows_affected=%d)", intent.name, affected)

        if intent is StatementIntent.INSERT:
            if last_id is None:
                msg = "unable to determine the last insert id"
                raise ExecError(msg)
            return f"{affected} rows affected, last insert id: {last_id}"
        return f"{affected} rows affected"
