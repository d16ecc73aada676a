"""Database tool service.

Composes the connection provider, the EXPLAIN gate and the executors into
the two entry points used by every MCP tool: ``handle_query`` returns CSV
text, ``handle_exec`` returns a status summary.
"""

from __future__ import annotations

from collections.abc import Mapping

from fastmcp.utilities.logging import get_logger

from sqlgate_mcp.execute.models import QueryResult, StatementIntent
from sqlgate_mcp.execute.plan_guard import PlanGuard, PlanInspector
from sqlgate_mcp.execute.runner import MutationExecutor, QueryExecutor
from sqlgate_mcp.execute.tabular import encode_csv
from sqlgate_mcp.services.connection import ConnectionProvider

_logger = get_logger(__name__)


class DatabaseToolService:
    """Business logic behind the database MCP tools."""

    def __init__(
        self,
        provider: ConnectionProvider,
        *,
        explain_check: bool = False,
        inspector: PlanInspector | None = None,
    ) -> None:
        self.provider = provider
        self.guard = PlanGuard(provider, inspector, enabled=explain_check)
        self.queries = QueryExecutor(provider, self.guard)
        self.mutations = MutationExecutor(provider, self.guard)

    def run_query(
        self,
        sql: str,
        intent: StatementIntent = StatementIntent.NONE,
        params: Mapping[str, object] | None = None,
    ) -> QueryResult:
        return self.queries.query(sql, intent, params)

    def handle_query(
        self,
        sql: str,
        intent: StatementIntent = StatementIntent.NONE,
        params: Mapping[str, object] | None = None,
    ) -> str:
        """Run a read query and encode its result as CSV."""
        result = self.queries.query(sql, intent, params)
        return encode_csv(result.rows, result.columns)

    def handle_exec(self, sql: str, intent: StatementIntent = StatementIntent.NONE) -> str:
        """Run a mutation and return its affected-rows summary."""
        return self.mutations.execute(sql, intent)

    @property
    def dialect_name(self) -> str:
        return self.provider.dialect_name

    def close(self) -> None:
        """Release the shared engine."""
        _logger.info("Closing database tool service")
        self.provider.reset()
