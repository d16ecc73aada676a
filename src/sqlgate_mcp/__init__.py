"""sqlgate-mcp package: a relational database behind MCP tools.

Provides Model Context Protocol (FastMCP) tools to list, describe, read,
count, write, update and delete data, with an optional EXPLAIN-based gate
that checks each statement's plan against its declared intent.
"""

from sqlgate_mcp.errors import (
    CatalogError,
    DatabaseConnectionError,
    EncodeError,
    ExecError,
    PlanCheckError,
    QueryError,
    SqlGateError,
)
from sqlgate_mcp.execute import (
    MutationExecutor,
    PlanGuard,
    QueryExecutor,
    QueryResult,
    StatementIntent,
    encode_csv,
)
from sqlgate_mcp.models import ServerSettings
from sqlgate_mcp.services import ConfigService, ConnectionProvider, DatabaseToolService

__all__ = [  # noqa: RUF022
    # Core
    "MutationExecutor",
    "PlanGuard",
    "QueryExecutor",
    "QueryResult",
    "StatementIntent",
    "encode_csv",
    # Services
    "ConfigService",
    "ConnectionProvider",
    "DatabaseToolService",
    "ServerSettings",
    # Errors
    "CatalogError",
    "DatabaseConnectionError",
    "EncodeError",
    "ExecError",
    "PlanCheckError",
    "QueryError",
    "SqlGateError",
]
