"""Exception hierarchy for sqlgate-mcp.

Every failure raised by the query-execution core derives from
``SqlGateError`` so tool adapters can translate them into a single
client-facing error path while still telling the phases apart.

Exception Categories:
- Connection errors when the shared engine cannot be established
- Plan check errors when the EXPLAIN gate denies a statement
- Query and exec errors for statement execution failures
- Encode errors for CSV serialization failures
- Catalog errors for unsupported dialects or malformed identifiers
"""

from __future__ import annotations


class SqlGateError(Exception):
    """Base exception for sqlgate-mcp operations."""


class DatabaseConnectionError(SqlGateError):
    """Raised when the database engine cannot be created or reached.

    Nothing is cached on failure, so a later call retries from scratch.
    """


class PlanCheckError(SqlGateError):
    """Raised when the EXPLAIN gate denies a statement.

    This covers a failed probe, an absent or ambiguous plan, and a plan whose
    reported operation does not match the declared intent. The statement is
    never executed when this is raised.
    """


class QueryError(SqlGateError):
    """Raised when a read query, its metadata or its rows cannot be fetched."""


class ExecError(SqlGateError):
    """Raised when a mutation fails or its summary values are unavailable."""


class EncodeError(SqlGateError):
    """Raised when result rows cannot be serialized to CSV."""


class CatalogError(SqlGateError):
    """Raised when catalog SQL cannot be built for the active database."""
