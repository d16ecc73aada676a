"""Configuration service for sqlgate-mcp.

This module centralizes environment variable handling and database engine
creation. CLI flags override the values resolved here.
"""

from __future__ import annotations

import os
from typing import Final, get_args

import sqlalchemy as sa

from sqlgate_mcp.models import ServerSettings, Transport

_TRUTHY: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})
DEFAULT_PORT: Final[int] = 8080


def _env_flag(name: str, *, default: bool = False) -> bool:
    val = os.getenv(name)
    if val is None:
        return default
    return val.strip().lower() in _TRUTHY


class ConfigService:
    """Service for managing configuration and database connections."""

    @staticmethod
    def get_database_url() -> str | None:
        """Get the database URL from ``SQLGATE_MCP_DATABASE_URL``.

        Returns None when unset; the connection provider reports the missing
        URL on first use so the server can still start and list its tools.
        """
        return os.getenv("SQLGATE_MCP_DATABASE_URL") or None

    @staticmethod
    def create_database_engine(url: str) -> sa.Engine:
        """Create SQLAlchemy database engine.

        Args:
            url: Database connection URL

        Returns:
            SQLAlchemy Engine instance
        """
        # libpq-style scheme is not registered as a SQLAlchemy dialect name.
        if url.startswith("postgres://"):
            url = "postgresql://" + url.removeprefix("postgres://")
        return sa.create_engine(url)

    @staticmethod
    def read_only() -> bool:
        """Whether mutation tools are withheld."""
        return _env_flag("SQLGATE_MCP_READ_ONLY")

    @staticmethod
    def explain_check() -> bool:
        """Whether statements are checked with EXPLAIN before running."""
        return _env_flag("SQLGATE_MCP_EXPLAIN_CHECK")

    @staticmethod
    def transport() -> Transport:
        val = os.getenv("SQLGATE_MCP_TRANSPORT", "stdio").strip().lower()
        if val not in get_args(Transport):
            return "stdio"
        return val  # type: ignore[return-value]

    @staticmethod
    def host() -> str:
        return os.getenv("SQLGATE_MCP_HOST", "localhost")

    @staticmethod
    def port() -> int:
        """Port for network transports."""
        val = os.getenv("SQLGATE_MCP_PORT", str(DEFAULT_PORT))
        try:
            port = int(val)
        except ValueError:
            port = DEFAULT_PORT
        if not 1 <= port <= 65535:  # noqa: PLR2004
            port = DEFAULT_PORT
        return port

    @staticmethod
    def lang() -> str:
        return os.getenv("SQLGATE_MCP_LANG", "en")

    @staticmethod
    def load_settings() -> ServerSettings:
        """Resolve all settings from the environment."""
        return ServerSettings(
            database_url=ConfigService.get_database_url(),
            read_only=ConfigService.read_only(),
            explain_check=ConfigService.explain_check(),
            transport=ConfigService.transport(),
            host=ConfigService.host(),
            port=ConfigService.port(),
            lang=ConfigService.lang(),
        )
