"""Shared database engine provider.

Holds the single SQLAlchemy engine used by every tool call. The engine is
created on first use behind a lock, verified with a round trip, and reused
unconditionally afterwards. A failed attempt caches nothing.
"""

from __future__ import annotations

from collections.abc import Callable
import hashlib
import threading

from fastmcp.utilities.logging import get_logger
import sqlalchemy as sa
from sqlalchemy.exc import ArgumentError, SQLAlchemyError

from sqlgate_mcp.errors import DatabaseConnectionError
from sqlgate_mcp.services.config_service import ConfigService

_logger = get_logger(__name__)

EngineFactory = Callable[[str], sa.Engine]


class ConnectionProvider:
    """Lazily create and memoize one SQLAlchemy engine per provider."""

    def __init__(
        self,
        url: str | None,
        engine_factory: EngineFactory = ConfigService.create_database_engine,
    ) -> None:
        self._url = url
        self._engine_factory = engine_factory
        self._engine: sa.Engine | None = None
        self._lock = threading.Lock()

    def acquire(self) -> sa.Engine:
        """Return the shared engine, creating it on first use.

        Raises:
            DatabaseConnectionError: If no URL is configured or the database
                cannot be reached.
        """
        engine = self._engine
        if engine is not None:
            return engine

        with self._lock:
            if self._engine is None:
                self._engine = self._connect()
            return self._engine

    def reset(self) -> None:
        """Dispose of the engine so the next ``acquire`` reconnects."""
        with self._lock:
            if self._engine is not None:
                self._engine.dispose()
                _logger.debug("Database engine disposed")
            self._engine = None

    @property
    def is_connected(self) -> bool:
        return self._engine is not None

    @property
    def dialect_name(self) -> str:
        """SQLAlchemy dialect name of the active engine (e.g. ``postgresql``)."""
        return self.acquire().dialect.name

    # ---- internal ------------------------------------------------------------

    def _connect(self) -> sa.Engine:
        if not self._url:
            msg = "failed to establish database connection: no database URL configured"
            raise DatabaseConnectionError(msg)

        fp = hashlib.sha256(self._url.encode("utf-8")).hexdigest()[:10]
        _logger.info("Creating database engine (fingerprint=%s)", fp)

        try:
            engine = self._engine_factory(self._url)
        except (ArgumentError, SQLAlchemyError, ValueError, ImportError) as exc:
            msg = f"failed to establish database connection: {exc}"
            raise DatabaseConnectionError(msg) from exc

        try:
            with engine.connect() as conn:
                conn.execute(sa.text("SELECT 1"))
        except SQLAlchemyError as exc:
            engine.dispose()
            _logger.warning("Database connectivity check failed: %s", exc)
            msg = f"failed to establish database connection: {exc}"
            raise DatabaseConnectionError(msg) from exc

        _logger.info("Database engine ready (dialect=%s)", engine.dialect.name)
        return engine
