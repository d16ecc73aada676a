"""FastMCP server implementation for sqlgate-mcp."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Final

import dotenv
from fastmcp import FastMCP
from fastmcp.utilities.logging import get_logger
from starlette.requests import Request
from starlette.responses import JSONResponse

from sqlgate_mcp.models import ServerSettings
from sqlgate_mcp.services.config_service import ConfigService
from sqlgate_mcp.services.connection import ConnectionProvider
from sqlgate_mcp.services.localization import get_translator
from sqlgate_mcp.services.tool_service import DatabaseToolService
from sqlgate_mcp.tools.mcp_tools import register_database_tools

# Load environment variables
dotenv.load_dotenv()

# Configure a module-level logger for local server logs.
_logger = get_logger(__name__)

SERVER_NAME: Final[str] = "sqlgate-mcp"
INSTRUCTIONS: Final[str] = (
    "This server exposes a relational database through list, describe, read, "
    "count, write, update and delete tools. Query tools return CSV text; write "
    "tools return the number of affected rows."
)


def create_server(
    settings: ServerSettings | None = None,
    service: DatabaseToolService | None = None,
) -> FastMCP:
    """Build a FastMCP server with the database tools registered.

    Args:
        settings: Resolved settings; read from the environment when omitted.
        service: Pre-built tool service, mainly for tests.
    """
    settings = settings or ConfigService.load_settings()
    tool_service = service or DatabaseToolService(
        ConnectionProvider(settings.database_url),
        explain_check=settings.explain_check,
    )

    # -- Lifespan: release the shared engine on shutdown ---------------------
    @asynccontextmanager
    async def lifespan(_mcp_instance: FastMCP) -> AsyncGenerator[None]:
        _logger.info(
            "Starting %s (read_only=%s, explain_check=%s)",
            SERVER_NAME,
            settings.read_only,
            settings.explain_check,
        )
        try:
            yield
        finally:
            _logger.info("Shutting down database tool service during lifespan shutdown")
            tool_service.close()

    mcp = FastMCP(name=SERVER_NAME, instructions=INSTRUCTIONS, lifespan=lifespan)

    # -- Tool Registration -------------------------------------------------------
    register_database_tools(
        mcp,
        tool_service,
        read_only=settings.read_only,
        translate=get_translator(settings.lang),
    )

    # -- Health Check ----------------------------------------------------------
    @mcp.custom_route("/health", methods=["GET"])
    async def health_check(_request: Request) -> JSONResponse:  # pyright: ignore[reportUnusedFunction]
        return JSONResponse(
            {
                "status": "healthy",
                "service": SERVER_NAME,
                "database_connected": tool_service.provider.is_connected,
            }
        )

    return mcp
