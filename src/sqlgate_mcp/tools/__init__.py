"""MCP tool package: catalog SQL and FastMCP registration."""

from __future__ import annotations

from .catalog import Catalog, quote_table_name
from .mcp_tools import register_database_tools

__all__ = [
    "Catalog",
    "quote_table_name",
    "register_database_tools",
]
