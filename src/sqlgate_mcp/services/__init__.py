"""Services package for sqlgate-mcp.

Main Components:
- ConfigService: Configuration and database engine creation
- ConnectionProvider: Lazily created, shared database engine
- DatabaseToolService: Orchestration behind the MCP tools
"""

from .config_service import ConfigService
from .connection import ConnectionProvider
from .tool_service import DatabaseToolService

__all__ = [
    "ConfigService",
    "ConnectionProvider",
    "DatabaseToolService",
]
