"""Pydantic models for server configuration.

Kept small: the server only needs connection, safety and transport settings.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

Transport = Literal["stdio", "sse", "http"]


class ServerSettings(BaseModel):
    """Runtime settings resolved from the environment and CLI flags."""

    database_url: str | None = Field(
        default=None, description="SQLAlchemy database URL (DSN) of the target database"
    )
    read_only: bool = Field(
        default=False, description="Withhold the create/alter/write/update/delete tools"
    )
    explain_check: bool = Field(
        default=False, description="Check statement plans with EXPLAIN before executing"
    )
    transport: Transport = Field(default="stdio", description="MCP transport to serve on")
    host: str = Field(default="localhost", description="Bind address for network transports")
    port: int = Field(default=8080, ge=1, le=65535, description="Port for network transports")
    lang: str = Field(default="en", description="Locale for tool descriptions (en, zh-CN, ...)")
