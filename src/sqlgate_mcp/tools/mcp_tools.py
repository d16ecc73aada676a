"""MCP tool registration for the database tools.

Exposes a `register_database_tools` function that attaches the schema and
data tools to a FastMCP instance while delegating the actual work to a
`DatabaseToolService`. Query tools return CSV text; mutation tools return an
affected-rows summary. In read-only mode the mutation tools are not
registered at all.

Descriptions are localized at registration time, so annotations here are
evaluated eagerly.
"""

import asyncio
from collections.abc import Callable
from typing import Annotated, Final

from fastmcp import Context, FastMCP
from fastmcp.exceptions import ToolError
from fastmcp.utilities.logging import get_logger
from pydantic import Field

from sqlgate_mcp.errors import QueryError, SqlGateError
from sqlgate_mcp.execute.models import StatementIntent
from sqlgate_mcp.execute.tabular import encode_csv
from sqlgate_mcp.services.localization import Translator, get_translator
from sqlgate_mcp.services.tool_service import DatabaseToolService
from sqlgate_mcp.tools.catalog import Catalog

_logger = get_logger(__name__)
MAX_QUERY_DISPLAY: Final[int] = 100

READ_TOOLS: Final[tuple[str, ...]] = (
    "list_database",
    "list_table",
    "desc_table",
    "read_query",
    "count_query",
)
WRITE_TOOLS: Final[tuple[str, ...]] = (
    "create_table",
    "alter_table",
    "write_query",
    "update_query",
    "delete_query",
)


def _preview(sql: str) -> str:
    return sql[:MAX_QUERY_DISPLAY] + ("..." if len(sql) > MAX_QUERY_DISPLAY else "")


async def _run_tool(ctx: Context, tool: str, fn: Callable[..., str], *args: object) -> str:
    """Run blocking tool work off the event loop and surface core errors."""
    try:
        return await asyncio.to_thread(fn, *args)
    except SqlGateError as exc:
        _logger.warning("%s failed: %s", tool, exc)
        await ctx.error(f"{tool} failed: {exc}")
        raise ToolError(str(exc)) from exc


def _list_databases(service: DatabaseToolService) -> str:
    stmt = Catalog(service.dialect_name).list_databases()
    return service.handle_query(stmt.sql, params=stmt.params)


def _list_tables(service: DatabaseToolService) -> str:
    stmt = Catalog(service.dialect_name).list_tables()
    return service.handle_query(stmt.sql, params=stmt.params)


def _describe_table(service: DatabaseToolService, name: str) -> str:
    stmt = Catalog(service.dialect_name).describe_table(name)
    result = service.run_query(stmt.sql, params=stmt.params)
    if not result.rows:
        msg = f"table {name} does not exist"
        raise QueryError(msg)
    return encode_csv(result.rows, result.columns)


def _count_rows(service: DatabaseToolService, name: str) -> str:
    stmt = Catalog(service.dialect_name).count_rows(name)
    return service.handle_query(stmt.sql, params=stmt.params)


def register_database_tools(
    mcp: FastMCP,
    service: DatabaseToolService,
    *,
    read_only: bool = False,
    translate: Translator | None = None,
) -> list[str]:
    """Register the database tools and return the names registered."""

    t = translate or get_translator(None)

    # -- Schema tools ----------------------------------------------------------

    @mcp.tool(name="list_database", description=t("list_database"))
    async def list_database(ctx: Context) -> str:  # pyright: ignore[reportUnusedFunction]
        _logger.info("list_database")
        return await _run_tool(ctx, "list_database", _list_databases, service)

    @mcp.tool(name="list_table", description=t("list_table"))
    async def list_table(ctx: Context) -> str:  # pyright: ignore[reportUnusedFunction]
        _logger.info("list_table")
        return await _run_tool(ctx, "list_table", _list_tables, service)

    @mcp.tool(name="desc_table", description=t("desc_table"))
    async def desc_table(  # pyright: ignore[reportUnusedFunction]
        ctx: Context,
        name: Annotated[str, Field(description=t("desc_table_name"))],
    ) -> str:
        _logger.info("desc_table: %s", name)
        return await _run_tool(ctx, "desc_table", _describe_table, service, name)

    # -- Data tools ------------------------------------------------------------

    @mcp.tool(name="read_query", description=t("read_query"))
    async def read_query(  # pyright: ignore[reportUnusedFunction]
        ctx: Context,
        query: Annotated[str, Field(description=t("query_description"))],
    ) -> str:
        _logger.info("read_query: %s", _preview(query))
        return await _run_tool(
            ctx, "read_query", service.handle_query, query, StatementIntent.SELECT
        )

    @mcp.tool(name="count_query", description=t("count_query"))
    async def count_query(  # pyright: ignore[reportUnusedFunction]
        ctx: Context,
        name: Annotated[str, Field(description=t("count_query_name"))],
    ) -> str:
        _logger.info("count_query: %s", name)
        return await _run_tool(ctx, "count_query", _count_rows, service, name)

    registered = list(READ_TOOLS)

    if read_only:
        _logger.info("Read-only mode: mutation tools withheld")
        return registered

    @mcp.tool(name="create_table", description=t("create_table"))
    async def create_table(  # pyright: ignore[reportUnusedFunction]
        ctx: Context,
        query: Annotated[str, Field(description=t("create_table_query"))],
    ) -> str:
        _logger.info("create_table: %s", _preview(query))
        return await _run_tool(ctx, "create_table", service.handle_exec, query)

    @mcp.tool(name="alter_table", description=t("alter_table"))
    async def alter_table(  # pyright: ignore[reportUnusedFunction]
        ctx: Context,
        query: Annotated[str, Field(description=t("alter_table_query"))],
    ) -> str:
        _logger.info("alter_table: %s", _preview(query))
        return await _run_tool(ctx, "alter_table", service.handle_exec, query)

    @mcp.tool(name="write_query", description=t("write_query"))
    async def write_query(  # pyright: ignore[reportUnusedFunction]
        ctx: Context,
        query: Annotated[str, Field(description=t("query_description"))],
    ) -> str:
        _logger.info("write_query: %s", _preview(query))
        return await _run_tool(
            ctx, "write_query", service.handle_exec, query, StatementIntent.INSERT
        )

    @mcp.tool(name="update_query", description=t("update_query"))
    async def update_query(  # pyright: ignore[reportUnusedFunction]
        ctx: Context,
        query: Annotated[str, Field(description=t("query_description"))],
    ) -> str:
        _logger.info("update_query: %s", _preview(query))
        return await _run_tool(
            ctx, "update_query", service.handle_exec, query, StatementIntent.UPDATE
        )

    @mcp.tool(name="delete_query", description=t("delete_query"))
    async def delete_query(  # pyright: ignore[reportUnusedFunction]
        ctx: Context,
        query: Annotated[str, Field(description=t("query_description"))],
    ) -> str:
        _logger.info("delete_query: %s", _preview(query))
        return await _run_tool(
            ctx, "delete_query", service.handle_exec, query, StatementIntent.DELETE
        )

    registered.extend(WRITE_TOOLS)
    return registered
