"""Command-line entrypoint for the sqlgate-mcp FastMCP server.

Flags mirror the environment configuration; any flag given on the command
line wins over the corresponding ``SQLGATE_MCP_*`` variable.
"""

from __future__ import annotations

import argparse
from collections.abc import Sequence
import traceback
from typing import get_args

from fastmcp.utilities.logging import get_logger

from sqlgate_mcp.models import ServerSettings, Transport
from sqlgate_mcp.server import create_server
from sqlgate_mcp.services.config_service import ConfigService

# Configure a module-level logger for local server logs.
_logger = get_logger(__name__)


def build_parser(defaults: ServerSettings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sqlgate-mcp",
        description="Expose a relational database to MCP clients",
    )
    parser.add_argument(
        "--dsn",
        default=defaults.database_url,
        help="SQLAlchemy database URL (env: SQLGATE_MCP_DATABASE_URL)",
    )
    parser.add_argument(
        "--read-only",
        action="store_true",
        default=defaults.read_only,
        help="Enable read-only mode",
    )
    parser.add_argument(
        "--with-explain-check",
        action="store_true",
        default=defaults.explain_check,
        help="Check query plan with `EXPLAIN` before executing",
    )
    parser.add_argument(
        "-t",
        "--transport",
        choices=get_args(Transport),
        default=defaults.transport,
        help="Transport type",
    )
    parser.add_argument("--ip", default=defaults.host, help="Server ip address")
    parser.add_argument("--port", type=int, default=defaults.port, help="Server port")
    parser.add_argument(
        "--lang", default=defaults.lang, help="Language code for tool descriptions (en/zh-CN/...)"
    )
    return parser


def parse_settings(argv: Sequence[str] | None = None) -> ServerSettings:
    """Resolve settings from the environment, then apply CLI flags."""
    defaults = ConfigService.load_settings()
    args = build_parser(defaults).parse_args(argv)
    return ServerSettings(
        database_url=args.dsn,
        read_only=args.read_only,
        explain_check=args.with_explain_check,
        transport=args.transport,
        host=args.ip,
        port=args.port,
        lang=args.lang,
    )


def main(argv: Sequence[str] | None = None) -> None:
    """Start the sqlgate-mcp FastMCP server via CLI."""
    settings = parse_settings(argv)
    mcp = create_server(settings)
    try:
        if settings.transport == "stdio":
            mcp.run()
        else:
            _logger.info(
                "Serving %s on %s:%d", settings.transport, settings.host, settings.port
            )
            mcp.run(transport=settings.transport, host=settings.host, port=settings.port)
    except KeyboardInterrupt:
        _logger.info("Interrupted by user. Exiting cleanly.")
    except Exception:  # noqa: BLE001
        traceback.print_exc(limit=1)
        raise SystemExit(1) from None


if __name__ == "__main__":
    # Delegate to main() so behavior is consistent across execution paths.
    main()
