"""MCP server factory and stdio entry point.

Creates the low-level MCP server exposing the integration tools. Settings
are loaded once in main() and passed explicitly to the server; a fresh
Salesforce connection is established for every tool call.
"""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Awaitable, Callable
from typing import Any

import structlog
from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server
from simple_salesforce import Salesforce

from src.salesforce_mcp.config import Settings, get_settings
from src.salesforce_mcp.core.errors import ConfigurationError, IntegrationError
from src.salesforce_mcp.core.logging import configure_structlog
from src.salesforce_mcp.integrations.manager import IntegrationManager
from src.salesforce_mcp.salesforce.client import SalesforceClient
from src.salesforce_mcp.salesforce.connection import create_salesforce_connection
from src.salesforce_mcp.tools import TOOL_HANDLERS, TOOLS
from src.salesforce_mcp.tools.results import text_result

logger = structlog.get_logger(__name__)

SERVER_NAME = "salesforce-mcp-server-enhanced"
SERVER_VERSION = "1.1.0"

Connector = Callable[[Settings], Awaitable[Salesforce]]


def unknown_tool_message(name: str) -> str:
    available = "\n".join(f"- {tool.name}" for tool in TOOLS)
    return (
        f"Unknown tool: {name}.\n\nAvailable tools:\n{available}\n\n"
        "Note: This server only provides integration management tools. "
        "Use a general-purpose Salesforce server for standard record operations."
    )


async def dispatch_tool(
    settings: Settings,
    name: str,
    arguments: dict[str, Any] | None,
    connect: Connector = create_salesforce_connection,
) -> types.CallToolResult:
    """Connect to Salesforce and run the named tool.

    Any failure, including connection and authentication errors, is
    returned as an error result rather than raised.
    """
    handler = TOOL_HANDLERS.get(name)
    if handler is None:
        return text_result(unknown_tool_message(name), is_error=True)

    try:
        if not arguments:
            raise ConfigurationError("Arguments are required")

        sf = await connect(settings)
        manager = IntegrationManager(SalesforceClient(sf))
        return await handler(manager, arguments)
    except IntegrationError as exc:
        logger.warning("tool.call_failed", tool=name, error_type=type(exc).__name__, error=str(exc))
        return text_result(f"Error: {exc}", is_error=True)
    except Exception as exc:
        logger.exception("tool.call_crashed", tool=name)
        return text_result(f"Error: {exc}", is_error=True)


def create_server(settings: Settings, connect: Connector = create_salesforce_connection) -> Server:
    """Build the MCP server with the integration tools registered."""
    server: Server = Server(SERVER_NAME, version=SERVER_VERSION)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return list(TOOLS)

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any]) -> types.CallToolResult:
        logger.info("tool.called", tool=name)
        return await dispatch_tool(settings, name, arguments, connect)

    return server


async def run(settings: Settings) -> None:
    """Serve the tools over stdio until the client disconnects."""
    server = create_server(settings)
    async with stdio_server() as (read_stream, write_stream):
        logger.info(
            "server.started",
            server=SERVER_NAME,
            version=SERVER_VERSION,
            connection_type=settings.SALESFORCE_CONNECTION_TYPE.value,
        )
        await server.run(read_stream, write_stream, server.create_initialization_options())


def main() -> None:
    """Console entry point. Exits non-zero only on startup failure."""
    try:
        settings = get_settings()
    except Exception as exc:
        print(f"Fatal error loading settings: {exc}", file=sys.stderr)
        sys.exit(1)

    configure_structlog(settings)

    try:
        asyncio.run(run(settings))
    except KeyboardInterrupt:
        pass
    except Exception:
        logger.exception("server.fatal_error")
        sys.exit(1)


if __name__ == "__main__":
    main()
