"""
MCP stdio server exposing the diagnostics toolkit.

stdout carries the protocol stream, so logging is routed to stderr before
the server starts. Reports are returned as indented camelCase JSON text;
a failed tool call becomes an error result carrying the ``ToolError`` JSON.
"""

import asyncio
from typing import Any

import mcp.server.stdio
import mcp.types as types
import structlog
from mcp.server import NotificationOptions, Server
from mcp.server.models import InitializationOptions

from adapters.system import LocalHost
from sysdiag.config import AppConfig, get_config
from sysdiag.services.toolkit import DiagnosticsToolkit
from sysdiag.telemetry import configure_logging

logger = structlog.get_logger(__name__)


class ToolCallFailed(Exception):
    """Raised from the call handler so the transport flags the result as an error."""


def list_tool_definitions(toolkit: DiagnosticsToolkit) -> list[types.Tool]:
    return [
        types.Tool(name=spec.name.value, description=spec.description, inputSchema=spec.input_schema)
        for spec in toolkit.tool_specs()
    ]


async def call_tool(
    toolkit: DiagnosticsToolkit, name: str, arguments: dict[str, Any] | None
) -> list[types.TextContent]:
    outcome = await toolkit.invoke(name, arguments)
    if outcome.is_error:
        raise ToolCallFailed(outcome.to_json())
    return [types.TextContent(type="text", text=outcome.to_json())]


def create_server(toolkit: DiagnosticsToolkit, config: AppConfig) -> Server:
    server = Server(config.server.name)

    @server.list_tools()
    async def handle_list_tools() -> list[types.Tool]:
        return list_tool_definitions(toolkit)

    @server.call_tool()
    async def handle_call_tool(
        name: str, arguments: dict[str, Any] | None
    ) -> list[types.TextContent]:
        return await call_tool(toolkit, name, arguments)

    return server


async def serve(config: AppConfig) -> None:
    toolkit = DiagnosticsToolkit(LocalHost(config.collection), config)
    server = create_server(toolkit, config)
    logger.info("mcp_server_starting", name=config.server.name, version=config.server.version)

    async with mcp.server.stdio.stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            InitializationOptions(
                server_name=config.server.name,
                server_version=config.server.version,
                capabilities=server.get_capabilities(
                    notification_options=NotificationOptions(),
                    experimental_capabilities={},
                ),
            ),
        )


def main() -> None:
    config = get_config()
    configure_logging(config.logging)
    asyncio.run(serve(config))


if __name__ == "__main__":
    main()
