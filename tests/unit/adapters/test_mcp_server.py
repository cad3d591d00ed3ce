"""MCP handlers: tool listing, JSON results and error results."""

import json

import mcp.types as types
import pytest
from mcp.server import Server

from adapters.mcp.server import ToolCallFailed, call_tool, create_server, list_tool_definitions
from sysdiag.config import AppConfig
from sysdiag.services.toolkit import DiagnosticsToolkit


def test_tools_listed_with_schemas(toolkit: DiagnosticsToolkit) -> None:
    tools = list_tool_definitions(toolkit)

    assert [tool.name for tool in tools] == [
        "get_health_alerts",
        "get_performance_stats",
        "get_battery_status",
        "get_thermal_status",
        "get_network_status",
        "get_system_health",
        "get_full_health_report",
    ]
    assert all(tool.inputSchema["type"] == "object" for tool in tools)
    assert tools[0].description.startswith("START HERE")


async def test_call_returns_indented_camel_case_json(toolkit: DiagnosticsToolkit) -> None:
    content = await call_tool(toolkit, "get_health_alerts", {})

    assert len(content) == 1
    assert isinstance(content[0], types.TextContent)
    assert content[0].text.startswith("{\n  ")
    document = json.loads(content[0].text)
    assert document["systemHealthScore"] == {"score": 100, "status": "Good"}


async def test_call_accepts_missing_arguments(toolkit: DiagnosticsToolkit) -> None:
    content = await call_tool(toolkit, "get_full_health_report", None)

    assert json.loads(content[0].text)["processCount"] == 212


async def test_failed_call_raises_with_tool_error_document(toolkit: DiagnosticsToolkit) -> None:
    with pytest.raises(ToolCallFailed) as exc_info:
        await call_tool(toolkit, "get_weather", {})

    assert json.loads(str(exc_info.value)) == {
        "error": "Unknown tool: get_weather",
        "tool": "get_weather",
    }


def test_create_server_registers_handlers(toolkit: DiagnosticsToolkit, config: AppConfig) -> None:
    server = create_server(toolkit, config)

    assert isinstance(server, Server)
    assert server.name == "system-health-mcp"
    assert types.ListToolsRequest in server.request_handlers
    assert types.CallToolRequest in server.request_handlers
