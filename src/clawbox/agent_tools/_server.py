"""MCP server exposing the IPC tools over stdio.

Context (chat, group, main flag, IPC dir) comes from ``CLAWBOX_*``
environment variables set by whoever spawns the server.
"""

from __future__ import annotations

from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import CallToolResult, TextContent, Tool

from clawbox.agent_tools import ToolRegistry, ipc_tool_entries
from clawbox.ipc.emitter import IpcContext, IpcEmitter


async def dispatch(
    registry: ToolRegistry, name: str, arguments: dict[str, Any] | None
) -> list[TextContent] | CallToolResult:
    handler = registry.get_handler(name)
    if handler:
        return await handler(arguments or {})
    return [TextContent(type="text", text=f"Unknown tool: {name}")]


def create_server(context: IpcContext | None = None) -> tuple[Server, ToolRegistry]:
    registry = ToolRegistry(ipc_tool_entries(IpcEmitter(context or IpcContext.from_env())))
    server = Server("clawbox")

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        return registry.all_tools()

    @server.call_tool()
    async def call_tool(name: str, arguments: dict) -> list[TextContent] | CallToolResult:
        return await dispatch(registry, name, arguments)

    return server, registry


async def run_server() -> None:
    server, _ = create_server()
    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )
