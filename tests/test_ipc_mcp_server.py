"""Tests for the stdio MCP server wiring."""

from __future__ import annotations

from mcp.server import Server
from mcp.types import TextContent

from clawbox.agent_tools import result_text
from clawbox.agent_tools._server import create_server, dispatch

from conftest import make_context


class TestCreateServer:
    def test_registers_ipc_tools_unprefixed(self, ipc_dir):
        server, registry = create_server(make_context(ipc_dir))
        assert isinstance(server, Server)
        assert set(registry.names()) == {
            "send_message",
            "schedule_task",
            "list_tasks",
            "pause_task",
            "resume_task",
            "cancel_task",
            "register_group",
        }

    def test_context_from_env(self, ipc_dir, monkeypatch):
        for key, value in make_context(ipc_dir, is_main=True).to_env().items():
            monkeypatch.setenv(key, value)
        _, registry = create_server()
        (tool,) = [t for t in registry.all_tools() if t.name == "schedule_task"]
        assert "target_group_jid" in tool.inputSchema["properties"]


class TestDispatch:
    async def test_routes_to_handler(self, ipc_dir):
        _, registry = create_server(make_context(ipc_dir))
        result = await dispatch(registry, "send_message", {"text": "hi"})
        assert result_text(result).startswith("Message queued for delivery")
        assert len(list((ipc_dir / "messages").glob("*.json"))) == 1

    async def test_unknown_tool(self, ipc_dir):
        _, registry = create_server(make_context(ipc_dir))
        result = await dispatch(registry, "nope", None)
        assert result == [TextContent(type="text", text="Unknown tool: nope")]

    async def test_none_arguments(self, ipc_dir):
        _, registry = create_server(make_context(ipc_dir))
        result = await dispatch(registry, "list_tasks", None)
        assert result_text(result) == "No scheduled tasks found."
