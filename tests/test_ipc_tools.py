"""Tests for the IPC tool handlers and the tool registry."""

from __future__ import annotations

import json

import pytest
from mcp.types import CallToolResult, TextContent, Tool

from clawbox.agent_tools import (
    IPC_TOOL_PREFIX,
    ToolEntry,
    ToolRegistry,
    build_registry,
    ipc_tool_entries,
    result_is_error,
    result_text,
    tool_error,
    tool_text,
)


def _registry(emitter) -> ToolRegistry:
    return ToolRegistry(ipc_tool_entries(emitter))


async def _call(registry: ToolRegistry, name: str, arguments: dict):
    handler = registry.get_handler(name)
    assert handler is not None, name
    return await handler(arguments)


class TestToolRegistry:
    def _entry(self, name: str) -> ToolEntry:
        async def handle(arguments):
            return tool_text("ok")

        return ToolEntry(
            definition=Tool(name=name, description="d", inputSchema={"type": "object"}),
            handler=handle,
        )

    def test_duplicate_rejected(self):
        registry = ToolRegistry([self._entry("a")])
        with pytest.raises(ValueError, match="Duplicate tool name: a"):
            registry.register(self._entry("a"))

    def test_lookup(self):
        registry = ToolRegistry([self._entry("a"), self._entry("b")])
        assert "a" in registry
        assert "c" not in registry
        assert len(registry) == 2
        assert registry.names() == ["a", "b"]
        assert registry.get_handler("c") is None

    def test_openai_tools_format(self):
        registry = ToolRegistry([self._entry("a")])
        assert registry.openai_tools() == [
            {
                "type": "function",
                "function": {"name": "a", "description": "d", "parameters": {"type": "object"}},
            }
        ]

    def test_build_registry_prefixes_ipc_tools(self, group_emitter, workspace):
        registry = build_registry(group_emitter, workspace)
        names = registry.names()
        assert f"{IPC_TOOL_PREFIX}send_message" in names
        assert "send_message" not in names
        for builtin in ("Bash", "Read", "Write", "Edit", "Glob", "Grep", "WebFetch", "WebSearch"):
            assert builtin in names

    def test_every_tool_exports_object_schema(self, group_emitter, workspace):
        specs = build_registry(group_emitter, workspace).openai_tools()
        assert specs
        for spec in specs:
            assert spec["function"]["parameters"]["type"] == "object", spec["function"]["name"]


class TestResultHelpers:
    def test_result_text_from_content_list(self):
        assert result_text(tool_text("hello")) == "hello"

    def test_result_text_from_error(self):
        result = tool_error("boom")
        assert isinstance(result, CallToolResult)
        assert result.isError is True
        assert result_text(result) == "boom"

    def test_result_text_joins_parts(self):
        parts = [TextContent(type="text", text="a"), TextContent(type="text", text="b")]
        assert result_text(parts) == "a\nb"

    def test_error_flag(self):
        assert result_is_error(tool_error("boom")) is True
        assert result_is_error(tool_text("fine")) is False
        assert result_is_error(CallToolResult(content=[], isError=False)) is False


class TestSendMessageTool:
    async def test_queues_message(self, group_emitter, ipc_dir):
        result = await _call(_registry(group_emitter), "send_message", {"text": "hi"})
        assert result_text(result).startswith("Message queued for delivery (")
        assert len(list((ipc_dir / "messages").glob("*.json"))) == 1

    async def test_empty_text_is_error(self, group_emitter, ipc_dir):
        result = await _call(_registry(group_emitter), "send_message", {"text": ""})
        assert isinstance(result, CallToolResult) and result.isError
        assert not (ipc_dir / "messages").exists()


class TestScheduleTaskTool:
    async def test_success_message(self, group_emitter):
        result = await _call(
            _registry(group_emitter),
            "schedule_task",
            {"prompt": "p", "schedule_type": "interval", "schedule_value": "300000"},
        )
        text = result_text(result)
        assert text.startswith("Task scheduled (")
        assert text.endswith("): interval - 300000")

    async def test_validation_error_returned_to_model(self, group_emitter, ipc_dir):
        result = await _call(
            _registry(group_emitter),
            "schedule_task",
            {"prompt": "p", "schedule_type": "cron", "schedule_value": "not-a-cron"},
        )
        assert isinstance(result, CallToolResult) and result.isError
        assert 'Invalid cron: "not-a-cron"' in result_text(result)
        assert not (ipc_dir / "tasks").exists()

    async def test_missing_prompt(self, group_emitter):
        result = await _call(
            _registry(group_emitter),
            "schedule_task",
            {"schedule_type": "interval", "schedule_value": "1000"},
        )
        assert isinstance(result, CallToolResult) and result.isError

    def test_target_field_only_offered_to_main(self, group_emitter, main_emitter):
        def schema(emitter):
            (tool,) = [t for t in _registry(emitter).all_tools() if t.name == "schedule_task"]
            return tool.inputSchema["properties"]

        assert "target_group_jid" not in schema(group_emitter)
        assert "target_group_jid" in schema(main_emitter)

    async def test_non_main_target_ignored(self, group_emitter, ipc_dir):
        await _call(
            _registry(group_emitter),
            "schedule_task",
            {
                "prompt": "p",
                "schedule_type": "interval",
                "schedule_value": "1000",
                "target_group_jid": "other@g.us",
            },
        )
        (f,) = list((ipc_dir / "tasks").glob("*.json"))
        assert json.loads(f.read_text())["targetJid"] == "team@g.us"


class TestListTasksTool:
    async def test_no_snapshot(self, group_emitter):
        result = await _call(_registry(group_emitter), "list_tasks", {})
        assert result_text(result) == "No scheduled tasks found."

    async def test_malformed_snapshot(self, group_emitter, ipc_dir):
        (ipc_dir / "current_tasks.json").write_text("not json")
        result = await _call(_registry(group_emitter), "list_tasks", {})
        assert result_text(result).startswith("Error reading tasks:")


class TestTaskActionTools:
    @pytest.mark.parametrize(
        "tool,expected",
        [
            ("pause_task", "Task t1 pause requested."),
            ("resume_task", "Task t1 resume requested."),
            ("cancel_task", "Task t1 cancellation requested."),
        ],
    )
    async def test_action(self, group_emitter, ipc_dir, tool, expected):
        result = await _call(_registry(group_emitter), tool, {"task_id": "t1"})
        assert result_text(result) == expected
        (f,) = list((ipc_dir / "tasks").glob("*.json"))
        assert json.loads(f.read_text())["type"] == tool

    async def test_missing_task_id(self, group_emitter):
        result = await _call(_registry(group_emitter), "pause_task", {})
        assert isinstance(result, CallToolResult) and result.isError


class TestRegisterGroupTool:
    ARGS = {"jid": "new@g.us", "name": "Family", "folder": "family-chat", "trigger": "@Andy"}

    async def test_main_registers(self, main_emitter, ipc_dir):
        result = await _call(_registry(main_emitter), "register_group", self.ARGS)
        assert result_text(result) == (
            'Group "Family" registered. It will start receiving messages immediately.'
        )
        assert len(list((ipc_dir / "tasks").glob("*.json"))) == 1

    async def test_non_main_refused(self, group_emitter, ipc_dir):
        result = await _call(_registry(group_emitter), "register_group", self.ARGS)
        assert isinstance(result, CallToolResult) and result.isError
        assert "Only the main group" in result_text(result)
        assert not (ipc_dir / "tasks").exists()

    async def test_missing_fields(self, main_emitter):
        result = await _call(_registry(main_emitter), "register_group", {"jid": "x"})
        assert "name, folder, trigger" in result_text(result)
