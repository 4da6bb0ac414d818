"""register_group tool (main group only)."""

from __future__ import annotations

from typing import Any

from mcp.types import Tool

from clawbox.agent_tools._registry import ToolEntry, ToolResult, tool_error, tool_text
from clawbox.ipc.emitter import IpcEmitter, PermissionDeniedError

_REQUIRED = ("jid", "name", "folder", "trigger")


def _definition(name: str) -> Tool:
    return Tool(
        name=name,
        description=(
            "Register a new group so the agent can respond to messages there. "
            "Main group only. The folder name should be lowercase with "
            'hyphens (e.g., "family-chat").'
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "jid": {
                    "type": "string",
                    "description": 'The chat JID (e.g., "120363336345536173@g.us")',
                },
                "name": {"type": "string", "description": "Display name for the group"},
                "folder": {
                    "type": "string",
                    "description": 'Folder name for group files (e.g., "family-chat")',
                },
                "trigger": {"type": "string", "description": 'Trigger word (e.g., "@Andy")'},
            },
            "required": list(_REQUIRED),
        },
    )


def admin_tools(emitter: IpcEmitter, prefix: str = "") -> list[ToolEntry]:
    async def handle(arguments: dict[str, Any]) -> ToolResult:
        missing = [k for k in _REQUIRED if not arguments.get(k)]
        if missing:
            return tool_error(f"register_group is missing: {', '.join(missing)}")
        try:
            emitter.register_group(
                jid=str(arguments["jid"]),
                name=str(arguments["name"]),
                folder=str(arguments["folder"]),
                trigger=str(arguments["trigger"]),
            )
        except PermissionDeniedError as exc:
            return tool_error(str(exc))
        return tool_text(
            f'Group "{arguments["name"]}" registered. It will start receiving messages immediately.'
        )

    return [ToolEntry(definition=_definition(f"{prefix}register_group"), handler=handle)]
