"""send_message tool."""

from __future__ import annotations

from typing import Any

from mcp.types import Tool

from clawbox.agent_tools._registry import ToolEntry, ToolResult, tool_error, tool_text
from clawbox.ipc.emitter import IpcEmitter


def _definition(name: str) -> Tool:
    return Tool(
        name=name,
        description=(
            "Send a message to the user or group immediately while "
            "you're still running. Use this for progress updates or "
            "to send multiple messages. You can call this multiple "
            "times. Note: when running as a scheduled task, your "
            "final output is NOT sent to the user. Use this tool "
            "if you need to communicate with the user or group."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "text": {
                    "type": "string",
                    "description": "The message text to send",
                },
                "sender": {
                    "type": "string",
                    "description": 'Your role/identity name (e.g. "Researcher").',
                },
            },
            "required": ["text"],
        },
    )


def messaging_tools(emitter: IpcEmitter, prefix: str = "") -> list[ToolEntry]:
    name = f"{prefix}send_message"

    async def handle(arguments: dict[str, Any]) -> ToolResult:
        text = arguments.get("text")
        if not isinstance(text, str) or not text:
            return tool_error('send_message requires a non-empty "text" field.')
        filename = emitter.send_message(text, sender=arguments.get("sender") or None)
        return tool_text(f"Message queued for delivery ({filename})")

    return [ToolEntry(definition=_definition(name), handler=handle)]
