"""Read, Write and Edit tools, confined to the sandbox root."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from mcp.types import Tool

from clawbox.agent_tools._registry import ToolEntry, ToolResult, tool_error, tool_text
from clawbox.agent_tools._sandbox import SandboxPathError, resolve_sandbox_path


def _path_property(root: Path) -> dict[str, str]:
    return {"type": "string", "description": f"Relative path from {root}"}


def file_tools(root: Path) -> list[ToolEntry]:
    async def read(arguments: dict[str, Any]) -> ToolResult:
        try:
            path = resolve_sandbox_path(root, str(arguments.get("path") or ""))
            return tool_text(path.read_text(encoding="utf-8"))
        except (SandboxPathError, OSError, UnicodeDecodeError) as exc:
            return tool_error(f"Error: {exc}")

    async def write(arguments: dict[str, Any]) -> ToolResult:
        raw_path = str(arguments.get("path") or "")
        content = arguments.get("content")
        if not isinstance(content, str):
            content = "" if content is None else str(content)
        try:
            path = resolve_sandbox_path(root, raw_path)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except (SandboxPathError, OSError) as exc:
            return tool_error(f"Error: {exc}")
        return tool_text(f"Wrote {raw_path}")

    async def edit(arguments: dict[str, Any]) -> ToolResult:
        raw_path = str(arguments.get("path") or "")
        old = str(arguments.get("old_string") or "")
        new = str(arguments.get("new_string") or "")
        try:
            path = resolve_sandbox_path(root, raw_path)
            content = path.read_text(encoding="utf-8")
            if not old or old not in content:
                return tool_error("Error: old_string not found in file")
            path.write_text(content.replace(old, new, 1), encoding="utf-8")
        except (SandboxPathError, OSError, UnicodeDecodeError) as exc:
            return tool_error(f"Error: {exc}")
        return tool_text(f"Edited {raw_path}")

    return [
        ToolEntry(
            definition=Tool(
                name="Read",
                description="Read contents of a file.",
                inputSchema={
                    "type": "object",
                    "properties": {"path": _path_property(root)},
                    "required": ["path"],
                },
            ),
            handler=read,
        ),
        ToolEntry(
            definition=Tool(
                name="Write",
                description="Write content to a file. Creates parent directories if needed.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "path": _path_property(root),
                        "content": {"type": "string", "description": "Content to write"},
                    },
                    "required": ["path", "content"],
                },
            ),
            handler=write,
        ),
        ToolEntry(
            definition=Tool(
                name="Edit",
                description=(
                    "Edit a file: replace the first exact occurrence of "
                    "old_string with new_string."
                ),
                inputSchema={
                    "type": "object",
                    "properties": {
                        "path": _path_property(root),
                        "old_string": {"type": "string", "description": "Exact string to find"},
                        "new_string": {"type": "string", "description": "Replacement string"},
                    },
                    "required": ["path", "old_string", "new_string"],
                },
            ),
            handler=edit,
        ),
    ]
