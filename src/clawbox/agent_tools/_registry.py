"""Tool registry shared by the chat loop and the MCP server.

Tools are described with MCP ``Tool`` definitions (name, description, JSON
schema) and handled by async callables returning MCP content. The chat loop
flattens results to text and converts definitions to chat-completions
function specs; the MCP server returns them as-is.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Any

from mcp.types import CallToolResult, TextContent, Tool

ToolResult = list[TextContent] | CallToolResult
ToolHandler = Callable[[dict[str, Any]], Awaitable[ToolResult]]


@dataclass(frozen=True)
class ToolEntry:
    """A registered tool with its definition and handler."""

    definition: Tool
    handler: ToolHandler

    @property
    def name(self) -> str:
        return self.definition.name


class ToolRegistry:
    """Name → tool lookup for one invocation. Names must be unique."""

    def __init__(self, entries: Iterable[ToolEntry] = ()) -> None:
        self._tools: dict[str, ToolEntry] = {}
        self.extend(entries)

    def register(self, entry: ToolEntry) -> None:
        if entry.name in self._tools:
            raise ValueError(f"Duplicate tool name: {entry.name}")
        self._tools[entry.name] = entry

    def extend(self, entries: Iterable[ToolEntry]) -> None:
        for entry in entries:
            self.register(entry)

    def get_handler(self, name: str) -> ToolHandler | None:
        entry = self._tools.get(name)
        return entry.handler if entry else None

    def names(self) -> list[str]:
        return list(self._tools)

    def all_tools(self) -> list[Tool]:
        return [e.definition for e in self._tools.values()]

    def openai_tools(self) -> list[dict[str, Any]]:
        """Definitions in chat-completions ``tools`` format."""
        return [
            {
                "type": "function",
                "function": {
                    "name": t.name,
                    "description": t.description or "",
                    "parameters": t.inputSchema,
                },
            }
            for t in self.all_tools()
        ]

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)


def tool_text(text: str) -> list[TextContent]:
    return [TextContent(type="text", text=text)]


def tool_error(msg: str) -> CallToolResult:
    """Return an MCP error result with a text message."""
    return CallToolResult(
        content=[TextContent(type="text", text=msg)],
        isError=True,
    )


def result_text(result: ToolResult) -> str:
    """Flatten a tool result to the text fed back to the model."""
    content = result.content if isinstance(result, CallToolResult) else result
    return "\n".join(c.text for c in content if isinstance(c, TextContent))


def result_is_error(result: ToolResult) -> bool:
    return isinstance(result, CallToolResult) and bool(result.isError)
