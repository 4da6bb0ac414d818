"""WebFetch and WebSearch tools."""

from __future__ import annotations

from typing import Any

import aiohttp
from mcp.types import Tool

from clawbox.agent_tools._registry import ToolEntry, ToolResult, tool_error, tool_text

MAX_FETCH_CHARS = 100_000
ERROR_PREVIEW_CHARS = 500
USER_AGENT = "clawbox/0.1"

WEB_SEARCH_UNAVAILABLE = (
    "WebSearch is not implemented in custom provider mode. "
    "Use WebFetch with a specific URL if you have one."
)


async def fetch_url(url: str) -> tuple[bool, str]:
    """GET *url* and return ``(ok, text)`` with the body capped at MAX_FETCH_CHARS."""
    if not url.startswith(("http://", "https://")):
        return False, "Error: URL must start with http:// or https://"
    try:
        async with (
            aiohttp.ClientSession(headers={"User-Agent": USER_AGENT}) as session,
            session.get(url) as resp,
        ):
            text = await resp.text(errors="replace")
            if resp.status >= 400:
                return False, f"Error: {resp.status} {resp.reason}\n{text[:ERROR_PREVIEW_CHARS]}"
            return True, text[:MAX_FETCH_CHARS]
    except (aiohttp.ClientError, TimeoutError, ValueError) as exc:
        return False, f"Error: {exc}"


def web_tools() -> list[ToolEntry]:
    async def web_fetch(arguments: dict[str, Any]) -> ToolResult:
        ok, text = await fetch_url(str(arguments.get("url") or ""))
        return tool_text(text) if ok else tool_error(text)

    async def web_search(arguments: dict[str, Any]) -> ToolResult:
        return tool_text(WEB_SEARCH_UNAVAILABLE)

    return [
        ToolEntry(
            definition=Tool(
                name="WebSearch",
                description=(
                    "Search the web. Not available in this mode: returns a note "
                    "pointing at WebFetch."
                ),
                inputSchema={
                    "type": "object",
                    "properties": {"query": {"type": "string", "description": "Search query"}},
                    "required": ["query"],
                },
            ),
            handler=web_search,
        ),
        ToolEntry(
            definition=Tool(
                name="WebFetch",
                description="Fetch content from a URL. Returns response text or error.",
                inputSchema={
                    "type": "object",
                    "properties": {"url": {"type": "string", "description": "URL to fetch"}},
                    "required": ["url"],
                },
            ),
            handler=web_fetch,
        ),
    ]
