"""Glob and Grep tools over the sandbox tree."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

from mcp.types import Tool

from clawbox.agent_tools._registry import ToolEntry, ToolResult, tool_text
from clawbox.agent_tools._sandbox import glob_files, relative_display

NO_MATCHES = "(no matches)"


def grep_files(root: Path, pattern: str, path_glob: str | None = None) -> list[str]:
    """Return ``rel:lineno: line`` for every matching line.

    An invalid regex matches nothing. Files that are not UTF-8 text are skipped.
    """
    try:
        regex = re.compile(pattern)
    except re.error:
        return []
    files = glob_files(root, path_glob or "**")
    matches: list[str] = []
    for f in files:
        try:
            content = f.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            continue
        rel = relative_display(root, f)
        for lineno, line in enumerate(content.split("\n"), start=1):
            if regex.search(line):
                matches.append(f"{rel}:{lineno}: {line.strip()}")
    return matches


def search_tools(root: Path) -> list[ToolEntry]:
    async def glob(arguments: dict[str, Any]) -> ToolResult:
        files = glob_files(root, str(arguments.get("pattern") or "*"))
        if not files:
            return tool_text(NO_MATCHES)
        return tool_text("\n".join(relative_display(root, f) for f in files))

    async def grep(arguments: dict[str, Any]) -> ToolResult:
        path_arg = arguments.get("path")
        lines = grep_files(
            root,
            str(arguments.get("pattern") or ""),
            str(path_arg) if path_arg else None,
        )
        return tool_text("\n".join(lines) if lines else NO_MATCHES)

    return [
        ToolEntry(
            definition=Tool(
                name="Glob",
                description=(
                    "List files matching a glob pattern (e.g. **/*.py, src/**). "
                    f"Paths relative to {root}."
                ),
                inputSchema={
                    "type": "object",
                    "properties": {"pattern": {"type": "string", "description": "Glob pattern"}},
                    "required": ["pattern"],
                },
            ),
            handler=glob,
        ),
        ToolEntry(
            definition=Tool(
                name="Grep",
                description=f"Search for a regex in files under {root}. Returns matching lines.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "pattern": {"type": "string", "description": "Search pattern (regex)"},
                        "path": {
                            "type": "string",
                            "description": "Optional glob to limit which files are searched",
                        },
                    },
                    "required": ["pattern"],
                },
            ),
            handler=grep,
        ),
    ]
