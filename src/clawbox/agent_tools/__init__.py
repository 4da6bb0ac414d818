"""Agent tool catalog.

Two sources are merged into one registry per invocation:

  IPC tools        - send_message, schedule_task, list_tasks, pause/resume/
                     cancel_task, register_group (write to the host via IPC)
  sandboxed tools  - Bash, Read, Write, Edit, Glob, Grep, WebFetch, WebSearch

In the chat loop the IPC tools carry the ``mcp__clawbox__`` prefix so they
are named the same as when an MCP client reaches them through the stdio
server.
"""

from __future__ import annotations

from pathlib import Path

from clawbox.agent_tools._registry import (
    ToolEntry,
    ToolRegistry,
    result_is_error,
    result_text,
    tool_error,
    tool_text,
)
from clawbox.agent_tools._sandbox import SandboxPathError, resolve_sandbox_path
from clawbox.agent_tools._tools_admin import admin_tools
from clawbox.agent_tools._tools_files import file_tools
from clawbox.agent_tools._tools_messaging import messaging_tools
from clawbox.agent_tools._tools_search import search_tools
from clawbox.agent_tools._tools_shell import BASH_TIMEOUT_SECONDS, shell_tools
from clawbox.agent_tools._tools_tasks import task_tools
from clawbox.agent_tools._tools_web import web_tools
from clawbox.ipc.emitter import IpcEmitter

IPC_TOOL_PREFIX = "mcp__clawbox__"


def ipc_tool_entries(emitter: IpcEmitter, prefix: str = "") -> list[ToolEntry]:
    return [
        *messaging_tools(emitter, prefix),
        *task_tools(emitter, prefix),
        *admin_tools(emitter, prefix),
    ]


def builtin_tool_entries(
    root: Path, shell_timeout: float = BASH_TIMEOUT_SECONDS
) -> list[ToolEntry]:
    return [
        *shell_tools(root, shell_timeout),
        *file_tools(root),
        *search_tools(root),
        *web_tools(),
    ]


def build_registry(
    emitter: IpcEmitter,
    root: Path,
    shell_timeout: float = BASH_TIMEOUT_SECONDS,
) -> ToolRegistry:
    """Merge IPC and sandboxed tools; raises ValueError on a name clash."""
    registry = ToolRegistry(ipc_tool_entries(emitter, IPC_TOOL_PREFIX))
    registry.extend(builtin_tool_entries(root, shell_timeout))
    return registry


__all__ = [
    "IPC_TOOL_PREFIX",
    "SandboxPathError",
    "ToolEntry",
    "ToolRegistry",
    "build_registry",
    "builtin_tool_entries",
    "ipc_tool_entries",
    "resolve_sandbox_path",
    "result_is_error",
    "result_text",
    "tool_error",
    "tool_text",
]
