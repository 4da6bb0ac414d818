"""Agent core protocol.

The runner in ``main.py`` drives an implementation of this protocol and
turns its events into output records. Cores own their session state and
expose it through ``session_id``.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol, runtime_checkable


@dataclass
class AgentCoreConfig:
    """Configuration for initializing an agent core.

    Attributes:
        cwd: Sandbox root; the file and shell tools are confined to it and
            sessions are stored under it
        ipc_dir: IPC directory shared with the host
        session_id: Session to resume, or None to start a new one
        group_folder: Group folder name
        chat_jid: Canonical chat identifier
        is_main: Whether this is the main (privileged) group
        is_scheduled_task: Whether this run was fired by the scheduler
        system_prompt_append: Extra system context for a new session
        max_rounds: Upper bound on completion calls per query
        shell_timeout: Bash tool timeout in seconds
        extra: Core-specific settings
    """

    cwd: Path
    ipc_dir: Path
    session_id: str | None
    group_folder: str
    chat_jid: str
    is_main: bool
    is_scheduled_task: bool = False
    system_prompt_append: str | None = None
    max_rounds: int = 30
    shell_timeout: float = 60.0
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass
class AgentEvent:
    """Event emitted during a query.

    - "tool_use": tool_name (str), tool_input (dict), tool_call_id (str)
    - "tool_result": tool_result_id (str), tool_result_content (str),
                     tool_result_is_error (bool)
    - "text": text (str)
    - "result": result (str | None), result_metadata (dict)
    """

    type: str
    data: dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class AgentCore(Protocol):
    async def start(self) -> None: ...

    def query(self, prompt: str) -> AsyncIterator[AgentEvent]: ...

    async def stop(self) -> None: ...

    @property
    def session_id(self) -> str | None: ...
