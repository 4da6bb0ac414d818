"""Task scheduling and management tools: schedule_task, list_tasks, pause/resume/cancel."""

from __future__ import annotations

from typing import Any

from mcp.types import Tool

from clawbox.agent_tools._registry import ToolEntry, ToolResult, tool_error, tool_text
from clawbox.ipc.emitter import IpcEmitter
from clawbox.ipc.schedule import CONTEXT_MODES, SCHEDULE_TYPES, ScheduleValidationError
from clawbox.ipc.snapshot import list_tasks
from clawbox.logger import logger

# -- schedule_task --


def _schedule_task_definition(name: str, is_main: bool) -> Tool:
    properties: dict[str, Any] = {
        "prompt": {
            "type": "string",
            "description": (
                "What the agent should do when the task runs. "
                "For isolated mode, include all necessary context here."
            ),
        },
        "schedule_type": {
            "type": "string",
            "enum": list(SCHEDULE_TYPES),
            "description": (
                "cron=recurring at specific times, "
                "interval=recurring every N ms, "
                "once=run once at specific time"
            ),
        },
        "schedule_value": {
            "type": "string",
            "description": (
                'cron: "*/5 * * * *" | interval: '
                'milliseconds like "300000" | once: '
                "local timestamp like "
                '"2026-02-01T15:30:00" (no Z suffix!)'
            ),
        },
        "context_mode": {
            "type": "string",
            "enum": list(CONTEXT_MODES),
            "default": "group",
            "description": (
                "group=runs with chat history, isolated=fresh session "
                "(include context in prompt)"
            ),
        },
    }
    if is_main:
        properties["target_group_jid"] = {
            "type": "string",
            "description": (
                "JID of the registered group to schedule the task for. "
                "Defaults to the current group."
            ),
        }

    return Tool(
        name=name,
        description=(
            "Schedule a recurring or one-time task. The task will run as "
            "a full agent with access to all tools.\n\n"
            "CONTEXT MODE - Choose based on task type:\n"
            '• "group": Task runs in the group\'s conversation '
            "context, with access to chat history. Use for tasks "
            "that need context about ongoing discussions, user "
            "preferences, or recent interactions.\n"
            '• "isolated": Task runs in a fresh session with no '
            "conversation history. When using isolated mode, "
            "include all necessary context in the prompt itself.\n\n"
            "SCHEDULE VALUE FORMAT (all times are LOCAL timezone):\n"
            '• cron: Standard cron expression (e.g., "*/5 * * '
            '* *" for every 5 minutes, "0 9 * * *" for daily at '
            "9am LOCAL time)\n"
            "• interval: Milliseconds between runs (e.g., "
            '"300000" for 5 minutes, "3600000" for 1 hour)\n'
            '• once: Local time WITHOUT "Z" suffix (e.g., '
            '"2026-02-01T15:30:00"). Do NOT use UTC/Z suffix.'
        ),
        inputSchema={
            "type": "object",
            "properties": properties,
            "required": ["prompt", "schedule_type", "schedule_value"],
        },
    )


# -- list_tasks --


def _list_tasks_definition(name: str) -> Tool:
    return Tool(
        name=name,
        description=(
            "List all scheduled tasks. From main: shows all tasks. "
            "From other groups: shows only that group's tasks."
        ),
        inputSchema={"type": "object", "properties": {}},
    )


# -- pause/resume/cancel --

_ACTION_DESCRIPTIONS = {
    "pause_task": ("Pause a scheduled task. It will not run until resumed.", "pause"),
    "resume_task": ("Resume a paused task.", "resume"),
    "cancel_task": ("Cancel and delete a scheduled task.", "cancel"),
}


def _task_action_definition(name: str, action: str) -> Tool:
    description, verb = _ACTION_DESCRIPTIONS[action]
    return Tool(
        name=name,
        description=description,
        inputSchema={
            "type": "object",
            "properties": {
                "task_id": {
                    "type": "string",
                    "description": f"The task ID to {verb}",
                },
            },
            "required": ["task_id"],
        },
    )


def task_tools(emitter: IpcEmitter, prefix: str = "") -> list[ToolEntry]:
    ctx = emitter.context

    async def schedule_task(arguments: dict[str, Any]) -> ToolResult:
        prompt = arguments.get("prompt")
        if not prompt:
            return tool_error('schedule_task requires a "prompt" field.')
        schedule_type = str(arguments.get("schedule_type") or "")
        schedule_value = str(arguments.get("schedule_value") or "").strip()
        try:
            filename = emitter.schedule_task(
                prompt=str(prompt),
                schedule_type=schedule_type,
                schedule_value=schedule_value,
                context_mode=arguments.get("context_mode") or "group",
                target_jid=arguments.get("target_group_jid"),
            )
        except ScheduleValidationError as exc:
            return tool_error(str(exc))
        return tool_text(f"Task scheduled ({filename}): {schedule_type} - {schedule_value}")

    async def list_tasks_handle(arguments: dict[str, Any]) -> ToolResult:
        try:
            return tool_text(list_tasks(ctx.tasks_snapshot, ctx.group_folder, ctx.is_main))
        except (OSError, ValueError) as exc:
            logger.warning("Failed to read task snapshot", error=str(exc))
            return tool_text(f"Error reading tasks: {exc}")

    def make_action(action: str):
        emit = getattr(emitter, action)
        _, verb = _ACTION_DESCRIPTIONS[action]
        label = "cancellation" if verb == "cancel" else verb

        async def handle(arguments: dict[str, Any]) -> ToolResult:
            task_id = arguments.get("task_id")
            if not task_id:
                return tool_error(f'{action} requires a "task_id" field.')
            emit(str(task_id))
            return tool_text(f"Task {task_id} {label} requested.")

        return handle

    entries = [
        ToolEntry(
            definition=_schedule_task_definition(f"{prefix}schedule_task", ctx.is_main),
            handler=schedule_task,
        ),
        ToolEntry(
            definition=_list_tasks_definition(f"{prefix}list_tasks"),
            handler=list_tasks_handle,
        ),
    ]
    for action in _ACTION_DESCRIPTIONS:
        entries.append(
            ToolEntry(
                definition=_task_action_definition(f"{prefix}{action}", action),
                handler=make_action(action),
            )
        )
    return entries
