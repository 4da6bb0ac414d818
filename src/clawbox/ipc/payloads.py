"""IPC payload types: what the sandbox hands to the host.

Each dataclass serializes to the JSON object the host's IPC watcher expects
via ``to_dict()``. The ``type`` key routes the payload; everything under
``tasks/`` shares one directory and is told apart by it.

``TaskSnapshotEntry`` goes the other way: the host writes
``current_tasks.json`` and the sandbox only reads it.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Literal

TaskAction = Literal["pause_task", "resume_task", "cancel_task"]


@dataclass(frozen=True)
class OutboundMessage:
    chat_jid: str
    text: str
    group_folder: str
    timestamp: str
    sender: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "type": "message",
            "chatJid": self.chat_jid,
            "text": self.text,
            "groupFolder": self.group_folder,
            "timestamp": self.timestamp,
        }
        if self.sender:
            d["sender"] = self.sender
        return d


@dataclass(frozen=True)
class ScheduleRequest:
    """A request for the host to create a scheduled agent task.

    ``target_jid`` is always the conversation the task will run in. For
    non-main callers it is the caller's own conversation; the emitter sets
    it, callers cannot.
    """

    prompt: str
    schedule_type: str
    schedule_value: str
    context_mode: str
    target_jid: str
    created_by: str
    timestamp: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "schedule_task",
            "prompt": self.prompt,
            "schedule_type": self.schedule_type,
            "schedule_value": self.schedule_value,
            "context_mode": self.context_mode,
            "targetJid": self.target_jid,
            "createdBy": self.created_by,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class TaskControlCommand:
    """Pause/resume/cancel intent. The host checks that the task exists and
    that ``group_folder`` may control it."""

    action: TaskAction
    task_id: str
    group_folder: str
    is_main: bool
    timestamp: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.action,
            "taskId": self.task_id,
            "groupFolder": self.group_folder,
            "isMain": self.is_main,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class GroupRegistration:
    jid: str
    name: str
    folder: str
    trigger: str
    timestamp: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "register_group",
            "jid": self.jid,
            "name": self.name,
            "folder": self.folder,
            "trigger": self.trigger,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class TaskSnapshotEntry:
    id: str
    prompt: str
    schedule_type: str
    schedule_value: str
    status: str
    next_run: str | None = None
    group_folder: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TaskSnapshotEntry:
        """Create from one element of ``current_tasks.json``, ignoring unknown keys."""
        known = {f.name for f in dataclasses.fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        if "groupFolder" in data:
            values["group_folder"] = data["groupFolder"]
        values["id"] = str(values.get("id", ""))
        for key in ("prompt", "schedule_type", "schedule_value", "status"):
            values[key] = "" if values.get(key) is None else str(values[key])
        return cls(**values)
