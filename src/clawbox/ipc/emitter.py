"""IPC emitter: turns agent intents into files for the host.

One method per payload kind. Each validates, stamps a timestamp, writes
atomically and returns the file name as a receipt. The receipt is only for
human-readable acknowledgement; the host assigns real task ids.

The privilege rules here are advisory. A sandboxed process can write to the
IPC directories directly, so the host re-validates every payload it consumes.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from clawbox.ipc.payloads import (
    GroupRegistration,
    OutboundMessage,
    ScheduleRequest,
    TaskAction,
    TaskControlCommand,
)
from clawbox.ipc.schedule import validate_context_mode, validate_schedule
from clawbox.ipc.writer import now_iso, write_ipc_file
from clawbox.logger import logger

DEFAULT_IPC_DIR = Path("/workspace/ipc")


class PermissionDeniedError(PermissionError):
    """A non-main group attempted a main-only operation."""


@dataclass(frozen=True)
class IpcContext:
    """Who is talking to the host, and where the IPC directories live."""

    chat_jid: str
    group_folder: str
    is_main: bool
    ipc_dir: Path = DEFAULT_IPC_DIR

    @property
    def messages_dir(self) -> Path:
        return self.ipc_dir / "messages"

    @property
    def tasks_dir(self) -> Path:
        return self.ipc_dir / "tasks"

    @property
    def tasks_snapshot(self) -> Path:
        return self.ipc_dir / "current_tasks.json"

    @classmethod
    def from_env(cls) -> IpcContext:
        """Context for processes spawned by the runner (e.g. the MCP server)."""
        return cls(
            chat_jid=os.environ.get("CLAWBOX_CHAT_JID", ""),
            group_folder=os.environ.get("CLAWBOX_GROUP_FOLDER", ""),
            is_main=os.environ.get("CLAWBOX_IS_MAIN") == "1",
            ipc_dir=Path(os.environ.get("CLAWBOX_IPC_DIR") or DEFAULT_IPC_DIR),
        )

    def to_env(self) -> dict[str, str]:
        return {
            "CLAWBOX_CHAT_JID": self.chat_jid,
            "CLAWBOX_GROUP_FOLDER": self.group_folder,
            "CLAWBOX_IS_MAIN": "1" if self.is_main else "0",
            "CLAWBOX_IPC_DIR": str(self.ipc_dir),
        }


class IpcEmitter:
    def __init__(self, context: IpcContext) -> None:
        self.context = context

    def send_message(self, text: str, sender: str | None = None) -> str:
        message = OutboundMessage(
            chat_jid=self.context.chat_jid,
            text=text,
            group_folder=self.context.group_folder,
            timestamp=now_iso(),
            sender=sender,
        )
        filename = write_ipc_file(self.context.messages_dir, message.to_dict())
        logger.info("IPC message queued", file=filename, chars=len(text))
        return filename

    def schedule_task(
        self,
        prompt: str,
        schedule_type: str,
        schedule_value: str,
        context_mode: str = "group",
        target_jid: str | None = None,
    ) -> str:
        """Queue a scheduled task.

        Raises:
            ScheduleValidationError: bad schedule type, value or context mode.
                Nothing is written.
        """
        schedule_value = validate_schedule(schedule_type, schedule_value)
        validate_context_mode(context_mode)

        # Non-main groups can only schedule for themselves
        target = (target_jid if self.context.is_main else None) or self.context.chat_jid
        if target_jid and target != target_jid:
            logger.warning(
                "Ignoring schedule target override from non-main group",
                group=self.context.group_folder,
                requested=target_jid,
            )

        request = ScheduleRequest(
            prompt=prompt,
            schedule_type=schedule_type,
            schedule_value=schedule_value,
            context_mode=context_mode,
            target_jid=target,
            created_by=self.context.group_folder,
            timestamp=now_iso(),
        )
        filename = write_ipc_file(self.context.tasks_dir, request.to_dict())
        logger.info(
            "IPC task scheduled",
            file=filename,
            schedule_type=schedule_type,
            schedule_value=schedule_value,
        )
        return filename

    def pause_task(self, task_id: str) -> str:
        return self._task_action("pause_task", task_id)

    def resume_task(self, task_id: str) -> str:
        return self._task_action("resume_task", task_id)

    def cancel_task(self, task_id: str) -> str:
        return self._task_action("cancel_task", task_id)

    def _task_action(self, action: TaskAction, task_id: str) -> str:
        command = TaskControlCommand(
            action=action,
            task_id=task_id,
            group_folder=self.context.group_folder,
            is_main=self.context.is_main,
            timestamp=now_iso(),
        )
        filename = write_ipc_file(self.context.tasks_dir, command.to_dict())
        logger.info("IPC task action queued", action=action, task_id=task_id, file=filename)
        return filename

    def register_group(self, jid: str, name: str, folder: str, trigger: str) -> str:
        """Ask the host to start serving a new group.

        Raises:
            PermissionDeniedError: the caller is not the main group.
        """
        if not self.context.is_main:
            raise PermissionDeniedError("Only the main group can register new groups.")

        registration = GroupRegistration(
            jid=jid,
            name=name,
            folder=folder,
            trigger=trigger,
            timestamp=now_iso(),
        )
        filename = write_ipc_file(self.context.tasks_dir, registration.to_dict())
        logger.info("IPC group registration queued", jid=jid, folder=folder, file=filename)
        return filename
