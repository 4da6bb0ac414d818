"""File-drop IPC from the agent sandbox to the host.

The sandbox has no network path to the host's control plane; the IPC
directory is the only channel.

  writer    - atomic publish into messages/ and tasks/
  payloads  - wire dataclasses (message, schedule, task control, registration)
  schedule  - schedule expression validation
  emitter   - IpcContext + IpcEmitter, privilege rules
  snapshot  - read and filter current_tasks.json
"""

from clawbox.ipc.emitter import IpcContext, IpcEmitter, PermissionDeniedError
from clawbox.ipc.schedule import ScheduleValidationError, validate_schedule
from clawbox.ipc.snapshot import list_tasks, read_task_snapshot, visible_tasks
from clawbox.ipc.writer import now_iso, write_ipc_file

__all__ = [
    "IpcContext",
    "IpcEmitter",
    "PermissionDeniedError",
    "ScheduleValidationError",
    "list_tasks",
    "now_iso",
    "read_task_snapshot",
    "validate_schedule",
    "visible_tasks",
    "write_ipc_file",
]
