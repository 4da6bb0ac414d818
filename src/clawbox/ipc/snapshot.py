"""Read side of the task registry.

The host refreshes ``current_tasks.json`` out of band. A missing file means
"no tasks yet", not an error.
"""

from __future__ import annotations

import json
from pathlib import Path

from clawbox.ipc.payloads import TaskSnapshotEntry

NO_TASKS = "No scheduled tasks found."
PROMPT_PREVIEW_CHARS = 50


def read_task_snapshot(path: Path) -> list[TaskSnapshotEntry]:
    """Parse the snapshot file. Raises on unreadable or malformed content."""
    if not path.exists():
        return []
    data = json.loads(path.read_text())
    if not isinstance(data, list):
        raise ValueError(f"{path.name} must contain a JSON array")
    return [TaskSnapshotEntry.from_dict(item) for item in data if isinstance(item, dict)]


def visible_tasks(
    entries: list[TaskSnapshotEntry], group_folder: str, is_main: bool
) -> list[TaskSnapshotEntry]:
    if is_main:
        return list(entries)
    return [t for t in entries if t.group_folder == group_folder]


def format_task(task: TaskSnapshotEntry) -> str:
    return (
        f"- [{task.id}] {task.prompt[:PROMPT_PREVIEW_CHARS]}... "
        f"({task.schedule_type}: {task.schedule_value}) "
        f"- {task.status}, next: {task.next_run or 'N/A'}"
    )


def list_tasks(snapshot_path: Path, group_folder: str, is_main: bool) -> str:
    """Render the tasks this caller may see.

    Main sees every task; other groups see only their own.
    """
    tasks = visible_tasks(read_task_snapshot(snapshot_path), group_folder, is_main)
    if not tasks:
        return NO_TASKS
    return "Scheduled tasks:\n" + "\n".join(format_task(t) for t in tasks)
