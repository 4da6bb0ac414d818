"""Atomic IPC file writing.

The host polls ``messages/`` and ``tasks/`` and may read a file the instant
it appears, so every write goes to a ``.json.tmp`` staging path first and is
published with a single rename. Names are ``<epoch-ms>-<6 hex>.json``:
sortable by creation time, and unique across concurrent writers without a
lock.
"""

from __future__ import annotations

import contextlib
import json
import os
import random
import time
from datetime import UTC, datetime
from pathlib import Path
from typing import Any


def ipc_filename() -> str:
    return f"{int(time.time() * 1000)}-{random.randbytes(3).hex()}.json"


def write_ipc_file(directory: Path, data: dict[str, Any]) -> str:
    """Write an IPC file atomically (temp file + rename) and return its name.

    Raises whatever the filesystem raises (e.g. ``OSError`` on a full disk);
    the staging file is removed first so no partial artifact is left behind.
    """
    directory.mkdir(parents=True, exist_ok=True)

    filename = ipc_filename()
    filepath = directory / filename

    temp_path = filepath.with_suffix(".json.tmp")
    try:
        temp_path.write_text(json.dumps(data, indent=2))
        os.replace(temp_path, filepath)
    except BaseException:
        with contextlib.suppress(OSError):
            temp_path.unlink()
        raise

    return filename


def now_iso() -> str:
    return datetime.now(UTC).isoformat()
