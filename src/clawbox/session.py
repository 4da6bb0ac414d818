"""Conversation history persistence, one JSON file per session id.

Files live at ``<sandbox root>/.sessions/<session_id>.json`` as
``{"messages": [...]}`` in chat-completions message format. Concurrent
sessions never share a file, so no locking is needed; saves still go through
a temp file + rename so a crash mid-write leaves the previous history intact.
"""

from __future__ import annotations

import json
import os
import re
import secrets
import time
from pathlib import Path
from typing import Any

from clawbox.logger import logger

SESSIONS_DIRNAME = ".sessions"

_SESSION_ID_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]{0,127}$")


def new_session_id() -> str:
    return f"{int(time.time() * 1000):x}-{secrets.token_hex(4)}"


def validate_session_id(session_id: str) -> str:
    """Reject ids that could address a file outside the sessions directory."""
    if not _SESSION_ID_RE.match(session_id) or ".." in session_id:
        raise ValueError(f"Invalid session id: {session_id!r}")
    return session_id


class SessionStore:
    def __init__(self, root: Path) -> None:
        self.directory = root / SESSIONS_DIRNAME

    def path_for(self, session_id: str) -> Path:
        return self.directory / f"{validate_session_id(session_id)}.json"

    def load(self, session_id: str) -> list[dict[str, Any]] | None:
        """Return the stored turns, or None if absent or unreadable."""
        path = self.path_for(session_id)
        if not path.exists():
            return None
        try:
            raw = json.loads(path.read_text())
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Failed to load session", session_id=session_id, error=str(exc))
            return None
        messages = raw.get("messages") if isinstance(raw, dict) else None
        if not isinstance(messages, list):
            logger.warning("Session file has no message list", session_id=session_id)
            return None
        return messages

    def save(self, session_id: str, messages: list[dict[str, Any]]) -> Path:
        path = self.path_for(session_id)
        self.directory.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(json.dumps({"messages": messages}, separators=(",", ":")))
        os.replace(tmp, path)
        return path
