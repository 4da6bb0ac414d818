"""Runner I/O models: dataclasses for the stdin/stdout protocol.

ContainerInput: parsed from JSON on stdin at start.
ContainerOutput: serialized to JSON on stdout, wrapped in output markers.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any


@dataclass
class ContainerInput:
    """Parsed input received from the host via stdin JSON."""

    prompt: str
    group_folder: str
    chat_jid: str
    is_main: bool = False
    session_id: str | None = None
    is_scheduled_task: bool = False
    system_prompt_append: str | None = None

    def __post_init__(self) -> None:
        # The host may send "" for unset
        if self.session_id == "":
            self.session_id = None
        if self.system_prompt_append == "":
            self.system_prompt_append = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ContainerInput:
        """Create from a JSON-parsed dict, ignoring unknown keys."""
        known = {f.name for f in dataclasses.fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class ContainerOutput:
    """Output sent to the host via stdout JSON.

    The ``type`` field controls which subset of fields are serialized
    by ``to_dict()``; ``type`` and ``status`` are always present.
    """

    status: str
    result: str | None = None
    new_session_id: str | None = None
    error: str | None = None
    type: str = "result"
    tool_name: str | None = None
    tool_input: dict[str, Any] | None = None
    text: str | None = None
    tool_result_id: str | None = None
    tool_result_content: str | None = None
    tool_result_is_error: bool | None = None
    result_metadata: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"type": self.type, "status": self.status}

        if self.type == "result":
            d["result"] = self.result
            if self.new_session_id:
                d["new_session_id"] = self.new_session_id
            if self.error:
                d["error"] = self.error
            if self.result_metadata:
                d["result_metadata"] = self.result_metadata
        elif self.type == "tool_use":
            d["tool_name"] = self.tool_name
            d["tool_input"] = self.tool_input
        elif self.type == "text":
            d["text"] = self.text
        elif self.type == "tool_result":
            d["tool_result_id"] = self.tool_result_id
            d["tool_result_content"] = self.tool_result_content
            d["tool_result_is_error"] = self.tool_result_is_error

        return d
