"""Bash tool: runs commands in the sandbox root with a hard timeout."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

from mcp.types import Tool

from clawbox.agent_tools._registry import ToolEntry, ToolResult, tool_error, tool_text
from clawbox.logger import logger

BASH_TIMEOUT_SECONDS = 60.0
MAX_OUTPUT_BYTES = 1024 * 1024
_READ_CHUNK = 64 * 1024


class _BoundedBuffer:
    """Keeps the first *limit* bytes of a stream and notes whether any were dropped."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        self.data = bytearray()
        self.truncated = False

    async def drain(self, stream: asyncio.StreamReader) -> None:
        while True:
            chunk = await stream.read(_READ_CHUNK)
            if not chunk:
                return
            room = self.limit - len(self.data)
            if len(chunk) > room:
                self.truncated = True
            if room > 0:
                self.data.extend(chunk[:room])

    def text(self) -> str:
        text = self.data.decode(errors="replace")
        if self.truncated:
            text += "\n[output truncated]"
        return text


def _failure(message: str, stdout: str, stderr: str) -> str:
    text = f"Error: {message}"
    if stdout:
        text += f"\nstdout: {stdout}"
    if stderr:
        text += f"\nstderr: {stderr}"
    return text


async def run_shell(
    command: str,
    cwd: Path,
    timeout: float = BASH_TIMEOUT_SECONDS,
) -> tuple[bool, str]:
    """Run *command* and return ``(ok, text)``.

    Partial stdout/stderr are kept on timeout and on non-zero exit.
    """
    logger.debug("Shell", cwd=str(cwd), command=command[:200])
    proc = await asyncio.create_subprocess_shell(
        command,
        cwd=cwd,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    out_buf = _BoundedBuffer(MAX_OUTPUT_BYTES)
    err_buf = _BoundedBuffer(MAX_OUTPUT_BYTES)
    assert proc.stdout is not None and proc.stderr is not None
    try:
        await asyncio.wait_for(
            asyncio.gather(
                out_buf.drain(proc.stdout),
                err_buf.drain(proc.stderr),
                proc.wait(),
            ),
            timeout=timeout,
        )
    except TimeoutError:
        proc.kill()
        await proc.wait()
        logger.warning("Shell command timed out", timeout=timeout, command=command[:200])
        return False, _failure(
            f"Command timed out after {timeout:g}s", out_buf.text(), err_buf.text()
        )

    stdout = out_buf.text()
    stderr = err_buf.text()
    if proc.returncode != 0:
        return False, _failure(f"Command failed with exit code {proc.returncode}", stdout, stderr)

    output = stdout
    if stderr:
        output = f"{output}\n{stderr}" if output else stderr
    return True, output or "(no output)"


def shell_tools(root: Path, timeout: float = BASH_TIMEOUT_SECONDS) -> list[ToolEntry]:
    async def bash(arguments: dict[str, Any]) -> ToolResult:
        command = str(arguments.get("command") or "")
        if not command.strip():
            return tool_error("Error: empty command")
        try:
            ok, text = await run_shell(command, root, timeout)
        except OSError as exc:
            return tool_error(f"Error: {exc}")
        return tool_text(text) if ok else tool_error(text)

    return [
        ToolEntry(
            definition=Tool(
                name="Bash",
                description=(
                    "Run a bash command in the sandbox. Use for running scripts, git, etc. "
                    f"Working directory is {root}; commands time out after {timeout:g}s."
                ),
                inputSchema={
                    "type": "object",
                    "properties": {
                        "command": {"type": "string", "description": "Bash command to run"},
                    },
                    "required": ["command"],
                },
            ),
            handler=bash,
        ),
    ]
