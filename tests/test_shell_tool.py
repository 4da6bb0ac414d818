"""Tests for the Bash tool."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from mcp.types import CallToolResult

from clawbox.agent_tools import result_text
from clawbox.agent_tools._tools_shell import run_shell, shell_tools


class TestRunShell:
    async def test_success(self, workspace):
        ok, text = await run_shell("echo hello", workspace)
        assert ok
        assert text.strip() == "hello"

    async def test_runs_in_sandbox_root(self, workspace):
        ok, text = await run_shell("pwd", workspace)
        assert ok
        assert text.strip() == str(workspace)

    async def test_no_output(self, workspace):
        assert await run_shell("true", workspace) == (True, "(no output)")

    async def test_stderr_appended_on_success(self, workspace):
        ok, text = await run_shell("echo out; echo err >&2", workspace)
        assert ok
        assert text == "out\n\nerr\n"

    async def test_non_zero_exit(self, workspace):
        ok, text = await run_shell("echo partial; echo oops >&2; exit 3", workspace)
        assert not ok
        assert text.startswith("Error: Command failed with exit code 3")
        assert "stdout: partial" in text
        assert "stderr: oops" in text

    async def test_timeout_keeps_partial_output(self, workspace):
        ok, text = await run_shell("echo started; sleep 5", workspace, timeout=0.5)
        assert not ok
        assert text.startswith("Error: Command timed out after 0.5s")
        assert "stdout: started" in text

    async def test_output_capped_with_note(self, workspace):
        with patch("clawbox.agent_tools._tools_shell.MAX_OUTPUT_BYTES", 10):
            ok, text = await run_shell("head -c 100 /dev/zero | tr '\\0' x", workspace)
        assert ok
        assert text == "x" * 10 + "\n[output truncated]"

    async def test_output_exactly_at_cap_not_flagged(self, workspace):
        with patch("clawbox.agent_tools._tools_shell.MAX_OUTPUT_BYTES", 10):
            ok, text = await run_shell("printf xxxxxxxxxx", workspace)
        assert ok
        assert text == "x" * 10

    async def test_stderr_capped_independently(self, workspace):
        with patch("clawbox.agent_tools._tools_shell.MAX_OUTPUT_BYTES", 4):
            ok, text = await run_shell("printf ab; printf 0123456789 >&2", workspace)
        assert ok
        assert text == "ab\n0123\n[output truncated]"


class TestBashTool:
    @pytest.fixture()
    def bash(self, workspace):
        (entry,) = shell_tools(workspace, timeout=5)
        return entry.handler

    async def test_success_is_plain_text(self, bash):
        result = await bash({"command": "echo hi"})
        assert not isinstance(result, CallToolResult)
        assert result_text(result).strip() == "hi"

    async def test_failure_is_error_result(self, bash):
        result = await bash({"command": "exit 1"})
        assert isinstance(result, CallToolResult) and result.isError

    async def test_empty_command(self, bash):
        result = await bash({"command": "  "})
        assert result_text(result) == "Error: empty command"

    def test_description_mentions_timeout(self, workspace):
        (entry,) = shell_tools(workspace, timeout=60)
        assert "60s" in entry.definition.description
