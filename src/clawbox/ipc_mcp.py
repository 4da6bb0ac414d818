"""Stdio MCP server entry point: ``python -m clawbox.ipc_mcp``."""

from __future__ import annotations

import asyncio

from clawbox.agent_tools._server import run_server


def run() -> None:
    asyncio.run(run_server())


if __name__ == "__main__":
    run()
