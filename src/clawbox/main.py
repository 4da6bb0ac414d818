"""clawbox agent runner: runs inside the sandbox.

Input protocol:
  Stdin: one ContainerInput JSON document (read until EOF)

Stdout protocol:
  Each event is a ContainerOutput JSON object wrapped in
  OUTPUT_START_MARKER / OUTPUT_END_MARKER lines. The last one is always a
  ``result`` record carrying the session id.

Logs go to stderr. Exit status is 0 on success and 1 on any error.
"""

from __future__ import annotations

import asyncio
import json
import sys
from typing import Any, TextIO

from pydantic import ValidationError

from clawbox.config import (
    ProviderConfigError,
    ProviderSettings,
    RunnerSettings,
    load_provider_settings,
)
from clawbox.core import AgentCoreConfig, AgentEvent
from clawbox.cores.chat import ChatCompletionsCore, RoundBudgetExceededError
from clawbox.logger import install_excepthook, logger
from clawbox.models import ContainerInput, ContainerOutput

OUTPUT_START_MARKER = "---CLAWBOX_OUTPUT_START---"
OUTPUT_END_MARKER = "---CLAWBOX_OUTPUT_END---"


def write_output(output: ContainerOutput, stream: TextIO | None = None) -> None:
    """Write a marker-wrapped output to stdout."""
    out = stream or sys.stdout
    print(OUTPUT_START_MARKER, file=out)
    print(json.dumps(output.to_dict()), file=out)
    print(OUTPUT_END_MARKER, file=out)
    out.flush()


def read_input(stream: TextIO | None = None) -> ContainerInput:
    data = json.loads((stream or sys.stdin).read())
    if not isinstance(data, dict):
        raise ValueError("input must be a JSON object")
    return ContainerInput.from_dict(data)


def event_to_output(event: AgentEvent, session_id: str | None) -> ContainerOutput:
    data = event.data
    if event.type == "tool_use":
        return ContainerOutput(
            status="success",
            type="tool_use",
            tool_name=data.get("tool_name"),
            tool_input=data.get("tool_input"),
        )
    if event.type == "tool_result":
        return ContainerOutput(
            status="success",
            type="tool_result",
            tool_result_id=data.get("tool_result_id"),
            tool_result_content=data.get("tool_result_content"),
            tool_result_is_error=data.get("tool_result_is_error"),
        )
    if event.type == "text":
        return ContainerOutput(status="success", type="text", text=data.get("text"))
    return ContainerOutput(
        status="success",
        result=data.get("result"),
        new_session_id=session_id,
        result_metadata=data.get("result_metadata"),
    )


def _error_output(error: str, session_id: str | None, subtype: str) -> ContainerOutput:
    return ContainerOutput(
        status="error",
        new_session_id=session_id,
        error=error,
        result_metadata={"subtype": subtype, "session_id": session_id, "is_error": True},
    )


async def run_agent(
    container_input: ContainerInput,
    *,
    runner: RunnerSettings | None = None,
    provider: ProviderSettings | None = None,
    client: Any = None,
    stream: TextIO | None = None,
) -> int:
    """Run one prompt and write every event. Returns the process exit code."""
    if runner is None:
        try:
            runner = RunnerSettings()
        except ValidationError as exc:
            logger.error("Invalid runner settings", error=str(exc))
            write_output(
                _error_output(
                    f"Invalid runner settings: {exc}", container_input.session_id, "error_config"
                ),
                stream,
            )
            return 1
    logger.info(
        "Received input",
        group=container_input.group_folder,
        session_id=container_input.session_id or "new",
        scheduled=container_input.is_scheduled_task,
    )

    if client is None and provider is None:
        try:
            provider = load_provider_settings()
        except ProviderConfigError as exc:
            logger.error("Provider not configured", error=str(exc))
            write_output(
                _error_output(str(exc), container_input.session_id, "error_config"), stream
            )
            return 1

    core = ChatCompletionsCore(
        AgentCoreConfig(
            cwd=runner.workspace_dir,
            ipc_dir=runner.ipc_dir,
            session_id=container_input.session_id,
            group_folder=container_input.group_folder,
            chat_jid=container_input.chat_jid,
            is_main=container_input.is_main,
            is_scheduled_task=container_input.is_scheduled_task,
            system_prompt_append=container_input.system_prompt_append,
            max_rounds=runner.max_rounds,
        ),
        provider=provider,
        client=client,
    )

    try:
        await core.start()
        async for event in core.query(container_input.prompt):
            write_output(event_to_output(event, core.session_id), stream)
    except RoundBudgetExceededError as exc:
        write_output(_error_output(str(exc), core.session_id, "error_max_rounds"), stream)
        return 1
    except ProviderConfigError as exc:
        logger.error("Provider not configured", error=str(exc))
        write_output(_error_output(str(exc), core.session_id, "error_config"), stream)
        return 1
    except Exception as exc:
        logger.error("Agent error", error=str(exc), exc_info=True)
        write_output(
            _error_output(str(exc), core.session_id, "error_during_execution"), stream
        )
        return 1
    finally:
        await core.stop()

    return 0


async def main() -> int:
    try:
        container_input = read_input()
    except (ValueError, TypeError) as exc:
        write_output(ContainerOutput(status="error", error=f"Failed to parse input: {exc}"))
        return 1
    return await run_agent(container_input)


def run() -> None:
    install_excepthook()
    sys.exit(asyncio.run(main()))
