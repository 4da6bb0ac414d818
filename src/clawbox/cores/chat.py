"""Chat-completions agent core with a bounded tool-calling loop.

Works against any OpenAI-compatible endpoint (OpenRouter, DashScope, a
LiteLLM proxy, ...). Each query runs discrete rounds:

  1. send the whole history plus the tool catalog
  2. if the reply requests tool calls, run them one at a time in the order
     given, append one ``tool`` turn per call, go to 1
  3. if the reply is plain text, persist the history and finish

The loop stops after ``max_rounds`` completion calls with
``RoundBudgetExceededError``. Only a successful query writes the session
file; an aborted or failed query leaves the last saved history untouched.
"""

from __future__ import annotations

import json
from collections.abc import AsyncIterator
from typing import Any

from openai import AsyncOpenAI

from clawbox.agent_tools import ToolRegistry, build_registry, result_is_error, result_text
from clawbox.config import ProviderSettings, load_provider_settings, require_endpoint
from clawbox.core import AgentCoreConfig, AgentEvent
from clawbox.ipc.emitter import IpcContext, IpcEmitter
from clawbox.logger import logger
from clawbox.session import SessionStore, new_session_id, validate_session_id

SCHEDULED_TASK_PREFIX = (
    "[SCHEDULED TASK - You are running automatically. "
    "Use mcp__clawbox__send_message if needed to communicate with the user.]\n\n"
)


class ProtocolError(RuntimeError):
    """The endpoint answered with something that is not a usable completion."""


class RoundBudgetExceededError(RuntimeError):
    """The model kept requesting tools past the round budget."""


def _as_mapping(obj: Any) -> dict[str, Any]:
    """Convert SDK response objects (pydantic models) or dicts to plain dicts."""
    if obj is None:
        return {}
    if isinstance(obj, dict):
        return obj
    if hasattr(obj, "model_dump"):
        data = obj.model_dump()
        if isinstance(data, dict):
            return data
    raise ProtocolError(f"Unexpected completion payload: {type(obj).__name__}")


def _first_message(completion: Any) -> dict[str, Any]:
    choices = _as_mapping(completion).get("choices") or []
    if not choices:
        raise ProtocolError("No message in completion response")
    message = _as_mapping(choices[0]).get("message")
    if not message:
        raise ProtocolError("No message in completion response")
    return _as_mapping(message)


def message_text(content: Any) -> str:
    """Concatenate a string or a list of text fragments."""
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, dict):
                parts.append(part.get("text") or "")
            else:
                parts.append(getattr(part, "text", None) or "")
        return "".join(parts)
    return str(content)


def _assistant_turn(message: dict[str, Any]) -> dict[str, Any]:
    """Reduce a response message to the fields worth keeping in history."""
    turn: dict[str, Any] = {"role": "assistant", "content": message.get("content")}
    calls = []
    for raw in message.get("tool_calls") or []:
        call = _as_mapping(raw)
        function = _as_mapping(call.get("function"))
        calls.append(
            {
                "id": call.get("id") or "",
                "type": "function",
                "function": {
                    "name": function.get("name") or "",
                    "arguments": function.get("arguments") or "{}",
                },
            }
        )
    if calls:
        turn["tool_calls"] = calls
    return turn


class ChatCompletionsCore:
    """Agent core driving a chat-completions endpoint with local tools."""

    def __init__(
        self,
        config: AgentCoreConfig,
        provider: ProviderSettings | None = None,
        client: Any = None,
    ) -> None:
        self.config = config
        self._provider = provider
        self._client = client
        self._store = SessionStore(config.cwd)
        self._registry: ToolRegistry | None = None
        self._history: list[dict[str, Any]] = []
        self._session_id: str | None = config.session_id

    @property
    def session_id(self) -> str | None:
        return self._session_id

    @property
    def registry(self) -> ToolRegistry:
        if self._registry is None:
            raise RuntimeError("ChatCompletionsCore not started (call start() first)")
        return self._registry

    @property
    def model(self) -> str:
        return self._provider.model if self._provider else "unknown"

    async def start(self) -> None:
        """Resolve the session, load its history and build the tool catalog."""
        self._session_id = validate_session_id(self.config.session_id or new_session_id())
        self._history = self._store.load(self._session_id) or []

        emitter = IpcEmitter(
            IpcContext(
                chat_jid=self.config.chat_jid,
                group_folder=self.config.group_folder,
                is_main=self.config.is_main,
                ipc_dir=self.config.ipc_dir,
            )
        )
        self._registry = build_registry(emitter, self.config.cwd, self.config.shell_timeout)

        if self._client is None:
            if self._provider is None:
                self._provider = load_provider_settings()
            base_url, api_key = require_endpoint(self._provider)
            self._client = AsyncOpenAI(base_url=base_url, api_key=api_key)

        logger.info(
            "Chat core started",
            session_id=self._session_id,
            resumed_turns=len(self._history),
            model=self.model,
            tools=len(self._registry),
        )

    async def query(self, prompt: str) -> AsyncIterator[AgentEvent]:
        """Run one prompt to completion, yielding tool and result events.

        Raises:
            RoundBudgetExceededError: no plain-text answer within max_rounds.
            ProtocolError: the endpoint returned no message.
            Any transport error raised by the client.
        """
        registry = self.registry
        tools = registry.openai_tools()

        if self.config.is_scheduled_task:
            prompt = SCHEDULED_TASK_PREFIX + prompt

        # Work on a copy; self._history only changes on success
        messages = list(self._history)
        if not messages and self.config.system_prompt_append:
            messages.append({"role": "system", "content": self.config.system_prompt_append})
        messages.append({"role": "user", "content": prompt})

        for round_no in range(1, self.config.max_rounds + 1):
            logger.info("Chat round", round=round_no, session_id=self._session_id)

            request: dict[str, Any] = {"model": self.model, "messages": messages}
            if tools:
                request["tools"] = tools
            completion = await self._client.chat.completions.create(**request)

            turn = _assistant_turn(_first_message(completion))
            messages.append(turn)

            tool_calls = turn.get("tool_calls")
            if tool_calls:
                for call in tool_calls:
                    name = call["function"]["name"]
                    yield AgentEvent(
                        type="tool_use",
                        data={
                            "tool_name": name,
                            "tool_input": _parse_arguments(call["function"]["arguments"]),
                            "tool_call_id": call["id"],
                        },
                    )
                    content, is_error = await self._run_tool(name, call["function"]["arguments"])
                    messages.append(
                        {"role": "tool", "tool_call_id": call["id"], "content": content}
                    )
                    yield AgentEvent(
                        type="tool_result",
                        data={
                            "tool_result_id": call["id"],
                            "tool_result_content": content,
                            "tool_result_is_error": is_error,
                        },
                    )
                continue

            text = message_text(turn.get("content"))
            self._history = messages
            self._persist()
            logger.info("Chat query done", rounds=round_no, session_id=self._session_id)
            yield AgentEvent(
                type="result",
                data={
                    "result": text or None,
                    "result_metadata": {
                        "subtype": "success",
                        "session_id": self._session_id,
                        "num_turns": round_no,
                        "is_error": False,
                    },
                },
            )
            return

        logger.warning(
            "Round budget exhausted",
            max_rounds=self.config.max_rounds,
            session_id=self._session_id,
        )
        raise RoundBudgetExceededError("Max tool rounds exceeded")

    async def _run_tool(self, name: str, raw_arguments: str) -> tuple[str, bool]:
        """Execute one tool call; failures come back as text for the model."""
        handler = self.registry.get_handler(name)
        if handler is None:
            logger.warning("Unknown tool requested", tool=name)
            return f"Unknown tool: {name or 'null'}", True
        try:
            arguments = json.loads(raw_arguments or "{}")
            if not isinstance(arguments, dict):
                raise ValueError("tool arguments must be a JSON object")
            result = await handler(arguments)
        except Exception as exc:
            logger.warning("Tool call failed", tool=name, error=str(exc))
            return f"Error: {exc}", True
        return result_text(result), result_is_error(result)

    def _persist(self) -> None:
        assert self._session_id is not None
        try:
            self._store.save(self._session_id, self._history)
        except OSError as exc:
            logger.error("Failed to save session", session_id=self._session_id, error=str(exc))

    async def stop(self) -> None:
        close = getattr(self._client, "close", None)
        if close is not None:
            await close()


def _parse_arguments(raw: str) -> dict[str, Any]:
    try:
        value = json.loads(raw or "{}")
    except json.JSONDecodeError:
        return {"raw": raw}
    return value if isinstance(value, dict) else {"raw": raw}
