"""Agent core implementations."""

from clawbox.cores.chat import ChatCompletionsCore, ProtocolError, RoundBudgetExceededError

__all__ = ["ChatCompletionsCore", "ProtocolError", "RoundBudgetExceededError"]
