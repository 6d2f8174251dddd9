"""Type definitions for the Ollama completion provider.

This module contains the dataclasses used to describe conversation turns sent
to Ollama and the decoded form of its chat replies. Raw replies are decoded in
exactly one place, CompletionResult.from_ollama_response, so the rest of the
code never walks nested response dictionaries.
"""

from collections.abc import Collection, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class TurnRole(str, Enum):
    """Role of a single turn in the running exchange."""

    USER = "user"
    MODEL = "model"
    TOOL_RESULT = "tool-result"


class FinishReason(str, Enum):
    """Why the provider stopped generating."""

    STOP = "stop"
    MAX_TOKENS = "max_tokens"
    UNEXPECTED_TOOL_CALL = "unexpected_tool_call"
    OTHER = "other"


@dataclass(frozen=True)
class ToolCall:
    """A tool invocation requested by the model.

    Attributes:
        name: Function name in the provider's naming convention
        arguments: Argument mapping supplied by the model
    """

    name: str
    arguments: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ConversationTurn:
    """One role-tagged entry of the running exchange.

    Turns are never mutated after being appended to a history.

    Attributes:
        role: Who produced the turn
        text: Free text content (user message, model answer or tool output)
        tool_call: Tool invocation carried by a model turn, if any
        tool_name: Provider-side tool name a tool-result turn answers
    """

    role: TurnRole
    text: str = ""
    tool_call: ToolCall | None = None
    tool_name: str | None = None

    @classmethod
    def user(cls, text: str) -> "ConversationTurn":
        return cls(role=TurnRole.USER, text=text)

    @classmethod
    def model(cls, text: str = "", tool_call: ToolCall | None = None) -> "ConversationTurn":
        return cls(role=TurnRole.MODEL, text=text, tool_call=tool_call)

    @classmethod
    def tool_result(cls, tool_name: str, text: str) -> "ConversationTurn":
        return cls(role=TurnRole.TOOL_RESULT, text=text, tool_name=tool_name)

    def to_ollama_message(self) -> dict[str, Any]:
        """Convert the turn to an Ollama chat message dict."""
        if self.role is TurnRole.USER:
            return {"role": "user", "content": self.text}

        if self.role is TurnRole.MODEL:
            message: dict[str, Any] = {"role": "assistant", "content": self.text}
            if self.tool_call is not None:
                message["tool_calls"] = [
                    {
                        "function": {
                            "name": self.tool_call.name,
                            "arguments": dict(self.tool_call.arguments),
                        }
                    }
                ]
            return message

        return {"role": "tool", "content": self.text, "tool_name": self.tool_name}


@dataclass
class CompletionResult:
    """Decoded reply from a single Ollama chat call.

    Exactly one of text or tool_call is normally set. When neither is set,
    finish_reason explains why.

    Attributes:
        text: Generated text, stripped of surrounding whitespace (None if empty)
        tool_call: First tool invocation requested by the model
        finish_reason: Decoded stop reason
        eval_count: Number of generated tokens, if reported
        prompt_eval_count: Number of prompt tokens, if reported
    """

    text: str | None = None
    tool_call: ToolCall | None = None
    finish_reason: FinishReason = FinishReason.STOP
    eval_count: int | None = None
    prompt_eval_count: int | None = None

    @staticmethod
    def from_ollama_response(
        data: Mapping[str, Any],
        declared_tools: Collection[str] = (),
    ) -> "CompletionResult":
        """Decode a non-streaming Ollama chat response.

        Args:
            data: Response as a dict (ChatResponse.model_dump() or raw JSON)
            declared_tools: Provider-side names of the tools sent with the request

        Returns:
            CompletionResult: The decoded reply

        Raises:
            ValueError: If the response does not have the expected shape
        """
        message = data.get("message")
        if not isinstance(message, Mapping):
            raise ValueError("response has no message object")

        content = message.get("content") or ""
        if not isinstance(content, str):
            raise ValueError("message content is not a string")
        text = content.strip() or None

        done_reason = data.get("done_reason")
        if done_reason == "length":
            finish_reason = FinishReason.MAX_TOKENS
        elif done_reason in (None, "stop"):
            finish_reason = FinishReason.STOP
        else:
            finish_reason = FinishReason.OTHER

        tool_call = None
        raw_calls = message.get("tool_calls") or []
        if not isinstance(raw_calls, list):
            raise ValueError("tool_calls is not a list")

        if raw_calls:
            function = raw_calls[0].get("function") if isinstance(raw_calls[0], Mapping) else None
            if not isinstance(function, Mapping) or not isinstance(function.get("name"), str):
                raise ValueError("tool call has no function name")

            arguments = function.get("arguments") or {}
            if not isinstance(arguments, Mapping):
                raise ValueError("tool call arguments are not an object")

            name = function["name"]
            if name in declared_tools:
                tool_call = ToolCall(name=name, arguments=dict(arguments))
            else:
                finish_reason = FinishReason.UNEXPECTED_TOOL_CALL

        return CompletionResult(
            text=text,
            tool_call=tool_call,
            finish_reason=finish_reason,
            eval_count=data.get("eval_count"),
            prompt_eval_count=data.get("prompt_eval_count"),
        )
