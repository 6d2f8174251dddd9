"""Ollama client wrapper and integration layer.

This package provides the async client used for every completion call and the
types describing conversation turns and decoded replies.
"""

from runcloud_chat.ollama.client import OllamaClient
from runcloud_chat.ollama.types import (
    CompletionResult,
    ConversationTurn,
    FinishReason,
    ToolCall,
    TurnRole,
)

__all__ = [
    "OllamaClient",
    "CompletionResult",
    "ConversationTurn",
    "FinishReason",
    "ToolCall",
    "TurnRole",
]
