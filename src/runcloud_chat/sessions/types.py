"""Data types for chat session persistence."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ChatMessage:
    """A stored question or answer."""

    type: str = "question"  # question | answer
    content: str = ""
    actions: list[dict[str, Any]] = field(default_factory=list)
    created_at: str = ""

    def is_question(self) -> bool:
        return self.type == "question"

    def is_answer(self) -> bool:
        return self.type == "answer"
