"""Business logic services for runcloud-chat-server.

This package contains the tool-augmented conversation core: the relevance
gate, intent resolution, live context enrichment and the conversation loop.
"""

from runcloud_chat.services.context import ContextEnricher
from runcloud_chat.services.conversation import (
    ConversationController,
    ConversationOutcome,
    ToolCallRecord,
)
from runcloud_chat.services.intent import Intent, IntentResolver
from runcloud_chat.services.relevance import is_in_scope

__all__ = [
    "ContextEnricher",
    "ConversationController",
    "ConversationOutcome",
    "Intent",
    "IntentResolver",
    "ToolCallRecord",
    "is_in_scope",
]
