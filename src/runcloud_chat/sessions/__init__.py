"""Session management for runcloud-chat-server.

This package provides token-protected chat rooms, their persistence and the
stored question/answer history.
"""

from runcloud_chat.sessions.manager import SessionManager
from runcloud_chat.sessions.session import ChatSession
from runcloud_chat.sessions.types import ChatMessage

__all__ = [
    "ChatMessage",
    "ChatSession",
    "SessionManager",
]
