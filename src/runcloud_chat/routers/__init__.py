"""API routers for runcloud-chat-server."""

from runcloud_chat.routers import chat, health, sessions

__all__ = ["chat", "health", "sessions"]
