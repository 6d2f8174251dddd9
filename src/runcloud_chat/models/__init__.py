"""Pydantic models for API requests and responses."""

from runcloud_chat.models.chat import (
    ChatHistoryResponse,
    ClearChatResponse,
    MessageResponse,
    SendMessageRequest,
    SendMessageResponse,
    ToolCallExecuted,
)
from runcloud_chat.models.health import HealthResponse
from runcloud_chat.models.sessions import (
    InitSessionRequest,
    InitSessionResponse,
    RoomSummary,
    UserRoomsResponse,
)

__all__ = [
    "ChatHistoryResponse",
    "ClearChatResponse",
    "HealthResponse",
    "InitSessionRequest",
    "InitSessionResponse",
    "MessageResponse",
    "RoomSummary",
    "SendMessageRequest",
    "SendMessageResponse",
    "ToolCallExecuted",
    "UserRoomsResponse",
]
