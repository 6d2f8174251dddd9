"""Pydantic models for chat API requests and responses."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SendMessageRequest(BaseModel):
    """Request body for POST /api/v1/chats."""

    message: str = Field(..., min_length=1, description="The user message to send")

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"message": "List my servers"},
                {"message": "Show web apps on server yoga staging vultr"},
            ]
        }
    )


class ToolCallExecuted(BaseModel):
    """A remote tool executed while answering."""

    name: str = Field(description="Tool name in the MCP catalog")
    arguments: dict[str, Any] = Field(default_factory=dict)
    success: bool = Field(description="Whether the remote call succeeded")


class SendMessageResponse(BaseModel):
    """Response body for POST /api/v1/chats."""

    answer: str = Field(description="The assistant's answer")
    actions: list[dict[str, Any]] = Field(default_factory=list)
    tool_calls_executed: list[ToolCallExecuted] = Field(
        default_factory=list,
        description="Remote tools executed while producing the answer",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "answer": "You have 3 servers: web-1, web-2 and db-1.",
                "actions": [],
                "tool_calls_executed": [
                    {"name": "list-servers", "arguments": {}, "success": True}
                ],
            }
        }
    )


class MessageResponse(BaseModel):
    """A stored question or answer."""

    type: str = Field(description="question or answer")
    content: str = Field(description="Message content")
    actions: list[dict[str, Any]] = Field(default_factory=list)
    created_at: str = Field(description="ISO 8601 timestamp")

    model_config = ConfigDict(from_attributes=True)


class ChatHistoryResponse(BaseModel):
    """Response body for GET /api/v1/chats."""

    room_id: str = Field(description="Room identifier")
    messages: list[MessageResponse] = Field(default_factory=list)
    has_runcloud_token: bool = Field(
        False, description="Whether the room has a RunCloud API key"
    )


class ClearChatResponse(BaseModel):
    """Response body for DELETE /api/v1/chats."""

    status: str = Field("cleared")
    message: str = Field("Chat session cleared successfully.")
