"""Pydantic models for session API requests and responses."""

from pydantic import BaseModel, Field


class InitSessionRequest(BaseModel):
    """Request body for initializing a chat session."""

    app_key: str = Field(..., min_length=1, description="The user's RunCloud API key")
    user_id: str | None = Field(
        None, description="Optional user identifier for listing rooms"
    )


class InitSessionResponse(BaseModel):
    """Response for a newly initialized chat session."""

    status: str = Field("initialized", description="Initialization status")
    room_id: str = Field(description="Room identifier")
    user_token: str = Field(description="Token authorizing access to the room")
    user_id: str | None = Field(default=None, description="Owner identifier")
    expires_at: str = Field(description="ISO 8601 token expiry")


class RoomSummary(BaseModel):
    """One of a user's chat rooms."""

    room_id: str = Field(description="Room identifier")
    user_token: str = Field(description="Token authorizing access to the room")
    room_name: str = Field("New Chat", description="Display name of the room")
    last_activity: str | None = Field(
        default=None, description="ISO 8601 timestamp of the last exchange"
    )
    message_count: int = Field(0, description="Number of stored messages")
    last_message: str | None = Field(
        default=None, description="Content of the most recent message"
    )
    has_runcloud_token: bool = Field(
        False, description="Whether the room has a RunCloud API key"
    )


class UserRoomsResponse(BaseModel):
    """Response listing a user's rooms."""

    user_id: str = Field(description="Owner identifier")
    rooms: list[RoomSummary] = Field(default_factory=list)
