"""Dependency injection providers for FastAPI endpoints.

This module provides FastAPI dependency functions that are used across
multiple routers to inject common dependencies like settings,
the conversation controller and the authenticated chat session.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from runcloud_chat.config import RunCloudChatSettings
from runcloud_chat.services import ConversationController
from runcloud_chat.sessions import ChatSession, SessionManager


@lru_cache
def get_settings() -> RunCloudChatSettings:
    """Get the application settings instance.

    This function is cached so that the same settings instance is reused
    across all requests. Settings are loaded from environment variables
    with the RCCHAT_ prefix.

    Returns:
        RunCloudChatSettings: The application configuration settings.
    """
    return RunCloudChatSettings()


def get_conversation_controller(request: Request) -> ConversationController:
    """Get the shared ConversationController created at startup.

    Raises:
        HTTPException: If the controller is not initialized (503 Service Unavailable).
    """
    if not hasattr(request.app.state, "conversation_controller"):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Conversation controller not initialized",
        )
    return request.app.state.conversation_controller


def get_session_manager(request: Request) -> SessionManager:
    """Get a SessionManager instance with app configuration.

    Creates a new SessionManager for each request, using the sessions
    directory and token lifetime from the settings in app.state.
    """
    # Use settings from app.state instead of cached get_settings()
    # This ensures tests can use their own isolated settings
    settings: RunCloudChatSettings = request.app.state.settings
    return SessionManager(
        sessions_dir=settings.resolved_sessions_dir,
        token_expiry_hours=settings.token_expiry_hours,
    )


def _unauthorized(code: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"error": {"code": code, "message": message, "details": {}}},
    )


def _extract_user_token(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header[len("Bearer "):]

    return request.headers.get("X-User-Token") or request.query_params.get("user_token")


def _extract_room_id(request: Request) -> str | None:
    return request.headers.get("X-Room-Id") or request.query_params.get("room_id")


def get_chat_session(
    request: Request,
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
) -> ChatSession:
    """Authenticate the request and return its chat session.

    The user token is read from an `Authorization: Bearer` header, an
    `X-User-Token` header or a `user_token` query parameter. The room is read
    from an `X-Room-Id` header or a `room_id` query parameter.

    Raises:
        HTTPException: 401 if the token or room is missing, or the session is
        unknown or expired.
    """
    user_token = _extract_user_token(request)
    if not user_token:
        raise _unauthorized(
            "missing_token",
            "Missing user token. Provide it via Authorization header, "
            "X-User-Token header, or user_token parameter.",
        )

    room_id = _extract_room_id(request)
    if not room_id:
        raise _unauthorized(
            "missing_room",
            "Missing room ID. Provide it via X-Room-Id header or room_id parameter.",
        )

    session = session_manager.validate_token(user_token, room_id)
    if session is None:
        raise _unauthorized(
            "invalid_session",
            "Invalid or expired session. Please initialize a new session.",
        )

    return session
