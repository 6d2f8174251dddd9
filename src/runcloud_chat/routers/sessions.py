"""Sessions router for initializing chat rooms and listing a user's rooms."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from runcloud_chat.dependencies import get_session_manager
from runcloud_chat.models.sessions import (
    InitSessionRequest,
    InitSessionResponse,
    RoomSummary,
    UserRoomsResponse,
)
from runcloud_chat.sessions import SessionManager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/sessions", tags=["sessions"])


@router.post(
    "",
    response_model=InitSessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Initialize a chat session",
)
async def init_session(
    request: InitSessionRequest,
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
) -> InitSessionResponse:
    """Create a chat room bound to the caller's RunCloud API key.

    Args:
        request: The RunCloud API key and optional user identifier
        session_manager: Injected SessionManager

    Returns:
        The room ID and the user token that authorizes chat requests

    Raises:
        HTTPException: 500 if the session cannot be stored
    """
    try:
        session = session_manager.create_session(
            app_key=request.app_key, user_id=request.user_id
        )
    except OSError as e:
        logger.error(f"Failed to create session: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": {
                    "code": "session_save_error",
                    "message": f"Failed to create session: {str(e)}",
                    "details": {},
                }
            },
        )

    return InitSessionResponse(
        status="initialized",
        room_id=session.room_id,
        user_token=session.user_token,
        user_id=session.user_id,
        expires_at=session.expires_at,
    )


@router.get(
    "",
    response_model=UserRoomsResponse,
    summary="List a user's rooms",
)
async def list_user_rooms(
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
    user_id: str = Query(..., min_length=1, description="Owner identifier"),
) -> UserRoomsResponse:
    """List the valid rooms of a user, most recently active first.

    Args:
        session_manager: Injected SessionManager
        user_id: Owner identifier given at initialization

    Returns:
        The user's rooms with their latest activity
    """
    rooms = []
    for session in session_manager.list_user_rooms(user_id):
        last_message = session.messages[-1].content if session.messages else None
        rooms.append(
            RoomSummary(
                room_id=session.room_id,
                user_token=session.user_token,
                room_name=session.room_name or "New Chat",
                last_activity=session.last_activity,
                message_count=len(session.messages),
                last_message=last_message,
                has_runcloud_token=bool(session.app_key),
            )
        )

    return UserRoomsResponse(user_id=user_id, rooms=rooms)
