"""Chat API endpoints.

This module provides the token-protected endpoints for sending a message to
the RunCloud assistant, reading the stored history and clearing it.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from runcloud_chat.dependencies import (
    get_chat_session,
    get_conversation_controller,
    get_session_manager,
)
from runcloud_chat.models.chat import (
    ChatHistoryResponse,
    ClearChatResponse,
    MessageResponse,
    SendMessageRequest,
    SendMessageResponse,
    ToolCallExecuted,
)
from runcloud_chat.services import ConversationController
from runcloud_chat.sessions import ChatSession, SessionManager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/chats", tags=["chat"])


def _save_error(e: Exception) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={
            "error": {
                "code": "session_save_error",
                "message": f"Failed to save session: {str(e)}",
                "details": {},
            }
        },
    )


@router.post("", response_model=SendMessageResponse)
async def send_message(
    request_body: SendMessageRequest,
    session: Annotated[ChatSession, Depends(get_chat_session)],
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
    controller: Annotated[ConversationController, Depends(get_conversation_controller)],
) -> SendMessageResponse:
    """Send a message and receive the assistant's answer.

    The session's RunCloud API key is passed to the conversation loop so the
    assistant can read live server data. The question and answer are stored
    once the answer is known.

    Raises:
        HTTPException: 401 if the session is invalid, 500 if saving fails
    """
    logger.info(f"Received message for session {session.room_id}")

    outcome = await controller.respond(request_body.message, session.app_key or None)
    actions: list[dict] = []

    try:
        session_manager.add_exchange(session, request_body.message, outcome.answer, actions)
    except (OSError, ValueError, KeyError) as e:
        logger.error(f"Failed to save session {session.room_id}: {e}")
        raise _save_error(e)

    return SendMessageResponse(
        answer=outcome.answer,
        actions=actions,
        tool_calls_executed=[
            ToolCallExecuted(name=call.name, arguments=call.arguments, success=call.success)
            for call in outcome.tool_calls
        ],
    )


@router.get("", response_model=ChatHistoryResponse)
async def get_chats(
    session: Annotated[ChatSession, Depends(get_chat_session)],
) -> ChatHistoryResponse:
    """Return the stored question/answer history of the session."""
    return ChatHistoryResponse(
        room_id=session.room_id,
        messages=[MessageResponse.model_validate(message) for message in session.messages],
        has_runcloud_token=bool(session.app_key),
    )


@router.delete("", response_model=ClearChatResponse)
async def clear_chats(
    session: Annotated[ChatSession, Depends(get_chat_session)],
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
) -> ClearChatResponse:
    """Delete all stored messages of the session."""
    try:
        session_manager.clear_messages(session)
    except OSError as e:
        logger.error(f"Failed to clear session {session.room_id}: {e}")
        raise _save_error(e)

    return ClearChatResponse(
        status="cleared",
        message="Chat session cleared successfully.",
    )
