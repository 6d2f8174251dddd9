"""SessionManager for chat session tokens and stored messages.

This module provides the SessionManager class which handles:
- Creating sessions with a user token and expiry
- Validating a user token for a room
- Recording question/answer exchanges and room activity
- Listing a user's rooms
- Extending, revoking and pruning sessions
"""

import logging
import secrets
from pathlib import Path
from typing import Any

from runcloud_chat.sessions.session import (
    ChatSession,
    format_timestamp,
    parse_timestamp,
    utc_now,
)

logger = logging.getLogger(__name__)

ROOM_NAME_MAX_LENGTH = 50


class SessionManager:
    """Manages chat sessions stored as JSON files in one directory."""

    def __init__(self, sessions_dir: Path, token_expiry_hours: int = 3):
        """Initialize the SessionManager.

        Args:
            sessions_dir: Directory where session JSON files are stored
            token_expiry_hours: Lifetime of a newly issued user token
        """
        self.sessions_dir = sessions_dir
        self.token_expiry_hours = token_expiry_hours
        self.sessions_dir.mkdir(parents=True, exist_ok=True)

    def create_session(self, app_key: str, user_id: str | None = None) -> ChatSession:
        """Create a new chat session with a fresh user token.

        Args:
            app_key: The user's RunCloud API key
            user_id: Optional owner identifier

        Returns:
            The newly created ChatSession
        """
        session = ChatSession(
            room_id=ChatSession.generate_room_id(),
            user_token=ChatSession.generate_token(),
            app_key=app_key,
            expires_at=format_timestamp(utc_now()),
            user_id=user_id,
        )
        session.extend(self.token_expiry_hours)
        session.save(self.sessions_dir)

        logger.info(f"Created new session {session.room_id}")
        return session

    def get_session(self, room_id: str) -> ChatSession:
        """Load a session regardless of expiry.

        Raises:
            FileNotFoundError: If session doesn't exist
        """
        return ChatSession.load(room_id, self.sessions_dir)

    def validate_token(self, user_token: str, room_id: str) -> ChatSession | None:
        """Return the session if the token matches the room and has not expired."""
        try:
            session = self.get_session(room_id)
        except FileNotFoundError:
            logger.debug(f"Token validation failed: unknown room {room_id!r}")
            return None
        except (OSError, ValueError, KeyError) as e:
            logger.warning(f"Token validation failed: unreadable session {room_id}: {e}")
            return None

        # Bytes comparison accepts non-ASCII input
        if not secrets.compare_digest(
            session.user_token.encode("utf-8"), user_token.encode("utf-8")
        ):
            logger.warning(f"Token validation failed: wrong token for room {room_id}")
            return None

        if session.is_expired():
            logger.info(f"Token validation failed: session {room_id} expired")
            return None

        return session

    def add_exchange(
        self,
        session: ChatSession,
        question: str,
        answer: str,
        actions: list[dict[str, Any]] | None = None,
    ) -> ChatSession:
        """Store a question and its answer, then record room activity.

        The stored session is reloaded first so exchanges written by other
        requests since `session` was loaded are kept.

        Returns:
            ChatSession: The session as saved
        """
        current = self.get_session(session.room_id)
        current.add_message("question", question)
        current.add_message("answer", answer, actions)
        self.update_activity(current)

        session.messages = current.messages
        session.room_name = current.room_name
        session.last_activity = current.last_activity
        return current

    def update_activity(self, session: ChatSession) -> None:
        """Stamp last activity and name the room after its first question."""
        session.last_activity = format_timestamp(utc_now())

        if not session.room_name:
            first_question = session.first_question()
            if first_question:
                name = " ".join(first_question.split())
                if len(name) > ROOM_NAME_MAX_LENGTH:
                    name = name[: ROOM_NAME_MAX_LENGTH - 3] + "..."
                session.room_name = name

        session.save(self.sessions_dir)

    def clear_messages(self, session: ChatSession) -> None:
        session.clear_messages()
        session.save(self.sessions_dir)
        logger.info(f"Cleared messages of session {session.room_id}")

    def extend_session(self, session: ChatSession) -> None:
        session.extend(self.token_expiry_hours)
        session.save(self.sessions_dir)

    def revoke_session(self, session: ChatSession) -> None:
        session.revoke()
        session.save(self.sessions_dir)
        logger.info(f"Revoked session {session.room_id}")

    def list_sessions(self) -> list[ChatSession]:
        """Load every stored session, skipping unreadable files."""
        sessions: list[ChatSession] = []

        for file_path in self.sessions_dir.glob("*.json"):
            try:
                sessions.append(ChatSession.load(file_path.stem, self.sessions_dir))
            except Exception as e:
                logger.warning(f"Failed to load session {file_path.stem}: {e}")
                continue

        return sessions

    def list_user_rooms(self, user_id: str) -> list[ChatSession]:
        """List a user's valid rooms, most recently active first."""
        rooms = [
            session
            for session in self.list_sessions()
            if session.user_id == user_id and session.is_valid()
        ]
        rooms.sort(
            key=lambda s: parse_timestamp(s.last_activity or s.created_at),
            reverse=True,
        )
        return rooms

    def cleanup_expired(self, dry_run: bool = False) -> int:
        """Delete expired sessions.

        Args:
            dry_run: Only count the expired sessions

        Returns:
            Number of expired sessions (deleted unless dry_run)
        """
        now = utc_now()
        expired = [s for s in self.list_sessions() if s.is_expired(now)]

        if not dry_run:
            for session in expired:
                (self.sessions_dir / f"{session.room_id}.json").unlink(missing_ok=True)
            if expired:
                logger.info(f"Deleted {len(expired)} expired chat sessions")

        return len(expired)
