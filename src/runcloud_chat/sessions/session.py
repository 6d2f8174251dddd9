"""ChatSession class for a single chat room.

This module provides the ChatSession class which handles:
- Loading and saving session data to JSON files
- Token expiry checks
- Appending and clearing stored messages
"""

import json
import logging
import re
import secrets
import uuid
from dataclasses import asdict
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

from runcloud_chat.sessions.types import ChatMessage

logger = logging.getLogger(__name__)

_ROOM_ID_RE = re.compile(r"^[A-Za-z0-9]{1,50}$")


def format_timestamp(moment: datetime) -> str:
    """Format a UTC datetime as an ISO 8601 string with a Z suffix."""
    return moment.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    """Parse a timestamp written by format_timestamp."""
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ChatSession:
    """A chat room bound to a user token and a RunCloud API key.

    A session is persisted as a JSON file with the following structure:
    {
        "room_id": "...",
        "user_token": "...",
        "app_key": "...",
        ...
        "messages": [...]
    }
    """

    def __init__(
        self,
        room_id: str,
        user_token: str,
        app_key: str,
        expires_at: str,
        user_id: str | None = None,
        room_name: str | None = None,
        created_at: str | None = None,
        last_activity: str | None = None,
        messages: list[ChatMessage] | None = None,
    ):
        """Initialize a ChatSession.

        Args:
            room_id: Unique room identifier (10-char hex)
            user_token: Secret token authorizing access to this room
            app_key: The user's RunCloud API key
            expires_at: ISO timestamp after which the token is invalid
            user_id: Optional owner identifier used to list a user's rooms
            room_name: Optional display name
            created_at: Creation timestamp (default: now)
            last_activity: Timestamp of the last message exchange
            messages: Stored question/answer history (default: empty)
        """
        self.room_id = room_id
        self.user_token = user_token
        self.app_key = app_key
        self.expires_at = expires_at
        self.user_id = user_id
        self.room_name = room_name
        self.created_at = created_at or format_timestamp(utc_now())
        self.last_activity = last_activity
        self.messages: list[ChatMessage] = messages or []

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check whether the session token has expired."""
        return parse_timestamp(self.expires_at) <= (now or utc_now())

    def is_valid(self, now: datetime | None = None) -> bool:
        return not self.is_expired(now)

    def extend(self, hours: int) -> None:
        """Push the expiry to `hours` from now."""
        self.expires_at = format_timestamp(utc_now() + timedelta(hours=hours))

    def revoke(self) -> None:
        """Expire the session immediately."""
        self.expires_at = format_timestamp(utc_now() - timedelta(seconds=1))

    def add_message(
        self,
        type: str,
        content: str,
        actions: list[dict[str, Any]] | None = None,
    ) -> ChatMessage:
        """Append a question or answer to the history.

        Args:
            type: "question" or "answer"
            content: Message text
            actions: Optional follow-up actions attached to an answer

        Returns:
            ChatMessage: The stored message
        """
        if type not in ("question", "answer"):
            raise ValueError(f"Unknown message type: {type}")

        message = ChatMessage(
            type=type,
            content=content,
            actions=actions or [],
            created_at=format_timestamp(utc_now()),
        )
        self.messages.append(message)
        return message

    def clear_messages(self) -> None:
        self.messages = []

    def first_question(self) -> str | None:
        for message in self.messages:
            if message.is_question():
                return message.content
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert session to a dictionary for JSON serialization."""
        return {
            "room_id": self.room_id,
            "user_token": self.user_token,
            "app_key": self.app_key,
            "user_id": self.user_id,
            "room_name": self.room_name,
            "created_at": self.created_at,
            "expires_at": self.expires_at,
            "last_activity": self.last_activity,
            "messages": [asdict(message) for message in self.messages],
        }

    def save(self, sessions_dir: Path) -> None:
        """Save the session to a JSON file.

        Args:
            sessions_dir: Directory where session files are stored
        """
        sessions_dir.mkdir(parents=True, exist_ok=True)
        file_path = sessions_dir / f"{self.room_id}.json"

        with open(file_path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)

        logger.debug(f"Saved session {self.room_id} to {file_path}")

    @classmethod
    def load(cls, room_id: str, sessions_dir: Path) -> "ChatSession":
        """Load a session from a JSON file.

        Args:
            room_id: The room ID to load
            sessions_dir: Directory where session files are stored

        Returns:
            Loaded ChatSession instance

        Raises:
            FileNotFoundError: If the room ID is malformed or no file exists
        """
        if not _ROOM_ID_RE.match(room_id):
            raise FileNotFoundError(f"Session {room_id!r} not found")

        file_path = sessions_dir / f"{room_id}.json"
        if not file_path.exists():
            raise FileNotFoundError(f"Session {room_id} not found")

        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        return cls(
            room_id=data["room_id"],
            user_token=data["user_token"],
            app_key=data["app_key"],
            expires_at=data["expires_at"],
            user_id=data.get("user_id"),
            room_name=data.get("room_name"),
            created_at=data.get("created_at"),
            last_activity=data.get("last_activity"),
            messages=[ChatMessage(**message) for message in data.get("messages", [])],
        )

    @staticmethod
    def generate_room_id() -> str:
        """Generate a new unique room ID.

        Returns:
            10-character hexadecimal string
        """
        return uuid.uuid4().hex[:10]

    @staticmethod
    def generate_token() -> str:
        """Generate a 64-character URL-safe user token."""
        return secrets.token_urlsafe(48)
