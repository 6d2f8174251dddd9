"""Unit tests for SessionManager.

Tests session creation, token validation, exchange recording, room listing
and expiry pruning.
"""

from datetime import timedelta
from pathlib import Path

import pytest

from runcloud_chat.sessions import ChatSession, SessionManager
from runcloud_chat.sessions.session import format_timestamp, utc_now


@pytest.fixture
def sessions_dir(tmp_path: Path) -> Path:
    """Create a temporary sessions directory."""
    return tmp_path / "sessions"


@pytest.fixture
def manager(sessions_dir: Path) -> SessionManager:
    return SessionManager(sessions_dir, token_expiry_hours=3)


def expire(manager: SessionManager, session: ChatSession) -> None:
    session.expires_at = format_timestamp(utc_now() - timedelta(minutes=1))
    session.save(manager.sessions_dir)


def test_create_session(manager: SessionManager, sessions_dir: Path):
    """Test creating a new session."""
    session = manager.create_session(app_key="rc_key", user_id="user-1")

    assert len(session.room_id) == 10
    assert session.app_key == "rc_key"
    assert session.user_id == "user-1"
    assert session.is_valid()
    assert (sessions_dir / f"{session.room_id}.json").exists()


def test_validate_token(manager: SessionManager):
    session = manager.create_session(app_key="rc_key")

    validated = manager.validate_token(session.user_token, session.room_id)

    assert validated is not None
    assert validated.room_id == session.room_id


def test_validate_wrong_token(manager: SessionManager):
    session = manager.create_session(app_key="rc_key")

    assert manager.validate_token("wrong-token", session.room_id) is None


def test_validate_unknown_room(manager: SessionManager):
    assert manager.validate_token("token", "unknownroom") is None


def test_validate_expired_session(manager: SessionManager):
    session = manager.create_session(app_key="rc_key")
    expire(manager, session)

    assert manager.validate_token(session.user_token, session.room_id) is None


def test_add_exchange_names_room(manager: SessionManager):
    session = manager.create_session(app_key="rc_key")

    manager.add_exchange(session, "list my servers", "You have 3 servers")

    loaded = manager.get_session(session.room_id)
    assert [m.type for m in loaded.messages] == ["question", "answer"]
    assert loaded.room_name == "list my servers"
    assert loaded.last_activity is not None


def test_long_room_name_is_shortened(manager: SessionManager):
    session = manager.create_session(app_key="rc_key")
    question = "show me " + "all my web applications " * 5

    manager.add_exchange(session, question, "Here they are")

    assert len(session.room_name) == 50
    assert session.room_name.endswith("...")


def test_room_name_is_kept(manager: SessionManager):
    session = manager.create_session(app_key="rc_key")
    manager.add_exchange(session, "list my servers", "3 servers")

    manager.add_exchange(session, "list my backups", "no backups")

    assert session.room_name == "list my servers"


def test_clear_messages(manager: SessionManager):
    session = manager.create_session(app_key="rc_key")
    manager.add_exchange(session, "list my servers", "3 servers")

    manager.clear_messages(session)

    assert manager.get_session(session.room_id).messages == []


def test_extend_and_revoke_session(manager: SessionManager):
    session = manager.create_session(app_key="rc_key")

    manager.revoke_session(session)
    assert manager.validate_token(session.user_token, session.room_id) is None

    manager.extend_session(session)
    assert manager.validate_token(session.user_token, session.room_id) is not None


def test_list_user_rooms(manager: SessionManager):
    older = manager.create_session(app_key="rc_key", user_id="user-1")
    newer = manager.create_session(app_key="rc_key", user_id="user-1")
    manager.create_session(app_key="rc_key", user_id="user-2")
    expired = manager.create_session(app_key="rc_key", user_id="user-1")
    expire(manager, expired)

    manager.add_exchange(older, "list my servers", "3 servers")
    manager.add_exchange(newer, "list my backups", "no backups")
    older.last_activity = format_timestamp(utc_now() - timedelta(minutes=5))
    older.save(manager.sessions_dir)

    rooms = manager.list_user_rooms("user-1")

    assert [room.room_id for room in rooms] == [newer.room_id, older.room_id]


def test_list_sessions_skips_corrupt_files(manager: SessionManager, sessions_dir: Path):
    manager.create_session(app_key="rc_key")
    (sessions_dir / "broken.json").write_text("{not json", encoding="utf-8")

    assert len(manager.list_sessions()) == 1


def test_cleanup_expired(manager: SessionManager, sessions_dir: Path):
    valid = manager.create_session(app_key="rc_key")
    expired = manager.create_session(app_key="rc_key")
    expire(manager, expired)

    assert manager.cleanup_expired(dry_run=True) == 1
    assert (sessions_dir / f"{expired.room_id}.json").exists()

    assert manager.cleanup_expired() == 1
    assert not (sessions_dir / f"{expired.room_id}.json").exists()
    assert (sessions_dir / f"{valid.room_id}.json").exists()


def test_validate_non_ascii_token(manager: SessionManager):
    session = manager.create_session(app_key="rc_key")

    assert manager.validate_token("é", session.room_id) is None


def test_validate_corrupt_session_file(manager: SessionManager, sessions_dir: Path):
    session = manager.create_session(app_key="rc_key")
    (sessions_dir / f"{session.room_id}.json").write_text("{not json", encoding="utf-8")

    assert manager.validate_token(session.user_token, session.room_id) is None


def test_validate_session_file_missing_fields(manager: SessionManager, sessions_dir: Path):
    session = manager.create_session(app_key="rc_key")
    (sessions_dir / f"{session.room_id}.json").write_text("{}", encoding="utf-8")

    assert manager.validate_token(session.user_token, session.room_id) is None


def test_add_exchange_keeps_exchanges_from_stale_copies(manager: SessionManager):
    """Two copies loaded before either write both keep their exchange."""
    session = manager.create_session(app_key="rc_key")
    first = manager.get_session(session.room_id)
    second = manager.get_session(session.room_id)

    manager.add_exchange(first, "list servers A", "ans A")
    saved = manager.add_exchange(second, "list servers B", "ans B")

    stored = manager.get_session(session.room_id)
    assert [m.content for m in stored.messages] == [
        "list servers A",
        "ans A",
        "list servers B",
        "ans B",
    ]
    assert [m.content for m in saved.messages] == [m.content for m in stored.messages]
    assert second.room_name == "list servers A"
