"""Integration tests for session API endpoints.

Tests session initialization and room listing with httpx AsyncClient
against the FastAPI application.
"""

import pytest


@pytest.mark.asyncio
async def test_init_session(async_client):
    """Test initializing a chat session."""
    response = await async_client.post(
        "/api/v1/sessions",
        json={"app_key": "rc_test_token", "user_id": "user-1"},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "initialized"
    assert len(data["room_id"]) == 10
    assert len(data["user_token"]) == 64
    assert data["user_id"] == "user-1"
    assert data["expires_at"].endswith("Z")
    assert "app_key" not in data


@pytest.mark.asyncio
async def test_init_session_stores_file(async_client, test_settings):
    response = await async_client.post("/api/v1/sessions", json={"app_key": "rc_key"})

    room_id = response.json()["room_id"]
    assert (test_settings.resolved_sessions_dir / f"{room_id}.json").exists()


@pytest.mark.asyncio
async def test_init_session_requires_app_key(async_client):
    response = await async_client.post("/api/v1/sessions", json={"user_id": "user-1"})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_user_rooms(async_client, stub_controller, chat_session):
    """A room appears in its owner's list with its latest activity."""
    await async_client.post(
        "/api/v1/chats",
        json={"message": "list my servers"},
        headers=chat_session["headers"],
    )

    response = await async_client.get("/api/v1/sessions", params={"user_id": "user-1"})

    assert response.status_code == 200
    data = response.json()
    assert data["user_id"] == "user-1"
    assert len(data["rooms"]) == 1
    room = data["rooms"][0]
    assert room["room_id"] == chat_session["room_id"]
    assert room["room_name"] == "list my servers"
    assert room["message_count"] == 2
    assert room["last_message"] == "You have 3 servers"
    assert room["has_runcloud_token"] is True


@pytest.mark.asyncio
async def test_list_user_rooms_other_user(async_client, chat_session):
    response = await async_client.get("/api/v1/sessions", params={"user_id": "user-2"})

    assert response.status_code == 200
    assert response.json()["rooms"] == []


@pytest.mark.asyncio
async def test_list_user_rooms_requires_user_id(async_client):
    response = await async_client.get("/api/v1/sessions")

    assert response.status_code == 422
