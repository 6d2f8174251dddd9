"""Integration tests for the chat API endpoints.

The conversation controller is stubbed; these tests cover authentication,
persistence of the exchange and the response shapes.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from runcloud_chat.ollama import CompletionResult
from runcloud_chat.services import ConversationOutcome
from runcloud_chat.services.relevance import OUT_OF_SCOPE_ANSWER


@pytest.mark.asyncio
async def test_send_message(async_client, stub_controller, chat_session):
    """Test sending a message and receiving the answer."""
    response = await async_client.post(
        "/api/v1/chats",
        json={"message": "list my servers"},
        headers=chat_session["headers"],
    )

    assert response.status_code == 200
    data = response.json()
    assert data["answer"] == "You have 3 servers"
    assert data["actions"] == []
    assert data["tool_calls_executed"] == [
        {"name": "list-servers", "arguments": {}, "success": True}
    ]
    stub_controller.respond.assert_awaited_once_with("list my servers", "rc_test_token")


@pytest.mark.asyncio
async def test_send_message_stores_exchange(async_client, stub_controller, chat_session):
    await async_client.post(
        "/api/v1/chats",
        json={"message": "list my servers"},
        headers=chat_session["headers"],
    )

    response = await async_client.get("/api/v1/chats", headers=chat_session["headers"])

    assert response.status_code == 200
    data = response.json()
    assert data["room_id"] == chat_session["room_id"]
    assert data["has_runcloud_token"] is True
    assert [(m["type"], m["content"]) for m in data["messages"]] == [
        ("question", "list my servers"),
        ("answer", "You have 3 servers"),
    ]


@pytest.mark.asyncio
async def test_token_in_query_parameters(async_client, stub_controller, chat_session):
    response = await async_client.get(
        "/api/v1/chats",
        params={
            "user_token": chat_session["user_token"],
            "room_id": chat_session["room_id"],
        },
    )

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_token_in_custom_header(async_client, stub_controller, chat_session):
    response = await async_client.get(
        "/api/v1/chats",
        headers={
            "X-User-Token": chat_session["user_token"],
            "X-Room-Id": chat_session["room_id"],
        },
    )

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_missing_token(async_client, chat_session):
    response = await async_client.get(
        "/api/v1/chats", headers={"X-Room-Id": chat_session["room_id"]}
    )

    assert response.status_code == 401
    assert response.json()["detail"]["error"]["code"] == "missing_token"


@pytest.mark.asyncio
async def test_missing_room(async_client, chat_session):
    response = await async_client.get(
        "/api/v1/chats",
        headers={"Authorization": f"Bearer {chat_session['user_token']}"},
    )

    assert response.status_code == 401
    assert response.json()["detail"]["error"]["code"] == "missing_room"


@pytest.mark.asyncio
async def test_wrong_token(async_client, stub_controller, chat_session):
    response = await async_client.post(
        "/api/v1/chats",
        json={"message": "list my servers"},
        headers={"Authorization": "Bearer wrong", "X-Room-Id": chat_session["room_id"]},
    )

    assert response.status_code == 401
    assert response.json()["detail"]["error"]["code"] == "invalid_session"
    stub_controller.respond.assert_not_called()


@pytest.mark.asyncio
async def test_empty_message_rejected(async_client, stub_controller, chat_session):
    response = await async_client.post(
        "/api/v1/chats", json={"message": ""}, headers=chat_session["headers"]
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_clear_chats(async_client, stub_controller, chat_session):
    await async_client.post(
        "/api/v1/chats",
        json={"message": "list my servers"},
        headers=chat_session["headers"],
    )

    response = await async_client.delete("/api/v1/chats", headers=chat_session["headers"])

    assert response.status_code == 200
    assert response.json()["status"] == "cleared"

    history = await async_client.get("/api/v1/chats", headers=chat_session["headers"])
    assert history.json()["messages"] == []


@pytest.mark.asyncio
async def test_out_of_scope_message_uses_real_controller(
    async_client, mock_ollama_client, chat_session
):
    """Without a stub, an unrelated question is deflected before any model call."""
    response = await async_client.post(
        "/api/v1/chats",
        json={"message": "Tell me a joke"},
        headers=chat_session["headers"],
    )

    assert response.status_code == 200
    assert response.json()["answer"] == OUT_OF_SCOPE_ANSWER
    mock_ollama_client.chat.assert_not_called()
    mock_ollama_client.complete.assert_not_called()


@pytest.mark.asyncio
async def test_real_controller_without_mcp(async_client, mock_ollama_client, chat_session):
    """With no MCP server configured the model answers without tools."""
    reply = CompletionResult(text="Please configure the MCP server.")
    mock_ollama_client.chat = AsyncMock(return_value=reply)

    response = await async_client.post(
        "/api/v1/chats",
        json={"message": "list my servers"},
        headers=chat_session["headers"],
    )

    assert response.status_code == 200
    assert response.json()["answer"] == "Please configure the MCP server."
    assert response.json()["tool_calls_executed"] == []
    assert mock_ollama_client.chat.call_args.kwargs["tools"] is None


@pytest.mark.asyncio
async def test_non_ascii_token_is_rejected(async_client, stub_controller, chat_session):
    response = await async_client.get(
        "/api/v1/chats",
        params={"user_token": "é", "room_id": chat_session["room_id"]},
    )

    assert response.status_code == 401
    assert response.json()["detail"]["error"]["code"] == "invalid_session"


@pytest.mark.asyncio
async def test_corrupt_session_file_is_rejected(
    async_client, test_settings, chat_session
):
    session_file = test_settings.resolved_sessions_dir / f"{chat_session['room_id']}.json"
    session_file.write_text('{"room_id": "truncated', encoding="utf-8")

    response = await async_client.get("/api/v1/chats", headers=chat_session["headers"])

    assert response.status_code == 401
    assert response.json()["detail"]["error"]["code"] == "invalid_session"


@pytest.mark.asyncio
async def test_overlapping_messages_are_all_stored(async_client, stub_controller, chat_session):
    """Two messages answered at the same time both end up in the history."""

    async def slow_respond(message, auth_token):
        await asyncio.sleep(0.05)
        return ConversationOutcome(answer=f"ans {message}")

    stub_controller.respond.side_effect = slow_respond

    responses = await asyncio.gather(
        async_client.post(
            "/api/v1/chats",
            json={"message": "list servers A"},
            headers=chat_session["headers"],
        ),
        async_client.post(
            "/api/v1/chats",
            json={"message": "list servers B"},
            headers=chat_session["headers"],
        ),
    )
    assert [r.status_code for r in responses] == [200, 200]

    history = await async_client.get("/api/v1/chats", headers=chat_session["headers"])

    contents = [m["content"] for m in history.json()["messages"]]
    assert len(contents) == 4
    assert set(contents) == {
        "list servers A",
        "ans list servers A",
        "list servers B",
        "ans list servers B",
    }
