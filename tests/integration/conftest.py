"""Pytest configuration for integration tests.

This module provides integration-test-specific fixtures: a stubbed
conversation controller and a helper that initializes a chat session.
"""

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from runcloud_chat.dependencies import get_conversation_controller
from runcloud_chat.services import ConversationOutcome, ToolCallRecord


@pytest.fixture
def stub_controller(test_app):
    """Replace the conversation controller with a stub for all chat requests."""
    controller = AsyncMock()
    controller.respond.return_value = ConversationOutcome(
        answer="You have 3 servers",
        tool_calls=(ToolCallRecord(name="list-servers", arguments={}, success=True),),
    )
    test_app.dependency_overrides[get_conversation_controller] = lambda: controller
    yield controller
    test_app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def chat_session(async_client):
    """Initialize a chat session and return its credentials as headers."""
    response = await async_client.post(
        "/api/v1/sessions",
        json={"app_key": "rc_test_token", "user_id": "user-1"},
    )
    assert response.status_code == 201
    data = response.json()
    return {
        "room_id": data["room_id"],
        "user_token": data["user_token"],
        "headers": {
            "Authorization": f"Bearer {data['user_token']}",
            "X-Room-Id": data["room_id"],
        },
    }
