"""Pytest configuration and shared fixtures for runcloud-chat-server tests.

This module provides common fixtures used across all test modules,
including test app creation and async client setup.
"""

from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from runcloud_chat import create_app
from runcloud_chat.config import RunCloudChatSettings


@pytest.fixture
def test_settings(tmp_path):
    """Create test settings with an isolated temporary data directory.

    Args:
        tmp_path: Pytest fixture providing a temporary directory.

    Returns:
        RunCloudChatSettings: Settings instance configured for testing.
    """
    return RunCloudChatSettings(
        host="127.0.0.1",
        port=8000,
        ollama_host="http://localhost:11434",
        model="llama3.2:latest",
        mcp_url=None,
        mcp_token=None,
        data_dir=str(tmp_path),
        sessions_dir="chat_sessions",
        prune_interval_seconds=0,
        log_level="DEBUG",
        cors_origins=["*"],
    )


@pytest.fixture
def test_app(test_settings):
    """Create a FastAPI test application instance."""
    return create_app(settings=test_settings)


@pytest.fixture
def mock_ollama_client():
    """Patch OllamaClient so the lifespan never talks to a real Ollama server."""
    with patch("runcloud_chat.app.OllamaClient") as mock_client_class:
        mock_instance = AsyncMock()
        mock_instance.host = "http://localhost:11434"
        mock_instance.check_connection.return_value = True
        mock_client_class.return_value = mock_instance
        yield mock_instance


@pytest_asyncio.fixture
async def async_client(test_app, mock_ollama_client):
    """Create an async HTTP client for testing FastAPI endpoints.

    Yields:
        AsyncClient: Async HTTP client for making test requests.
    """
    # Trigger the lifespan startup manually for tests
    async with test_app.router.lifespan_context(test_app):
        transport = ASGITransport(app=test_app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
