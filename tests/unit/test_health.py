"""Unit tests for the health check endpoint."""

import pytest


@pytest.mark.asyncio
async def test_health_check_returns_ok(async_client):
    """Test that health check returns status ok."""
    response = await async_client.get("/api/v1/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["version"] == "0.1.0"


@pytest.mark.asyncio
async def test_health_check_response_structure(async_client):
    """Test that health check response has correct structure."""
    response = await async_client.get("/api/v1/health")

    assert response.status_code == 200
    data = response.json()

    assert "status" in data
    assert "version" in data
    assert "ollama_connected" in data
    assert "ollama_host" in data
    assert data["mcp_configured"] is False


@pytest.mark.asyncio
async def test_health_check_with_ollama_connected(async_client):
    """Test health check when Ollama is connected."""
    response = await async_client.get("/api/v1/health")

    assert response.status_code == 200
    data = response.json()
    assert data["ollama_connected"] is True
    assert data["ollama_host"] == "http://localhost:11434"


@pytest.mark.asyncio
async def test_health_check_with_ollama_disconnected(async_client, mock_ollama_client):
    """Test health check when Ollama is not reachable."""
    mock_ollama_client.check_connection.return_value = False

    response = await async_client.get("/api/v1/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"  # Server is still healthy
    assert data["ollama_connected"] is False


@pytest.mark.asyncio
async def test_health_check_ollama_check_exception(async_client, mock_ollama_client):
    """Test health check when Ollama connectivity check raises exception."""
    mock_ollama_client.check_connection.side_effect = Exception("Connection error")

    response = await async_client.get("/api/v1/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["ollama_connected"] is False


@pytest.mark.asyncio
async def test_health_check_no_ollama_client(async_client, test_app, mock_ollama_client):
    """Test health check when Ollama client is not initialized."""
    delattr(test_app.state, "ollama_client")

    response = await async_client.get("/api/v1/health")

    # Restore the client so lifespan shutdown can close it
    test_app.state.ollama_client = mock_ollama_client

    assert response.status_code == 200
    data = response.json()
    assert data["ollama_connected"] is None
    assert data["ollama_host"] is None


@pytest.mark.asyncio
async def test_health_check_reports_mcp_configured(test_settings, mock_ollama_client):
    """Test that a configured MCP server is reported."""
    from httpx import ASGITransport, AsyncClient

    from runcloud_chat import create_app

    test_settings.mcp_url = "http://mcp.test/mcp"
    test_settings.mcp_token = "service-token"
    app = create_app(settings=test_settings)

    async with app.router.lifespan_context(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/api/v1/health")

    assert response.json()["mcp_configured"] is True
