"""Health check response model."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response model for the health check endpoint.

    Attributes:
        status: Health status indicator ("ok" or "error").
        version: The version of runcloud-chat-server.
        ollama_connected: Whether Ollama answered the connectivity check.
        ollama_host: The Ollama host URL.
        mcp_configured: Whether the RunCloud MCP server is configured.
    """

    status: str = Field(..., description="Health status of the service")
    version: str = Field(..., description="Version of runcloud-chat-server")
    ollama_connected: bool | None = Field(
        default=None,
        description="Whether Ollama is connected",
    )
    ollama_host: str | None = Field(
        default=None,
        description="Ollama host URL",
    )
    mcp_configured: bool = Field(
        default=False,
        description="Whether the RunCloud MCP server URL and token are set",
    )
