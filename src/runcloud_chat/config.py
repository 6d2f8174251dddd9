"""Configuration module for runcloud-chat-server using pydantic-settings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RunCloudChatSettings(BaseSettings):
    """Main configuration settings for runcloud-chat-server.

    All settings can be overridden via environment variables with the RCCHAT_ prefix.
    For example, RCCHAT_MCP_URL will override the mcp_url setting.
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000

    # Ollama
    ollama_host: str = "http://localhost:11434"
    model: str = "llama3.2:latest"
    intent_model: str | None = None

    # RunCloud MCP server
    mcp_url: str | None = None
    mcp_token: str | None = None

    # Data directories (relative to data_dir)
    data_dir: str = "."
    sessions_dir: str = "chat_sessions"

    # Session tokens
    token_expiry_hours: int = 3
    prune_interval_seconds: int = 3600

    # Conversation loop
    max_tool_turns: int = Field(default=5, ge=1)
    max_tool_result_chars: int = 20000
    temperature: float = 0.7
    max_output_tokens: int = 1500

    # Timeouts (seconds)
    tool_timeout: float = 30.0
    completion_timeout: float = 30.0
    intent_timeout: float = 15.0
    resolution_timeout: float = 10.0

    # CORS
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="RCCHAT_")

    @property
    def resolved_sessions_dir(self) -> Path:
        """Get the full path to the sessions directory."""
        return Path(self.data_dir) / self.sessions_dir

    @property
    def resolved_intent_model(self) -> str:
        """Model used for intent extraction and name resolution."""
        return self.intent_model or self.model

    @property
    def mcp_configured(self) -> bool:
        """Whether both the MCP endpoint and its service credential are set."""
        return bool(self.mcp_url) and bool(self.mcp_token)
