"""runcloud-chat-server: chat server for RunCloud questions.

This package answers natural-language questions about RunCloud servers with
an Ollama model that can call the RunCloud MCP server's tools mid-conversation
to fetch live data.
"""

__version__ = "0.1.0"

from runcloud_chat.app import create_app  # noqa: E402

__all__ = ["create_app", "__version__"]
