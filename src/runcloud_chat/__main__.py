"""CLI entry point for runcloud-chat-server.

This module provides the command-line interface for starting the server.
It can be invoked as `runcloud-chat` (via the script entry point) or
`python -m runcloud_chat`.
"""

import argparse
import logging
import sys

import uvicorn

from runcloud_chat import __version__, create_app
from runcloud_chat.config import RunCloudChatSettings
from runcloud_chat.sessions import SessionManager


def setup_logging(log_level: str = "INFO") -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def prune_sessions(settings: RunCloudChatSettings, dry_run: bool) -> int:
    """Delete (or count) expired chat sessions and report the result."""
    manager = SessionManager(
        sessions_dir=settings.resolved_sessions_dir,
        token_expiry_hours=settings.token_expiry_hours,
    )
    count = manager.cleanup_expired(dry_run=dry_run)

    if dry_run:
        print(f"[DRY RUN] Would delete {count} expired chat sessions.")
    elif count > 0:
        print(f"Successfully deleted {count} expired chat sessions.")
    else:
        print("No expired chat sessions found.")
    return 0


def main() -> int:
    """Main entry point for the runcloud-chat CLI.

    Parses command-line arguments and either prunes expired sessions or
    starts the uvicorn server with the FastAPI application.
    """
    parser = argparse.ArgumentParser(
        prog="runcloud-chat",
        description="Chat server answering RunCloud questions with Ollama and live MCP tools",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"runcloud-chat-server {__version__}",
    )

    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Host to bind the server to (default: 127.0.0.1, can be set via RCCHAT_HOST)",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to bind the server to (default: 8000, can be set via RCCHAT_PORT)",
    )

    parser.add_argument(
        "--ollama-host",
        type=str,
        default=None,
        help="Ollama server URL (default: http://localhost:11434, can be set via RCCHAT_OLLAMA_HOST)",
    )

    parser.add_argument(
        "--model",
        type=str,
        default=None,
        help="Ollama model used for answers (can be set via RCCHAT_MODEL)",
    )

    parser.add_argument(
        "--mcp-url",
        type=str,
        default=None,
        help="RunCloud MCP server URL (can be set via RCCHAT_MCP_URL)",
    )

    parser.add_argument(
        "--data-dir",
        type=str,
        default=None,
        help="Base directory for all data (default: ., can be set via RCCHAT_DATA_DIR)",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO, can be set via RCCHAT_LOG_LEVEL)",
    )

    parser.add_argument(
        "--prune-expired",
        action="store_true",
        help="Delete expired chat sessions and exit",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="With --prune-expired, only report how many sessions would be deleted",
    )

    args = parser.parse_args()

    # Build settings, CLI args override environment variables
    settings_kwargs = {}
    if args.host is not None:
        settings_kwargs["host"] = args.host
    if args.port is not None:
        settings_kwargs["port"] = args.port
    if args.ollama_host is not None:
        settings_kwargs["ollama_host"] = args.ollama_host
    if args.model is not None:
        settings_kwargs["model"] = args.model
    if args.mcp_url is not None:
        settings_kwargs["mcp_url"] = args.mcp_url
    if args.data_dir is not None:
        settings_kwargs["data_dir"] = args.data_dir
    if args.log_level is not None:
        settings_kwargs["log_level"] = args.log_level

    settings = RunCloudChatSettings(**settings_kwargs)
    setup_logging(settings.log_level)

    if args.prune_expired:
        return prune_sessions(settings, dry_run=args.dry_run)

    app = create_app(settings=settings)

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
