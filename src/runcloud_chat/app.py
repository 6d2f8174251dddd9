"""FastAPI application factory and lifespan management.

This module contains the create_app() factory function that creates and configures
the FastAPI application instance, including lifespan management for startup/shutdown
and router registration.
"""

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from runcloud_chat import __version__
from runcloud_chat.config import RunCloudChatSettings
from runcloud_chat.ollama import OllamaClient
from runcloud_chat.routers import chat, health, sessions
from runcloud_chat.services import (
    ContextEnricher,
    ConversationController,
    IntentResolver,
)
from runcloud_chat.sessions import SessionManager
from runcloud_chat.tools import McpClient, ToolCatalog

logger = logging.getLogger(__name__)


async def prune_expired_sessions(settings: RunCloudChatSettings) -> None:
    """Periodically delete expired chat sessions until cancelled."""
    manager = SessionManager(
        sessions_dir=settings.resolved_sessions_dir,
        token_expiry_hours=settings.token_expiry_hours,
    )
    while True:
        await asyncio.sleep(settings.prune_interval_seconds)
        try:
            deleted = manager.cleanup_expired()
            logger.debug(f"Session pruning removed {deleted} expired sessions")
        except OSError as e:
            logger.error(f"Session pruning failed: {e}")


def build_conversation_controller(
    settings: RunCloudChatSettings,
    ollama_client: OllamaClient,
    mcp_client: McpClient,
) -> ConversationController:
    """Wire the conversation core from settings and the shared clients."""
    intent_resolver = IntentResolver(
        ollama_client=ollama_client,
        mcp_client=mcp_client,
        model=settings.resolved_intent_model,
        intent_timeout=settings.intent_timeout,
        resolution_timeout=settings.resolution_timeout,
    )
    return ConversationController(
        ollama_client=ollama_client,
        mcp_client=mcp_client,
        tool_catalog=ToolCatalog(mcp_client),
        context_enricher=ContextEnricher(intent_resolver, mcp_client),
        model=settings.model,
        max_tool_turns=settings.max_tool_turns,
        temperature=settings.temperature,
        max_output_tokens=settings.max_output_tokens,
        completion_timeout=settings.completion_timeout,
        max_tool_result_chars=settings.max_tool_result_chars,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan context manager for FastAPI application.

    The Ollama and MCP clients and the conversation controller are created
    once at startup and stored in app.state for reuse across all requests.
    A background task prunes expired sessions while the app is running.

    Args:
        app: The FastAPI application instance.

    Yields:
        None: Control is yielded while the app is running.
    """
    settings: RunCloudChatSettings = app.state.settings

    app.state.ollama_client = OllamaClient(host=settings.ollama_host)
    logger.info(f"Initialized Ollama client with host: {settings.ollama_host}")

    app.state.mcp_client = McpClient(
        url=settings.mcp_url,
        token=settings.mcp_token,
        timeout=settings.tool_timeout,
    )

    app.state.conversation_controller = build_conversation_controller(
        settings, app.state.ollama_client, app.state.mcp_client
    )

    connected = await app.state.ollama_client.check_connection()
    if connected:
        logger.info("Successfully connected to Ollama")
    else:
        logger.warning("Could not connect to Ollama - check if server is running")

    prune_task = None
    if settings.prune_interval_seconds > 0:
        prune_task = asyncio.create_task(prune_expired_sessions(settings))

    yield

    if prune_task is not None:
        prune_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await prune_task

    await app.state.mcp_client.close()
    await app.state.ollama_client.close()
    logger.info("Clients closed")


def create_app(settings: RunCloudChatSettings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional RunCloudChatSettings instance. If not provided,
                  settings will be loaded from environment variables.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    if settings is None:
        from runcloud_chat.dependencies import get_settings

        settings = get_settings()

    app = FastAPI(
        title="runcloud-chat-server",
        description="Chat server answering RunCloud questions with Ollama and live MCP tools",
        version=__version__,
        lifespan=lifespan,
    )

    # Store settings in app.state for lifespan access
    app.state.settings = settings

    # Note: FastAPI's type hints for add_middleware are overly strict
    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(sessions.router)
    app.include_router(chat.router)

    return app
