"""Async Ollama client wrapper.

This module provides an async wrapper around the ollama.AsyncClient for
communicating with the Ollama API. The client is created once at startup and
shared by all requests; it keeps no per-request state.

Every call is bounded by an explicit timeout. Failures are logged and reported
as None rather than raised, so callers always receive either a decoded
CompletionResult or a failure marker.
"""

import asyncio
import logging
from collections.abc import Sequence
from typing import Any

import ollama

from runcloud_chat.ollama.types import CompletionResult, ConversationTurn

logger = logging.getLogger(__name__)


class OllamaClient:
    """Async client for the Ollama chat API.

    Attributes:
        host: The Ollama server URL (e.g., "http://localhost:11434")
        _client: The underlying ollama.AsyncClient instance
    """

    def __init__(self, host: str) -> None:
        """Initialize the Ollama client.

        Args:
            host: The Ollama server URL
        """
        self.host = host
        self._client = ollama.AsyncClient(host=host)
        logger.info(f"OllamaClient initialized with host: {host}")

    async def check_connection(self) -> bool:
        """Check if the Ollama server is reachable.

        Returns:
            bool: True if connection is successful, False otherwise
        """
        try:
            await self._client.list()
            logger.debug("Ollama connection check: successful")
            return True
        except Exception as e:
            logger.warning(f"Ollama connection check failed: {e}")
            return False

    async def chat(
        self,
        model: str,
        turns: Sequence[ConversationTurn],
        tools: list[dict[str, Any]] | None = None,
        options: dict[str, Any] | None = None,
        timeout: float = 30.0,
    ) -> CompletionResult | None:
        """Send the turn history to Ollama and decode the reply.

        Args:
            model: The model name to use for the chat
            turns: Ordered conversation history
            tools: Optional function declarations in Ollama format
            options: Optional model parameters (temperature, num_predict, ...)
            timeout: Seconds to wait for the complete reply

        Returns:
            CompletionResult | None: The decoded reply, or None if the call
            failed or the reply could not be decoded
        """
        messages = [turn.to_ollama_message() for turn in turns]
        declared = [tool["function"]["name"] for tool in tools or []]

        logger.debug(
            f"Sending {len(messages)} messages to {model} with {len(declared)} tools"
        )

        try:
            response = await asyncio.wait_for(
                self._client.chat(
                    model=model,
                    messages=messages,
                    tools=tools or None,
                    stream=False,
                    options=options,
                ),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            logger.error(f"Ollama chat timed out after {timeout}s (model={model})")
            return None
        except ollama.ResponseError as e:
            logger.error(f"Ollama API error (status={e.status_code}): {e.error}")
            return None
        except Exception as e:
            logger.error(f"Ollama chat failed: {e}")
            return None

        if hasattr(response, "model_dump"):
            data = response.model_dump()
        elif isinstance(response, dict):
            data = response
        else:
            logger.warning(f"Unexpected Ollama response type: {type(response).__name__}")
            return None

        try:
            result = CompletionResult.from_ollama_response(data, declared_tools=declared)
        except ValueError as e:
            logger.warning(f"Unexpected Ollama response format: {e}; response={data}")
            return None

        logger.debug(
            f"Ollama reply: text={result.text is not None}, "
            f"tool_call={result.tool_call.name if result.tool_call else None}, "
            f"finish_reason={result.finish_reason.value}, "
            f"eval_count={result.eval_count}, prompt_eval_count={result.prompt_eval_count}"
        )
        return result

    async def complete(
        self,
        model: str,
        prompt: str,
        temperature: float = 0.1,
        max_tokens: int = 200,
        timeout: float = 15.0,
    ) -> str | None:
        """Run a single-prompt completion and return its text.

        Args:
            model: The model name to use
            prompt: The full prompt, sent as one user message
            temperature: Sampling temperature
            max_tokens: Maximum number of tokens to generate
            timeout: Seconds to wait for the reply

        Returns:
            str | None: The stripped reply text, or None on failure or empty reply
        """
        result = await self.chat(
            model=model,
            turns=[ConversationTurn.user(prompt)],
            options={"temperature": temperature, "num_predict": max_tokens},
            timeout=timeout,
        )
        if result is None:
            return None
        if result.text is None:
            logger.warning(
                f"Ollama completion returned no text (finish_reason={result.finish_reason.value})"
            )
        return result.text

    async def close(self) -> None:
        """Close the client and clean up resources.

        ollama.AsyncClient uses httpx internally which handles cleanup.
        """
        logger.debug("OllamaClient closed")
