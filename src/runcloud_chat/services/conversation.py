"""Tool-augmented conversation loop.

ConversationController answers one user message. It gates the message through
the relevance filter, builds the first user turn with live RunCloud context,
then alternates between Ollama and the MCP server: whenever the model asks for
a tool, the tool is executed and its result is fed back, until the model
answers in text or the tool-call cap is reached.

The controller is created once per application. All per-message state (turn
history, tool-call count, the user's credential) lives in local variables and
arguments, so concurrent requests never share anything mutable.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from runcloud_chat.ollama import (
    CompletionResult,
    ConversationTurn,
    FinishReason,
    OllamaClient,
    ToolCall,
)
from runcloud_chat.services.context import ContextEnricher
from runcloud_chat.services.relevance import OUT_OF_SCOPE_ANSWER, is_in_scope
from runcloud_chat.tools import (
    McpClient,
    ToolCatalog,
    ToolDeclaration,
    ToolInvocationResult,
    to_catalog_name,
)

logger = logging.getLogger(__name__)

FALLBACK_ANSWER = (
    "I apologize, but I'm having trouble generating a response right now. "
    "Please try again in a moment."
)

UNEXPECTED_TOOL_CALL_ANSWER = (
    "I found information about your RunCloud resources, but I'm having trouble "
    "formatting the response. Let me provide a direct answer based on what I found "
    "in your RunCloud context above."
)

MAX_TOKENS_ANSWER = (
    "I was providing information about your RunCloud resources, but my response "
    "was cut off. Please ask me to continue or be more specific about what you need."
)

TOOL_CAP_ANSWER = (
    "I gathered information about your RunCloud resources but couldn't finish "
    "putting together an answer. Please try a more specific question."
)

NO_TOOLS_INSTRUCTION = (
    "IMPORTANT: You are an AI assistant that provides direct answers. Do not attempt "
    "to call any tools or functions. Answer directly based on the information "
    "provided above."
)

TRUNCATION_MARKER = "\n...(truncated)"


@dataclass(frozen=True)
class ToolCallRecord:
    """A tool executed while answering a message."""

    name: str
    arguments: dict[str, Any]
    success: bool


@dataclass(frozen=True)
class ConversationOutcome:
    """Result of answering one user message.

    Attributes:
        answer: Text to show the user
        turns: Full exchange that produced the answer (empty if it was
            discarded after a provider failure or no provider call was made)
        tool_calls: Tools executed, in order
    """

    answer: str
    turns: tuple[ConversationTurn, ...] = ()
    tool_calls: tuple[ToolCallRecord, ...] = field(default_factory=tuple)


class ConversationController:
    """Drives the bounded model/tool exchange for a single message."""

    def __init__(
        self,
        ollama_client: OllamaClient,
        mcp_client: McpClient,
        tool_catalog: ToolCatalog,
        context_enricher: ContextEnricher,
        model: str,
        max_tool_turns: int = 5,
        temperature: float = 0.7,
        max_output_tokens: int = 1500,
        completion_timeout: float = 30.0,
        max_tool_result_chars: int = 20000,
    ) -> None:
        self.ollama_client = ollama_client
        self.mcp_client = mcp_client
        self.tool_catalog = tool_catalog
        self.context_enricher = context_enricher
        self.model = model
        self.max_tool_turns = max_tool_turns
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self.completion_timeout = completion_timeout
        self.max_tool_result_chars = max_tool_result_chars

    async def respond(self, message: str, auth_token: str | None) -> ConversationOutcome:
        """Answer a user message.

        Args:
            message: The user's message
            auth_token: The session's RunCloud API key, if any

        Returns:
            ConversationOutcome: The answer plus the exchange that produced it.
            Never raises; failures are reported through fixed answers.
        """
        if not is_in_scope(message):
            logger.info("Message is not RunCloud-related, returning deflection")
            return ConversationOutcome(answer=OUT_OF_SCOPE_ANSWER)

        try:
            return await self._run(message, auth_token)
        except Exception as e:
            logger.error(f"Conversation loop failed: {e}", exc_info=True)
            return ConversationOutcome(answer=FALLBACK_ANSWER)

    async def _run(self, message: str, auth_token: str | None) -> ConversationOutcome:
        tools_enabled = bool(auth_token) and self.tool_catalog.is_configured()

        first_turn = await self.context_enricher.build_context(message, auth_token)
        turns: list[ConversationTurn] = [ConversationTurn.user(first_turn)]
        if not tools_enabled:
            turns.append(ConversationTurn.user(NO_TOOLS_INSTRUCTION))

        tool_calls: list[ToolCallRecord] = []
        turn_count = 0

        while turn_count < self.max_tool_turns:
            declarations = (
                await self.tool_catalog.discover_tools() if tools_enabled else None
            )
            result = await self._call_model(turns, declarations)

            if result is None:
                logger.error(
                    f"Completion failed after {turn_count} tool calls, returning fallback"
                )
                return ConversationOutcome(answer=FALLBACK_ANSWER)

            if result.text is not None:
                turns.append(ConversationTurn.model(text=result.text))
                logger.info(
                    f"Answered after {turn_count} tool calls ({len(turns)} turns)"
                )
                return ConversationOutcome(
                    answer=result.text,
                    turns=tuple(turns),
                    tool_calls=tuple(tool_calls),
                )

            if result.tool_call is not None:
                record, result_turn = await self._execute(
                    result.tool_call, declarations or [], auth_token or ""
                )
                turns.append(ConversationTurn.model(tool_call=result.tool_call))
                turns.append(result_turn)
                tool_calls.append(record)
                turn_count += 1
                continue

            if result.finish_reason is FinishReason.UNEXPECTED_TOOL_CALL:
                logger.warning("Model tried to call a tool that is not in the catalog")
                return ConversationOutcome(
                    answer=UNEXPECTED_TOOL_CALL_ANSWER, tool_calls=tuple(tool_calls)
                )

            if result.finish_reason is FinishReason.MAX_TOKENS:
                logger.warning("Model response was cut off due to max tokens")
                return ConversationOutcome(
                    answer=MAX_TOKENS_ANSWER, tool_calls=tuple(tool_calls)
                )

            logger.warning(
                f"Model returned neither text nor a tool call "
                f"(finish_reason={result.finish_reason.value})"
            )
            return ConversationOutcome(answer=FALLBACK_ANSWER, tool_calls=tuple(tool_calls))

        logger.warning(f"Reached the tool call cap ({self.max_tool_turns})")
        return ConversationOutcome(
            answer=TOOL_CAP_ANSWER,
            turns=tuple(turns),
            tool_calls=tuple(tool_calls),
        )

    async def _call_model(
        self,
        turns: list[ConversationTurn],
        declarations: list[ToolDeclaration] | None,
    ) -> CompletionResult | None:
        tools = [d.to_ollama_schema() for d in declarations] if declarations else None
        return await self.ollama_client.chat(
            model=self.model,
            turns=turns,
            tools=tools,
            options={
                "temperature": self.temperature,
                "num_predict": self.max_output_tokens,
            },
            timeout=self.completion_timeout,
        )

    async def _execute(
        self,
        tool_call: ToolCall,
        declarations: list[ToolDeclaration],
        auth_token: str,
    ) -> tuple[ToolCallRecord, ConversationTurn]:
        """Run a requested tool and build the paired tool-result turn."""
        remote_name = next(
            (d.remote_name for d in declarations if d.name == tool_call.name),
            to_catalog_name(tool_call.name),
        )
        logger.info(f"Executing tool {remote_name} with arguments {tool_call.arguments}")

        invocation = await self.mcp_client.invoke_tool(
            remote_name, dict(tool_call.arguments), auth_token
        )
        record = ToolCallRecord(
            name=remote_name,
            arguments=dict(tool_call.arguments),
            success=invocation.success,
        )
        return record, ConversationTurn.tool_result(
            tool_call.name, self._result_text(invocation)
        )

    def _result_text(self, invocation: ToolInvocationResult) -> str:
        if not invocation.success:
            return json.dumps({"error": invocation.error})

        text = self.mcp_client.extract_text(invocation.content)
        if not text:
            text = json.dumps(invocation.content, ensure_ascii=False)

        if len(text) > self.max_tool_result_chars:
            text = text[: self.max_tool_result_chars] + TRUNCATION_MARKER
        return text
