"""Live RunCloud context for the first user turn.

ContextEnricher resolves what a question is about, fetches the matching
RunCloud resources through the MCP server and appends them to the user's
message as labelled sections. It never raises; on any internal failure the
message is returned unchanged.
"""

import logging
from dataclasses import dataclass

from runcloud_chat.services.intent import Intent, IntentResolver
from runcloud_chat.services.relevance import is_in_scope
from runcloud_chat.tools import McpClient

logger = logging.getLogger(__name__)

MCP_NOT_CONFIGURED_NOTICE = (
    "I can see you're asking about RunCloud, but the MCP server connection isn't "
    "configured. Please set RCCHAT_MCP_URL and RCCHAT_MCP_TOKEN in your environment "
    "to enable RunCloud integration."
)

TOKEN_REQUIRED_NOTICE = (
    "Note: I can help you with RunCloud server management, but I'll need your "
    "RunCloud API token to access live data. You can provide it as your app_key "
    "when initializing the chat session."
)

LIVE_DATA_UNAVAILABLE_NOTICE = (
    "Note: I can help with RunCloud management, but I'm unable to fetch live data "
    "right now. This could be due to an invalid token or MCP server connectivity issues."
)


@dataclass(frozen=True)
class ResourceSource:
    """How one resource kind is fetched and labelled."""

    tool: str
    label: str
    needs_server: bool = False


RESOURCE_SOURCES: dict[str, ResourceSource] = {
    "servers": ResourceSource(tool="list-servers", label="Your RunCloud Servers:"),
    "web_applications": ResourceSource(
        tool="list-web-applications",
        label="Web Applications on Server {server} (ID: {server_id}):",
        needs_server=True,
    ),
    "databases": ResourceSource(
        tool="list-databases",
        label="Databases on Server {server} (ID: {server_id}):",
        needs_server=True,
    ),
    "backups": ResourceSource(tool="list-backups", label="Recent Backups:"),
}


class ContextEnricher:
    """Builds the augmented first user turn from live RunCloud data."""

    def __init__(self, intent_resolver: IntentResolver, mcp_client: McpClient) -> None:
        self.intent_resolver = intent_resolver
        self.mcp_client = mcp_client

    async def build_context(self, message: str, auth_token: str | None) -> str:
        """Return the message, augmented with live RunCloud context when possible.

        Args:
            message: The user's message
            auth_token: The user's RunCloud API key, if the session has one

        Returns:
            str: The message to send as the first user turn
        """
        try:
            in_scope = is_in_scope(message)

            if not self.mcp_client.is_configured() or not in_scope:
                if auth_token and auth_token.startswith("rc_") and in_scope:
                    return f"{message}\n\n{MCP_NOT_CONFIGURED_NOTICE}"
                return message

            if not auth_token:
                return f"{message}\n\n{TOKEN_REQUIRED_NOTICE}"

            context = await self.fetch_context(message, auth_token)
            if context:
                return f"{message}\n\nRunCloud Context:\n{context}"

            return f"{message}\n\n{LIVE_DATA_UNAVAILABLE_NOTICE}"

        except Exception as e:
            logger.error(f"Failed to build RunCloud context: {e}", exc_info=True)
            return message

    async def fetch_context(self, message: str, auth_token: str) -> str:
        """Fetch the resources the message asks about as one context block.

        Returns:
            str: Labelled sections separated by a blank line (empty if none)
        """
        intent = await self.intent_resolver.resolve_intent(message)
        if intent is None:
            return ""

        server_id = intent.server_id
        server_resolved = server_id is not None
        sections: list[str] = []

        for kind in intent.resources:
            source = RESOURCE_SOURCES.get(kind)
            if source is None:
                logger.debug(f"Ignoring unknown resource kind: {kind}")
                continue

            arguments: dict[str, str] = {}
            if source.needs_server:
                if not server_resolved and intent.server_name:
                    server_id = await self.intent_resolver.resolve_server_id(
                        intent.server_name, auth_token
                    )
                    server_resolved = True
                if server_id is None:
                    logger.info(f"Skipping {kind}: no server id available")
                    continue
                arguments["server_id"] = server_id

            result = await self.mcp_client.invoke_tool(source.tool, arguments, auth_token)
            if not result.success:
                continue

            text = self.mcp_client.extract_text(result.content)
            if text:
                sections.append(f"{self._label(source, intent, server_id)}\n{text}")

        return "\n\n".join(sections)

    @staticmethod
    def _label(source: ResourceSource, intent: Intent, server_id: str | None) -> str:
        return source.label.format(
            server=intent.server_name or server_id, server_id=server_id
        )
