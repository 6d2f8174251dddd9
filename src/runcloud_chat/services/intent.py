"""Intent extraction and server name resolution.

This module asks the model to describe a RunCloud question as a small JSON
object (which resources, which server, what action) and, when the user named a
server instead of giving its id, asks the model to find that id in the live
server list.

Model replies are never trusted blindly: the intent must parse as JSON with a
resources array, and a resolved id must be purely numeric.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any

from runcloud_chat.ollama import OllamaClient
from runcloud_chat.tools import McpClient

logger = logging.getLogger(__name__)

RESOURCE_KINDS = ("servers", "web_applications", "databases", "backups")

NULL_MARKER = "null"

_FENCE_RE = re.compile(r"```(?:json)?\s*|\s*```", re.IGNORECASE)
_NUMERIC_ID_RE = re.compile(r"^\d+$")

INTENT_PROMPT = """Analyze this RunCloud-related query and extract the intent as JSON. Return only valid JSON with no additional text.

Query: "{message}"

Extract:
1. resources: array of resource types the user is asking about (servers, web_applications, databases, backups)
2. serverId: specific server ID if mentioned (number only, or null if not found)
3. serverName: server name if mentioned (string, or null if not found)
4. action: what they want to do (list, show, get, check, etc.)

Available resource types:
- servers: for server listings or server info
- web_applications: for web apps, applications, sites
- databases: for database info
- backups: for backup information

Example responses:
{{"resources": ["servers"], "serverId": null, "serverName": null, "action": "list"}}
{{"resources": ["web_applications"], "serverId": 123, "serverName": null, "action": "show"}}
{{"resources": ["web_applications"], "serverId": null, "serverName": "yoga staging vultr", "action": "list"}}
{{"resources": ["databases"], "serverId": 456, "serverName": "nginx 22", "action": "list"}}

Only return the JSON object:"""

RESOLUTION_PROMPT = """Given the server list below, find the server ID for the server name '{name}'. Return only the numeric ID, nothing else.

Server List:
{listing}

Server name to find: {name}

Return only the numeric server ID (e.g., 5979), or 'null' if not found:"""


@dataclass(frozen=True)
class Intent:
    """What a RunCloud question is asking for.

    Attributes:
        resources: Requested resource kinds, in the order the model listed them
        server_id: Server id given in the message, if any
        server_name: Human server name given in the message, if any
        action: Verb describing the request (list, show, ...)
    """

    resources: tuple[str, ...]
    server_id: str | None = None
    server_name: str | None = None
    action: str | None = None


def strip_code_fences(text: str) -> str:
    """Remove markdown code fence delimiters around a model reply."""
    return _FENCE_RE.sub("", text).strip()


def _optional_id(value: Any) -> str | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str) and _NUMERIC_ID_RE.match(value.strip()):
        return value.strip()
    return None


def _optional_text(value: Any) -> str | None:
    if isinstance(value, str) and value.strip() and value.strip().lower() != NULL_MARKER:
        return value.strip()
    return None


def parse_intent(reply: str) -> Intent | None:
    """Decode the model's intent reply.

    Returns:
        Intent | None: The intent, or None if the reply is not a JSON object
        with a resources array
    """
    text = strip_code_fences(reply)
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning(f"Failed to parse intent analysis: {e}; text={text!r}")
        return None

    if not isinstance(data, dict) or not isinstance(data.get("resources"), list):
        logger.warning(f"Invalid intent analysis structure: {data!r}")
        return None

    resources = tuple(
        resource for resource in data["resources"] if isinstance(resource, str)
    )

    return Intent(
        resources=resources,
        server_id=_optional_id(data.get("serverId")),
        server_name=_optional_text(data.get("serverName")),
        action=_optional_text(data.get("action")),
    )


def parse_identifier(reply: str | None) -> str | None:
    """Accept a name-resolution reply only if it is a bare numeric id."""
    if reply is None:
        return None
    candidate = strip_code_fences(reply).strip().strip("'\"`").strip()
    if not candidate or candidate.lower() == NULL_MARKER:
        return None
    if not _NUMERIC_ID_RE.match(candidate):
        return None
    return candidate


class IntentResolver:
    """Extracts structured intents and resolves server names to ids."""

    def __init__(
        self,
        ollama_client: OllamaClient,
        mcp_client: McpClient,
        model: str,
        intent_timeout: float = 15.0,
        resolution_timeout: float = 10.0,
    ) -> None:
        self.ollama_client = ollama_client
        self.mcp_client = mcp_client
        self.model = model
        self.intent_timeout = intent_timeout
        self.resolution_timeout = resolution_timeout

    async def resolve_intent(self, message: str) -> Intent | None:
        """Ask the model for the intent behind a message.

        Args:
            message: The user's message

        Returns:
            Intent | None: The extracted intent, or None if the call failed or
            the reply was unusable
        """
        reply = await self.ollama_client.complete(
            model=self.model,
            prompt=INTENT_PROMPT.format(message=message),
            temperature=0.1,
            max_tokens=200,
            timeout=self.intent_timeout,
        )
        if reply is None:
            logger.warning("Intent analysis returned no reply")
            return None

        intent = parse_intent(reply)
        if intent is not None:
            logger.info(
                f"Resolved intent: resources={list(intent.resources)} "
                f"server_id={intent.server_id} server_name={intent.server_name} "
                f"action={intent.action}"
            )
        return intent

    async def resolve_name_to_id(self, name: str, catalog_listing: str) -> str | None:
        """Ask the model which id in the listing belongs to a server name.

        Args:
            name: Human server name from the user's message
            catalog_listing: Text of the live server list

        Returns:
            str | None: The numeric id, or None when the model could not find it
            or replied with anything but a number
        """
        reply = await self.ollama_client.complete(
            model=self.model,
            prompt=RESOLUTION_PROMPT.format(name=name, listing=catalog_listing),
            temperature=0.1,
            max_tokens=10,
            timeout=self.resolution_timeout,
        )

        server_id = parse_identifier(reply)
        if server_id is None:
            logger.info(f"Server name not resolved: name={name!r} reply={reply!r}")
        else:
            logger.info(f"Resolved server name {name!r} to id {server_id}")
        return server_id

    async def resolve_server_id(self, name: str, auth_token: str) -> str | None:
        """Resolve a server name against the user's live server list."""
        result = await self.mcp_client.invoke_tool("list-servers", {}, auth_token)
        if not result.success:
            return None

        listing = self.mcp_client.extract_text(result.content)
        if not listing:
            return None

        return await self.resolve_name_to_id(name, listing)
