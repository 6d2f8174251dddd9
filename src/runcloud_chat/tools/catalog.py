"""Tool discovery and schema conversion.

ToolCatalog turns the MCP server's tools/list result into provider function
declarations. Discovery runs for every provider call; nothing is cached
because the remote catalog may change between requests.
"""

import copy
import logging
from typing import Any

from runcloud_chat.tools.client import AUTH_ARGUMENT, McpClient
from runcloud_chat.tools.names import to_provider_name
from runcloud_chat.tools.types import ToolDeclaration

logger = logging.getLogger(__name__)


def _normalize_schema(raw_schema: Any) -> dict[str, Any]:
    """Return an explicit object schema for a tool's input schema.

    Missing, empty or non-object schemas become an empty object schema. The
    credential argument is removed because McpClient injects it on every call.
    """
    if not isinstance(raw_schema, dict) or not raw_schema:
        return {"type": "object", "properties": {}}

    schema = copy.deepcopy(raw_schema)
    schema.setdefault("type", "object")

    properties = schema.get("properties")
    if not isinstance(properties, dict):
        properties = {}
    properties.pop(AUTH_ARGUMENT, None)
    schema["properties"] = properties

    required = schema.get("required")
    if isinstance(required, list):
        required = [name for name in required if name != AUTH_ARGUMENT]
        if required:
            schema["required"] = required
        else:
            schema.pop("required")

    return schema


def declaration_from_mcp_tool(raw_tool: dict[str, Any]) -> ToolDeclaration:
    """Convert one tools/list entry into a ToolDeclaration.

    Raises:
        ValueError: If the entry has no usable name
    """
    name = raw_tool.get("name")
    if not isinstance(name, str) or not name:
        raise ValueError(f"tool definition without a name: {raw_tool!r}")

    description = raw_tool.get("description")
    return ToolDeclaration(
        name=to_provider_name(name),
        remote_name=name,
        description=description if isinstance(description, str) else "",
        parameters=_normalize_schema(raw_tool.get("inputSchema")),
    )


class ToolCatalog:
    """Discovers remote tools and translates them for the provider."""

    def __init__(self, mcp_client: McpClient) -> None:
        self.mcp_client = mcp_client

    def is_configured(self) -> bool:
        return self.mcp_client.is_configured()

    async def discover_tools(self) -> list[ToolDeclaration] | None:
        """Fetch the catalog and convert every tool, in catalog order.

        Returns:
            list[ToolDeclaration] | None: The declarations, or None when the
            catalog is unreachable or malformed
        """
        result = await self.mcp_client.list_tools()
        if result is None:
            return None

        raw_tools = result.get("tools")
        if not isinstance(raw_tools, list):
            logger.warning(f"MCP tools/list result has no tools array: {result}")
            return None

        try:
            declarations = [
                declaration_from_mcp_tool(raw_tool) for raw_tool in raw_tools
            ]
        except (AttributeError, ValueError) as e:
            logger.warning(f"Malformed MCP tool definition: {e}")
            return None

        logger.debug(f"Discovered {len(declarations)} MCP tools")
        return declarations
