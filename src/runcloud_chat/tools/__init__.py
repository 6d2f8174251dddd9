"""Remote tool discovery, schema conversion and execution layer.

This package talks to the RunCloud MCP server: McpClient executes JSON-RPC
calls, ToolCatalog converts the catalog into provider function declarations,
and the names module maps tool names between the two conventions.
"""

from runcloud_chat.tools.catalog import ToolCatalog, declaration_from_mcp_tool
from runcloud_chat.tools.client import AUTH_ARGUMENT, McpClient
from runcloud_chat.tools.names import to_catalog_name, to_provider_name
from runcloud_chat.tools.types import ToolDeclaration, ToolInvocationResult

__all__ = [
    "AUTH_ARGUMENT",
    "McpClient",
    "ToolCatalog",
    "ToolDeclaration",
    "ToolInvocationResult",
    "declaration_from_mcp_tool",
    "to_catalog_name",
    "to_provider_name",
]
