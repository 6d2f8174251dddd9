"""Data types for remote tools.

This module defines the provider-facing tool declarations produced from the
MCP catalog and the result of a single remote tool invocation.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ToolDeclaration:
    """A remote tool translated into the provider's function-declaration form.

    Attributes:
        name: Function name in the provider convention (e.g. "list_servers")
        remote_name: Name of the tool in the MCP catalog (e.g. "list-servers")
        description: Human readable description
        parameters: JSON schema of the arguments, always an object schema
    """

    name: str
    remote_name: str
    description: str = ""
    parameters: dict[str, Any] = field(
        default_factory=lambda: {"type": "object", "properties": {}}
    )

    def to_ollama_schema(self) -> dict[str, Any]:
        """Convert to the Ollama `tools` entry format."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


@dataclass(frozen=True)
class ToolInvocationResult:
    """Outcome of a tools/call request.

    Attributes:
        success: Whether the remote call succeeded
        content: The raw JSON-RPC result payload on success
        error: Error message on failure
    """

    success: bool
    content: dict[str, Any] | None = None
    error: str | None = None

    @classmethod
    def ok(cls, content: dict[str, Any]) -> "ToolInvocationResult":
        return cls(success=True, content=content)

    @classmethod
    def failed(cls, error: str) -> "ToolInvocationResult":
        return cls(success=False, error=error)
