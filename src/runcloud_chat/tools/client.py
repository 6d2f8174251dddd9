"""Async client for the RunCloud MCP server.

This module provides McpClient, a JSON-RPC 2.0 client for the remote tool
catalog. It supports the two methods the chat core needs, tools/list and
tools/call, over a single shared httpx.AsyncClient.

Transport and protocol problems never escape this module: they are logged and
turned into None (for discovery) or a failed ToolInvocationResult (for calls).
"""

import itertools
import json
import logging
from typing import Any

import httpx

from runcloud_chat.tools.types import ToolInvocationResult

logger = logging.getLogger(__name__)

# Argument key under which the per-user RunCloud API key is passed to every tool
AUTH_ARGUMENT = "runcloud_api_token"


class McpError(Exception):
    """Raised internally when a JSON-RPC exchange fails."""


class McpClient:
    """JSON-RPC client for the remote tool catalog.

    The client is created once at startup and is safe to share between
    concurrent requests: the per-user credential is passed to each call and
    never stored on the instance.

    Attributes:
        url: The MCP endpoint URL
        timeout: Seconds allowed for each request
    """

    def __init__(
        self,
        url: str | None,
        token: str | None,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the MCP client.

        Args:
            url: The MCP endpoint URL
            token: Service-level bearer credential for the MCP server
            timeout: Seconds allowed for each request
            http_client: Optional preconfigured httpx client (used by tests)
        """
        self.url = url
        self.timeout = timeout
        self._token = token
        self._ids = itertools.count(1)
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

        if not self.is_configured():
            logger.warning("RunCloud MCP service not configured (missing URL or token)")
        else:
            logger.info(f"McpClient initialized with url: {url}")

    def is_configured(self) -> bool:
        """Check whether both the endpoint and the service credential are set."""
        return bool(self.url) and bool(self._token)

    async def invoke_tool(
        self,
        name: str,
        arguments: dict[str, Any],
        auth_token: str,
    ) -> ToolInvocationResult:
        """Execute a remote tool.

        Args:
            name: Tool name as listed by the catalog (e.g. "list-servers")
            arguments: Tool arguments
            auth_token: The user's RunCloud API key

        Returns:
            ToolInvocationResult: Success with the raw result payload, or failure
        """
        if not self.is_configured():
            logger.error("RunCloud MCP service not configured")
            return ToolInvocationResult.failed("MCP service not configured")

        params = {
            "name": name,
            "arguments": {**arguments, AUTH_ARGUMENT: auth_token},
        }
        headers = {"X-RunCloud-Token": auth_token}

        try:
            result = await self._call("tools/call", params, headers)
        except McpError as e:
            logger.error(f"MCP tool {name} failed: {e}")
            return ToolInvocationResult.failed(str(e))
        except httpx.HTTPError as e:
            logger.error(f"MCP API exception for tool {name}: {e!r}")
            return ToolInvocationResult.failed(f"transport error: {e}")

        logger.debug(f"MCP tool {name} succeeded")
        return ToolInvocationResult.ok(result)

    async def list_tools(self) -> dict[str, Any] | None:
        """List the tools available on the MCP server.

        Returns:
            dict | None: The raw tools/list result (with a "tools" array), or
            None on any failure
        """
        if not self.is_configured():
            logger.error("RunCloud MCP service not configured for tool discovery")
            return None

        try:
            return await self._call("tools/list", {}, {})
        except McpError as e:
            logger.error(f"MCP tools/list error: {e}")
            return None
        except httpx.HTTPError as e:
            logger.error(f"MCP tools/list exception: {e!r}")
            return None

    @staticmethod
    def extract_text(result: dict[str, Any] | None) -> str | None:
        """Join the text entries of an MCP result's content array.

        Args:
            result: A tools/call result payload

        Returns:
            str | None: Newline-joined text entries, or None if the result has
            no content array
        """
        if not isinstance(result, dict):
            return None

        content = result.get("content")
        if not isinstance(content, list):
            return None

        return "\n".join(
            entry["text"]
            for entry in content
            if isinstance(entry, dict)
            and entry.get("type") == "text"
            and isinstance(entry.get("text"), str)
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._http.aclose()
        logger.debug("McpClient closed")

    async def _call(
        self,
        method: str,
        params: dict[str, Any],
        headers: dict[str, str],
    ) -> dict[str, Any]:
        """Send one JSON-RPC request and return its result object.

        Raises:
            McpError: On a non-success status, a JSON-RPC error or a malformed body
            httpx.HTTPError: On transport failures and timeouts
        """
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }
        request_headers = {
            "Authorization": f"Bearer {self._token}",
            "Content-Type": "application/json",
            "Accept": "application/json, text/event-stream",
            **headers,
        }

        response = await self._http.post(
            self.url, json=payload, headers=request_headers, timeout=self.timeout
        )

        if not response.is_success:
            logger.error(
                f"MCP API error for {method}: status={response.status_code} body={response.text}"
            )
            raise McpError(f"HTTP {response.status_code}")

        data = _decode_body(response)

        if "error" in data:
            error = data["error"]
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise McpError(f"JSON-RPC error: {message}")

        result = data.get("result")
        if not isinstance(result, dict):
            raise McpError("response has no result object")

        return result


def _decode_body(response: httpx.Response) -> dict[str, Any]:
    """Decode a JSON-RPC response body, plain JSON or a single SSE message."""
    try:
        if response.headers.get("content-type", "").startswith("text/event-stream"):
            data_lines = [
                line[len("data:"):].strip()
                for line in response.text.splitlines()
                if line.startswith("data:")
            ]
            if not data_lines:
                raise McpError("event stream contained no data")
            data = json.loads(data_lines[-1])
        else:
            data = response.json()
    except ValueError as e:
        raise McpError(f"invalid JSON body: {e}") from e

    if not isinstance(data, dict):
        raise McpError("response body is not a JSON object")
    return data
