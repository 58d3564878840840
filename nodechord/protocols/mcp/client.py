"""MCP tool-call client.

Calls a single tool on a remote server with one JSON-RPC ``tools/call``
POST. No session is kept between calls.
"""

from __future__ import annotations

import itertools
from typing import Any

import httpx

from nodechord.errors.exceptions import ToolServerError
from nodechord.protocols.mcp.types import ToolServerConfig

_request_ids = itertools.count(1)


def next_request_id() -> int:
    """Process-wide monotonic JSON-RPC request id."""
    return next(_request_ids)


class MCPHttpClient:
    """Client for invoking tools on HTTP tool servers.

    Example:
        >>> client = MCPHttpClient()
        >>> result = await client.call_tool(server, "search", {"query": "mcp"})
    """

    def __init__(
        self,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
        placeholders: dict[str, str] | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            timeout: Request timeout in seconds.
            transport: Optional httpx transport (used by tests).
            placeholders: ``NAME_API_KEY`` values substituted into server URLs.
        """
        self._timeout = timeout
        self._transport = transport
        self._placeholders = placeholders or {}

    @staticmethod
    def build_request(name: str, arguments: dict[str, Any]) -> dict[str, Any]:
        """Build the JSON-RPC envelope for a tool call."""
        return {
            "jsonrpc": "2.0",
            "id": next_request_id(),
            "method": "tools/call",
            "params": {"name": name, "arguments": arguments},
        }

    async def call_tool(
        self,
        server: ToolServerConfig,
        name: str,
        arguments: dict[str, Any] | None = None,
    ) -> Any:
        """Call a tool and return its result payload.

        Args:
            server: Server to call.
            name: Tool name.
            arguments: Tool arguments.

        Returns:
            The ``result`` member of the response, or the bare payload when the
            server does not wrap it.

        Raises:
            ToolServerError: On transport failure, non-2xx status, malformed
                JSON, or a JSON-RPC error member.
        """
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json, text/event-stream",
        }
        if server.auth_token:
            headers["Authorization"] = f"Bearer {server.auth_token}"

        url = server.resolved_url(self._placeholders)
        payload = self.build_request(name, arguments or {})

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(url, json=payload, headers=headers)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            raise ToolServerError(
                f"Tool '{name}' on {server.name} returned HTTP {e.response.status_code}",
                server=server.name,
            ) from e
        except httpx.HTTPError as e:
            raise ToolServerError(
                f"Tool '{name}' on {server.name} failed: {e}", server=server.name
            ) from e
        except ValueError as e:
            raise ToolServerError(
                f"Tool '{name}' on {server.name} returned malformed JSON", server=server.name
            ) from e

        if isinstance(data, dict):
            if data.get("error"):
                error = data["error"]
                message = error.get("message") if isinstance(error, dict) else str(error)
                raise ToolServerError(
                    f"Tool '{name}' on {server.name} failed: {message}", server=server.name
                )
            if "result" in data:
                return data["result"]
        return data
