"""MCP (Model Context Protocol) tool-server support.

Tool servers are addressed over HTTP with JSON-RPC ``tools/call`` requests.
"""

from nodechord.protocols.mcp.client import MCPHttpClient
from nodechord.protocols.mcp.resolver import (
    InMemoryToolServerResolver,
    ToolServerResolver,
    migrate_node_data,
)
from nodechord.protocols.mcp.types import WEB_RESEARCH, ToolServerConfig

__all__ = [
    "MCPHttpClient",
    "ToolServerConfig",
    "ToolServerResolver",
    "InMemoryToolServerResolver",
    "migrate_node_data",
    "WEB_RESEARCH",
]
