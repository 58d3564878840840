"""MCP type definitions.

This module defines data structures for remote tool servers.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

WEB_RESEARCH = "web_research"

_KEY_PLACEHOLDER = re.compile(r"\{([A-Z][A-Z0-9_]*_API_KEY)\}")


class ToolServerConfig(BaseModel):
    """Resolved connection descriptor for a tool server.

    Accepts the camelCase keys used in node data as well as snake_case.

    Example:
        >>> config = ToolServerConfig(
        ...     name="Firecrawl",
        ...     url="https://mcp.firecrawl.dev/{FIRECRAWL_API_KEY}/v2/mcp",
        ...     capability="web_research",
        ... )
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str | None = Field(None, description="Catalog identifier")
    name: str = Field(
        "unknown_tool",
        validation_alias=AliasChoices("name", "toolName"),
        description="Server (and tool) name presented to the model",
    )
    url: str = Field("", description="Endpoint URL, may embed {NAME_API_KEY} placeholders")
    auth_token: str | None = Field(
        None,
        validation_alias=AliasChoices("auth_token", "authToken", "accessToken"),
        repr=False,
    )
    description: str | None = None
    input_schema: dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("input_schema", "inputSchema", "schema"),
        description="JSON Schema for tool input parameters",
    )
    capability: str | None = Field(None, description="'web_research' or free-form")

    @property
    def is_web_research(self) -> bool:
        """Whether the server exposes scrape/search/map/crawl actions."""
        return self.capability == WEB_RESEARCH or "firecrawl" in self.name.lower()

    def resolved_url(self, placeholders: dict[str, str]) -> str:
        """URL with ``{NAME_API_KEY}`` placeholders filled from the given keys.

        Unknown placeholders are replaced with an empty string.
        """
        return _KEY_PLACEHOLDER.sub(lambda m: placeholders.get(m.group(1), ""), self.url)

    def to_openai_schema(self) -> dict[str, Any]:
        """Convert to OpenAI function calling schema."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description or "No description",
                "parameters": {
                    "type": "object",
                    "properties": self.input_schema.get("properties", {}),
                    "required": self.input_schema.get("required", []),
                },
            },
        }

