"""Groq LLM provider.

Groq serves an OpenAI-compatible API. Tool servers are attached as remote
MCP tools through the Responses API, where Groq calls them itself.
"""

from __future__ import annotations

import json
from typing import Any

from nodechord.core.types import LLMResponse, Message, ToolCallRecord, Usage
from nodechord.llm._sdk import field_of
from nodechord.llm.openai import OpenAIProvider
from nodechord.protocols.mcp.client import MCPHttpClient
from nodechord.protocols.mcp.types import ToolServerConfig

GROQ_BASE_URL = "https://api.groq.com/openai/v1"
DEFAULT_MODEL = "llama-3.3-70b-versatile"

TOOL_OUTPUT_TYPES = ("tool_use", "mcp_call")


class GroqProvider(OpenAIProvider):
    """Groq API provider.

    Example:
        >>> provider = GroqProvider(model="llama-3.3-70b-versatile", api_key="gsk_...")
        >>> response = await provider.complete([Message.user("Hello!")])
    """

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        api_key: str | None = None,
        base_url: str = GROQ_BASE_URL,
        timeout: float = 120.0,
        placeholders: dict[str, str] | None = None,
        tool_client: MCPHttpClient | None = None,
    ) -> None:
        super().__init__(
            model=model,
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            tool_client=tool_client,
        )
        self._placeholders = placeholders or {}

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "groq"

    async def complete(
        self,
        messages: list[Message],
        *,
        tools: list[ToolServerConfig] | None = None,
        temperature: float = 0.7,
        max_tokens: int = 4096,
        **kwargs: Any,
    ) -> LLMResponse:
        """Generate a completion using Groq.

        Without tools this is a plain chat completion. With tools, only the
        last message is sent as Responses API input; the invocations Groq
        reports are recorded without outputs.
        """
        if not tools:
            return await super().complete(
                messages, temperature=temperature, max_tokens=max_tokens, **kwargs
            )

        client = self._get_client()
        try:
            response = await client.responses.create(
                model=self._model,
                input=messages[-1].content if messages else "",
                tools=[
                    {
                        "type": "mcp",
                        "server_label": tool.name,
                        "server_url": tool.resolved_url(self._placeholders),
                    }
                    for tool in tools
                ],
                **kwargs,
            )
        except Exception as e:
            self._handle_error(e)

        usage = field_of(response, "usage")
        return LLMResponse(
            content=field_of(response, "output_text") or "",
            model=field_of(response, "model") or self._model,
            usage=Usage.of(
                field_of(usage, "input_tokens"),
                field_of(usage, "output_tokens"),
                field_of(usage, "total_tokens"),
            ),
            tool_calls=self._recorded_tool_calls(field_of(response, "output", None) or []),
            raw_response={"id": field_of(response, "id"), "model": field_of(response, "model")},
        )

    @staticmethod
    def _recorded_tool_calls(outputs: list[Any]) -> list[ToolCallRecord]:
        records = []
        for item in outputs:
            kind = field_of(item, "type")
            if kind not in TOOL_OUTPUT_TYPES:
                continue
            arguments = field_of(item, "input") or field_of(item, "arguments") or {}
            if isinstance(arguments, str):
                try:
                    arguments = json.loads(arguments)
                except json.JSONDecodeError:
                    arguments = {}
            records.append(ToolCallRecord(
                id=field_of(item, "id"),
                name=field_of(item, "name") or "unknown_tool",
                arguments=arguments if isinstance(arguments, dict) else {},
                output=None,
                type=kind,
                server_name=field_of(item, "server_label"),
            ))
        return records
