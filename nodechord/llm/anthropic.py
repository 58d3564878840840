"""Anthropic Claude LLM provider implementation.

Tool servers are handed to Claude directly through the MCP connector beta;
Claude calls them server-side and returns the invocations and their results
as content blocks.
"""

from __future__ import annotations

from typing import Any

from nodechord.core.types import LLMResponse, Message, MessageRole, ToolCallRecord, Usage
from nodechord.errors.exceptions import (
    APIError,
    AuthenticationError,
    MissingAPIKeyError,
    RateLimitError,
    TimeoutError,
)
from nodechord.llm._sdk import field_of
from nodechord.llm.base import BaseLLMProvider
from nodechord.logging import get_logger
from nodechord.protocols.mcp.types import ToolServerConfig

DEFAULT_MODEL = "claude-sonnet-4-5-20250929"
MCP_BETA = "mcp-client-2025-04-04"

TOOL_USE_TYPES = ("tool_use", "mcp_tool_use")
TOOL_RESULT_TYPES = ("tool_result", "mcp_tool_result")


class AnthropicProvider(BaseLLMProvider):
    """Anthropic Claude API provider.

    Example:
        >>> provider = AnthropicProvider(api_key="sk-ant-...")
        >>> response = await provider.complete([Message.user("Hello!")])
        >>> print(response.content)
    """

    supports_tools = True

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float = 120.0,
        placeholders: dict[str, str] | None = None,
    ) -> None:
        """Initialize Anthropic provider.

        Args:
            model: Model identifier (e.g., 'claude-sonnet-4-5-20250929').
            api_key: Anthropic API key.
            base_url: Custom API base URL for proxies.
            timeout: Request timeout in seconds.
            placeholders: ``NAME_API_KEY`` values substituted into tool server URLs.
        """
        self._model = model
        self._api_key = api_key
        self._base_url = base_url
        self._timeout = timeout
        self._placeholders = placeholders or {}
        self._client: Any = None

    def _get_client(self) -> Any:
        """Lazy initialization of Anthropic client."""
        if self._client is None:
            from anthropic import AsyncAnthropic

            if not self._api_key:
                raise MissingAPIKeyError("anthropic")

            kwargs: dict[str, Any] = {
                "api_key": self._api_key,
                "timeout": self._timeout,
            }
            if self._base_url:
                kwargs["base_url"] = self._base_url

            self._client = AsyncAnthropic(**kwargs)
        return self._client

    @property
    def model(self) -> str:
        """Return the model identifier."""
        return self._model

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "anthropic"

    async def complete(
        self,
        messages: list[Message],
        *,
        tools: list[ToolServerConfig] | None = None,
        temperature: float = 0.7,
        max_tokens: int = 4096,
        **kwargs: Any,
    ) -> LLMResponse:
        """Generate a completion using Anthropic API.

        With tool servers, the request goes through the beta messages endpoint
        with ``mcp_servers`` attached. Servers named ``arcade`` are not
        reachable through the connector and are skipped.

        Args:
            messages: List of conversation messages.
            tools: Tool servers Claude may call.
            temperature: Sampling temperature (capped at 1.0 for Claude).
            max_tokens: Maximum tokens to generate.
            **kwargs: Additional Anthropic-specific parameters.

        Returns:
            LLMResponse with generated content, usage and tool calls.
        """
        client = self._get_client()
        system_prompt, anthropic_messages = self._extract_system_and_messages(messages)

        create_kwargs: dict[str, Any] = {
            "model": self._model,
            "messages": anthropic_messages,
            "max_tokens": max_tokens,
            "temperature": min(temperature, 1.0),  # Claude max is 1.0
            **kwargs,
        }
        if system_prompt:
            create_kwargs["system"] = system_prompt

        mcp_servers = self._build_mcp_servers(tools or [])

        try:
            if mcp_servers:
                response = await client.beta.messages.create(
                    mcp_servers=mcp_servers,
                    betas=[MCP_BETA],
                    **create_kwargs,
                )
            else:
                response = await client.messages.create(**create_kwargs)
        except Exception as e:
            self._handle_error(e)

        return self._convert_response(response)

    def _build_mcp_servers(self, tools: list[ToolServerConfig]) -> list[dict[str, Any]]:
        """Build the ``mcp_servers`` request member, skipping arcade servers."""
        servers: list[dict[str, Any]] = []
        for tool in tools:
            if "arcade" in tool.name.lower():
                get_logger().warning("Skipping arcade tool server", server=tool.name)
                continue
            entry: dict[str, Any] = {
                "type": "url",
                "url": tool.resolved_url(self._placeholders),
                "name": tool.name,
            }
            if tool.auth_token:
                entry["authorization_token"] = tool.auth_token
            servers.append(entry)
        return servers

    def _extract_system_and_messages(
        self, messages: list[Message]
    ) -> tuple[str | None, list[dict[str, Any]]]:
        """Extract system message and convert other messages to Anthropic format.

        Anthropic handles system messages separately from other messages.
        """
        system_prompt: str | None = None
        anthropic_messages: list[dict[str, Any]] = []

        for msg in messages:
            if msg.role == MessageRole.SYSTEM:
                system_prompt = msg.content
            else:
                role = "assistant" if msg.role == MessageRole.ASSISTANT else "user"
                anthropic_messages.append({"role": role, "content": msg.content})

        return system_prompt, anthropic_messages

    def _convert_response(self, response: Any) -> LLMResponse:
        """Convert Anthropic response to NodeChord format.

        Invocations are paired with results by position; the connector
        returns them in the same order.
        """
        blocks = list(field_of(response, "content", None) or [])
        tool_uses = [b for b in blocks if field_of(b, "type") in TOOL_USE_TYPES]
        tool_results = [b for b in blocks if field_of(b, "type") in TOOL_RESULT_TYPES]
        texts = [field_of(b, "text", "") for b in blocks if field_of(b, "type") == "text"]

        tool_calls: list[ToolCallRecord] = []
        for idx, use in enumerate(tool_uses):
            arguments = field_of(use, "input")
            tool_calls.append(ToolCallRecord(
                id=field_of(use, "id"),
                name=field_of(use, "name") or "unknown_tool",
                arguments=arguments if isinstance(arguments, dict) else {},
                output=normalize_tool_result(tool_results[idx]) if idx < len(tool_results) else None,
                type=field_of(use, "type"),
                server_name=field_of(use, "server_name") or "MCP",
            ))

        usage = field_of(response, "usage")
        return LLMResponse(
            content="\n".join(texts),
            model=field_of(response, "model") or self._model,
            usage=Usage.of(field_of(usage, "input_tokens"), field_of(usage, "output_tokens")),
            finish_reason=field_of(response, "stop_reason") or "end_turn",
            tool_calls=tool_calls,
            raw_response={
                "id": field_of(response, "id"),
                "model": field_of(response, "model"),
                "stop_reason": field_of(response, "stop_reason"),
            },
        )

    def _handle_error(self, error: Exception) -> None:
        """Convert Anthropic errors to NodeChord errors."""
        import anthropic

        if isinstance(error, anthropic.RateLimitError):
            raise RateLimitError(
                str(error),
                provider="anthropic",
                model=self._model,
            ) from error
        elif isinstance(error, anthropic.AuthenticationError):
            raise AuthenticationError(
                str(error),
                provider="anthropic",
            ) from error
        elif isinstance(error, anthropic.APITimeoutError):
            raise TimeoutError(
                str(error),
                provider="anthropic",
                model=self._model,
                timeout_seconds=self._timeout,
            ) from error
        elif isinstance(error, anthropic.APIError):
            raise APIError(
                str(error),
                provider="anthropic",
                model=self._model,
                status_code=getattr(error, "status_code", None),
            ) from error
        raise error


def normalize_tool_result(block: Any) -> Any:
    """Output of a tool-result block.

    Errors become ``{"error": content}``; chunked content yields the first
    chunk's text (or the chunks themselves when that text is empty).
    """
    content = field_of(block, "content")
    if field_of(block, "is_error"):
        return {"error": content}
    if isinstance(content, list):
        first = field_of(content[0], "text") if content else None
        return first or content
    return content
