"""OpenAI LLM provider implementation.

Tools run client-side: the model asks for function calls, the adapter
executes them against the tool servers and sends the results back for a
second completion.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

from nodechord.core.types import LLMResponse, Message, ToolCallRecord, Usage
from nodechord.errors.exceptions import MissingAPIKeyError, ToolServerError
from nodechord.llm._sdk import field_of, raise_openai_error
from nodechord.llm.base import BaseLLMProvider
from nodechord.logging import get_logger
from nodechord.protocols.mcp.client import MCPHttpClient
from nodechord.protocols.mcp.types import ToolServerConfig

DEFAULT_MODEL = "gpt-4o-mini"


class OpenAIProvider(BaseLLMProvider):
    """OpenAI API provider.

    Example:
        >>> provider = OpenAIProvider(model="gpt-4o-mini", api_key="sk-...")
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
        tool_client: MCPHttpClient | None = None,
    ) -> None:
        """Initialize OpenAI provider.

        Args:
            model: Model identifier (e.g., 'gpt-4o', 'gpt-4o-mini').
            api_key: OpenAI API key.
            base_url: Custom API base URL for compatible endpoints.
            timeout: Request timeout in seconds.
            tool_client: Client used to execute tool calls.
        """
        self._model = model
        self._api_key = api_key
        self._base_url = base_url
        self._timeout = timeout
        self._tool_client = tool_client or MCPHttpClient()
        self._client: Any = None

    def _get_client(self) -> Any:
        """Lazy initialization of OpenAI client."""
        if self._client is None:
            from openai import AsyncOpenAI

            if not self._api_key:
                raise MissingAPIKeyError(self.provider_name)

            self._client = AsyncOpenAI(
                api_key=self._api_key,
                base_url=self._base_url,
                timeout=self._timeout,
            )
        return self._client

    @property
    def model(self) -> str:
        """Return the model identifier."""
        return self._model

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "openai"

    async def complete(
        self,
        messages: list[Message],
        *,
        tools: list[ToolServerConfig] | None = None,
        temperature: float = 0.7,
        max_tokens: int = 4096,
        **kwargs: Any,
    ) -> LLMResponse:
        """Generate a completion using OpenAI API.

        With tools, the first call lets the model request function calls.
        Requested calls run concurrently; each outcome (result or error) is
        sent back as a ``tool`` message and a second call produces the final
        answer. Usage is summed across both calls.

        Args:
            messages: List of conversation messages.
            tools: Tool servers exposed as functions.
            temperature: Sampling temperature (0.0-2.0).
            max_tokens: Maximum tokens to generate.
            **kwargs: Additional OpenAI-specific parameters.

        Returns:
            LLMResponse with generated content, usage and tool calls.
        """
        openai_messages = self._convert_messages(messages)
        create_kwargs: dict[str, Any] = {
            "temperature": temperature,
            "max_tokens": max_tokens,
            **kwargs,
        }

        if not tools:
            response = await self._create(openai_messages, **create_kwargs)
            return self._convert_response(response)

        first = await self._create(
            openai_messages,
            tools=[tool.to_openai_schema() for tool in tools],
            tool_choice="auto",
            **create_kwargs,
        )
        message = first.choices[0].message
        requested = list(field_of(message, "tool_calls", None) or [])
        if not requested:
            return self._convert_response(first)

        outcomes = await asyncio.gather(
            *(self._run_tool_call(call, tools) for call in requested)
        )
        records = [record for record, _ in outcomes]
        tool_messages = [tool_message for _, tool_message in outcomes]

        second = await self._create(
            [*openai_messages, self._assistant_turn(message, requested), *tool_messages],
            **create_kwargs,
        )
        final = self._convert_response(second)
        return final.model_copy(update={
            "usage": self._usage(first) + final.usage,
            "tool_calls": records,
        })

    async def _create(self, messages: list[dict[str, Any]], **kwargs: Any) -> Any:
        client = self._get_client()
        try:
            return await client.chat.completions.create(
                model=self._model,
                messages=messages,
                **kwargs,
            )
        except Exception as e:
            self._handle_error(e)

    async def _run_tool_call(
        self, call: Any, tools: list[ToolServerConfig]
    ) -> tuple[ToolCallRecord, dict[str, Any]]:
        """Execute one requested call, capturing any failure as its output."""
        function = field_of(call, "function")
        name = field_of(function, "name") or ""
        call_id = field_of(call, "id")
        arguments = self._parse_tool_arguments(field_of(function, "arguments") or "{}")

        try:
            server = next((tool for tool in tools if tool.name == name), None)
            if server is None:
                raise ToolServerError(f"MCP server not found for tool: {name}")
            if arguments is None:
                raise ValueError(f"Invalid arguments for tool: {name}")
            output: Any = await self._tool_client.call_tool(server, name, arguments)
            success = True
        except Exception as e:
            output = {"error": str(e)}
            success = False

        get_logger().tool_call(name, success, server=name)
        record = ToolCallRecord(
            id=call_id,
            name=name,
            arguments=arguments or {},
            output=output,
        )
        tool_message = {
            "role": "tool",
            "tool_call_id": call_id,
            "content": json.dumps(output, default=str),
        }
        return record, tool_message

    @staticmethod
    def _assistant_turn(message: Any, requested: list[Any]) -> dict[str, Any]:
        """Echo the model's tool-requesting turn back in request format."""
        return {
            "role": "assistant",
            "content": field_of(message, "content"),
            "tool_calls": [
                {
                    "id": field_of(call, "id"),
                    "type": "function",
                    "function": {
                        "name": field_of(field_of(call, "function"), "name"),
                        "arguments": field_of(field_of(call, "function"), "arguments"),
                    },
                }
                for call in requested
            ],
        }

    def _convert_messages(self, messages: list[Message]) -> list[dict[str, Any]]:
        """Convert messages to OpenAI format."""
        result = []
        for msg in messages:
            msg_dict: dict[str, Any] = {"role": msg.role.value, "content": msg.content}
            if msg.tool_call_id:
                msg_dict["tool_call_id"] = msg.tool_call_id
            result.append(msg_dict)
        return result

    def _convert_response(self, response: Any) -> LLMResponse:
        """Convert OpenAI response to NodeChord format."""
        choice = response.choices[0]
        return LLMResponse(
            content=field_of(choice.message, "content") or "",
            model=field_of(response, "model") or self._model,
            usage=self._usage(response),
            finish_reason=field_of(choice, "finish_reason") or "stop",
            raw_response={
                "id": field_of(response, "id"),
                "model": field_of(response, "model"),
            },
        )

    @staticmethod
    def _usage(response: Any) -> Usage:
        usage = field_of(response, "usage")
        return Usage.of(
            field_of(usage, "prompt_tokens"),
            field_of(usage, "completion_tokens"),
            field_of(usage, "total_tokens"),
        )

    @staticmethod
    def _parse_tool_arguments(arguments: str | dict[str, Any]) -> dict[str, Any] | None:
        """Parse tool arguments from JSON string. None when malformed."""
        if isinstance(arguments, dict):
            return arguments
        try:
            parsed = json.loads(arguments)
        except json.JSONDecodeError:
            return None
        return parsed if isinstance(parsed, dict) else None

    def _handle_error(self, error: Exception) -> None:
        """Convert OpenAI errors to NodeChord errors."""
        raise_openai_error(
            error, provider=self.provider_name, model=self._model, timeout=self._timeout
        )
