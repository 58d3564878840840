"""Tests for the OpenAI provider adapter."""

from __future__ import annotations

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from nodechord.core.types import Message
from nodechord.errors import (
    APIError,
    AuthenticationError,
    MissingAPIKeyError,
    RateLimitError,
    ToolServerError,
)
from nodechord.llm.openai import OpenAIProvider
from nodechord.protocols.mcp import ToolServerConfig


def _completion(content="", tool_calls=None, prompt=10, completion=5):
    message = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(
        id="chatcmpl-1",
        model="gpt-4o-mini",
        choices=[SimpleNamespace(message=message, finish_reason="stop")],
        usage=SimpleNamespace(
            prompt_tokens=prompt, completion_tokens=completion, total_tokens=prompt + completion
        ),
    )


def _call(call_id, name, arguments):
    return SimpleNamespace(id=call_id, function=SimpleNamespace(name=name, arguments=arguments))


def _provider(*responses, tool_client=None) -> tuple[OpenAIProvider, AsyncMock]:
    provider = OpenAIProvider(api_key="sk-test", tool_client=tool_client)
    create = AsyncMock(side_effect=list(responses))
    provider._client = MagicMock()
    provider._client.chat.completions.create = create
    return provider, create


@pytest.fixture
def lookup_tool() -> ToolServerConfig:
    return ToolServerConfig(
        name="lookup",
        url="https://tools.dev/mcp",
        input_schema={"properties": {"id": {"type": "integer"}}, "required": ["id"]},
    )


class TestOpenAIComplete:
    """Tests for plain completions."""

    @pytest.mark.asyncio
    async def test_complete_basic(self):
        provider, create = _provider(_completion("Hello"))

        result = await provider.complete([Message.user("Hi")], max_tokens=100)

        assert result.content == "Hello"
        assert result.usage.prompt_tokens == 10
        assert result.usage.total_tokens == 15
        assert result.tool_calls == []
        kwargs = create.call_args.kwargs
        assert kwargs["messages"] == [{"role": "user", "content": "Hi"}]
        assert kwargs["max_tokens"] == 100
        assert "tools" not in kwargs

    def test_missing_api_key(self):
        provider = OpenAIProvider(api_key=None)
        with pytest.raises(MissingAPIKeyError):
            provider._get_client()

    def test_provider_name(self):
        assert OpenAIProvider(api_key="k").provider_name == "openai"


class TestOpenAIToolCalls:
    """Tests for the client-side tool round."""

    @pytest.mark.asyncio
    async def test_tool_round_trip(self, lookup_tool):
        tool_client = MagicMock()
        tool_client.call_tool = AsyncMock(return_value={"name": "widget"})
        first = _completion(tool_calls=[_call("call_1", "lookup", '{"id": 7}')])
        second = _completion("The item is a widget.", prompt=20, completion=8)
        provider, create = _provider(first, second, tool_client=tool_client)

        result = await provider.complete([Message.user("What is item 7?")], tools=[lookup_tool])

        assert result.content == "The item is a widget."
        assert result.usage.prompt_tokens == 30
        assert result.usage.completion_tokens == 13
        assert result.usage.total_tokens == 43
        assert result.tool_calls[0].name == "lookup"
        assert result.tool_calls[0].arguments == {"id": 7}
        assert result.tool_calls[0].output == {"name": "widget"}
        tool_client.call_tool.assert_awaited_once_with(lookup_tool, "lookup", {"id": 7})

        first_kwargs = create.call_args_list[0].kwargs
        assert first_kwargs["tool_choice"] == "auto"
        assert first_kwargs["tools"][0]["function"]["name"] == "lookup"

        second_messages = create.call_args_list[1].kwargs["messages"]
        assert second_messages[1]["role"] == "assistant"
        assert second_messages[1]["tool_calls"][0]["id"] == "call_1"
        assert second_messages[2] == {
            "role": "tool",
            "tool_call_id": "call_1",
            "content": json.dumps({"name": "widget"}),
        }
        assert "tools" not in create.call_args_list[1].kwargs

    @pytest.mark.asyncio
    async def test_no_requested_calls(self, lookup_tool):
        provider, create = _provider(_completion("Direct answer"))

        result = await provider.complete([Message.user("Hi")], tools=[lookup_tool])

        assert result.content == "Direct answer"
        assert create.await_count == 1

    @pytest.mark.asyncio
    async def test_failures_become_tool_outputs(self, lookup_tool):
        tool_client = MagicMock()
        tool_client.call_tool = AsyncMock(side_effect=ToolServerError("server down"))
        first = _completion(tool_calls=[
            _call("c1", "lookup", '{"id": 1}'),
            _call("c2", "missing", "{}"),
            _call("c3", "lookup", "{not json"),
        ])
        provider, create = _provider(first, _completion("Sorry"), tool_client=tool_client)

        result = await provider.complete([Message.user("go")], tools=[lookup_tool])

        outputs = [record.output for record in result.tool_calls]
        assert outputs == [
            {"error": "server down"},
            {"error": "MCP server not found for tool: missing"},
            {"error": "Invalid arguments for tool: lookup"},
        ]
        tool_messages = create.call_args_list[1].kwargs["messages"][-3:]
        assert [m["tool_call_id"] for m in tool_messages] == ["c1", "c2", "c3"]
        assert tool_client.call_tool.await_count == 1

    @pytest.mark.asyncio
    async def test_unexpected_client_error_does_not_abort_batch(self, lookup_tool):
        tool_client = MagicMock()
        tool_client.call_tool = AsyncMock(side_effect=[RuntimeError("socket closed"), {"ok": 1}])
        first = _completion(tool_calls=[
            _call("c1", "lookup", '{"id": 1}'),
            _call("c2", "lookup", '{"id": 2}'),
        ])
        provider, create = _provider(first, _completion("Partial"), tool_client=tool_client)

        result = await provider.complete([Message.user("go")], tools=[lookup_tool])

        assert result.content == "Partial"
        assert [record.output for record in result.tool_calls] == [
            {"error": "socket closed"},
            {"ok": 1},
        ]
        assert create.await_count == 2

    def test_parse_tool_arguments(self):
        assert OpenAIProvider._parse_tool_arguments('{"a": 1}') == {"a": 1}
        assert OpenAIProvider._parse_tool_arguments({"a": 1}) == {"a": 1}
        assert OpenAIProvider._parse_tool_arguments("[1]") is None
        assert OpenAIProvider._parse_tool_arguments("{") is None


class TestOpenAIErrors:
    """Tests for SDK error mapping."""

    @staticmethod
    def _response(status: int) -> httpx.Response:
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        return httpx.Response(status, request=request)

    @pytest.mark.asyncio
    async def test_rate_limit(self):
        error = openai.RateLimitError("slow down", response=self._response(429), body=None)
        provider, _ = _provider(error)
        with pytest.raises(RateLimitError):
            await provider.complete([Message.user("Hi")])

    @pytest.mark.asyncio
    async def test_authentication(self):
        error = openai.AuthenticationError("bad key", response=self._response(401), body=None)
        provider, _ = _provider(error)
        with pytest.raises(AuthenticationError):
            await provider.complete([Message.user("Hi")])

    @pytest.mark.asyncio
    async def test_server_error(self):
        error = openai.InternalServerError("oops", response=self._response(500), body=None)
        provider, _ = _provider(error)
        with pytest.raises(APIError) as exc_info:
            await provider.complete([Message.user("Hi")])
        assert exc_info.value.status_code == 500
