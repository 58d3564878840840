"""Tests for the OpenAI-compatible Groq and AI/ML API adapters."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from nodechord.core.types import Message
from nodechord.llm.aimlapi import AIMLAPIProvider, resolve_model
from nodechord.llm.groq import GROQ_BASE_URL, GroqProvider
from nodechord.protocols.mcp import ToolServerConfig


def _chat_completion(content: str):
    return SimpleNamespace(
        id="c1",
        model="m",
        choices=[SimpleNamespace(message=SimpleNamespace(content=content, tool_calls=None),
                                 finish_reason="stop")],
        usage=SimpleNamespace(prompt_tokens=3, completion_tokens=2, total_tokens=5),
    )


class TestGroqProvider:
    """Tests for GroqProvider."""

    def test_defaults(self):
        provider = GroqProvider(api_key="gsk")
        assert provider.provider_name == "groq"
        assert provider._base_url == GROQ_BASE_URL

    @pytest.mark.asyncio
    async def test_without_tools_uses_chat_completions(self):
        provider = GroqProvider(api_key="gsk")
        provider._client = MagicMock()
        provider._client.chat.completions.create = AsyncMock(return_value=_chat_completion("hi"))

        result = await provider.complete([Message.user("Hello")])

        assert result.content == "hi"
        assert result.usage.total_tokens == 5

    @pytest.mark.asyncio
    async def test_tools_use_responses_api(self):
        response = SimpleNamespace(
            id="resp_1",
            model="llama-3.3-70b-versatile",
            output_text="Found it.",
            usage=SimpleNamespace(input_tokens=40, output_tokens=10, total_tokens=50),
            output=[
                {"type": "mcp_list_tools", "server_label": "Firecrawl"},
                {"type": "mcp_call", "id": "mc1", "name": "firecrawl_search",
                 "arguments": '{"query": "mcp"}', "server_label": "Firecrawl"},
                {"type": "message", "content": []},
            ],
        )
        provider = GroqProvider(api_key="gsk", placeholders={"FIRECRAWL_API_KEY": "fc-9"})
        provider._client = MagicMock()
        provider._client.responses.create = AsyncMock(return_value=response)
        tools = [ToolServerConfig(name="Firecrawl", url="https://mcp.firecrawl.dev/{FIRECRAWL_API_KEY}/v2/mcp")]

        result = await provider.complete(
            [Message.user("first"), Message.assistant("ok"), Message.user("search mcp")], tools=tools
        )

        kwargs = provider._client.responses.create.call_args.kwargs
        assert kwargs["input"] == "search mcp"
        assert kwargs["tools"] == [{
            "type": "mcp",
            "server_label": "Firecrawl",
            "server_url": "https://mcp.firecrawl.dev/fc-9/v2/mcp",
        }]
        assert result.content == "Found it."
        assert result.usage.total_tokens == 50
        assert len(result.tool_calls) == 1
        record = result.tool_calls[0]
        assert record.name == "firecrawl_search"
        assert record.arguments == {"query": "mcp"}
        assert record.output is None
        assert record.server_name == "Firecrawl"


class TestAIMLAPIProvider:
    """Tests for AIMLAPIProvider."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("llama-3.1-8b", "meta-llama/Meta-Llama-3.1-8B-Instruct-Turbo"),
            ("aimlapi/llama-3.1-70b", "meta-llama/Meta-Llama-3.1-70B-Instruct-Turbo"),
            ("mistralai/Mixtral-8x7B", "mistralai/Mixtral-8x7B"),
        ],
    )
    def test_resolve_model(self, name, expected):
        assert resolve_model(name) == expected

    def test_no_tool_support(self):
        assert AIMLAPIProvider.supports_tools is False

    @pytest.mark.asyncio
    async def test_fixed_sampling_and_tools_ignored(self):
        provider = AIMLAPIProvider(model="llama-3.1-8b", api_key="key")
        provider._client = MagicMock()
        create = AsyncMock(return_value=_chat_completion("answer"))
        provider._client.chat.completions.create = create

        result = await provider.complete(
            [Message.user("q"), Message.assistant("a")],
            tools=[ToolServerConfig(name="x", url="https://x.dev")],
            temperature=0.1,
            max_tokens=10,
        )

        assert result.content == "answer"
        kwargs = create.call_args.kwargs
        assert kwargs["temperature"] == 0.7
        assert kwargs["max_tokens"] == 4096
        assert kwargs["model"] == "meta-llama/Meta-Llama-3.1-8B-Instruct-Turbo"
        assert kwargs["messages"] == [
            {"role": "user", "content": "q"},
            {"role": "assistant", "content": "a"},
        ]
        assert "tools" not in kwargs
