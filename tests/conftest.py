"""Pytest configuration and fixtures for NodeChord tests."""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest

from nodechord.core.config import EngineSettings, ProviderKeys
from nodechord.core.state import WorkflowNode, WorkflowState
from nodechord.core.types import LLMResponse, Message, ToolCallRecord, Usage
from nodechord.llm.base import BaseLLMProvider
from nodechord.llm.registry import ProviderRegistry
from nodechord.logging import logging_disabled
from nodechord.protocols.mcp.types import ToolServerConfig


class MockLLMProvider(BaseLLMProvider):
    """Mock LLM provider for testing."""

    supports_tools = True

    def __init__(
        self,
        model: str = "mock-model",
        response_content: str = "Mock response",
        tool_calls: list[ToolCallRecord] | None = None,
        error: Exception | None = None,
        provider_name: str = "mock",
    ) -> None:
        self._model = model
        self._response_content = response_content
        self._tool_calls = tool_calls or []
        self._error = error
        self._provider_name = provider_name
        self.call_count = 0
        self.received_messages: list[list[Message]] = []
        self.received_tools: list[list[ToolServerConfig] | None] = []

    async def complete(
        self,
        messages: list[Message],
        *,
        tools: list[ToolServerConfig] | None = None,
        temperature: float = 0.7,
        max_tokens: int = 4096,
        **kwargs: Any,
    ) -> LLMResponse:
        """Mock complete implementation."""
        self.call_count += 1
        self.received_messages.append(list(messages))
        self.received_tools.append(tools)
        if self._error is not None:
            raise self._error
        return LLMResponse(
            content=self._response_content,
            model=self._model,
            usage=Usage.of(10, 5),
            tool_calls=self._tool_calls,
        )

    @property
    def model(self) -> str:
        return self._model

    @property
    def provider_name(self) -> str:
        return self._provider_name


@pytest.fixture(autouse=True)
def quiet_logging():
    """Keep test output free of log lines."""
    with logging_disabled():
        yield


@pytest.fixture
def mock_provider() -> MockLLMProvider:
    """Create a mock LLM provider."""
    return MockLLMProvider()


@pytest.fixture
def registry_factory() -> Callable[[BaseLLMProvider], ProviderRegistry]:
    """Build a registry whose every provider name returns the given provider."""

    def _factory(provider: BaseLLMProvider) -> ProviderRegistry:
        registry = ProviderRegistry()
        for name in ("anthropic", "openai", "groq", "gemini", "aimlapi"):
            registry.register(name, lambda **kwargs: provider)
        return registry

    return _factory


@pytest.fixture
def strict_settings() -> EngineSettings:
    """Settings with degraded mode off."""
    return EngineSettings(use_fallback_data=False, demo_mode=False, mock_agent_response=None)


@pytest.fixture
def fallback_settings() -> EngineSettings:
    """Settings with degraded mode on."""
    return EngineSettings(use_fallback_data=True, demo_mode=True, mock_agent_response=None)


@pytest.fixture
def provider_keys() -> ProviderKeys:
    return ProviderKeys(anthropic="sk-ant-test", openai="sk-test", firecrawl="fc-test")


@pytest.fixture
def state() -> WorkflowState:
    return WorkflowState.start("latest AI research trends")


@pytest.fixture
def node_factory() -> Callable[..., WorkflowNode]:
    """Create nodes with keyword data."""

    def _factory(node_id: str = "node-1", node_type: str = "agent", **data: Any) -> WorkflowNode:
        return WorkflowNode(id=node_id, type=node_type, data=data)

    return _factory


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)

    def json_body(self, index: int = -1) -> Any:
        return json.loads(self.requests[index].content)


@pytest.fixture
def transport_factory() -> Callable[..., RecordingTransport]:
    """Create a recording transport from a handler or a fixed JSON reply."""

    def _factory(
        handler: Callable[[httpx.Request], httpx.Response] | None = None,
        *,
        status_code: int = 200,
        json_body: Any = None,
    ) -> RecordingTransport:
        if handler is None:
            def handler(request: httpx.Request) -> httpx.Response:
                return httpx.Response(status_code, json=json_body)
        return RecordingTransport(handler)

    return _factory
