"""Agent node executor.

Sends the node's instructions to the model named by ``data["model"]`` and
proposes the resulting state update. Provider-specific tool handling lives
in the adapters under ``nodechord.llm``.
"""

from __future__ import annotations

import json
import time
from typing import Any

from nodechord.core.config import EngineSettings, ProviderKeys
from nodechord.core.state import WorkflowNode, WorkflowState
from nodechord.core.structured import parse_json_output
from nodechord.core.templating import substitute_variables
from nodechord.core.types import Message
from nodechord.errors.exceptions import (
    AgentExecutionError,
    MissingCredentialsError,
    NoAPIKeyAvailableError,
    OutputFormatError,
    RateLimitError,
)
from nodechord.executors.base import AgentResult, NodeExecutor
from nodechord.executors.scenarios import AgentScenarioRegistry
from nodechord.llm.registry import ProviderRegistry, get_registry, parse_model_identifier
from nodechord.logging import get_logger
from nodechord.protocols.mcp.client import MCPHttpClient
from nodechord.protocols.mcp.resolver import ToolServerResolver, migrate_node_data
from nodechord.protocols.mcp.types import ToolServerConfig

DEFAULT_INSTRUCTIONS = "Process the input"

_MISSING = object()


def classify_agent_error(error: Exception, node_id: str) -> AgentExecutionError:
    """Turn an agent failure into a user-facing error with a kind."""
    message = str(error)
    if isinstance(error, NoAPIKeyAvailableError) or "No API key available" in message:
        provider = getattr(error, "provider", None)
        named = f" for provider: {provider}" if provider else f" ({message})"
        return AgentExecutionError(
            f"No API key configured{named}. Please add a Gemini, AI/ML API, "
            "Anthropic, OpenAI, or Groq API key.",
            kind=AgentExecutionError.NO_PROVIDER_KEY,
            node_id=node_id,
        )
    if "API key" in message or "api_key" in message:
        return AgentExecutionError(
            "Missing API key. Please add your LLM provider key in Settings.",
            kind=AgentExecutionError.MISSING_API_KEY,
            node_id=node_id,
        )
    if isinstance(error, RateLimitError) or "rate limit" in message.lower() or "429" in message:
        return AgentExecutionError(
            "Rate limited. Please wait a moment and try again.",
            kind=AgentExecutionError.RATE_LIMITED,
            node_id=node_id,
        )
    return AgentExecutionError(
        f"Agent execution failed: {message}",
        kind=AgentExecutionError.UNKNOWN,
        node_id=node_id,
    )


def lookup_mock_response(raw: str | None, node: WorkflowNode) -> Any:
    """Mock output for a node, or ``_MISSING``.

    A JSON object is looked up by node id, then node name, then ``default``.
    Any other value (JSON scalar or plain text) applies to every node.
    """
    if not raw:
        return _MISSING
    try:
        config: Any = json.loads(raw)
    except json.JSONDecodeError:
        return raw
    if not isinstance(config, dict):
        return config

    for key in (node.id, node.name, "default"):
        if key is not None and config.get(key) is not None:
            return config[key]
    return _MISSING


class AgentExecutor(NodeExecutor):
    """Executor for ``agent`` nodes.

    Example:
        >>> executor = AgentExecutor(resolver)
        >>> result = await executor.execute(node, state, ProviderKeys(anthropic="sk-ant-..."))
        >>> state = state.apply(result.to_patch())
    """

    node_type = "agent"

    def __init__(
        self,
        resolver: ToolServerResolver | None = None,
        registry: ProviderRegistry | None = None,
        settings: EngineSettings | None = None,
        scenarios: AgentScenarioRegistry | None = None,
        tool_client: MCPHttpClient | None = None,
    ) -> None:
        super().__init__(settings)
        self._resolver = resolver
        self._registry = registry
        self._scenarios = scenarios or AgentScenarioRegistry()
        self._tool_client = tool_client

    @property
    def registry(self) -> ProviderRegistry:
        return self._registry or get_registry()

    async def execute(
        self,
        node: WorkflowNode,
        state: WorkflowState,
        provider_keys: ProviderKeys | None = None,
    ) -> AgentResult:
        """Run the agent node.

        Args:
            node: Agent node.
            state: Current state snapshot.
            provider_keys: API keys for this call only.

        Returns:
            The agent result. With fallback enabled, any failure yields a
            canned result marked ``fallback``.

        Raises:
            AgentExecutionError: On failure with fallback disabled.
        """
        logger = get_logger()
        logger.node_start(node.id, self.node_type, node.name)
        start_time = time.time()

        try:
            result = await self._run(node, state, provider_keys)
        except Exception as e:
            if self.settings.fallback_enabled:
                logger.fallback_used(node.id, str(e))
                result = self._fallback_result(node, state)
            else:
                error = classify_agent_error(e, node.id)
                logger.node_error(node.id, str(e))
                raise error from e

        logger.node_end(
            node.id,
            duration_ms=int((time.time() - start_time) * 1000),
            tokens=result.usage.total_tokens,
            fallback=result.fallback,
        )
        return result

    async def _run(
        self,
        node: WorkflowNode,
        state: WorkflowState,
        provider_keys: ProviderKeys | None,
    ) -> AgentResult:
        data = node.data
        instructions = substitute_variables(data.get("instructions") or DEFAULT_INSTRUCTIONS, state)
        tools = await self._resolve_tools(data)

        if provider_keys is None:
            raise MissingCredentialsError()

        mock = lookup_mock_response(self.settings.mock_agent_response, node)
        if mock is not _MISSING:
            get_logger().debug("Using mock agent response", node=node.id)
            return self._result(node, instructions, mock)

        prompt = Message.user(instructions)
        if data.get("includeChatHistory") and state.chat_history:
            messages = [*state.chat_history, prompt]
        else:
            messages = [prompt]

        provider_name, model = parse_model_identifier(data.get("model") or self.settings.default_model)
        provider = self.registry.create_provider(
            provider_name,
            model,
            provider_keys,
            timeout=self.settings.llm_timeout,
            tool_client=self._tool_client or MCPHttpClient(
                timeout=self.settings.tool_call_timeout,
                placeholders=provider_keys.placeholders(),
            ),
        )

        call_start = time.time()
        response = await provider.complete(
            messages,
            tools=tools or None,
            max_tokens=self.settings.llm_max_tokens,
        )
        get_logger().llm_call(
            provider.provider_name,
            provider.model,
            response.usage.total_tokens,
            int((time.time() - call_start) * 1000),
        )

        value: Any = response.content
        if data.get("outputFormat") == "JSON":
            try:
                value = parse_json_output(response.content)
            except OutputFormatError as e:
                get_logger().warning("Could not parse JSON output, using raw text", node=node.id, error=str(e))

        return self._result(
            node,
            instructions,
            value,
            response_text=response.content,
            tool_calls=response.tool_calls,
            usage=response.usage,
            provider=provider.provider_name,
            model=provider.model,
        )

    async def _resolve_tools(self, data: dict[str, Any]) -> list[ToolServerConfig]:
        migrated = migrate_node_data(data)
        server_ids = migrated.get("mcpServerIds") or []
        if server_ids and self._resolver is not None:
            return await self._resolver.resolve_many(server_ids)
        return [ToolServerConfig.model_validate(t) for t in migrated.get("mcpTools") or []]

    def _fallback_result(self, node: WorkflowNode, state: WorkflowState) -> AgentResult:
        response = self._scenarios.response_for(node.name or node.id, state.input)
        instructions = substitute_variables(
            node.data.get("instructions") or DEFAULT_INSTRUCTIONS, state
        )
        return self._result(node, instructions, response, fallback=True)

    @staticmethod
    def _result(
        node: WorkflowNode,
        instructions: str,
        value: Any,
        response_text: str | None = None,
        **fields: Any,
    ) -> AgentResult:
        if response_text is None:
            response_text = value if isinstance(value, str) else json.dumps(value)
        chat_updates = (
            [Message.user(instructions), Message.assistant(response_text)]
            if node.data.get("includeChatHistory")
            else []
        )
        return AgentResult(
            value=value,
            chat_history_updates=chat_updates,
            variable_updates={"lastOutput": value},
            **fields,
        )
