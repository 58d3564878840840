"""NodeChord - Workflow Node Execution Engine.

NodeChord runs single nodes of a workflow graph (LLM agents, remote tool
servers and HTTP requests) and threads an immutable execution state between
them.

Example:
    >>> from nodechord import AgentExecutor, ProviderKeys, WorkflowNode, WorkflowState
    >>> state = WorkflowState.start("Summarize today's AI news")
    >>> node = WorkflowNode(id="a1", type="agent", data={"model": "openai/gpt-4o-mini"})
    >>> result = await AgentExecutor().execute(node, state, ProviderKeys(openai="sk-..."))
    >>> state = state.apply(result.to_patch())
"""

__version__ = "0.1.0"

# Core exports
from nodechord.core.config import EngineSettings, ProviderKeys, get_settings
from nodechord.core.state import StatePatch, WorkflowNode, WorkflowState
from nodechord.core.templating import substitute_deep, substitute_variables
from nodechord.core.types import LLMResponse, Message, MessageRole, ToolCallRecord, Usage

# Error exports
from nodechord.errors.exceptions import (
    AgentExecutionError,
    ConfigurationError,
    HTTPError,
    NodeChordError,
    ToolServerError,
    UpstreamError,
)

# Protocol exports
from nodechord.protocols.mcp import (
    InMemoryToolServerResolver,
    MCPHttpClient,
    ToolServerConfig,
    ToolServerResolver,
    migrate_node_data,
)

__all__ = [
    # Version
    "__version__",
    # Core
    "EngineSettings",
    "ProviderKeys",
    "get_settings",
    "WorkflowNode",
    "WorkflowState",
    "StatePatch",
    "substitute_variables",
    "substitute_deep",
    # Types
    "LLMResponse",
    "Message",
    "MessageRole",
    "ToolCallRecord",
    "Usage",
    # Errors
    "NodeChordError",
    "ConfigurationError",
    "UpstreamError",
    "HTTPError",
    "ToolServerError",
    "AgentExecutionError",
    # Protocols
    "ToolServerConfig",
    "ToolServerResolver",
    "InMemoryToolServerResolver",
    "MCPHttpClient",
    "migrate_node_data",
    # Executors
    "AgentExecutor",
    "HTTPExecutor",
    "RemoteToolExecutor",
]


def __getattr__(name: str):
    """Lazy import of executors so provider SDKs load on first use."""
    if name == "AgentExecutor":
        from nodechord.executors.agent import AgentExecutor
        return AgentExecutor
    if name == "HTTPExecutor":
        from nodechord.executors.http import HTTPExecutor
        return HTTPExecutor
    if name == "RemoteToolExecutor":
        from nodechord.executors.mcp import RemoteToolExecutor
        return RemoteToolExecutor
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
