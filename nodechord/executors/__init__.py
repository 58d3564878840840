"""Node executors for NodeChord."""

from nodechord.executors.agent import AgentExecutor, classify_agent_error
from nodechord.executors.base import (
    AgentResult,
    ExecutionResult,
    HTTPResult,
    NodeExecutor,
    RemoteToolResult,
)
from nodechord.executors.http import HTTPExecutor
from nodechord.executors.mcp import DeepWikiAdapter, RemoteToolExecutor, ServerAdapter
from nodechord.executors.scenarios import AgentScenarioRegistry

__all__ = [
    "NodeExecutor",
    "ExecutionResult",
    "RemoteToolResult",
    "HTTPResult",
    "AgentResult",
    "RemoteToolExecutor",
    "HTTPExecutor",
    "AgentExecutor",
    "classify_agent_error",
    "ServerAdapter",
    "DeepWikiAdapter",
    "AgentScenarioRegistry",
]
