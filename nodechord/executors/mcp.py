"""Remote-tool node executor.

Runs a node's tool servers. Web-research servers (Firecrawl) perform one
scrape, search, map or crawl action and end the node with that envelope.
Other servers are dispatched by name to a server adapter; their failures
are recorded per server and do not fail the node.
"""

from __future__ import annotations

import json
import re
import time
from typing import Any, Callable, Protocol

from nodechord.core.config import EngineSettings
from nodechord.core.state import WorkflowNode, WorkflowState
from nodechord.core.types import ToolCallRecord
from nodechord.errors.exceptions import (
    ConfigurationError,
    MissingAPIKeyError,
    NodeChordError,
    NoServerConfiguredError,
    ToolServerError,
    ToolServerNotSupportedError,
)
from nodechord.executors.base import NodeExecutor, RemoteToolResult
from nodechord.logging import get_logger
from nodechord.protocols.mcp.client import MCPHttpClient
from nodechord.protocols.mcp.resolver import ToolServerResolver
from nodechord.protocols.mcp.types import ToolServerConfig
from nodechord.tools.extraction import extract_field
from nodechord.tools.scenarios import SearchScenarioRegistry
from nodechord.tools.targets import resolve_search_query, resolve_target_url
from nodechord.tools.web_research import ACTIONS, FirecrawlBackend

BackendFactory = Callable[..., FirecrawlBackend]

DEFAULT_REPOSITORY = "anthropics/anthropic-sdk-python"
_REPOSITORY_SLUG = re.compile(r"([a-zA-Z0-9-]+/[a-zA-Z0-9-]+)")


class ServerAdapter(Protocol):
    """Runs a named tool server for a remote-tool node."""

    def matches(self, server: ToolServerConfig) -> bool:
        ...

    async def run(
        self, server: ToolServerConfig, state: WorkflowState, client: MCPHttpClient
    ) -> tuple[str, Any]:
        """Return the tool name used and its result."""
        ...


def _input_text(state: WorkflowState) -> str:
    value = state.input or state.last_output
    if isinstance(value, str):
        return value
    return json.dumps(value)


class DeepWikiAdapter:
    """Documentation Q&A over the DeepWiki server.

    The tool is picked from the run input: wiki structure or topics map to
    ``read_wiki_structure``, wiki content or documentation to
    ``read_wiki_contents``, anything else is asked as a question.
    """

    def matches(self, server: ToolServerConfig) -> bool:
        name = server.name.lower()
        return "deepwiki" in name or "devin" in name

    @staticmethod
    def select_tool(text: str) -> tuple[str, dict[str, Any]]:
        match = _REPOSITORY_SLUG.search(text)
        arguments: dict[str, Any] = {"repoName": match.group(1) if match else DEFAULT_REPOSITORY}
        if "wiki structure" in text or "topics" in text:
            return "read_wiki_structure", arguments
        if "wiki content" in text or "documentation" in text:
            return "read_wiki_contents", arguments
        arguments["question"] = text
        return "ask_question", arguments

    async def run(
        self, server: ToolServerConfig, state: WorkflowState, client: MCPHttpClient
    ) -> tuple[str, Any]:
        tool, arguments = self.select_tool(_input_text(state))
        return tool, await client.call_tool(server, tool, arguments)


class RemoteToolExecutor(NodeExecutor):
    """Executor for ``mcp`` nodes.

    Example:
        >>> executor = RemoteToolExecutor(resolver)
        >>> result = await executor.execute(node, state)
        >>> state = state.apply(result.to_patch())
    """

    node_type = "mcp"

    def __init__(
        self,
        resolver: ToolServerResolver | None = None,
        settings: EngineSettings | None = None,
        backend_factory: BackendFactory | None = None,
        tool_client: MCPHttpClient | None = None,
        scenarios: SearchScenarioRegistry | None = None,
        adapters: list[ServerAdapter] | None = None,
    ) -> None:
        super().__init__(settings)
        self._resolver = resolver
        self._backend_factory = backend_factory or FirecrawlBackend
        self._tool_client = tool_client
        self._scenarios = scenarios or SearchScenarioRegistry()
        self._adapters: list[ServerAdapter] = adapters if adapters is not None else [DeepWikiAdapter()]

    def register_adapter(self, adapter: ServerAdapter) -> None:
        """Add a named-server adapter, tried after the existing ones."""
        self._adapters.append(adapter)

    async def execute(self, node: WorkflowNode, state: WorkflowState) -> RemoteToolResult:
        """Run the node's tool servers.

        Returns:
            The result envelope. When no server resolves, ``error`` is set
            instead of raising.

        Raises:
            ConfigurationError: Web-research key missing or unknown action.
            ToolServerError: Web-research action failed and no fallback applies.
        """
        logger = get_logger()
        logger.node_start(node.id, self.node_type, node.name)
        start_time = time.time()

        servers = await self._resolve_servers(node)
        if not servers:
            error = NoServerConfiguredError(node.id, node.data.get("mcpServerId"))
            logger.node_error(node.id, str(error))
            return RemoteToolResult(error=str(error))

        results: list[dict[str, Any]] = []
        output: Any = None
        for server in servers:
            if server.is_web_research:
                try:
                    result = await self._run_web_research(node, state, server)
                except NodeChordError as e:
                    logger.node_error(node.id, str(e))
                    raise
                logger.node_end(
                    node.id,
                    duration_ms=int((time.time() - start_time) * 1000),
                    fallback=result.fallback,
                )
                return result

            entry = await self._run_named_server(server, state)
            if entry["success"]:
                output = entry["data"]
            results.append(entry)

        logger.node_end(node.id, duration_ms=int((time.time() - start_time) * 1000))
        return RemoteToolResult(
            results=results,
            output_value=output,
            servers=[server.name for server in servers],
        )

    async def _resolve_servers(self, node: WorkflowNode) -> list[ToolServerConfig]:
        data = node.data
        server_id = data.get("mcpServerId")
        if server_id and self._resolver is not None:
            resolved = await self._resolver.resolve(server_id)
            if resolved is not None:
                return [resolved]
        return [ToolServerConfig.model_validate(s) for s in data.get("mcpServers") or []]

    def _client(self) -> MCPHttpClient:
        return self._tool_client or MCPHttpClient(timeout=self.settings.tool_call_timeout)

    async def _run_named_server(
        self, server: ToolServerConfig, state: WorkflowState
    ) -> dict[str, Any]:
        adapter = next((a for a in self._adapters if a.matches(server)), None)
        try:
            if adapter is None:
                raise ToolServerNotSupportedError(server.name, server.url)
            tool, data = await adapter.run(server, state, self._client())
        except NodeChordError as e:
            get_logger().error("Tool server failed", server=server.name, error=str(e))
            return {"server": server.name, "success": False, "error": str(e)}

        get_logger().tool_call(tool, True, server=server.name)
        return {"server": server.name, "tool": tool, "success": True, "data": data}

    async def _run_web_research(
        self, node: WorkflowNode, state: WorkflowState, server: ToolServerConfig
    ) -> RemoteToolResult:
        data = node.data
        action = data.get("mcpAction") or "scrape"
        if action not in ACTIONS:
            raise ConfigurationError(f"Unknown Firecrawl action: {action}")

        api_key = self.settings.firecrawl_api_key or server.auth_token
        if not api_key:
            raise MissingAPIKeyError("firecrawl")

        backend = self._backend_factory(
            api_key=api_key,
            base_url=self.settings.firecrawl_base_url,
            timeout=self.settings.tool_call_timeout,
        )
        url = resolve_target_url(data, state)
        query = resolve_search_query(data, state)
        output_field = data.get("outputField")

        try:
            if action == "scrape":
                formats = ["json"] if data.get("useJsonMode") else ["markdown", "html"]
                result = await backend.scrape(url, formats=formats)
            elif action == "search":
                result = await backend.search(query, limit=data.get("searchLimit") or 5)
            elif action == "map":
                result = await backend.map(url)
            else:
                result = await backend.crawl(url, limit=data.get("crawlLimit") or 10)
        except ConfigurationError:
            raise
        except Exception as e:
            if self.settings.fallback_enabled and action == "search":
                get_logger().fallback_used(node.id, str(e))
                fallback = self._scenarios.results_for(query)
                return RemoteToolResult(
                    results=[{
                        "server": server.name,
                        "tool": action,
                        "success": False,
                        "error": "Using fallback data",
                        "data": fallback,
                    }],
                    output_value=self._project(fallback, data),
                    tool_calls=[ToolCallRecord(
                        name=f"firecrawl_{action}",
                        arguments={"action": action, "query": query},
                        output=fallback,
                    )],
                    extracted_field=output_field,
                    servers=[server.name],
                    fallback=True,
                )
            raise ToolServerError(f"Firecrawl {action} failed: {e}", server=server.name) from e

        get_logger().tool_call(f"firecrawl_{action}", True, server=server.name)
        return RemoteToolResult(
            results=[{"server": server.name, "tool": action, "success": True, "data": result}],
            output_value=self._project(result, data),
            tool_calls=[ToolCallRecord(
                name=f"firecrawl_{action}",
                arguments={"action": action, "url": url, "query": query},
                output=result,
            )],
            extracted_field=output_field,
            servers=[server.name],
        )

    @staticmethod
    def _project(result: Any, data: dict[str, Any]) -> Any:
        output_field = data.get("outputField")
        if output_field and output_field != "full":
            return extract_field(result, output_field, data.get("customOutputPath"))
        return result
