"""Tests for the remote-tool node executor."""

from __future__ import annotations

import httpx
import pytest

from nodechord.core.config import EngineSettings
from nodechord.core.state import StatePatch, WorkflowState
from nodechord.errors import ConfigurationError, MissingAPIKeyError, ToolServerError
from nodechord.executors.mcp import DEFAULT_REPOSITORY, DeepWikiAdapter, RemoteToolExecutor
from nodechord.protocols.mcp import InMemoryToolServerResolver, MCPHttpClient, ToolServerConfig
from nodechord.tools.web_research import FirecrawlBackend

FIRECRAWL = {"name": "Firecrawl", "url": "https://mcp.firecrawl.dev/{FIRECRAWL_API_KEY}/v2/mcp"}


def _settings(**overrides) -> EngineSettings:
    values = {
        "use_fallback_data": False,
        "demo_mode": False,
        "firecrawl_api_key": "fc-test",
    }
    values.update(overrides)
    return EngineSettings(**values)


def _executor(transport, settings=None, **kwargs) -> RemoteToolExecutor:
    def backend_factory(**backend_kwargs):
        return FirecrawlBackend(transport=transport, poll_interval=0, **backend_kwargs)

    return RemoteToolExecutor(
        settings=settings or _settings(), backend_factory=backend_factory, **kwargs
    )


def _failing(status_code: int = 500):
    return lambda request: httpx.Response(status_code, json={"error": "upstream down"})


class TestNoServers:
    """Tests for nodes without a resolvable server."""

    @pytest.mark.asyncio
    async def test_no_servers_returns_error(self, node_factory, state, transport_factory):
        executor = _executor(transport_factory(json_body={}))
        result = await executor.execute(node_factory("mcp-1", "mcp"), state)

        assert result.error.startswith("No MCP servers configured")
        assert result.to_patch() == StatePatch()

    @pytest.mark.asyncio
    async def test_unresolvable_id_named_in_error(self, node_factory, state, transport_factory):
        executor = _executor(
            transport_factory(json_body={}), resolver=InMemoryToolServerResolver()
        )
        result = await executor.execute(node_factory("mcp-1", "mcp", mcpServerId="ghost"), state)
        assert "ghost" in result.error


class TestWebResearch:
    """Tests for Firecrawl-backed actions."""

    @pytest.mark.asyncio
    async def test_scrape_with_output_field(self, node_factory, state, transport_factory):
        transport = transport_factory(
            json_body={"success": True, "data": {"markdown": "# Doc", "html": "<h1>Doc</h1>"}}
        )
        node = node_factory(
            "scrape-1", "mcp",
            mcpServers=[FIRECRAWL],
            mcpAction="scrape",
            scrapeUrl="https://docs.dev",
            outputField="markdown",
        )

        result = await _executor(transport).execute(node, state)

        assert result.output == "# Doc"
        assert result.extracted_field == "markdown"
        assert result.results[0]["success"] is True
        assert result.tool_calls[0].name == "firecrawl_scrape"
        assert transport.json_body()["url"] == "https://docs.dev"
        assert state.apply(result.to_patch()).last_output == "# Doc"
        assert "_fallback" not in result.to_dict()

    @pytest.mark.asyncio
    async def test_json_mode_requests_json_format(self, node_factory, state, transport_factory):
        transport = transport_factory(json_body={"success": True, "data": {"json": {"a": 1}}})
        node = node_factory("s", "mcp", mcpServers=[FIRECRAWL], useJsonMode=True)

        await _executor(transport).execute(node, state)

        assert transport.json_body()["formats"] == ["json"]

    @pytest.mark.asyncio
    async def test_search_uses_input_as_query(self, node_factory, state, transport_factory):
        transport = transport_factory(json_body={"success": True, "data": [{"url": "a"}]})
        node = node_factory("s", "mcp", mcpServers=[FIRECRAWL], mcpAction="search", searchLimit=2)

        result = await _executor(transport).execute(node, state)

        assert transport.json_body() == {"query": "latest AI research trends", "limit": 2}
        assert result.output == {"web": [{"url": "a"}]}

    @pytest.mark.asyncio
    async def test_resolved_by_id(self, node_factory, state, transport_factory):
        transport = transport_factory(json_body={"success": True, "links": ["https://x.dev/a"]})
        resolver = InMemoryToolServerResolver({"fc": FIRECRAWL})
        node = node_factory("m", "mcp", mcpServerId="fc", mcpAction="map", mapUrl="https://x.dev")

        result = await _executor(transport, resolver=resolver).execute(node, state)

        assert result.output == {"links": ["https://x.dev/a"]}
        assert result.servers == ["Firecrawl"]

    @pytest.mark.asyncio
    async def test_search_fallback(self, node_factory, transport_factory):
        state = WorkflowState.start("NVDA stock analysis")
        node = node_factory("s", "mcp", mcpServers=[FIRECRAWL], mcpAction="search")
        executor = _executor(transport_factory(_failing()), settings=_settings(use_fallback_data=True))

        result = await executor.execute(node, state)

        envelope = result.to_dict()
        assert envelope["_fallback"] is True
        assert envelope["results"][0]["success"] is False
        assert envelope["results"][0]["error"] == "Using fallback data"
        assert envelope["results"][0]["data"]["web"]
        assert "finance.yahoo.com" in result.output["web"][0]["url"]
        assert result.tool_calls[0].arguments == {"action": "search", "query": "NVDA stock analysis"}
        assert state.apply(result.to_patch()).last_output == result.output

    @pytest.mark.asyncio
    async def test_search_failure_without_fallback(self, node_factory, state, transport_factory):
        node = node_factory("s", "mcp", mcpServers=[FIRECRAWL], mcpAction="search")
        with pytest.raises(ToolServerError, match="Firecrawl search failed: HTTP 500"):
            await _executor(transport_factory(_failing())).execute(node, state)

    @pytest.mark.asyncio
    async def test_scrape_failure_ignores_fallback(self, node_factory, state, transport_factory):
        node = node_factory("s", "mcp", mcpServers=[FIRECRAWL], mcpAction="scrape")
        executor = _executor(transport_factory(_failing()), settings=_settings(use_fallback_data=True))
        with pytest.raises(ToolServerError, match="Firecrawl scrape failed"):
            await executor.execute(node, state)

    @pytest.mark.asyncio
    async def test_missing_api_key(self, node_factory, state, transport_factory):
        node = node_factory("s", "mcp", mcpServers=[FIRECRAWL])
        executor = _executor(transport_factory(json_body={}), settings=_settings(firecrawl_api_key=""))
        with pytest.raises(MissingAPIKeyError):
            await executor.execute(node, state)

    @pytest.mark.asyncio
    async def test_server_token_used_as_key(self, node_factory, state, transport_factory):
        transport = transport_factory(json_body={"success": True, "data": {}})
        server = {**FIRECRAWL, "authToken": "fc-from-server"}
        node = node_factory("s", "mcp", mcpServers=[server])

        await _executor(transport, settings=_settings(firecrawl_api_key="")).execute(node, state)

        assert transport.requests[0].headers["Authorization"] == "Bearer fc-from-server"

    @pytest.mark.asyncio
    async def test_unknown_action(self, node_factory, state, transport_factory):
        node = node_factory("s", "mcp", mcpServers=[FIRECRAWL], mcpAction="extract")
        with pytest.raises(ConfigurationError, match="Unknown Firecrawl action"):
            await _executor(transport_factory(json_body={})).execute(node, state)


class QuotaExceededBackend:
    """Backend whose every action fails with a non-library error."""

    def __init__(self, **kwargs):
        pass

    async def search(self, query, limit=5):
        raise RuntimeError("quota exceeded")

    async def scrape(self, url, formats=None):
        raise RuntimeError("quota exceeded")


class TestBackendFailures:
    """Tests for arbitrary exceptions raised by an injected backend."""

    @pytest.mark.asyncio
    async def test_search_falls_back(self, node_factory):
        executor = RemoteToolExecutor(
            settings=_settings(demo_mode=True), backend_factory=QuotaExceededBackend
        )
        node = node_factory("s", "mcp", mcpServers=[FIRECRAWL], mcpAction="search")

        result = await executor.execute(node, WorkflowState.start("AI research trends"))

        assert result.fallback is True
        assert result.to_dict()["_fallback"] is True
        assert result.results[0]["data"]["web"]

    @pytest.mark.asyncio
    async def test_wrapped_without_fallback(self, node_factory, state):
        executor = RemoteToolExecutor(settings=_settings(), backend_factory=QuotaExceededBackend)
        node = node_factory("s", "mcp", mcpServers=[FIRECRAWL], mcpAction="search")

        with pytest.raises(ToolServerError, match="Firecrawl search failed: quota exceeded") as exc_info:
            await executor.execute(node, state)
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    @pytest.mark.asyncio
    async def test_scrape_wrapped_even_with_fallback(self, node_factory, state):
        executor = RemoteToolExecutor(
            settings=_settings(demo_mode=True), backend_factory=QuotaExceededBackend
        )
        node = node_factory("s", "mcp", mcpServers=[FIRECRAWL], mcpAction="scrape")

        with pytest.raises(ToolServerError, match="Firecrawl scrape failed: quota exceeded"):
            await executor.execute(node, state)


class TestNamedServers:
    """Tests for adapter-dispatched servers."""

    def test_deepwiki_tool_selection(self):
        adapter = DeepWikiAdapter()
        assert adapter.select_tool("show the wiki structure of pallets/flask") == (
            "read_wiki_structure", {"repoName": "pallets/flask"},
        )
        assert adapter.select_tool("read documentation")[0] == "read_wiki_contents"
        tool, arguments = adapter.select_tool("how does it work?")
        assert tool == "ask_question"
        assert arguments == {"repoName": DEFAULT_REPOSITORY, "question": "how does it work?"}

    @pytest.mark.asyncio
    async def test_deepwiki_success(self, node_factory, transport_factory):
        transport = transport_factory(json_body={"result": {"content": [{"text": "answer"}]}})
        executor = RemoteToolExecutor(
            settings=_settings(), tool_client=MCPHttpClient(transport=transport)
        )
        node = node_factory(
            "dw", "mcp", mcpServers=[{"name": "DeepWiki", "url": "https://mcp.deepwiki.com/mcp"}]
        )
        state = WorkflowState.start("How does routing work in pallets/flask?")

        result = await executor.execute(node, state)

        assert result.results == [{
            "server": "DeepWiki",
            "tool": "ask_question",
            "success": True,
            "data": {"content": [{"text": "answer"}]},
        }]
        assert transport.json_body()["params"]["arguments"]["repoName"] == "pallets/flask"
        assert state.apply(result.to_patch()).last_output == {"content": [{"text": "answer"}]}

    @pytest.mark.asyncio
    async def test_unsupported_server_recorded(self, node_factory, state):
        node = node_factory(
            "x", "mcp", mcpServers=[{"name": "Custom", "url": "https://custom.dev/mcp"}]
        )

        result = await RemoteToolExecutor(settings=_settings()).execute(node, state)

        entry = result.results[0]
        assert entry["success"] is False
        assert entry["error"] == (
            'MCP server "Custom" execution not yet implemented. Server URL: https://custom.dev/mcp'
        )
        assert result.to_patch() == StatePatch()

    @pytest.mark.asyncio
    async def test_custom_adapter(self, node_factory, state):
        class EchoAdapter:
            def matches(self, server: ToolServerConfig) -> bool:
                return server.name == "Echo"

            async def run(self, server, state, client):
                return "echo", state.input

        executor = RemoteToolExecutor(settings=_settings())
        executor.register_adapter(EchoAdapter())
        node = node_factory("e", "mcp", mcpServers=[{"name": "Echo"}])

        result = await executor.execute(node, state)

        assert result.output == "latest AI research trends"
        assert result.results[0]["tool"] == "echo"

    @pytest.mark.asyncio
    async def test_server_failure_does_not_fail_node(self, node_factory, state, transport_factory):
        transport = transport_factory(status_code=502, json_body={})
        executor = RemoteToolExecutor(
            settings=_settings(), tool_client=MCPHttpClient(transport=transport)
        )
        node = node_factory("dw", "mcp", mcpServers=[{"name": "DeepWiki", "url": "https://dw.dev"}])

        result = await executor.execute(node, state)

        assert result.results[0]["success"] is False
        assert "HTTP 502" in result.results[0]["error"]
