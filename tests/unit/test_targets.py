"""Tests for web-research target resolution."""

from __future__ import annotations

from nodechord.core.state import StatePatch, WorkflowState
from nodechord.tools.targets import (
    DEFAULT_QUERY,
    DEFAULT_URL,
    resolve_search_query,
    resolve_target_url,
)


def _state(input_value, last_output=None):
    state = WorkflowState.start(input_value)
    if last_output is not None:
        state = state.apply(StatePatch(variables={"lastOutput": last_output}))
    return state


class TestResolveTargetUrl:
    """Tests for resolve_target_url candidate order."""

    def test_explicit_templated_url(self):
        state = _state("docs")
        data = {"scrapeUrl": "https://site.dev/{{input}}"}
        assert resolve_target_url(data, state) == "https://site.dev/docs"

    def test_explicit_non_url_is_skipped(self):
        state = _state("https://from-input.dev")
        assert resolve_target_url({"mapUrl": "{{missing}}"}, state) == "https://from-input.dev"

    def test_last_output_string(self):
        state = _state("query", "https://previous.dev")
        assert resolve_target_url({}, state) == "https://previous.dev"

    def test_last_output_mapping_url(self):
        state = _state("query", {"url": "https://mapped.dev", "title": "t"})
        assert resolve_target_url({}, state) == "https://mapped.dev"

    def test_input_url(self):
        state = _state("https://input.dev", {"no": "url"})
        assert resolve_target_url({}, state) == "https://input.dev"

    def test_default(self):
        assert resolve_target_url({}, _state("not a url")) == DEFAULT_URL


class TestResolveSearchQuery:
    """Tests for resolve_search_query candidate order."""

    def test_explicit_query(self):
        state = _state("ignored")
        state = state.apply(StatePatch(variables={"topic": "mcp"}))
        assert resolve_search_query({"searchQuery": "news on {{topic}}"}, state) == "news on mcp"

    def test_last_output_non_url(self):
        state = _state("input words", "previous words")
        assert resolve_search_query({}, state) == "previous words"

    def test_url_last_output_skipped_for_input(self):
        state = _state("input words", "https://previous.dev")
        assert resolve_search_query({}, state) == "input words"

    def test_default(self):
        state = _state({"ticker": "NVDA"}, {"x": 1})
        assert resolve_search_query({}, state) == DEFAULT_QUERY
