"""Web-research tooling for remote-tool nodes."""

from nodechord.tools.extraction import extract_field, get_nested_value
from nodechord.tools.scenarios import SearchScenario, SearchScenarioRegistry
from nodechord.tools.targets import resolve_search_query, resolve_target_url
from nodechord.tools.web_research import FirecrawlBackend

__all__ = [
    "extract_field",
    "get_nested_value",
    "resolve_target_url",
    "resolve_search_query",
    "FirecrawlBackend",
    "SearchScenario",
    "SearchScenarioRegistry",
]
