"""Target resolution for web-research actions.

Each resolver walks an ordered list of candidate sources and returns the
first usable one, ending with a fixed default.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from nodechord.core.state import WorkflowState
from nodechord.core.templating import substitute_variables

DEFAULT_URL = "https://example.com"
DEFAULT_QUERY = "latest tech news"

URL_FIELDS = ("scrapeUrl", "mapUrl", "crawlUrl")


def _is_url(value: Any) -> bool:
    return isinstance(value, str) and value.startswith("http")


def resolve_target_url(data: Mapping[str, Any], state: WorkflowState) -> str:
    """URL for scrape, map and crawl actions.

    Order: the first explicit ``scrapeUrl``/``mapUrl``/``crawlUrl`` when it
    substitutes to a URL, then ``lastOutput`` as a URL string, then a ``url``
    key on ``lastOutput``, then ``input`` as a URL string, then
    ``https://example.com``.
    """
    explicit = next((data[name] for name in URL_FIELDS if data.get(name)), None)
    if explicit:
        substituted = substitute_variables(str(explicit), state)
        if _is_url(substituted):
            return substituted

    last_output = state.last_output
    if _is_url(last_output):
        return last_output
    if isinstance(last_output, Mapping) and isinstance(last_output.get("url"), str):
        return last_output["url"]
    if _is_url(state.input):
        return state.input
    return DEFAULT_URL


def resolve_search_query(data: Mapping[str, Any], state: WorkflowState) -> str:
    """Query for the search action.

    Order: ``searchQuery`` when it substitutes to a non-empty string, then
    ``lastOutput`` as a non-URL string, then ``input`` as a non-URL string,
    then ``latest tech news``.
    """
    if data.get("searchQuery"):
        substituted = substitute_variables(str(data["searchQuery"]), state)
        if substituted:
            return substituted

    last_output = state.last_output
    if isinstance(last_output, str) and not _is_url(last_output):
        return last_output
    if isinstance(state.input, str) and not _is_url(state.input):
        return state.input
    return DEFAULT_QUERY
