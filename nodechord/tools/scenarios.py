"""Synthetic web-search results for degraded mode.

Scenarios are tried in registration order; the first whose keywords appear
in the query wins, and the catch-all research scenario is used otherwise.
Payloads have the same shape as a live search (``{"web": [...]}``).
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class SearchScenario:
    """Canned search payload selected by query keywords."""

    name: str
    keywords: tuple[str, ...]
    results: list[dict[str, Any]] = field(default_factory=list)

    def matches(self, query: str) -> bool:
        lowered = query.lower()
        return any(keyword in lowered for keyword in self.keywords)

    def payload(self) -> dict[str, Any]:
        return {"web": copy.deepcopy(self.results)}


def _result(position: int, url: str, title: str, description: str) -> dict[str, Any]:
    return {"url": url, "title": title, "description": description, "position": position}


FINANCE = SearchScenario(
    name="finance",
    keywords=("stock", "yahoo finance", "ticker"),
    results=[
        _result(
            1,
            "https://finance.yahoo.com/quote/NVDA",
            "NVIDIA Corporation (NVDA) - Yahoo Finance",
            "NVIDIA Corporation (NVDA) stock quote, history, news and other vital information. "
            "Current price: $150.25 | Change: +$2.50 (+1.69%) | Market Cap: $3.7T | "
            "P/E Ratio: 75.2 | 52 Week High: $180.00 | 52 Week Low: $39.23",
        ),
        _result(
            2,
            "https://finance.yahoo.com/news/nvidia-stock-analysis",
            "NVIDIA Stock Analysis and Latest News",
            "Latest news: Strong earnings report, AI chip demand continues to grow. "
            "Analysts maintain buy rating with price target of $200.",
        ),
        _result(
            3,
            "https://finance.yahoo.com/quote/NVDA/key-statistics",
            "NVIDIA Key Statistics",
            "Trading volume: 45.2M | Beta: 1.68 | EPS: $2.00 | Dividend: $0.16 | "
            "Ex-dividend date: 2025-03-05",
        ),
    ],
)

PRODUCT = SearchScenario(
    name="product",
    keywords=("amazon", "product"),
    results=[
        _result(
            1,
            "https://www.amazon.com/dp/B08XYZ1234",
            "Logitech MX Master 3S Wireless Mouse - Amazon",
            "Price: $99.99 | Rating: 4.7/5 stars (12,345 reviews) | Features: Ergonomic design, "
            "7,000 DPI sensor, 70-day battery, USB-C charging, multi-device connectivity",
        ),
        _result(
            2,
            "https://www.amazon.com/dp/B09ABC5678",
            "Razer DeathAdder V3 Pro Wireless Gaming Mouse",
            "Price: $149.99 | Rating: 4.6/5 stars (8,901 reviews) | Features: 30,000 DPI sensor, "
            "90-hour battery, lightweight 63g design, optical switches",
        ),
        _result(
            3,
            "https://www.amazon.com/dp/B07DEF4567",
            "Apple Magic Mouse - Wireless Mouse",
            "Price: $79.00 | Rating: 4.2/5 stars (5,678 reviews) | Features: Multi-touch surface, "
            "rechargeable battery, seamless integration with Mac",
        ),
    ],
)

RESEARCH = SearchScenario(
    name="research",
    keywords=("research", "trends", "ai"),
    results=[
        _result(
            1,
            "https://techcrunch.com/2025/01/ai-trends-2025",
            "Top AI Trends Shaping 2025: What to Watch",
            "Key trends include multimodal AI models, agentic AI systems, edge AI deployment, "
            "and AI safety regulations. Industry experts predict significant growth in AI "
            "adoption across sectors.",
        ),
        _result(
            2,
            "https://www.mckinsey.com/ai-trends-2025",
            "AI Trends 2025: Market Analysis and Predictions",
            "Market research shows AI spending will reach $200B by 2025. Key areas: generative "
            "AI tools, AI-powered automation, and AI-enhanced decision-making systems.",
        ),
        _result(
            3,
            "https://venturebeat.com/ai/ai-trends-2025",
            "The Future of AI: 10 Trends to Watch in 2025",
            "Experts highlight trends in AI governance, responsible AI development, AI-native "
            "applications, and the convergence of AI with other emerging technologies.",
        ),
        _result(
            4,
            "https://www.gartner.com/ai-trends-2025",
            "Gartner AI Trends Report 2025",
            "Gartner identifies key AI trends: AI democratization, AI trust and transparency, "
            "AI-augmented development, and the rise of composite AI architectures.",
        ),
        _result(
            5,
            "https://www.forbes.com/ai-trends-2025",
            "AI in 2025: What Business Leaders Need to Know",
            "Business-focused analysis of AI trends including ROI metrics, AI integration "
            "strategies, and the impact of AI on workforce productivity and business models.",
        ),
    ],
)


class SearchScenarioRegistry:
    """Ordered collection of search scenarios with a catch-all default."""

    def __init__(
        self,
        scenarios: list[SearchScenario] | None = None,
        default: SearchScenario = RESEARCH,
    ) -> None:
        self._scenarios = list(scenarios if scenarios is not None else [FINANCE, PRODUCT])
        self._default = default

    def register(self, scenario: SearchScenario) -> None:
        """Add a scenario, matched after the existing ones."""
        self._scenarios.append(scenario)

    def select(self, query: str) -> SearchScenario:
        """Scenario for a query."""
        return next((s for s in self._scenarios if s.matches(query)), self._default)

    def results_for(self, query: str) -> dict[str, Any]:
        """Synthetic search payload for a query."""
        return self.select(query).payload()
