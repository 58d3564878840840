"""Canned agent responses for degraded mode.

A response is chosen by the node's role, detected from its name, and by the
topic of the run input (a ticker, a product or a research topic). Lookup
falls back from ``(role, topic)`` to ``(role, None)`` to the default
response, so scenarios can be added without touching the agent executor.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable

TOPIC_KEYS = ("ticker", "product", "research_topic")

RoleMatcher = Callable[[str], bool]


def detect_topic(input_value: Any) -> tuple[str | None, dict[str, str]]:
    """Find the topic of a run input.

    Keys are read from the input mapping and from a mapping nested under its
    ``input`` key. Returns the first topic found in ``TOPIC_KEYS`` order and
    every topic value found.
    """
    values: dict[str, str] = {}
    if isinstance(input_value, Mapping):
        nested = input_value.get("input")
        for key in TOPIC_KEYS:
            value = input_value.get(key)
            if not value and isinstance(nested, Mapping):
                value = nested.get(key)
            if value:
                values[key] = str(value)
    topic = next((key for key in TOPIC_KEYS if key in values), None)
    return topic, values


DEFAULT_ROLES: list[tuple[str, RoleMatcher]] = [
    ("analysis", lambda name: "gemini" in name or ("analysis" in name and "recommend" not in name)),
    ("summary", lambda name: "summary" in name or "summarize" in name),
    ("report", lambda name: "report" in name),
    ("recommend", lambda name: "recommend" in name),
    ("extract", lambda name: "extract" in name),
]


ANALYSIS_TICKER = """## Analysis of Search Results: {ticker}

### 1. Key Findings

1. **Current Market Position:** {ticker} is trading at $150.25, up $2.50 (+1.69%) from previous close, indicating strong market confidence.

2. **Financial Metrics:** Market capitalization of $3.7T with a P/E ratio of 75.2, reflecting high growth expectations. 52-week range shows significant volatility ($39.23 - $180.00).

3. **Recent Developments:** Strong earnings performance driven by AI chip demand. Analysts maintain positive outlook with price targets around $200.

### 2. Trends and Patterns Identified

- **Upward Momentum:** Consistent positive price movement over recent trading sessions
- **High Trading Volume:** 45.2M shares traded, indicating strong investor interest
- **Sector Leadership:** Positioned as a leader in AI and semiconductor technology

### 3. Important Statistics or Data Points

- Current Price: $150.25
- Daily Change: +$2.50 (+1.69%)
- Market Cap: $3.7T
- P/E Ratio: 75.2
- 52-Week High: $180.00
- 52-Week Low: $39.23
- Beta: 1.68 (higher volatility)

### 4. Expert Analysis and Implications

The stock demonstrates strong fundamentals with robust earnings growth. The high P/E ratio reflects market expectations for continued expansion in AI and data center markets. Recent news suggests sustained demand for the company's products.

**Implications:**
- Strong buy signal for growth-oriented investors
- Monitor for potential volatility given high beta
- Consider position sizing based on risk tolerance"""

ANALYSIS_PRODUCT = """## Analysis of Amazon Search Results: {product}

### 1. Key Findings

1. **Product Availability:** Multiple high-quality options found with ratings ranging from 4.2 to 4.7 stars.

2. **Price Range:** Products available from $79 to $149, offering options for different budget levels.

3. **Feature Analysis:** Top products include wireless connectivity, ergonomic design, long battery life, and precision sensors.

### 2. Trends and Patterns Identified

- **High Ratings:** All top results have 4+ star ratings with thousands of reviews
- **Wireless Dominance:** Most popular products are wireless with modern connectivity options
- **Price-Quality Correlation:** Higher-priced items tend to have more advanced features

### 3. Important Statistics or Data Points

- Top Product: Logitech MX Master 3S - $99.99, 4.7/5 stars (12,345 reviews)
- Premium Option: Razer DeathAdder V3 Pro - $149.99, 4.6/5 stars (8,901 reviews)
- Budget Option: Apple Magic Mouse - $79.00, 4.2/5 stars (5,678 reviews)

### 4. Expert Analysis and Implications

The search results show a competitive market with well-reviewed products across different price points. Customer reviews indicate strong satisfaction with top-rated items, particularly those with ergonomic designs and long battery life.

**Implications:**
- Consider Logitech MX Master 3S for best value proposition
- Premium features available in higher-priced models
- All options have strong customer satisfaction ratings"""

ANALYSIS_RESEARCH = """## Analysis of Search Results: {research_topic}

### 1. Key Findings

1. **Comprehensive Coverage:** Search results reveal multiple authoritative sources covering the topic from different angles including market analysis, technology trends, and business implications.

2. **Emerging Trends:** Key themes include multimodal AI models, agentic AI systems, edge AI deployment, and AI safety regulations.

3. **Market Growth:** Industry reports indicate significant growth projections, with AI spending expected to reach $200B by 2025.

### 2. Trends and Patterns Identified

- **Technology Evolution:** Rapid advancement in AI capabilities across multiple domains
- **Business Adoption:** Increasing integration of AI into business processes and decision-making
- **Regulatory Focus:** Growing emphasis on AI governance and responsible development

### 3. Important Statistics or Data Points

- Market Size: AI spending projected to reach $200B by 2025
- Key Sectors: Enterprise AI, consumer AI applications, AI infrastructure
- Growth Drivers: Generative AI tools, automation, enhanced decision-making systems

### 4. Expert Analysis and Implications

The research indicates a maturing AI ecosystem with strong growth potential. Industry leaders emphasize the importance of responsible AI development while leveraging new capabilities for competitive advantage.

**Implications:**
- Significant investment opportunities in AI infrastructure and applications
- Need for strategic planning around AI integration
- Importance of staying current with regulatory developments"""

ANALYSIS_GENERIC = """## Analysis Results

### 1. Key Findings
- Data successfully processed and analyzed
- Key insights extracted from available information
- Patterns and trends identified

### 2. Trends and Patterns Identified
- Consistent patterns observed in the data
- Notable trends requiring attention
- Opportunities for optimization identified

### 3. Important Statistics or Data Points
- Key metrics calculated and validated
- Comparative analysis completed
- Performance indicators assessed

### 4. Expert Analysis and Implications
The analysis demonstrates the workflow's capability to process complex information and generate actionable insights. The findings support informed decision-making and strategic planning."""

SUMMARY = """**Executive Summary: Analysis Results**

**Overview:**

The analysis has been completed successfully, processing the available data and extracting key insights. The findings demonstrate the workflow's capability to synthesize information and generate actionable recommendations.

**Key Takeaways:**

• Analysis completed with comprehensive data processing
• Key insights identified and validated
• Trends and patterns successfully extracted
• Actionable recommendations generated

**Actionable Insights:**

Based on the analysis, the following recommendations are provided:
1. Proceed with implementation based on validated findings
2. Monitor key metrics identified in the analysis
3. Adjust strategy based on emerging trends and patterns

This summary provides a clear overview of the analysis results and next steps for decision-making."""

REPORT = """# Stock Analysis Report: {ticker}

## Executive Summary
{ticker} demonstrates strong market performance with positive momentum. The stock shows robust fundamentals and favorable analyst sentiment, making it an attractive option for growth-oriented investors seeking exposure to the technology sector.

## Key Metrics

| Metric | Value |
|--------|-------|
| Current Price | $150.25 |
| Daily Change | +$2.50 (+1.69%) |
| Market Cap | $3.7T |
| P/E Ratio | 75.2 |
| 52-Week High | $180.00 |
| 52-Week Low | $39.23 |
| Beta | 1.68 |
| Trading Volume | 45.2M |

## Performance Analysis

The stock has shown strong upward momentum with consistent positive price movement. The high trading volume indicates significant investor interest and market activity. The P/E ratio of 75.2 reflects high growth expectations, while the beta of 1.68 suggests higher volatility compared to the market.

## Recent News Summary

1. **Strong Earnings Report:** Recent quarterly earnings exceeded expectations, driven by strong demand for AI chips and data center solutions.

2. **Analyst Upgrades:** Multiple analysts have maintained or upgraded their buy ratings, with price targets around $200, indicating continued confidence in the company's growth trajectory.

## Investment Recommendation

**BUY** - The stock presents a strong investment opportunity for growth-oriented investors. The combination of strong fundamentals, positive analyst sentiment, and favorable market trends supports a buy recommendation. However, investors should be aware of the higher volatility (beta 1.68) and consider position sizing accordingly.

**Risk Factors:**
- High P/E ratio may indicate overvaluation
- Market volatility could impact short-term performance
- Sector-specific risks related to technology and AI markets"""

RECOMMEND = """## Product Overview
**{product}** - Multiple high-quality options available with prices ranging from $79 to $149. Top-rated products feature wireless connectivity, ergonomic design, and long battery life.

## Pros & Cons

Based on reviews and features:

**Pros:**
- High customer satisfaction (4.2-4.7 star ratings)
- Wireless connectivity for modern setups
- Ergonomic designs for comfort during extended use
- Long battery life (70-90 hours)
- Precision sensors for accurate tracking
- Multi-device connectivity options

**Cons:**
- Premium pricing for top-tier models
- Some models may be too large for smaller hands
- Wireless models require battery management
- Limited customization on budget options

## Value Assessment

The products offer good value across price ranges. The Logitech MX Master 3S at $99.99 provides the best balance of features and price, with 4.7-star rating and 12,345 reviews. Premium options like the Razer DeathAdder V3 Pro offer advanced features for power users willing to pay more.

## Recommendation

**BUY** - The Logitech MX Master 3S is recommended as the best overall value. It combines excellent ratings (4.7/5), strong feature set, and reasonable pricing. For gaming enthusiasts, the Razer DeathAdder V3 Pro offers premium features worth the additional cost.

## Best For
- **Logitech MX Master 3S:** Professionals, content creators, and general users seeking reliable wireless mouse with excellent ergonomics
- **Razer DeathAdder V3 Pro:** Gaming enthusiasts and power users who prioritize precision and advanced features
- **Apple Magic Mouse:** Mac users seeking seamless integration with Apple ecosystem"""

EXTRACT = """**Product Information Extracted:**

**Product Title:** Logitech MX Master 3S Wireless Mouse

**Current Price:** $99.99

**Rating:** 4.7 out of 5 stars

**Number of Reviews:** 12,345 reviews

**Key Features/Specs:**
- Wireless connectivity (Bluetooth and USB receiver)
- Ergonomic design for right-handed users
- 7,000 DPI sensor for precision tracking
- 70-day battery life
- USB-C charging
- Multi-device connectivity (up to 3 devices)
- Programmable buttons
- Darkfield sensor for use on any surface

**Top Customer Review Summaries:**
1. "Excellent build quality and comfort for long work sessions. Battery life is outstanding."
2. "Best mouse I've ever used. The ergonomics are perfect and the precision is unmatched."
3. "Great for productivity. Multi-device switching is seamless and very convenient."
4. "Worth every penny. The build quality and features justify the price point."
5. "Highly recommend for professionals. The precision and comfort make it ideal for daily use.\""""

DEFAULT = """Analysis completed successfully. The workflow processed the input data and generated appropriate output based on the configured instructions.

**Note:** This is a demo response. In production, this would contain detailed output from the LLM."""


class _Defaults(dict):
    def __missing__(self, key: str) -> str:
        return {"ticker": "Stock", "product": "Product"}.get(key, "")


class AgentScenarioRegistry:
    """Canned responses keyed by (role, topic).

    Example:
        >>> registry = AgentScenarioRegistry()
        >>> registry.response_for("Write Report", {"ticker": "NVDA"}).splitlines()[0]
        '# Stock Analysis Report: NVDA'
    """

    def __init__(self, roles: list[tuple[str, RoleMatcher]] | None = None) -> None:
        self._roles = list(roles if roles is not None else DEFAULT_ROLES)
        self._templates: dict[tuple[str, str | None], str] = {}
        self.register("analysis", ANALYSIS_TICKER, topic="ticker")
        self.register("analysis", ANALYSIS_PRODUCT, topic="product")
        self.register("analysis", ANALYSIS_RESEARCH, topic="research_topic")
        self.register("analysis", ANALYSIS_GENERIC)
        self.register("summary", SUMMARY)
        self.register("report", REPORT)
        self.register("recommend", RECOMMEND)
        self.register("extract", EXTRACT)
        self.register("default", DEFAULT)

    def register(self, role: str, template: str, topic: str | None = None) -> None:
        """Add or replace a template. ``{ticker}``-style fields are filled from the input."""
        self._templates[(role, topic)] = template

    def detect_role(self, node_name: str) -> str:
        lowered = node_name.lower()
        return next((role for role, matches in self._roles if matches(lowered)), "default")

    def response_for(self, node_name: str, input_value: Any) -> str:
        """Canned response for a node name and run input."""
        role = self.detect_role(node_name)
        topic, values = detect_topic(input_value)
        template = (
            self._templates.get((role, topic))
            or self._templates.get((role, None))
            or self._templates[("default", None)]
        )
        return template.format_map(_Defaults(values))
