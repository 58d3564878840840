"""LLM provider adapters for NodeChord."""

from nodechord.llm.base import BaseLLMProvider
from nodechord.llm.registry import (
    ProviderInfo,
    ProviderRegistry,
    get_registry,
    parse_model_identifier,
)

__all__ = [
    "BaseLLMProvider",
    "ProviderInfo",
    "ProviderRegistry",
    "get_registry",
    "parse_model_identifier",
]


def __getattr__(name: str):
    """Lazy import of SDK-backed providers."""
    if name == "AnthropicProvider":
        from nodechord.llm.anthropic import AnthropicProvider
        return AnthropicProvider
    if name == "OpenAIProvider":
        from nodechord.llm.openai import OpenAIProvider
        return OpenAIProvider
    if name == "GroqProvider":
        from nodechord.llm.groq import GroqProvider
        return GroqProvider
    if name == "GeminiProvider":
        from nodechord.llm.gemini import GeminiProvider
        return GeminiProvider
    if name == "AIMLAPIProvider":
        from nodechord.llm.aimlapi import AIMLAPIProvider
        return AIMLAPIProvider
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
