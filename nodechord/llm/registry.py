"""LLM Provider Registry.

Maps the provider half of a ``provider/model`` identifier to an adapter
factory. Keys are checked per call, so one registry serves every caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from nodechord.core.config import ProviderKeys
from nodechord.errors.exceptions import NoAPIKeyAvailableError
from nodechord.llm.base import BaseLLMProvider

DEFAULT_PROVIDER = "openai"

ProviderFactory = Callable[..., BaseLLMProvider]


def parse_model_identifier(identifier: str) -> tuple[str, str]:
    """Split ``provider/model`` on the first slash.

    Identifiers without a slash belong to the default provider (openai).

    Example:
        >>> parse_model_identifier("aimlapi/meta-llama/Llama-3")
        ('aimlapi', 'meta-llama/Llama-3')
        >>> parse_model_identifier("gpt-4o")
        ('openai', 'gpt-4o')
    """
    provider, sep, model = identifier.partition("/")
    if not sep:
        return DEFAULT_PROVIDER, identifier
    return provider, model


@dataclass
class ProviderInfo:
    """Information about a registered LLM provider."""

    name: str
    factory: ProviderFactory


class ProviderRegistry:
    """Registry for managing LLM provider adapters.

    Example:
        >>> registry = ProviderRegistry()
        >>> registry.register("openai", factory_fn)
        >>> provider = registry.create_provider("openai", "gpt-4o", keys)
    """

    def __init__(self) -> None:
        self._providers: dict[str, ProviderInfo] = {}

    def register(self, name: str, factory: ProviderFactory) -> None:
        """Register a provider factory.

        The factory is called as ``factory(model=..., api_key=..., keys=...,
        **kwargs)``.
        """
        self._providers[name] = ProviderInfo(name=name, factory=factory)

    def unregister(self, name: str) -> bool:
        """Remove a provider. Returns True if found."""
        return self._providers.pop(name, None) is not None

    def create_provider(
        self,
        name: str,
        model: str,
        keys: ProviderKeys,
        **kwargs: Any,
    ) -> BaseLLMProvider:
        """Create an adapter for a provider using this call's keys.

        Raises:
            NoAPIKeyAvailableError: If the provider is unknown or has no key.
        """
        info = self._providers.get(name)
        api_key = keys.for_provider(name)
        if info is None or not api_key:
            raise NoAPIKeyAvailableError(name)
        return info.factory(model=model, api_key=api_key, keys=keys, **kwargs)

    def list_providers(self) -> list[str]:
        """List all registered provider names."""
        return list(self._providers.keys())

    def get_provider_info(self, name: str) -> ProviderInfo | None:
        """Get provider info by name."""
        return self._providers.get(name)


_default_registry: ProviderRegistry | None = None


def get_registry() -> ProviderRegistry:
    """Get the default provider registry, creating it lazily with built-in providers."""
    global _default_registry
    if _default_registry is None:
        _default_registry = ProviderRegistry()
        _register_defaults(_default_registry)
    return _default_registry


def _register_defaults(registry: ProviderRegistry) -> None:
    """Register built-in providers with lazy imports."""

    def _create_anthropic(*, model: str, api_key: str, keys: ProviderKeys, **kwargs: Any) -> BaseLLMProvider:
        from nodechord.llm.anthropic import AnthropicProvider
        return AnthropicProvider(
            model=model,
            api_key=api_key,
            timeout=kwargs.get("timeout", 120.0),
            placeholders=keys.placeholders(),
        )

    def _create_openai(*, model: str, api_key: str, keys: ProviderKeys, **kwargs: Any) -> BaseLLMProvider:
        from nodechord.llm.openai import OpenAIProvider
        return OpenAIProvider(
            model=model,
            api_key=api_key,
            timeout=kwargs.get("timeout", 120.0),
            tool_client=kwargs.get("tool_client"),
        )

    def _create_groq(*, model: str, api_key: str, keys: ProviderKeys, **kwargs: Any) -> BaseLLMProvider:
        from nodechord.llm.groq import GroqProvider
        return GroqProvider(
            model=model,
            api_key=api_key,
            timeout=kwargs.get("timeout", 120.0),
            placeholders=keys.placeholders(),
            tool_client=kwargs.get("tool_client"),
        )

    def _create_gemini(*, model: str, api_key: str, keys: ProviderKeys, **kwargs: Any) -> BaseLLMProvider:
        from nodechord.llm.gemini import GeminiProvider
        return GeminiProvider(
            model=model,
            api_key=api_key,
            timeout=kwargs.get("timeout", 120.0),
        )

    def _create_aimlapi(*, model: str, api_key: str, keys: ProviderKeys, **kwargs: Any) -> BaseLLMProvider:
        from nodechord.llm.aimlapi import AIMLAPIProvider
        return AIMLAPIProvider(
            model=model,
            api_key=api_key,
            timeout=kwargs.get("timeout", 120.0),
        )

    registry.register("anthropic", _create_anthropic)
    registry.register("openai", _create_openai)
    registry.register("groq", _create_groq)
    registry.register("gemini", _create_gemini)
    registry.register("aimlapi", _create_aimlapi)
