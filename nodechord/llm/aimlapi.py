"""AI/ML API provider (OpenAI-compatible)."""

from __future__ import annotations

from typing import Any

from nodechord.core.types import LLMResponse, Message, MessageRole
from nodechord.llm.openai import OpenAIProvider
from nodechord.protocols.mcp.types import ToolServerConfig

AIMLAPI_BASE_URL = "https://api.aimlapi.com/v1"
DEFAULT_MODEL = "llama-3.1-70b"

# Friendly names to the catalog names AI/ML API serves
MODEL_ALIASES: dict[str, str] = {
    "llama-3.1-70b": "meta-llama/Meta-Llama-3.1-70B-Instruct-Turbo",
    "llama-3.1-8b": "meta-llama/Meta-Llama-3.1-8B-Instruct-Turbo",
    "flux-1.1-pro": "black-forest-labs/FLUX.1.1-pro",
}

FIXED_TEMPERATURE = 0.7
FIXED_MAX_TOKENS = 4096


def resolve_model(model: str) -> str:
    """Map a friendly model name to its AI/ML API identifier."""
    if model.startswith("aimlapi/"):
        model = model[len("aimlapi/"):]
    return MODEL_ALIASES.get(model, model)


class AIMLAPIProvider(OpenAIProvider):
    """AI/ML API provider.

    Sampling is fixed at temperature 0.7 and 4096 max tokens. Tool servers
    are not supported and are ignored.

    Example:
        >>> provider = AIMLAPIProvider(model="llama-3.1-8b", api_key="...")
        >>> provider.model
        'meta-llama/Meta-Llama-3.1-8B-Instruct-Turbo'
    """

    supports_tools = False

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        api_key: str | None = None,
        base_url: str = AIMLAPI_BASE_URL,
        timeout: float = 120.0,
    ) -> None:
        super().__init__(
            model=resolve_model(model),
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
        )

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "aimlapi"

    async def complete(
        self,
        messages: list[Message],
        *,
        tools: list[ToolServerConfig] | None = None,
        temperature: float = FIXED_TEMPERATURE,
        max_tokens: int = FIXED_MAX_TOKENS,
        **kwargs: Any,
    ) -> LLMResponse:
        response = await self._create(
            self._convert_messages(messages),
            temperature=FIXED_TEMPERATURE,
            max_tokens=FIXED_MAX_TOKENS,
            **kwargs,
        )
        return self._convert_response(response)

    def _convert_messages(self, messages: list[Message]) -> list[dict[str, Any]]:
        # Every non-user turn is sent as an assistant turn
        return [
            {
                "role": "user" if msg.role == MessageRole.USER else "assistant",
                "content": msg.content,
            }
            for msg in messages
        ]
