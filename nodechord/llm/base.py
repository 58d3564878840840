"""Base LLM provider interface.

All provider adapters must implement this abstract base class.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from nodechord.core.types import LLMResponse, Message
from nodechord.protocols.mcp.types import ToolServerConfig


class BaseLLMProvider(ABC):
    """Abstract base class for LLM provider adapters.

    Each adapter keeps its provider's request/response translation to itself
    and hands back a normalized LLMResponse, so the agent executor never sees
    SDK-specific shapes. Adapters that run tool calls report them in
    ``LLMResponse.tool_calls``.

    Example:
        >>> class MyProvider(BaseLLMProvider):
        ...     async def complete(self, messages, **kwargs):
        ...         ...
    """

    supports_tools: bool = False

    @property
    @abstractmethod
    def model(self) -> str:
        """Return the model identifier."""
        ...

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name (e.g., 'openai', 'anthropic')."""
        ...

    @abstractmethod
    async def complete(
        self,
        messages: list[Message],
        *,
        tools: list[ToolServerConfig] | None = None,
        temperature: float = 0.7,
        max_tokens: int = 4096,
        **kwargs: Any,
    ) -> LLMResponse:
        """Generate a completion for the given messages.

        Args:
            messages: List of conversation messages.
            tools: Tool servers the model may call. Ignored by adapters
                without tool support.
            temperature: Sampling temperature (0.0-2.0).
            max_tokens: Maximum tokens to generate.
            **kwargs: Additional provider-specific parameters.

        Returns:
            LLMResponse containing the generated content and usage stats.

        Raises:
            RateLimitError: If rate limit is exceeded.
            AuthenticationError: If authentication fails.
            APIError: If the API returns an error.
            TimeoutError: If the request times out.
        """
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(model={self.model!r})"
