"""Google Gemini LLM provider.

This provider uses httpx against the ``generateContent`` REST endpoint.
The conversation is flattened into a single prompt; tool servers are not
supported.
"""

from __future__ import annotations

from typing import Any

import httpx

from nodechord.core.types import LLMResponse, Message, MessageRole, Usage
from nodechord.errors.exceptions import (
    APIError,
    AuthenticationError,
    MissingAPIKeyError,
    RateLimitError,
    TimeoutError,
)
from nodechord.llm.base import BaseLLMProvider
from nodechord.protocols.mcp.types import ToolServerConfig

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-2.5-flash"

# Retired names are served by the current flash model
MODEL_ALIASES: dict[str, str] = {
    "gemini-1.5-flash": "gemini-2.5-flash",
    "gemini-1.5-pro": "gemini-2.5-flash",
    "gemini-2.5-flash": "gemini-2.5-flash",
}


def resolve_model(model: str) -> str:
    """Normalize a Gemini model name.

    Strips the ``gemini/`` routing prefix, applies the alias table, then strips
    the ``models/`` resource prefix.

    Example:
        >>> resolve_model("gemini/gemini-1.5-pro")
        'gemini-2.5-flash'
    """
    model = model.replace("gemini/", "", 1)
    model = MODEL_ALIASES.get(model, model)
    return model.replace("models/", "", 1)


def flatten_messages(messages: list[Message]) -> str:
    """Combine a conversation into one prompt.

    User turns are kept verbatim, assistant turns are prefixed with
    ``Assistant: `` and turns are separated by blank lines.
    """
    parts = []
    for msg in messages:
        if msg.role == MessageRole.ASSISTANT:
            parts.append(f"Assistant: {msg.content}")
        else:
            parts.append(msg.content)
    return "\n\n".join(parts)


class GeminiProvider(BaseLLMProvider):
    """Google Gemini LLM provider.

    Example:
        >>> provider = GeminiProvider(model="gemini-1.5-flash", api_key="AIza...")
        >>> provider.model
        'gemini-2.5-flash'
    """

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        api_key: str | None = None,
        base_url: str = GEMINI_BASE_URL,
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize Gemini provider.

        Args:
            model: Model name; friendly aliases are remapped.
            api_key: Google AI Studio API key.
            base_url: REST API base URL.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport (used by tests).
        """
        self._model = resolve_model(model)
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def _require_api_key(self) -> str:
        """Ensure API key is available."""
        if not self._api_key:
            raise MissingAPIKeyError("gemini")
        return self._api_key

    @property
    def model(self) -> str:
        """Return the model identifier."""
        return self._model

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "gemini"

    async def complete(
        self,
        messages: list[Message],
        *,
        tools: list[ToolServerConfig] | None = None,
        temperature: float = 0.7,
        max_tokens: int = 4096,
        **kwargs: Any,
    ) -> LLMResponse:
        """Generate a completion using Gemini.

        Raises:
            MissingAPIKeyError: If API key is not set.
            AuthenticationError: If API key is invalid.
            RateLimitError: If the quota is exhausted.
            APIError: If Gemini API returns an error.
            TimeoutError: If the request times out.
        """
        url = f"{self._base_url}/models/{self._model}:generateContent"
        payload: dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": flatten_messages(messages)}]}],
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": max_tokens,
            },
        }
        headers = {
            "x-goog-api-key": self._require_api_key(),
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(url, json=payload, headers=headers)
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException as e:
            raise TimeoutError(
                f"Request to Gemini timed out after {self._timeout}s",
                provider="gemini",
                model=self._model,
                timeout_seconds=self._timeout,
            ) from e
        except httpx.HTTPStatusError as e:
            self._handle_error(e)
        except httpx.HTTPError as e:
            raise APIError(
                f"Failed to connect to Gemini API at {self._base_url}: {e}",
                provider="gemini",
                model=self._model,
            ) from e

        return self._convert_response(data)

    def _convert_response(self, data: dict[str, Any]) -> LLMResponse:
        candidates = data.get("candidates") or [{}]
        candidate = candidates[0]
        parts = (candidate.get("content") or {}).get("parts") or []
        text = "".join(part.get("text", "") for part in parts)

        metadata = data.get("usageMetadata") or {}
        return LLMResponse(
            content=text,
            model=data.get("modelVersion") or self._model,
            usage=Usage.of(
                metadata.get("promptTokenCount"),
                metadata.get("candidatesTokenCount"),
                metadata.get("totalTokenCount"),
            ),
            finish_reason=(candidate.get("finishReason") or "stop").lower(),
            raw_response=data,
        )

    def _handle_error(self, error: httpx.HTTPStatusError) -> None:
        """Handle HTTP errors from Gemini API.

        Raises:
            AuthenticationError: For 401/403 errors.
            RateLimitError: For 429 errors.
            APIError: For all other HTTP errors.
        """
        status_code = error.response.status_code
        error_text = error.response.text

        if status_code in (401, 403):
            raise AuthenticationError(
                "Invalid or missing API key. Get a key at https://aistudio.google.com/app/apikey",
                provider="gemini",
            ) from error
        if status_code == 429:
            raise RateLimitError(
                f"Gemini rate limit exceeded (429): {error_text}",
                provider="gemini",
                model=self._model,
            ) from error

        raise APIError(
            f"Gemini API error: {status_code} - {error_text}",
            provider="gemini",
            model=self._model,
            status_code=status_code,
        ) from error
