"""Helpers shared by the SDK-backed adapters."""

from __future__ import annotations

from typing import Any

from nodechord.errors.exceptions import (
    APIError,
    AuthenticationError,
    RateLimitError,
    TimeoutError,
)


def field_of(obj: Any, name: str, default: Any = None) -> Any:
    """Read a field from an SDK object or a plain dict."""
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


def raise_openai_error(error: Exception, *, provider: str, model: str, timeout: float) -> None:
    """Convert errors raised by the openai SDK to NodeChord errors."""
    import openai

    if isinstance(error, openai.RateLimitError):
        raise RateLimitError(str(error), provider=provider, model=model) from error
    elif isinstance(error, openai.AuthenticationError):
        raise AuthenticationError(str(error), provider=provider) from error
    elif isinstance(error, openai.APITimeoutError):
        raise TimeoutError(
            str(error), provider=provider, model=model, timeout_seconds=timeout
        ) from error
    elif isinstance(error, openai.APIError):
        raise APIError(
            str(error),
            provider=provider,
            model=model,
            status_code=getattr(error, "status_code", None),
        ) from error
    raise error
