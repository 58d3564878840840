"""NodeChord exception hierarchy.

All exceptions inherit from NodeChordError for easy catching.
Each exception includes a `retryable` flag to indicate if the operation can be retried.
"""

from __future__ import annotations

from typing import Any


class NodeChordError(Exception):
    """Base exception for all NodeChord errors."""

    def __init__(self, message: str, *, retryable: bool = False) -> None:
        super().__init__(message)
        self.retryable = retryable


# Configuration Errors
class ConfigurationError(NodeChordError):
    """Configuration-related errors. Always surfaced, never retried."""

    def __init__(self, message: str) -> None:
        super().__init__(message, retryable=False)


class NoServerConfiguredError(ConfigurationError):
    """A remote-tool node has no resolvable tool server."""

    def __init__(self, node_id: str, server_id: str | None = None) -> None:
        if server_id:
            message = (
                f"No MCP servers configured for node '{node_id}': "
                f"could not resolve server '{server_id}'"
            )
        else:
            message = f"No MCP servers configured for node '{node_id}'"
        super().__init__(message)
        self.node_id = node_id
        self.server_id = server_id


class MissingCredentialsError(ConfigurationError):
    """No provider API keys were handed to the agent executor."""

    def __init__(self) -> None:
        super().__init__("API keys are required for agent execution")


class MissingAPIKeyError(ConfigurationError):
    """API key for a backend service is missing."""

    def __init__(self, provider: str) -> None:
        super().__init__(
            f"API key for '{provider}' is not configured. "
            f"Set the {provider.upper()}_API_KEY environment variable."
        )
        self.provider = provider


class NoAPIKeyAvailableError(ConfigurationError):
    """The requested model provider is unknown or has no key for this call."""

    def __init__(self, provider: str) -> None:
        super().__init__(f"No API key available for provider: {provider}")
        self.provider = provider


class MissingFieldError(ConfigurationError):
    """A required node field is missing."""

    def __init__(self, field: str, node_id: str | None = None) -> None:
        where = f" on node '{node_id}'" if node_id else ""
        super().__init__(f"Required field '{field}' is missing{where}")
        self.field = field
        self.node_id = node_id


# Upstream Errors
class UpstreamError(NodeChordError):
    """A remote dependency failed. May be retried."""

    def __init__(self, message: str, *, retryable: bool = True) -> None:
        super().__init__(message, retryable=retryable)


class HTTPError(UpstreamError):
    """Non-2xx response from an HTTP step."""

    def __init__(self, status: int, status_text: str, body: Any = None) -> None:
        super().__init__(
            f"HTTP request failed: HTTP {status}: {status_text}",
            retryable=status >= 500 or status == 429,
        )
        self.status = status
        self.status_text = status_text
        self.body = body


class HTTPRequestError(UpstreamError):
    """HTTP step could not complete the request at all."""

    def __init__(self, message: str) -> None:
        super().__init__(f"HTTP request failed: {message}")


class ToolServerError(UpstreamError):
    """A tool server call failed."""

    def __init__(self, message: str, *, server: str | None = None) -> None:
        super().__init__(message)
        self.server = server


class ToolServerNotSupportedError(ToolServerError):
    """No adapter exists for this named tool server."""

    def __init__(self, server: str, url: str | None) -> None:
        super().__init__(
            f'MCP server "{server}" execution not yet implemented. Server URL: {url}',
            server=server,
        )
        self.url = url
        self.retryable = False


class LLMError(UpstreamError):
    """Base class for LLM-related errors."""

    def __init__(
        self,
        message: str,
        *,
        provider: str,
        model: str | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message, retryable=retryable)
        self.provider = provider
        self.model = model


class RateLimitError(LLMError):
    """Rate limit exceeded. Can be retried after backoff."""

    def __init__(
        self,
        message: str,
        *,
        provider: str,
        model: str | None = None,
        retry_after: float | None = None,
    ) -> None:
        super().__init__(message, provider=provider, model=model, retryable=True)
        self.retry_after = retry_after


class AuthenticationError(LLMError):
    """Authentication failed. Cannot be retried without fixing credentials."""

    def __init__(self, message: str, *, provider: str) -> None:
        super().__init__(message, provider=provider, retryable=False)


class APIError(LLMError):
    """General API error. May be retried."""

    def __init__(
        self,
        message: str,
        *,
        provider: str,
        model: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, provider=provider, model=model, retryable=True)
        self.status_code = status_code


class TimeoutError(LLMError):
    """Request timed out. Can be retried."""

    def __init__(
        self,
        message: str,
        *,
        provider: str,
        model: str | None = None,
        timeout_seconds: float,
    ) -> None:
        super().__init__(message, provider=provider, model=model, retryable=True)
        self.timeout_seconds = timeout_seconds


# Agent Errors
class AgentExecutionError(NodeChordError):
    """Classified failure of an agent node, with user-facing guidance."""

    MISSING_API_KEY = "missing_api_key"
    RATE_LIMITED = "rate_limited"
    NO_PROVIDER_KEY = "no_provider_key"
    UNKNOWN = "unknown"

    def __init__(self, message: str, *, kind: str, node_id: str) -> None:
        super().__init__(message, retryable=kind == self.RATE_LIMITED)
        self.kind = kind
        self.node_id = node_id


class OutputFormatError(NodeChordError):
    """Declared structured output could not be parsed. Recovered locally."""

    def __init__(self, message: str) -> None:
        super().__init__(message, retryable=False)
