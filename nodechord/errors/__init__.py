"""Error types for NodeChord."""

from nodechord.errors.exceptions import (
    AgentExecutionError,
    APIError,
    AuthenticationError,
    ConfigurationError,
    HTTPError,
    HTTPRequestError,
    LLMError,
    MissingAPIKeyError,
    MissingCredentialsError,
    MissingFieldError,
    NoAPIKeyAvailableError,
    NodeChordError,
    NoServerConfiguredError,
    OutputFormatError,
    RateLimitError,
    TimeoutError,
    ToolServerError,
    ToolServerNotSupportedError,
    UpstreamError,
)

__all__ = [
    "NodeChordError",
    "ConfigurationError",
    "NoServerConfiguredError",
    "MissingCredentialsError",
    "MissingAPIKeyError",
    "NoAPIKeyAvailableError",
    "MissingFieldError",
    "UpstreamError",
    "HTTPError",
    "HTTPRequestError",
    "ToolServerError",
    "ToolServerNotSupportedError",
    "LLMError",
    "RateLimitError",
    "AuthenticationError",
    "APIError",
    "TimeoutError",
    "AgentExecutionError",
    "OutputFormatError",
]
