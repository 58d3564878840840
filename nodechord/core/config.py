"""Engine configuration using Pydantic Settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


class EngineSettings(BaseSettings):
    """Engine settings loaded from environment variables."""

    # Degraded mode
    use_fallback_data: bool = False
    demo_mode: bool = True

    # Deterministic agent responses (JSON object or plain string)
    mock_agent_response: str | None = None

    # Web research backend
    firecrawl_api_key: str = ""
    firecrawl_base_url: str = "https://api.firecrawl.dev"

    # Timeouts (seconds) and LLM defaults
    http_timeout: float = 30.0
    tool_call_timeout: float = 60.0
    llm_timeout: float = 120.0
    llm_max_tokens: int = 4096
    default_model: str = "anthropic/claude-sonnet-4-5-20250929"

    # Logging
    log_level: str = "info"

    @property
    def fallback_enabled(self) -> bool:
        """Fallback is on unless DEMO_MODE=false, and USE_FALLBACK_DATA=true forces it on."""
        return self.use_fallback_data or self.demo_mode

    model_config = {"env_prefix": "", "case_sensitive": False}


@lru_cache
def get_settings() -> EngineSettings:
    """Get cached engine settings."""
    return EngineSettings()


class ProviderKeys(BaseModel):
    """API keys handed to a single agent call.

    Keys travel by value with each call; executors do not keep them.

    Example:
        >>> keys = ProviderKeys(anthropic="sk-ant-...", firecrawl="fc-...")
        >>> keys.for_provider("anthropic")
        'sk-ant-...'
    """

    anthropic: str | None = Field(None, repr=False)
    openai: str | None = Field(None, repr=False)
    groq: str | None = Field(None, repr=False)
    gemini: str | None = Field(None, repr=False)
    aimlapi: str | None = Field(None, repr=False)
    firecrawl: str | None = Field(None, repr=False)

    def for_provider(self, provider: str) -> str | None:
        """Key for a provider name, or None."""
        return getattr(self, provider, None) if provider in type(self).model_fields else None

    def placeholders(self) -> dict[str, str]:
        """Map of ``NAME_API_KEY`` placeholder names to available keys."""
        return {
            f"{name.upper()}_API_KEY": value
            for name, value in self.model_dump().items()
            if value
        }
