"""Application configuration from environment variables."""

from __future__ import annotations

from enum import Enum
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class LLMProvider(str, Enum):
    """Supported text-completion backends."""

    ANTHROPIC = "anthropic"
    OPENAI = "openai"
    OPENROUTER = "openrouter"


DEFAULT_MODELS = {
    LLMProvider.ANTHROPIC: "claude-sonnet-4-20250514",
    LLMProvider.OPENAI: "gpt-4o",
    LLMProvider.OPENROUTER: "anthropic/claude-sonnet-4",
}

DEFAULT_BASE_URLS = {
    LLMProvider.ANTHROPIC: "https://api.anthropic.com",
    LLMProvider.OPENAI: "https://api.openai.com/v1",
    LLMProvider.OPENROUTER: "https://openrouter.ai/api/v1",
}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # LLM
    llm_provider: LLMProvider = Field(default=LLMProvider.ANTHROPIC, alias="LLM_PROVIDER")
    llm_model: str = Field(default="", alias="LLM_MODEL")
    llm_api_key: str = Field(default="", alias="LLM_API_KEY")
    llm_base_url: str = Field(default="", alias="LLM_BASE_URL")
    llm_max_tokens: int = Field(default=8192, alias="LLM_MAX_TOKENS")
    llm_timeout: float = Field(default=120.0, alias="LLM_TIMEOUT")

    # Provider-specific key fallbacks
    anthropic_api_key: str = Field(default="", alias="ANTHROPIC_API_KEY")
    openai_api_key: str = Field(default="", alias="OPENAI_API_KEY")
    openrouter_api_key: str = Field(default="", alias="OPENROUTER_API_KEY")

    # Sources
    github_token: str = Field(default="", alias="GITHUB_TOKEN")
    collector_timeout: float = Field(default=60.0, alias="COLLECTOR_TIMEOUT")
    http_timeout: float = Field(default=30.0, alias="HTTP_TIMEOUT")
    user_agent: str = Field(default="solscout/0.1.0", alias="HTTP_USER_AGENT")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name": True,
    }

    @property
    def effective_model(self) -> str:
        return self.llm_model or DEFAULT_MODELS[self.llm_provider]

    @property
    def effective_base_url(self) -> str:
        return (self.llm_base_url or DEFAULT_BASE_URLS[self.llm_provider]).rstrip("/")

    @property
    def effective_api_key(self) -> str:
        """Explicit ``LLM_API_KEY`` first, then the provider's own variable."""
        if self.llm_api_key:
            return self.llm_api_key
        fallbacks = {
            LLMProvider.ANTHROPIC: self.anthropic_api_key,
            LLMProvider.OPENAI: self.openai_api_key,
            LLMProvider.OPENROUTER: self.openrouter_api_key,
        }
        return fallbacks[self.llm_provider]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def reset_settings_cache() -> None:
    """Clear cached settings (useful in tests)."""
    get_settings.cache_clear()
