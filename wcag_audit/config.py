"""Configuration management for the accessibility auditor."""

from dataclasses import dataclass, field
from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CORS_PROXIES = [
    "https://api.allorigins.win/raw?url=",
    "https://api.codetabs.com/v1/proxy?quest=",
    "https://proxy.cors.sh/",
]


@dataclass
class RetrieverConfig:
    """Knobs for the resilient page retriever."""

    timeout_seconds: float = 10.0
    max_retries: int = 3
    backoff_base_seconds: float = 1.0
    proxies: list[str] = field(default_factory=lambda: list(DEFAULT_CORS_PROXIES))
    user_agent: str = "wcag-audit/0.1"

    @property
    def max_attempts(self) -> int:
        """Hard ceiling on attempts: one direct plus every proxy retry."""
        return 1 + len(self.proxies) * self.max_retries


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Retrieval
    fetch_timeout_seconds: float = Field(10.0, description="Timeout for a single retrieval attempt")
    max_retries: int = Field(3, description="Retries per CORS proxy")
    backoff_base_seconds: float = Field(1.0, description="Backoff unit; delay is base * 2**attempt")
    cors_proxies: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CORS_PROXIES),
        description="Ordered proxy prefixes tried after the direct fetch fails",
    )
    user_agent: str = Field("wcag-audit/0.1", description="User-Agent header for page retrieval")

    # Evaluation
    evaluation_timeout_seconds: float = Field(30.0, description="Timeout for the rule engine run")

    # Logging
    log_level: str = Field("INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    log_json: bool = Field(False, description="Emit logs as JSON")

    # Text-generation assistant
    anthropic_api_key: Optional[SecretStr] = Field(None, description="Anthropic API key for remediation prose")
    recommendation_model: str = Field("claude-haiku-4-5", description="Model for per-issue recommendations")
    recommendation_max_tokens: int = Field(300, description="Response token limit for recommendations")

    def retriever_config(self) -> RetrieverConfig:
        """Build the retriever configuration from these settings."""
        return RetrieverConfig(
            timeout_seconds=self.fetch_timeout_seconds,
            max_retries=self.max_retries,
            backoff_base_seconds=self.backoff_base_seconds,
            proxies=list(self.cors_proxies),
            user_agent=self.user_agent,
        )


def get_settings() -> Settings:
    """Get application settings."""
    return Settings()
