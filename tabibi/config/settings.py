"""Application settings using Pydantic BaseSettings."""

import logging
from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Tabibi AI Assistant"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        upper = v.upper()
        if upper not in _VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {_VALID_LOG_LEVELS}, got '{v}'")
        return upper

    @model_validator(mode="after")
    def validate_temperatures(self) -> "Settings":
        for field_name in (
            "planning_temperature",
            "reading_temperature",
            "viz_temperature",
            "building_temperature",
        ):
            value = getattr(self, field_name)
            if not 0.0 <= value <= 2.0:
                raise ValueError(f"{field_name} must be between 0 and 2, got {value}")
        return self

    @model_validator(mode="after")
    def validate_positive_limits(self) -> "Settings":
        for field_name in (
            "provider_timeout",
            "planning_max_tokens",
            "reading_max_tokens",
            "viz_max_tokens",
            "building_max_tokens",
            "building_fallback_max_tokens",
            "analysis_excerpt_chars",
            "analysis_fallback_excerpt_chars",
            "analysis_static_excerpt_chars",
            "specific_row_limit",
            "context_row_limit",
            "supabase_timeout",
        ):
            value = getattr(self, field_name)
            if value <= 0:
                raise ValueError(f"{field_name} must be positive, got {value}")
        return self

    @model_validator(mode="after")
    def warn_wildcard_origins(self) -> "Settings":
        if self.allowed_origins == ["*"]:
            logging.getLogger(__name__).warning(
                "allowed_origins is set to ['*'], consider restricting in production"
            )
        return self

    # Fast provider (Cerebras, OpenAI-compatible)
    cerebras_api_key: str | None = None
    cerebras_base_url: str = "https://api.cerebras.ai/v1"
    fast_model: str = "llama-3.3-70b"
    fast_max_tokens_param: str = "max_completion_tokens"

    # Build provider (Groq, OpenAI-compatible)
    groq_api_key: str | None = None
    groq_base_url: str = "https://api.groq.com/openai/v1"
    build_model: str = "llama-3.3-70b-versatile"
    build_max_tokens_param: str = "max_tokens"

    # Deep-analysis provider (OpenRouter, raw HTTP)
    openrouter_api_key: str | None = None
    openrouter_api_url: str = "https://openrouter.ai/api/v1/chat/completions"
    deep_model: str = "deepseek/deepseek-chat"
    openrouter_referer: str = "https://tabibi.app"
    openrouter_title: str = "Tabibi AI"

    provider_timeout: float = 60.0

    # Planning phase
    planning_temperature: float = 0.3
    planning_max_tokens: int = 1024

    # Reading phase
    reading_temperature: float = 0.5
    reading_max_tokens: int = 1000

    # Visualization phase
    viz_temperature: float = 0.3
    viz_max_tokens: int = 1024

    # Building phase
    building_temperature: float = 0.7
    building_max_tokens: int = 1000
    building_fallback_max_tokens: int = 1500
    analysis_excerpt_chars: int = 500
    analysis_fallback_excerpt_chars: int = 300
    analysis_static_excerpt_chars: int = 200

    # Data fetching phase
    specific_row_limit: int = 50

    # Supabase
    supabase_url: str = ""
    supabase_anon_key: str = ""
    supabase_timeout: float = 15.0
    context_tables: list[str] = ["patients", "appointments", "visits", "financial_records"]
    context_row_limit: int = 100

    # Session logs (markdown per phase)
    session_logs_enabled: bool = False
    session_log_dir: str | None = None

    # CORS
    allowed_origins: list[str] = ["*"]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
