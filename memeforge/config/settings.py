"""Application settings using Pydantic BaseSettings."""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server
    environment: str = Field(default="development")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    log_file: Optional[str] = Field(default=None)
    api_prefix: str = Field(default="/api/ai")

    # CORS (applied to every response, including errors and streams)
    cors_allow_origin: str = Field(default="*")
    cors_allow_methods: str = Field(default="GET, POST, OPTIONS")
    cors_allow_headers: str = Field(default="Content-Type")
    max_request_bytes: int = Field(default=1048576)

    # Upstream provider (OpenAI-compatible REST API)
    openai_api_key: str = Field(default="")
    openai_org_id: str = Field(default="")
    openai_base_url: str = Field(default="https://api.openai.com/v1")
    provider_timeout_seconds: float = Field(default=60, gt=0)
    provider_max_retries: int = Field(default=1, ge=0)

    # Text model
    gpt_model: str = Field(default="gpt-4-turbo-preview")

    # Image model
    dalle_model: str = Field(default="dall-e-3")
    dalle_size: str = Field(default="1024x1024")
    dalle_quality: str = Field(default="standard")

    # Local admission control (sliding window shared by all AI endpoints)
    rate_limit_max_requests: int = Field(default=10, ge=1)
    rate_limit_window_ms: int = Field(default=60000, ge=1)

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    @property
    def cors_headers(self) -> dict[str, str]:
        """Permissive CORS headers stamped on every response."""
        return {
            "Access-Control-Allow-Origin": self.cors_allow_origin,
            "Access-Control-Allow-Methods": self.cors_allow_methods,
            "Access-Control-Allow-Headers": self.cors_allow_headers,
        }

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return upper

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        vv = (v or "").strip().lower()
        if vv not in {"development", "staging", "production"}:
            raise ValueError("ENVIRONMENT must be one of: development, staging, production")
        return vv

    @field_validator("api_prefix")
    @classmethod
    def validate_api_prefix(cls, v: str) -> str:
        vv = (v or "").strip().rstrip("/")
        if vv and not vv.startswith("/"):
            raise ValueError("API_PREFIX must start with '/'")
        return vv

    @field_validator("openai_base_url")
    @classmethod
    def validate_openai_base_url(cls, v: str) -> str:
        return (v or "").strip().rstrip("/")

    @field_validator("dalle_model")
    @classmethod
    def validate_dalle_model(cls, v: str) -> str:
        if v not in {"dall-e-2", "dall-e-3"}:
            raise ValueError("DALLE_MODEL must be one of: dall-e-2, dall-e-3")
        return v

    @field_validator("dalle_size")
    @classmethod
    def validate_dalle_size(cls, v: str) -> str:
        if v not in {"1024x1024", "1792x1024", "1024x1792"}:
            raise ValueError("DALLE_SIZE must be one of: 1024x1024, 1792x1024, 1024x1792")
        return v

    @field_validator("dalle_quality")
    @classmethod
    def validate_dalle_quality(cls, v: str) -> str:
        vv = (v or "").strip().lower()
        if vv not in {"standard", "hd"}:
            raise ValueError("DALLE_QUALITY must be one of: standard, hd")
        return vv


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
