from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    """Application settings loaded from environment variables with validation."""

    model_config = SettingsConfigDict(
        env_file=(str(PROJECT_ROOT / ".env"), ".env"),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        populate_by_name=True,
    )

    app_name: str = Field(default="Humanizer API", alias="APP_NAME")
    app_env: Literal["development", "staging", "production", "test"] = Field(
        default="production",
        alias="APP_ENV",
    )
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    api_prefix: str = Field(default="/api", alias="API_PREFIX")

    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        alias="CORS_ORIGINS",
    )

    anthropic_api_key: SecretStr | None = Field(default=None, alias="ANTHROPIC_API_KEY")
    anthropic_model: str = Field(default="claude-3-5-sonnet-latest", alias="ANTHROPIC_MODEL")
    llm_timeout_seconds: float = Field(default=60.0, gt=0, le=600, alias="LLM_TIMEOUT_SECONDS")

    lemon_squeezy_api_key: SecretStr | None = Field(default=None, alias="LEMON_SQUEEZY_API_KEY")
    lemon_squeezy_store_id: str | None = Field(default=None, alias="LEMON_SQUEEZY_STORE_ID")
    lemon_squeezy_webhook_secret: SecretStr | None = Field(
        default=None,
        alias="LEMON_SQUEEZY_WEBHOOK_SECRET",
    )
    http_timeout_seconds: float = Field(default=30.0, gt=0, le=300, alias="HTTP_TIMEOUT_SECONDS")

    # Read-only or ephemeral filesystems (Vercel and similar) cannot keep a data dir.
    serverless: bool = Field(
        default=False,
        validation_alias=AliasChoices("SERVERLESS", "VERCEL"),
    )
    data_dir: Path = Field(default=PROJECT_ROOT / "data", alias="DATA_DIR")
    storage_backend: Literal["auto", "sqlite", "json", "memory"] = Field(
        default="auto",
        alias="STORAGE_BACKEND",
    )

    free_word_limit: int = Field(default=100, ge=0, alias="FREE_WORD_LIMIT")

    @field_validator("api_prefix")
    @classmethod
    def validate_api_prefix(cls, value: str) -> str:
        """Ensure the API prefix starts with a slash and has no trailing slash."""
        normalized = value.strip()
        if not normalized.startswith("/"):
            raise ValueError("API_PREFIX must start with '/'.")
        if len(normalized) > 1 and normalized.endswith("/"):
            normalized = normalized.rstrip("/")
        return normalized

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, value: str | list[str]) -> list[str]:
        """Support comma-separated CORS origins from environment variables."""
        if isinstance(value, str):
            if not value.strip():
                return []
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("serverless", mode="before")
    @classmethod
    def parse_serverless_flag(cls, value: object) -> object:
        # Vercel sets VERCEL=1; treat any non-empty value other than an explicit false as on.
        if isinstance(value, str):
            return value.strip().lower() not in ("", "0", "false", "no", "off")
        return value

    @property
    def webhook_secret(self) -> str:
        if self.lemon_squeezy_webhook_secret is None:
            return ""
        return self.lemon_squeezy_webhook_secret.get_secret_value()

    @property
    def payments_configured(self) -> bool:
        return bool(
            self.lemon_squeezy_api_key
            and self.lemon_squeezy_api_key.get_secret_value()
            and self.lemon_squeezy_store_id
        )


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""
    return Settings()


settings: Settings = get_settings()
