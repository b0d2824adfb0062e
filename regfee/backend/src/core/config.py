"""Application configuration utilities."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PROMPT_PATH = Path(__file__).resolve().parents[1] / "prompts" / "fee_assistant.md"


class Settings(BaseSettings):
    """Settings derived from environment variables."""

    database_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("REGFEE_DATABASE_URL", "DATABASE_URL"),
    )
    database_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("REGFEE_DATABASE_KEY", "DATABASE_PASSWORD"),
    )
    openai_api_key: str | None = Field(default=None, alias="OPENAI_API_KEY")
    openai_model: str = Field(default="gpt-4o-mini", alias="OPENAI_MODEL")
    system_prompt_path: str = Field(
        default=str(DEFAULT_PROMPT_PATH), alias="ASSISTANT_PROMPT_PATH"
    )
    cors_origins: list[str] = Field(default_factory=lambda: ["*"], alias="CORS_ORIGINS")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()


__all__ = ["Settings", "get_settings"]
