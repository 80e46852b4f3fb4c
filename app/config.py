"""Application configuration models."""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


AIEngine = Literal["gemini", "openrouter"]


class Settings(BaseSettings):
    """Settings loaded from environment variables or a .env file."""

    app_name: str = Field(default="Archive 001", alias="APP_NAME")
    server_host: str = Field(default="0.0.0.0", alias="HOST")
    server_port: int = Field(default=3000, alias="PORT")

    ai_engine: AIEngine = Field(default="gemini", alias="AI_ENGINE")

    gemini_api_key: str | None = Field(
        default=None,
        alias="GEMINI_API_KEY",
        validation_alias=AliasChoices("GEMINI_API_KEY", "API_KEY"),
    )
    gemini_model: str = Field(default="gemini-2.5-flash", alias="GEMINI_MODEL")
    gemini_api_url: HttpUrl = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        alias="GEMINI_API_URL",
    )

    openrouter_api_key: str | None = Field(
        default=None, alias="OPENROUTER_API_KEY"
    )
    openrouter_model: str = Field(
        default="google/gemini-2.5-flash", alias="OPENROUTER_MODEL"
    )
    openrouter_api_url: HttpUrl = Field(
        default="https://openrouter.ai/api/v1", alias="OPENROUTER_API_URL"
    )

    display_language: str = Field(default="Chinese", alias="DISPLAY_LANGUAGE")

    id_prefix: str = Field(default="M", alias="ID_PREFIX")
    id_width: int = Field(default=3, alias="ID_WIDTH", ge=1, le=8)
    seed_catalog: bool = Field(default=True, alias="SEED_CATALOG")
    long_press_ms: int = Field(default=600, alias="LONG_PRESS_MS", ge=100, le=5_000)

    environment: Literal["development", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )

    @field_validator("id_prefix", mode="before")
    @classmethod
    def _normalise_id_prefix(cls, value: object) -> str:
        """Keep identifier prefixes short, upper-case and alphanumeric."""

        if value is None:
            return "M"
        prefix = re.sub(r"[^A-Za-z0-9]+", "", str(value)).upper()
        if not prefix:
            raise ValueError("ID_PREFIX must contain at least one letter or digit")
        if prefix[-1].isdigit():
            raise ValueError("ID_PREFIX must not end with a digit")
        return prefix

    @field_validator("display_language", mode="before")
    @classmethod
    def _require_language(cls, value: object) -> str:
        language = str(value or "").strip()
        if not language:
            raise ValueError("DISPLAY_LANGUAGE must not be blank")
        return language

    @property
    def active_model(self) -> str:
        """Return the model name used by the configured engine."""

        if self.ai_engine == "openrouter":
            return self.openrouter_model
        return self.gemini_model

    @property
    def active_api_url(self) -> str:
        if self.ai_engine == "openrouter":
            return str(self.openrouter_api_url)
        return str(self.gemini_api_url)

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()  # type: ignore[call-arg]


settings = get_settings()
