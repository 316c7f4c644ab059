"""Runtime configuration based on environment variables."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AnyHttpUrl, BaseModel, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SEARCH_URL = "http://search.twitter.com/search.json"


class SearchApiSettings(BaseModel):
    base_url: AnyHttpUrl = Field(
        default=DEFAULT_SEARCH_URL,
        description="Search endpoint; the q parameter is appended to it.",
    )
    request_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        le=600,
        description="None keeps the HTTP transport default.",
    )
    user_agent: str = Field(default="tweetsearch/0.1", min_length=1)


class ControllerSettings(BaseModel):
    discard_stale_results: bool = Field(
        default=True,
        description="Only the latest submitted search may update the result list.",
    )


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="TWEETSEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    environment: Literal["dev", "staging", "prod"] = "dev"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    telegram_token: SecretStr
    telegram_proxy: str | None = None

    search: SearchApiSettings = Field(default_factory=SearchApiSettings)
    controller: ControllerSettings = Field(default_factory=ControllerSettings)


@lru_cache
def get_settings() -> AppSettings:
    """Return cached settings instance."""

    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "ControllerSettings",
    "DEFAULT_SEARCH_URL",
    "SearchApiSettings",
    "get_settings",
]
