"""Runtime settings using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_config_path() -> Path:
    return Path.home() / ".mail.json"


class Settings(BaseSettings):
    """Settings loaded from ``MAILPULL_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="MAILPULL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Configuration file with accounts and certificates
    config_path: Path = Field(default_factory=_default_config_path)

    # Logging
    log_level: str = "WARNING"

    # Fetching
    persist_mode: Literal["message", "cycle"] = "message"
    timeout: float | None = None
    keep_going: bool = False


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
