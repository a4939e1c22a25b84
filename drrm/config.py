"""
Configuration and settings for the preparedness backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")

    # Hosted Postgres; when unset the embedded SQLite file is used instead.
    database_url: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("DATABASE_URL", "database_url")
    )

    # Embedded SQLite fallback
    sqlite_path: str = Field(
        default="./dev.sqlite",
        validation_alias=AliasChoices("DRRM_SQLITE_PATH", "sqlite_path"),
    )

    # The hosted schema is normally owned by migrations.
    create_hosted_schema: bool = Field(
        default=False,
        validation_alias=AliasChoices(
            "DRRM_CREATE_HOSTED_SCHEMA", "create_hosted_schema"
        ),
    )

    seed_on_startup: bool = Field(
        default=True,
        validation_alias=AliasChoices("DRRM_SEED_ON_STARTUP", "seed_on_startup"),
    )

    log_level: str = Field(
        default="INFO", validation_alias=AliasChoices("DRRM_LOG_LEVEL", "log_level")
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
