"""
Configuration settings for the welcome service.

Uses Pydantic Settings to load environment variables for the HTTP listener,
the MongoDB connection, the startup seed record, and logging. Empty values are
treated as unset so that `PORT=` falls back to the default like an absent
variable does.
"""
from __future__ import annotations

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # HTTP
    host: str = Field("0.0.0.0", alias="HOST")
    port: int = Field(4000, alias="PORT")

    # Database
    mongo_uri: str = Field("mongodb://localhost:27017/test", alias="MONGO_URI")
    mongo_default_database: str = Field("test", alias="MONGO_DEFAULT_DATABASE")
    mongo_retry_delay_seconds: float = Field(5.0, alias="MONGO_RETRY_DELAY_SECONDS", ge=0)
    mongo_server_selection_timeout_ms: int = Field(
        30_000, alias="MONGO_SERVER_SELECTION_TIMEOUT_MS", gt=0
    )

    # Seed record
    seed_on_startup: bool = Field(True, alias="SEED_ON_STARTUP")
    seed_name: str = Field("Big Bill Brown", alias="SEED_NAME")
    seed_idempotent: bool = Field(False, alias="SEED_IDEMPOTENT")
    seed_timeout_seconds: float = Field(10.0, alias="SEED_TIMEOUT_SECONDS", gt=0)

    # Application
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        populate_by_name=True,
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
