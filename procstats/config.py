"""Application configuration loading via Pydantic settings."""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Runtime configuration sourced from environment variables."""

    domain: str = Field(default="procstats", alias="PROCSTATS_DOMAIN")
    management_enabled: bool = Field(default=True, alias="PROCSTATS_MANAGEMENT_ENABLED")
    strict_parents: bool = Field(default=False, alias="PROCSTATS_STRICT_PARENTS")
    log_level: str = Field(default="INFO", alias="PROCSTATS_LOG_LEVEL")
    http_timing_enabled: bool = Field(default=True, alias="PROCSTATS_HTTP_TIMING")
    host: str = Field(default="127.0.0.1", alias="PROCSTATS_HOST")
    port: int = Field(default=8000, ge=1, le=65535, alias="PROCSTATS_PORT")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name": True,
    }

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level '{value}'")
        return level


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()
