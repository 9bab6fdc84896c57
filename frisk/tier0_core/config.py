"""
frisk.tier0_core.config
────────────────────────
Typed configuration with env layering. Reads from .env → environment
variables. All fields are typed via Pydantic.

Minimal stack: pydantic-settings + python-dotenv
"""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class FriskConfig(BaseSettings):
    """
    Typed frisk configuration.
    Env vars are prefixed with FRISK_ unless overridden.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Application ───────────────────────────────────────────────────────────
    environment: str = Field(default="development", alias="APP_ENV")

    # ── Validation ────────────────────────────────────────────────────────────
    strict: bool = Field(default=False, alias="FRISK_STRICT")
    max_schema_depth: int = Field(default=32, ge=1, alias="FRISK_MAX_SCHEMA_DEPTH")

    # ── Logging ───────────────────────────────────────────────────────────────
    log_level: str = Field(default="INFO", alias="FRISK_LOG_LEVEL")
    log_format: str = Field(default="json", alias="FRISK_LOG_FORMAT")

    # ── Error reporting ───────────────────────────────────────────────────────
    error_backend: str = Field(default="none", alias="FRISK_ERROR_BACKEND")

    @field_validator("environment")
    @classmethod
    def validate_env(cls, v: str) -> str:
        allowed = {"development", "staging", "production", "test"}
        if v.lower() not in allowed:
            raise ValueError(f"environment must be one of {allowed}, got {v!r}")
        return v.lower()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        if v.lower() not in {"json", "console"}:
            raise ValueError(f"log_format must be 'json' or 'console', got {v!r}")
        return v.lower()

    @property
    def is_test(self) -> bool:
        return self.environment == "test"


@lru_cache(maxsize=1)
def get_config() -> FriskConfig:
    """
    Return the singleton frisk config. Cached after first call.
    Call _reset_config() in tests to pick up new env vars.
    """
    return FriskConfig()


def _reset_config() -> None:
    """For tests: clear the config cache."""
    get_config.cache_clear()


__all__ = ["FriskConfig", "get_config"]
