# src/config/settings.py — v2
"""Typed process configuration loaded from .env via pydantic-settings.

Single source of truth for deployment-specific settings: Redis
connection, key prefix, global cache policy defaults and logging.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from rfccache.cache.models import RedisOptions


class ConfigurationError(Exception):
    """Raised when configuration is malformed or internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Store ===
    cache_key_prefix: str = "rfccache:"
    cache_redis_url: str = ""
    cache_redis_host: str = "localhost"
    cache_redis_port: int = 6379
    cache_redis_db: int = 0
    cache_redis_password: str = ""
    cache_redis_unix_socket: str = ""

    # === Global policy defaults ===
    store_private: bool = False
    store_no_store: bool = False
    ignore_no_last_mod: bool = False

    # === Fingerprint ===
    include_request_properties_in_hash: str = ""
    exclude_request_headers_from_hash: str = ""

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("cache_redis_port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if not 0 < v < 65536:
            raise ValueError("cache_redis_port must be within 1..65535")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        errors: list[str] = []

        if not self.cache_key_prefix:
            errors.append("CACHE_KEY_PREFIX must not be empty")

        if self.cache_redis_db < 0:
            errors.append("CACHE_REDIS_DB must be >= 0")

        if self.log_retention < 0:
            errors.append("LOG_RETENTION must be >= 0")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def include_request_properties_in_hash_list(self) -> list[str]:
        """Parse comma-separated extra fingerprint fields."""
        return _split(self.include_request_properties_in_hash)

    @property
    def exclude_request_headers_from_hash_list(self) -> list[str]:
        """Parse comma-separated extra excluded headers."""
        return _split(self.exclude_request_headers_from_hash)

    def redis_options(self) -> RedisOptions:
        from rfccache.cache.models import RedisOptions

        return RedisOptions(
            url=self.cache_redis_url or None,
            host=self.cache_redis_host,
            port=self.cache_redis_port,
            db=self.cache_redis_db,
            password=self.cache_redis_password or None,
            unix_socket=self.cache_redis_unix_socket or None,
        )


def _split(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
