# src/api/models.py — v2
"""API-level models: CacheConfig, the structured init-time configuration.

Accepts snake_case names as well as the camelCase keys used by existing
configuration files (``storePrivate``, ``hostConfig``, ``redisClient``...).
Unknown keys are ignored.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

from rfccache.cache.models import RedisOptions
from rfccache.config.settings import Settings
from rfccache.policy.models import GlobalPolicy, HostPolicy, Validator


class CacheConfig(BaseModel):
    """Global policy, host policies, fingerprint lists and store access."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        arbitrary_types_allowed=True,
        extra="ignore",
    )

    # Global policy
    store_private: bool = False
    store_no_store: bool = False
    ignore_no_last_mod: bool = False
    request_validators: list[Validator] = []
    response_validators: list[Validator] = []

    host_config: dict[str, HostPolicy] = {}

    include_request_properties_in_hash: list[str] = []
    exclude_request_headers_from_hash: list[str] = []

    # Store access: a ready client wins over connection parameters.
    redis_client: Any | None = None
    redis: RedisOptions | None = None
    key_prefix: str = "rfccache:"

    @model_validator(mode="after")
    def validate_store_access(self) -> CacheConfig:
        if self.redis_client is None and self.redis is None:
            raise ValueError(
                "redis must be provided if no redis_client is available"
            )
        if not self.key_prefix:
            raise ValueError("key_prefix must not be empty")
        return self

    def global_policy(self) -> GlobalPolicy:
        return GlobalPolicy(
            store_private=self.store_private,
            store_no_store=self.store_no_store,
            ignore_no_last_mod=self.ignore_no_last_mod,
            request_validators=list(self.request_validators),
            response_validators=list(self.response_validators),
        )

    @classmethod
    def from_settings(cls, settings: Settings, **overrides: Any) -> CacheConfig:
        """Derive a config from process settings; ``overrides`` win."""
        values: dict[str, Any] = {
            "store_private": settings.store_private,
            "store_no_store": settings.store_no_store,
            "ignore_no_last_mod": settings.ignore_no_last_mod,
            "include_request_properties_in_hash": (
                settings.include_request_properties_in_hash_list
            ),
            "exclude_request_headers_from_hash": (
                settings.exclude_request_headers_from_hash_list
            ),
            "key_prefix": settings.cache_key_prefix,
        }
        values.update(overrides)
        if values.get("redis_client") is None and values.get("redis") is None:
            values["redis"] = settings.redis_options()
        return cls(**values)
