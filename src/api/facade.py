# src/api/facade.py — v3
"""Public API facade — single entry point for cache decisions and storage.

Usage:
    from rfccache import HttpCache

    cache = HttpCache({"redis": {"host": "localhost"}})
    fingerprint = cache.make_hash(request)
    evaluator = cache.get_evaluator("api.example.com")
    if evaluator.is_retrievable(request):
        entry = await cache.get(fingerprint)
    ...
    if evaluator.is_storable(response):
        await cache.put({"fingerprint": fingerprint, "response": response})
"""

from __future__ import annotations

import logging
import warnings
from typing import Any, Iterable, Mapping

from pydantic import ValidationError

from rfccache.api.models import CacheConfig
from rfccache.cache.base_cache_store import BaseCacheStore
from rfccache.cache.cache_factory import create_redis_client
from rfccache.cache.fingerprint import Fingerprinter
from rfccache.cache.models import CacheEntry, StoredEntry
from rfccache.cache.redis_store import RedisCacheStore
from rfccache.config.settings import ConfigurationError, Settings
from rfccache.logging.context import set_host_context
from rfccache.policy.evaluator import Evaluator
from rfccache.policy.models import HostPolicy
from rfccache.policy.resolver import HostConfigRegistry, PolicyResolver

logger = logging.getLogger(__name__)

HostConfigs = Mapping[str, HostPolicy | Mapping[str, Any]]


class HttpCache:
    """HTTP response cache: policy resolution, fingerprints and storage.

    Args:
        config: ``CacheConfig`` or a plain mapping accepted by it.
        store: Ready store adapter; bypasses client construction.

    Raises:
        ConfigurationError: If ``config`` is malformed.
    """

    def __init__(
        self,
        config: CacheConfig | Mapping[str, Any],
        store: BaseCacheStore | None = None,
    ) -> None:
        if isinstance(config, CacheConfig):
            self.config = config
        elif isinstance(config, Mapping):
            try:
                self.config = CacheConfig.model_validate(dict(config))
            except ValidationError as e:
                raise ConfigurationError(f"invalid cache configuration: {e}") from e
        else:
            raise ConfigurationError("config must be provided as a mapping")

        self.key_prefix = self.config.key_prefix
        self.fingerprinter = Fingerprinter(
            include_properties=self.config.include_request_properties_in_hash,
            exclude_headers=self.config.exclude_request_headers_from_hash,
        )
        self.host_configs = HostConfigRegistry(self.config.host_config)
        self.resolver = PolicyResolver(self.config.global_policy(), self.host_configs)

        if store is None:
            client = self.config.redis_client
            if client is None:
                client = create_redis_client(self.config.redis)  # type: ignore[arg-type]
            store = RedisCacheStore(client, key_prefix=self.key_prefix)
        self.store = store

    @classmethod
    def from_settings(cls, settings: Settings | None = None, **overrides: Any) -> HttpCache:
        """Build a cache from process settings (.env / environment)."""
        settings = settings or Settings()
        try:
            config = CacheConfig.from_settings(settings, **overrides)
        except ValidationError as e:
            raise ConfigurationError(f"invalid cache configuration: {e}") from e
        return cls(config)

    # --- Fingerprints ---

    def make_hash(self, request: Mapping[str, Any]) -> str:
        """Fingerprint of the cache-relevant parts of ``request``."""
        return self.fingerprinter.fingerprint(request)

    def hash(self, request: Mapping[str, Any]) -> str:
        """Deprecated alias of make_hash()."""
        warnings.warn(
            "HttpCache.hash is deprecated, use HttpCache.make_hash instead",
            DeprecationWarning,
            stacklevel=2,
        )
        return self.make_hash(request)

    # --- Host policies ---

    def add_host_configs(self, configs: HostConfigs) -> None:
        self.host_configs.add(configs)

    def set_host_configs(self, configs: HostConfigs) -> None:
        self.host_configs.set(configs)

    def update_host_configs(self, configs: HostConfigs) -> None:
        self.host_configs.update(configs)

    def clear_host_configs(self, hostnames: Iterable[str]) -> None:
        self.host_configs.clear(hostnames)

    def get_evaluator(
        self,
        hostname: str | Mapping[str, Any] | None = None,
        overrides: HostPolicy | Mapping[str, Any] | None = None,
    ) -> Evaluator:
        """Fresh evaluator for one request/response cycle.

        Also sets the hostname logged with later cache calls in this
        context; no hostname clears it.
        """
        set_host_context(hostname if isinstance(hostname, str) else None)
        return self.resolver.resolve(hostname, overrides)

    # --- Storage ---

    async def get(self, fingerprint: str) -> StoredEntry | None:
        return await self.store.get(fingerprint)

    async def put(self, entry: CacheEntry | Mapping[str, Any]) -> None:
        if not isinstance(entry, CacheEntry):
            entry = CacheEntry.model_validate(dict(entry))
        await self.store.put(entry)

    async def put_with_command(
        self, command: str, fingerprint: str, *args: Any, **kwargs: Any
    ) -> Any:
        return await self.store.put_with_command(command, fingerprint, *args, **kwargs)

    async def purge(self, fingerprint: str) -> bool:
        return await self.store.purge(fingerprint)

    async def close(self) -> None:
        await self.store.close()

    async def __aenter__(self) -> HttpCache:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
