# src/cache/base_cache_store.py — v2
"""Abstract cache store interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from rfccache.cache.models import CacheEntry, StoredEntry


class BaseCacheStore(ABC):
    """Key-value persistence of cache entries addressed by fingerprint."""

    key_prefix: str = "rfccache:"

    def make_key(self, fingerprint: str) -> str:
        return f"{self.key_prefix}{fingerprint}"

    @abstractmethod
    async def get(self, fingerprint: str) -> StoredEntry | None:
        """Retrieve the entry stored under ``fingerprint``; None on a miss."""

    @abstractmethod
    async def put(self, entry: CacheEntry) -> None:
        """Store ``entry``, applying its absolute expiry if set."""

    @abstractmethod
    async def put_with_command(
        self, command: str, fingerprint: str, *args: Any, **kwargs: Any
    ) -> Any:
        """Run one store command against the prefixed key."""

    @abstractmethod
    async def purge(self, fingerprint: str) -> bool:
        """Delete the entry; True when exactly one key was removed."""

    async def close(self) -> None:
        """Release store resources."""
