# src/cache/redis_store.py — v2
"""Redis-based cache store.

Each entry is a Redis hash under ``key_prefix + fingerprint`` with fields
``response`` (JSON), ``raw`` and ``parsed``. An absolute expiry is set in
the same MULTI/EXEC transaction as the field write.

Requires the 'redis' package (redis.asyncio client).
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from redis.exceptions import RedisError

from rfccache.cache.base_cache_store import BaseCacheStore
from rfccache.cache.errors import CorruptEntryError, StoreError
from rfccache.cache.models import CacheEntry, StoredEntry
from rfccache.cache.serialization import deserialize_response, serialize_response
from rfccache.logging.context import entry_context

logger = logging.getLogger(__name__)

_ENTRY_FIELDS = ("response", "raw", "parsed")

# Commands callers may run through put_with_command.
SUPPORTED_COMMANDS = frozenset(
    {
        "hset",
        "hdel",
        "hincrby",
        "hincrbyfloat",
        "hsetnx",
        "expire",
        "expireat",
        "persist",
        "set",
        "incr",
        "incrby",
        "decr",
        "decrby",
    }
)


def _text(value: Any) -> Any:
    return value.decode("utf-8") if isinstance(value, bytes) else value


class RedisCacheStore(BaseCacheStore):
    """Redis hash-backed cache store using an asyncio client."""

    def __init__(self, client: Any, key_prefix: str = "rfccache:") -> None:
        self._client = client
        self.key_prefix = key_prefix
        self._cleanup_tasks: set[asyncio.Task[None]] = set()

    @property
    def client(self) -> Any:
        return self._client

    async def get(self, fingerprint: str) -> StoredEntry | None:
        """Read an entry; None on a miss.

        Raises:
            StoreError: Redis failed to answer.
            CorruptEntryError: The hash has no usable ``response`` field.
                The key is deleted in the background.
        """
        key = self.make_key(fingerprint)
        with entry_context(fingerprint, "get"):
            try:
                data = await self._client.hgetall(key)
            except RedisError as e:
                raise StoreError(f"HGETALL {key} failed: {e}") from e

            if not data:
                logger.debug("Cache miss")
                return None

            fields = {_text(name): value for name, value in data.items()}
            if not fields.get("response"):
                logger.warning("Entry has no response field, scheduling removal")
                self._schedule_cleanup(key)
                raise CorruptEntryError(key)

            try:
                response = deserialize_response(fields["response"])
            except ValueError as e:
                logger.warning("Entry response is not valid JSON, scheduling removal")
                self._schedule_cleanup(key)
                raise CorruptEntryError(key, "cached response is not valid JSON") from e

            logger.debug("Cache hit")
            return StoredEntry(
                fingerprint=fingerprint,
                response=response,
                raw=fields.get("raw"),
                parsed=fields.get("parsed"),
            )

    async def put(self, entry: CacheEntry) -> None:
        """Write the non-empty entry fields and optional expiry atomically.

        Raises:
            StoreError: The transaction failed; no rollback is attempted.
        """
        key = self.make_key(entry.fingerprint)
        fields: dict[str, Any] = {}
        if entry.response is not None:
            fields["response"] = serialize_response(entry.response)
        for name in ("raw", "parsed"):
            value = getattr(entry, name)
            if value is not None:
                fields[name] = value

        if not fields and entry.expire_at is None:
            return

        with entry_context(entry.fingerprint, "put"):
            try:
                async with self._client.pipeline(transaction=True) as pipe:
                    # HSET with no fields is a Redis error, so skip it for
                    # expiry-only updates.
                    if fields:
                        pipe.hset(key, mapping=fields)
                    if entry.expire_at is not None:
                        pipe.expireat(key, entry.expire_at)
                    result = await pipe.execute()
            except RedisError as e:
                raise StoreError(f"storing {key} failed: {e}") from e

            logger.debug(
                "Stored %d field(s), expire_at=%s: %s",
                len(fields), entry.expire_at, result,
            )

    async def put_with_command(
        self, command: str, fingerprint: str, *args: Any, **kwargs: Any
    ) -> Any:
        """Run one supported Redis command against the prefixed key.

        Example: ``await store.put_with_command("hincrby", fp, "hits", 1)``.

        Raises:
            StoreError: Unsupported command, or Redis rejected it.
        """
        key = self.make_key(fingerprint)
        with entry_context(fingerprint, command):
            if command.lower() not in SUPPORTED_COMMANDS:
                logger.error("Unsupported store command %r", command)
                raise StoreError(f"unsupported store command: {command!r}")
            method = getattr(self._client, command.lower())
            try:
                result = await method(key, *args, **kwargs)
            except RedisError as e:
                logger.error("Command %s failed: %s", command, e)
                raise StoreError(f"{command.upper()} {key} failed: {e}") from e

            logger.debug("Command %s succeeded", command)
            return result

    async def purge(self, fingerprint: str) -> bool:
        """Delete the entry; True only when exactly one key was removed."""
        key = self.make_key(fingerprint)
        with entry_context(fingerprint, "purge"):
            try:
                removed = await self._client.delete(key)
            except RedisError as e:
                raise StoreError(f"DEL {key} failed: {e}") from e
            logger.debug("Removed %d key(s)", removed)
            return removed == 1

    async def wait_for_cleanup(self) -> None:
        """Await pending background deletions of corrupt entries."""
        if self._cleanup_tasks:
            await asyncio.gather(*self._cleanup_tasks, return_exceptions=True)

    async def close(self) -> None:
        """Finish background cleanup and close the Redis connection."""
        await self.wait_for_cleanup()
        await self._client.aclose()

    def _schedule_cleanup(self, key: str) -> None:
        task = asyncio.get_running_loop().create_task(self._discard(key))
        self._cleanup_tasks.add(task)
        task.add_done_callback(self._cleanup_tasks.discard)

    async def _discard(self, key: str) -> None:
        try:
            removed = await self._client.delete(key)
        except Exception as e:
            logger.warning("Could not remove corrupt entry %s: %s", key, e)
            return
        logger.debug("Removed %d corrupt entry(ies) under %s", removed, key)
