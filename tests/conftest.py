# tests/conftest.py — v2
"""Shared test fixtures for all unit tests.

Provides an in-memory asyncio Redis double, sample requests/responses and
ready-made store/cache objects. No external services — all I/O is faked.
"""

from __future__ import annotations

from typing import Any

import pytest
from redis.exceptions import RedisError

from rfccache.api.facade import HttpCache
from rfccache.cache.redis_store import RedisCacheStore


# === FAKE REDIS ===


class FakeRedis:
    """Subset of redis.asyncio.Redis used by RedisCacheStore.

    Hashes live in ``hashes``; absolute expiries in ``expiry``. Commands
    listed in ``fail_on`` raise RedisError.
    """

    def __init__(self) -> None:
        self.hashes: dict[str, dict[str, Any]] = {}
        self.expiry: dict[str, int] = {}
        self.fail_on: set[str] = set()
        self.calls: list[str] = []
        self.closed = False

    def _check(self, command: str) -> None:
        self.calls.append(command)
        if command in self.fail_on:
            raise RedisError(f"{command} failed")

    async def hgetall(self, key: str) -> dict[str, Any]:
        self._check("hgetall")
        return dict(self.hashes.get(key, {}))

    async def hset(
        self,
        key: str,
        field: str | None = None,
        value: Any = None,
        mapping: dict[str, Any] | None = None,
    ) -> int:
        self._check("hset")
        items = dict(mapping or {})
        if field is not None:
            items[field] = value
        if not items:
            raise RedisError("wrong number of arguments for 'hset' command")
        target = self.hashes.setdefault(key, {})
        added = len([name for name in items if name not in target])
        target.update(items)
        return added

    async def hincrby(self, key: str, field: str, amount: int = 1) -> int:
        self._check("hincrby")
        target = self.hashes.setdefault(key, {})
        target[field] = int(target.get(field, 0)) + amount
        return target[field]

    async def expireat(self, key: str, when: int) -> bool:
        self._check("expireat")
        if key not in self.hashes:
            return False
        self.expiry[key] = when
        return True

    async def delete(self, *keys: str) -> int:
        self._check("delete")
        removed = 0
        for key in keys:
            if self.hashes.pop(key, None) is not None:
                removed += 1
            self.expiry.pop(key, None)
        return removed

    def pipeline(self, transaction: bool = True) -> FakePipeline:
        return FakePipeline(self)

    async def aclose(self) -> None:
        self.closed = True


class FakePipeline:
    """Queues commands and applies them on execute(), like MULTI/EXEC."""

    def __init__(self, client: FakeRedis) -> None:
        self._client = client
        self.queued: list[tuple[str, tuple, dict]] = []

    async def __aenter__(self) -> FakePipeline:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.queued.clear()

    def hset(self, *args: Any, **kwargs: Any) -> FakePipeline:
        self.queued.append(("hset", args, kwargs))
        return self

    def expireat(self, *args: Any, **kwargs: Any) -> FakePipeline:
        self.queued.append(("expireat", args, kwargs))
        return self

    async def execute(self) -> list[Any]:
        self._client.calls.append("exec")
        if not self.queued:
            return []
        results = []
        for name, args, kwargs in self.queued:
            results.append(await getattr(self._client, name)(*args, **kwargs))
        return results


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def store(fake_redis: FakeRedis) -> RedisCacheStore:
    return RedisCacheStore(fake_redis, key_prefix="test-cache:")


@pytest.fixture
def http_cache(fake_redis: FakeRedis) -> HttpCache:
    return HttpCache({"redisClient": fake_redis, "keyPrefix": "test-cache:"})


# === FIXTURES: Sample data ===


@pytest.fixture
def get_request() -> dict[str, Any]:
    """Minimal GET request descriptor."""
    return {
        "uri": "https://api.example.com/items",
        "qs": {"page": 1, "sort": "name"},
        "method": "GET",
        "headers": {"accept": "application/json"},
    }


@pytest.fixture
def ok_response() -> dict[str, Any]:
    """Cacheable 200 response with volatile headers."""
    return {
        "status_code": 200,
        "http_version": "1.1",
        "http_version_major": 1,
        "http_version_minor": 1,
        "trailers": {},
        "body": "not persisted",
        "headers": {
            "content-type": "application/json",
            "etag": '"abc"',
            "set-cookie": "session=1",
            "date": "Thu, 01 Jan 2026 00:00:00 GMT",
            "transfer-encoding": "chunked",
        },
    }
