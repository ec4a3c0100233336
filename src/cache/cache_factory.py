# src/cache/cache_factory.py — v3
"""Factory for the Redis cache store and its client."""

from __future__ import annotations

import logging
from typing import Any

from rfccache.cache.models import RedisOptions
from rfccache.cache.redis_store import RedisCacheStore
from rfccache.config.settings import Settings

logger = logging.getLogger(__name__)


def create_redis_client(options: RedisOptions) -> Any:
    """Build a redis.asyncio client from connection options.

    Precedence: ``url``, then ``unix_socket`` (supersedes host/port),
    then ``host``/``port``.
    """
    import redis.asyncio as aioredis

    if options.url:
        logger.debug("Creating redis client from url")
        return aioredis.Redis.from_url(options.url, decode_responses=True)

    if options.unix_socket:
        logger.debug("Creating redis client for unix socket %s", options.unix_socket)
        return aioredis.Redis(
            unix_socket_path=options.unix_socket,
            db=options.db,
            password=options.password,
            decode_responses=True,
        )

    logger.debug(
        "Creating redis client for host %s and port %d", options.host, options.port
    )
    return aioredis.Redis(
        host=options.host,
        port=options.port,
        db=options.db,
        password=options.password,
        decode_responses=True,
    )


def create_cache_store(
    settings: Settings | None = None,
    client: Any | None = None,
    options: RedisOptions | None = None,
    key_prefix: str | None = None,
) -> RedisCacheStore:
    """Instantiate the Redis cache store.

    Args:
        settings: Process settings. Used for connection parameters and the
            key prefix when ``client``/``options`` are not given.
        client: Pre-built redis.asyncio client; takes precedence.
        options: Explicit connection parameters.
        key_prefix: Overrides the configured key prefix.

    Returns:
        Configured RedisCacheStore.
    """
    if settings is None:
        settings = Settings()
    prefix = key_prefix if key_prefix is not None else settings.cache_key_prefix

    if client is None:
        client = create_redis_client(options or settings.redis_options())
    return RedisCacheStore(client, key_prefix=prefix)
