# src/cache/models.py — v2
"""Cache domain models: CacheEntry, StoredEntry, RedisOptions."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

# Opaque payloads are written to Redis hash fields as-is.
Payload = Union[str, bytes, int, float]


class CacheEntry(BaseModel):
    """Data handed to ``put``: what to store under ``fingerprint``."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    fingerprint: str
    response: dict[str, Any] | str | None = None
    raw: Payload | None = None
    parsed: Payload | None = None
    expire_at: int | None = None

    @field_validator("expire_at", mode="before")
    @classmethod
    def validate_expire_at(cls, v: Any) -> Any:
        """Accept an aware datetime as well as epoch seconds."""
        if isinstance(v, datetime):
            return int(v.timestamp())
        return v


class StoredEntry(BaseModel):
    """Entry read back from the store; ``response`` is deserialized."""

    fingerprint: str
    response: dict[str, Any]
    raw: Payload | None = None
    parsed: Payload | None = None


class RedisOptions(BaseModel):
    """Connection parameters used when no client is supplied."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: str | None = None
    unix_socket: str | None = None
    url: str | None = None
