# src/cache/errors.py — v1
"""Runtime cache errors raised by store adapters."""

from __future__ import annotations


class CacheError(Exception):
    """Base class for cache store failures."""


class CorruptEntryError(CacheError, ValueError):
    """A stored entry could not be decoded (e.g. missing ``response``)."""

    def __init__(self, key: str, reason: str = "found invalid data in cache") -> None:
        super().__init__(f"{reason}: {key}")
        self.key = key


class StoreError(CacheError):
    """The key-value store reported a transport or command failure."""
