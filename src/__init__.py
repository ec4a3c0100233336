# src/__init__.py — v1
"""rfccache — RFC 2616 cacheability decisions over a Redis-backed store."""

from rfccache.api.facade import HttpCache
from rfccache.api.models import CacheConfig
from rfccache.cache.errors import CacheError, CorruptEntryError, StoreError
from rfccache.cache.fingerprint import Fingerprinter, compute_fingerprint
from rfccache.cache.models import CacheEntry, RedisOptions, StoredEntry
from rfccache.config.settings import ConfigurationError, Settings, load_settings
from rfccache.policy.evaluator import Evaluator
from rfccache.policy.models import GlobalPolicy, HostPolicy
from rfccache.version import __version__

__all__ = [
    "CacheConfig",
    "CacheEntry",
    "CacheError",
    "ConfigurationError",
    "CorruptEntryError",
    "Evaluator",
    "Fingerprinter",
    "GlobalPolicy",
    "HostPolicy",
    "HttpCache",
    "RedisOptions",
    "Settings",
    "StoreError",
    "StoredEntry",
    "__version__",
    "compute_fingerprint",
    "load_settings",
]
