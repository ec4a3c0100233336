# src/cache/fingerprint.py — v4
"""Request fingerprinting for cache keys.

A fingerprint is the MD5 hex digest of a canonical JSON projection of the
request: selected top-level fields plus all headers except an exclude
list. Keys are sorted before hashing so the digest does not depend on
insertion order and stays stable across process restarts.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any, Iterable, Mapping

DEFAULT_INCLUDED_PROPERTIES = ("uri", "qs", "method", "authenticated_user")
DEFAULT_EXCLUDED_HEADERS = ("cookie", "authorization")


def _union(defaults: Iterable[str], extra: Iterable[str] | None) -> tuple[str, ...]:
    """Ordered union, first occurrence wins."""
    seen: dict[str, None] = dict.fromkeys(defaults)
    for name in extra or ():
        seen.setdefault(name, None)
    return tuple(seen)


class Fingerprinter:
    """Computes request fingerprints with configurable field/header lists."""

    def __init__(
        self,
        include_properties: Iterable[str] | None = None,
        exclude_headers: Iterable[str] | None = None,
    ) -> None:
        self.include_properties = _union(DEFAULT_INCLUDED_PROPERTIES, include_properties)
        self.exclude_headers = _union(
            DEFAULT_EXCLUDED_HEADERS,
            (name.lower() for name in exclude_headers or ()),
        )

    def project(self, request: Mapping[str, Any]) -> dict[str, Any]:
        """Return the cache-relevant subset of ``request``."""
        projection = {
            name: request[name] for name in self.include_properties if name in request
        }
        projection["headers"] = self._headers(request.get("headers") or {})
        return projection

    def _headers(self, headers: Mapping[Any, Any]) -> dict[str, Any]:
        """Lowercase names; names differing only in case keep every value.

        Values of such names are listed in order of the original names.
        """
        merged: dict[str, list[Any]] = {}
        for name in sorted(headers, key=str):
            lowered = str(name).lower()
            if lowered not in self.exclude_headers:
                merged.setdefault(lowered, []).append(headers[name])
        return {
            name: values[0] if len(values) == 1 else values
            for name, values in merged.items()
        }

    def fingerprint(self, request: Mapping[str, Any]) -> str:
        """Return the 32-character hex fingerprint of ``request``."""
        data = json.dumps(
            self.project(request),
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
            default=str,
        )
        return hashlib.md5(data.encode("utf-8")).hexdigest()  # noqa: S324


def compute_fingerprint(request: Mapping[str, Any]) -> str:
    """Fingerprint with the default include/exclude lists."""
    return Fingerprinter().fingerprint(request)
