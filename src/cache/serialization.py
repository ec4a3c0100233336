# src/cache/serialization.py — v1
"""Serialization of HTTP responses into the cached representation.

Only a fixed set of response attributes is kept. Headers that describe
the original exchange rather than the resource are dropped, and the
result is marked with ``from_cache``.
"""

from __future__ import annotations

import json
from typing import Any, Mapping

SERIALIZABLE_RESPONSE_PROPERTIES = (
    "trailers",
    "status_code",
    "http_version",
    "http_version_major",
    "http_version_minor",
)

EXCLUDED_RESPONSE_HEADERS = frozenset(
    {
        "set-cookie",
        "date",
        "transfer-encoding",
        "if-none-match",
        "if-modified-since",
    }
)


def filter_headers(headers: Mapping[str, Any] | None) -> dict[str, Any]:
    """Drop deny-listed headers (case-insensitive)."""
    return {
        name: value
        for name, value in (headers or {}).items()
        if str(name).lower() not in EXCLUDED_RESPONSE_HEADERS
    }


def project_response(response: Mapping[str, Any]) -> dict[str, Any]:
    projection = {
        name: response[name]
        for name in SERIALIZABLE_RESPONSE_PROPERTIES
        if name in response
    }
    projection["headers"] = filter_headers(response.get("headers"))
    projection["from_cache"] = True
    return projection


def serialize_response(response: Mapping[str, Any] | str) -> str:
    """Return the JSON string stored in the ``response`` hash field.

    Pre-serialized strings are passed through unchanged.
    """
    if isinstance(response, str):
        return response
    return json.dumps(project_response(response), default=str)


def deserialize_response(data: str | bytes) -> dict[str, Any]:
    """Parse a stored ``response`` field; raises ValueError on bad JSON."""
    value = json.loads(data)
    if not isinstance(value, dict):
        raise ValueError("cached response is not a JSON object")
    return value
