# src/policy/validators.py — v1
"""Built-in RFC 2616 cacheability validators.

Each validator receives the request (or response) mapping and the
evaluator, may set decision flags on the evaluator, and returns True when
it made a final decision. The first deciding validator stops the chain.

The request chain ends with ``method_get_or_head``, which always decides.
The response chain may run out without deciding, leaving ``storable``
unset.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, Mapping

if TYPE_CHECKING:
    from rfccache.policy.evaluator import Evaluator

_MAX_AGE = re.compile(r"max-age=\d+")
_MAX_AGE_ZERO = re.compile(r"max-age=(?:0+|-\d+)(?!\d)")
_NO_CACHE = re.compile(r"no-cache")
_NO_STORE = re.compile(r"no-store(?!=)")
_PRIVATE = re.compile(r"private")

CACHEABLE_STATUS_CODES = {
    200: "OK",
    203: "Non-Authoritative Information",
    300: "Multiple Choices",
    301: "Moved Permanently",
    401: "Unauthorized",
}


def header(subject: Mapping[str, Any], name: str) -> str | None:
    """Case-insensitive header lookup; None when absent."""
    headers = subject.get("headers") or {}
    value = headers.get(name)
    if value is None:
        for key, candidate in headers.items():
            if key.lower() == name:
                value = candidate
                break
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return str(value)


def _directives(subject: Mapping[str, Any], name: str = "cache-control") -> str:
    return header(subject, name) or ""


# --- Request validators ---


def disable_cache(request: Mapping[str, Any], evaluator: Evaluator) -> bool:
    """Explicit opt-out: nothing is read from or written to the cache."""
    if request.get("disable_cache") is True:
        evaluator.flag_storable(False)
        evaluator.flag_retrievable(False)
        return True
    return False


def force_fresh(request: Mapping[str, Any], evaluator: Evaluator) -> bool:
    """Bypass the cache for this read; the response may still be stored."""
    if request.get("force_fresh") is True:
        evaluator.flag_retrievable(False)
        return True
    return False


def request_max_age_zero(request: Mapping[str, Any], evaluator: Evaluator) -> bool:
    """Request max-age of zero forces revalidation (RFC 2616 §13.1.6)."""
    if _MAX_AGE_ZERO.search(_directives(request)):
        evaluator.flag_storable(True)
        evaluator.flag_retrievable(False)
        return True
    return False


def request_no_cache(request: Mapping[str, Any], evaluator: Evaluator) -> bool:
    """Cache-Control or Pragma no-cache (RFC 2616 §14.9, §14.32)."""
    if _NO_CACHE.search(_directives(request)) or _directives(request, "pragma") == "no-cache":
        evaluator.flag_storable(False)
        evaluator.flag_retrievable(False)
        return True
    return False


def request_no_store(request: Mapping[str, Any], evaluator: Evaluator) -> bool:
    """Request Cache-Control no-store (RFC 2616 §14.9.2)."""
    if _NO_STORE.search(_directives(request)):
        evaluator.flag_storable(False)
        evaluator.flag_retrievable(False)
        return True
    return False


def method_get_or_head(request: Mapping[str, Any], evaluator: Evaluator) -> bool:
    """Terminal default: only GET and HEAD are retrievable (RFC 2616 §13.9)."""
    method = str(request.get("method") or "").upper()
    evaluator.flag_retrievable(method in ("GET", "HEAD"))
    return True


# --- Response validators ---


def only_private(response: Mapping[str, Any], evaluator: Evaluator) -> bool:
    """Cache-Control private marks the response as user-specific."""
    if _PRIVATE.search(_directives(response)):
        evaluator.flag_private(True)
        if not evaluator.store_private:
            evaluator.flag_storable(False)
            return True
    return False


def response_no_store(response: Mapping[str, Any], evaluator: Evaluator) -> bool:
    """Response Cache-Control no-store, unless storing it is allowed."""
    if _NO_STORE.search(_directives(response)) and not evaluator.store_no_store:
        evaluator.flag_storable(False)
        return True
    return False


def response_max_age_zero(response: Mapping[str, Any], evaluator: Evaluator) -> bool:
    if _MAX_AGE_ZERO.search(_directives(response)):
        evaluator.flag_storable(False)
        return True
    return False


def max_age_future(response: Mapping[str, Any], evaluator: Evaluator) -> bool:
    if _MAX_AGE.search(_directives(response)):
        evaluator.flag_storable(True)
        return True
    return False


def last_modified(response: Mapping[str, Any], evaluator: Evaluator) -> bool:
    """Weak validator Last-Modified present (RFC 2616 §13.3.1)."""
    if header(response, "last-modified") is not None and not evaluator.ignore_no_last_mod:
        evaluator.flag_storable(True)
        return True
    return False


def etag(response: Mapping[str, Any], evaluator: Evaluator) -> bool:
    """Strong validator ETag present (RFC 2616 §13.3.2)."""
    if header(response, "etag") is not None:
        evaluator.flag_storable(True)
        return True
    return False


def status_codes(response: Mapping[str, Any], evaluator: Evaluator) -> bool:
    try:
        status = int(response.get("status_code") or 0)
    except (TypeError, ValueError):
        return False
    if status in CACHEABLE_STATUS_CODES:
        evaluator.flag_storable(True)
        return True
    return False


REQUEST_VALIDATORS = (
    disable_cache,
    force_fresh,
    request_max_age_zero,
    request_no_cache,
    request_no_store,
    method_get_or_head,
)

RESPONSE_VALIDATORS = (
    only_private,
    response_no_store,
    response_max_age_zero,
    max_age_future,
    last_modified,
    etag,
    status_codes,
)
