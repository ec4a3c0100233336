# src/logging/context.py — v2
"""Contextual logging support — attach fingerprint, hostname, operation to log records."""

from __future__ import annotations

import contextvars
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator

# Context variables for structured logging, set per cache operation.
_fingerprint: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "fingerprint", default=None
)
_hostname: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "hostname", default=None
)
_operation: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "operation", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    fingerprint: str | None = None
    hostname: str | None = None
    operation: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        fingerprint=_fingerprint.get(),
        hostname=_hostname.get(),
        operation=_operation.get(),
    )


def set_host_context(hostname: str | None) -> None:
    """Set the hostname of the request being evaluated."""
    _hostname.set(hostname)


@contextmanager
def entry_context(fingerprint: str, operation: str) -> Iterator[None]:
    """Scope fingerprint/operation to one store call."""
    fp_token = _fingerprint.set(fingerprint)
    op_token = _operation.set(operation)
    try:
        yield
    finally:
        _operation.reset(op_token)
        _fingerprint.reset(fp_token)


def clear_context() -> None:
    """Reset all context variables."""
    _fingerprint.set(None)
    _hostname.set(None)
    _operation.set(None)
