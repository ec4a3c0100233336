# src/logging/logger.py — v3
"""Formatters and logger configuration for the ``rfccache`` logger tree.

Both formatters read the fingerprint/hostname/operation context of the
cache call that emitted the record. ``configure_logging`` applies the
``LOG_*`` process settings; ``setup_logging`` takes explicit values.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any, TextIO

from rfccache.logging.context import get_context

if TYPE_CHECKING:
    from rfccache.config.settings import Settings

ROOT_LOGGER = "rfccache"


def _timestamp(record: logging.LogRecord) -> datetime:
    return datetime.fromtimestamp(record.created, tz=timezone.utc)


class JsonFormatter(logging.Formatter):
    """One JSON object per line; cache context under ``context``."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": _timestamp(record).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = get_context().as_dict()
        if context:
            entry["context"] = context

        data = getattr(record, "data", None)
        if data:
            entry["data"] = data

        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Single-line format: ``time [LEVEL] logger [host] (op fp) - message``."""

    def format(self, record: logging.LogRecord) -> str:
        ctx = get_context()
        line = (
            f"{_timestamp(record):%Y-%m-%d %H:%M:%S} "
            f"[{record.levelname:8s}] {record.name}"
        )
        if ctx.hostname:
            line += f" [{ctx.hostname}]"
        if ctx.operation:
            line += f" ({ctx.operation} {ctx.fingerprint or '-'})"
        line += f" - {record.getMessage()}"
        if record.exc_info and record.exc_info[1] is not None:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    log_file: str | Path | None = None,
    rotation: str = "10MB",
    retention: int = 30,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Install handlers on the ``rfccache`` logger, replacing earlier ones.

    Args:
        level: DEBUG, INFO, WARNING or ERROR.
        log_format: "json" or "text".
        log_file: Optional rotating log file, in addition to ``stream``.
        rotation: Max file size before rotation (e.g. "10MB").
        retention: Number of rotated files to keep.
        stream: Console stream (default: stderr).
    """
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()

    formatter = JsonFormatter() if log_format == "json" else TextFormatter()

    console = logging.StreamHandler(stream or sys.stderr)
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_file:
        from rfccache.logging.handlers import create_rotating_handler

        file_handler = create_rotating_handler(
            log_file, rotation=rotation, retention=retention
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    return root


def configure_logging(settings: Settings, verbose: bool = False) -> logging.Logger:
    """Apply LOG_LEVEL/LOG_FORMAT/LOG_FILE/LOG_ROTATION/LOG_RETENTION.

    ``verbose`` forces DEBUG regardless of LOG_LEVEL.
    """
    return setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )
