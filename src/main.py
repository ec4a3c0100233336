# src/main.py — v3
"""CLI entry point — fingerprint, evaluate, get, purge commands.

Usage:
    rfccache fingerprint <request.json>
    rfccache evaluate <request.json> [--response <response.json>]
                      [--host HOST --host-config <hosts.json>]
    rfccache get <fingerprint>
    rfccache purge <fingerprint>

Store commands use the Redis connection configured in .env / environment.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from rfccache.config.settings import ConfigurationError
from rfccache.version import __version__

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_MISS = 2


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        _setup_logging(args.verbose)
    except (ConfigurationError, ValidationError) as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return EXIT_ERROR

    if not hasattr(args, "func"):
        parser.print_help()
        return EXIT_ERROR

    try:
        return asyncio.run(args.func(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return EXIT_ERROR


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="rfccache",
        description=f"rfccache v{__version__} — HTTP response cache decisions",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- fingerprint ---
    p_fp = subparsers.add_parser(
        "fingerprint", help="Print the cache fingerprint of a request",
    )
    p_fp.add_argument("request", type=Path, help="Request descriptor (JSON file)")
    p_fp.set_defaults(func=_cmd_fingerprint)

    # --- evaluate ---
    p_eval = subparsers.add_parser(
        "evaluate", help="Evaluate cacheability of a request/response pair",
    )
    p_eval.add_argument("request", type=Path, help="Request descriptor (JSON file)")
    p_eval.add_argument(
        "--response", type=Path, default=None,
        help="Response descriptor (JSON file)",
    )
    p_eval.add_argument(
        "--host", default=None,
        help="Hostname whose policy applies (default: global policy only)",
    )
    p_eval.add_argument(
        "--host-config", type=Path, default=None,
        help="Host policies as JSON: {hostname: {storePrivate: ..., ...}}",
    )
    p_eval.set_defaults(func=_cmd_evaluate)

    # --- get ---
    p_get = subparsers.add_parser("get", help="Show a cached entry")
    p_get.add_argument("fingerprint", help="Entry fingerprint")
    p_get.set_defaults(func=_cmd_get)

    # --- purge ---
    p_purge = subparsers.add_parser("purge", help="Delete a cached entry")
    p_purge.add_argument("fingerprint", help="Entry fingerprint")
    p_purge.set_defaults(func=_cmd_purge)

    return parser


async def _cmd_fingerprint(args: argparse.Namespace) -> int:
    """Print the fingerprint of a request file."""
    from rfccache.cache.fingerprint import Fingerprinter
    from rfccache.config.settings import Settings

    request = _load_json(args.request)
    if request is None:
        return EXIT_ERROR

    settings = Settings()
    fingerprinter = Fingerprinter(
        include_properties=settings.include_request_properties_in_hash_list,
        exclude_headers=settings.exclude_request_headers_from_hash_list,
    )
    print(fingerprinter.fingerprint(request))
    return EXIT_OK


async def _cmd_evaluate(args: argparse.Namespace) -> int:
    """Print retrievable/storable/private decisions as JSON."""
    from rfccache.config.settings import Settings
    from rfccache.policy.models import GlobalPolicy
    from rfccache.policy.resolver import HostConfigRegistry, PolicyResolver

    request = _load_json(args.request)
    if request is None:
        return EXIT_ERROR
    response = None
    if args.response is not None:
        response = _load_json(args.response)
        if response is None:
            return EXIT_ERROR

    registry = HostConfigRegistry()
    if args.host_config is not None:
        host_configs = _load_json(args.host_config)
        if host_configs is None:
            return EXIT_ERROR
        registry.set(host_configs)
    if args.host is not None and args.host not in registry:
        logger.warning("No host policy for %s, using global policy", args.host)

    settings = Settings()
    resolver = PolicyResolver(
        GlobalPolicy(
            store_private=settings.store_private,
            store_no_store=settings.store_no_store,
            ignore_no_last_mod=settings.ignore_no_last_mod,
        ),
        registry,
    )
    evaluator = resolver.resolve(args.host)
    decisions: dict[str, Any] = {"retrievable": evaluator.is_retrievable(request)}
    if response is not None:
        decisions["storable"] = evaluator.is_storable(response)
    decisions["private"] = evaluator.private
    print(json.dumps(decisions))
    return EXIT_OK


async def _cmd_get(args: argparse.Namespace) -> int:
    """Print a stored entry as JSON."""
    from rfccache.cache.cache_factory import create_cache_store

    store = create_cache_store()
    try:
        entry = await store.get(args.fingerprint)
    finally:
        await store.close()

    if entry is None:
        logger.info("No entry for %s", args.fingerprint)
        return EXIT_MISS
    print(entry.model_dump_json(indent=2))
    return EXIT_OK


async def _cmd_purge(args: argparse.Namespace) -> int:
    """Delete a stored entry."""
    from rfccache.cache.cache_factory import create_cache_store

    store = create_cache_store()
    try:
        deleted = await store.purge(args.fingerprint)
    finally:
        await store.close()

    print(f"deleted: {str(deleted).lower()}")
    return EXIT_OK


def _load_json(path: Path) -> dict[str, Any] | None:
    """Read a JSON object from ``path``; logs and returns None on failure."""
    if not path.exists():
        logger.error("File not found: %s", path)
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        logger.error("Invalid JSON in %s: %s", path, e)
        return None
    if not isinstance(data, dict):
        logger.error("Expected a JSON object in %s", path)
        return None
    return data


def _setup_logging(verbose: bool) -> None:
    """Configure logging for CLI usage from LOG_* settings."""
    from rfccache.config.settings import Settings
    from rfccache.logging.logger import configure_logging

    configure_logging(Settings(), verbose=verbose)
    # Quiet noisy libraries
    logging.getLogger("asyncio").setLevel(logging.WARNING)


if __name__ == "__main__":
    sys.exit(main())
