# src/policy/resolver.py — v2
"""Host policy registry and evaluator resolution.

The registry is shared, long-lived state: mutations hold a lock and
resolution works on a point-in-time copy of the host entry.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Iterable, Mapping

from rfccache.policy.evaluator import Evaluator
from rfccache.policy.models import (
    POLICY_CHAINS,
    GlobalPolicy,
    HostPolicy,
    coerce_host_policy,
    merge_host_policy,
    resolve_policy,
)

logger = logging.getLogger(__name__)

HostConfigs = Mapping[str, HostPolicy | Mapping[str, Any]]


class HostConfigRegistry:
    """Thread-safe hostname -> HostPolicy mapping."""

    def __init__(self, initial: HostConfigs | None = None) -> None:
        self._lock = threading.Lock()
        self._hosts: dict[str, HostPolicy] = {}
        if initial:
            self.set(initial)

    def add(self, configs: HostConfigs) -> None:
        """Register hosts not yet present; existing entries are kept."""
        with self._lock:
            for hostname, config in configs.items():
                if hostname not in self._hosts:
                    self._hosts[hostname] = coerce_host_policy(config)

    def set(self, configs: HostConfigs) -> None:
        """Replace the policy of every listed host."""
        with self._lock:
            for hostname, config in configs.items():
                self._hosts[hostname] = coerce_host_policy(config)

    def update(self, configs: HostConfigs) -> None:
        """Merge each config field-by-field into the existing entry."""
        with self._lock:
            for hostname, config in configs.items():
                current = self._hosts.get(hostname, HostPolicy())
                self._hosts[hostname] = merge_host_policy(
                    current, coerce_host_policy(config)
                )

    def clear(self, hostnames: Iterable[str]) -> None:
        """Reset listed hosts to an empty policy (entries stay registered)."""
        if isinstance(hostnames, str) or not isinstance(hostnames, Iterable):
            return
        with self._lock:
            for hostname in hostnames:
                self._hosts[hostname] = HostPolicy()

    def snapshot(self, hostname: str) -> HostPolicy | None:
        """Point-in-time copy of a host entry.

        Validator lists are copied, the validators themselves are shared.
        """
        with self._lock:
            policy = self._hosts.get(hostname)
            if policy is None:
                return None
            chains = {
                name: list(getattr(policy, name))
                for name in POLICY_CHAINS
                if getattr(policy, name) is not None
            }
            return policy.model_copy(update=chains)

    def hostnames(self) -> list[str]:
        with self._lock:
            return list(self._hosts)

    def __contains__(self, hostname: object) -> bool:
        with self._lock:
            return hostname in self._hosts


class PolicyResolver:
    """Builds a fresh Evaluator per call from global, host and call scopes."""

    def __init__(
        self,
        global_policy: GlobalPolicy | None = None,
        registry: HostConfigRegistry | None = None,
    ) -> None:
        self.global_policy = global_policy or GlobalPolicy()
        self.registry = registry or HostConfigRegistry()

    def resolve(
        self,
        hostname: str | Mapping[str, Any] | None = None,
        overrides: HostPolicy | Mapping[str, Any] | None = None,
    ) -> Evaluator:
        """Return a new Evaluator for ``hostname`` with per-call ``overrides``.

        A mapping passed as ``hostname`` is taken as the overrides and no
        host policy applies.
        """
        if isinstance(hostname, Mapping):
            overrides, hostname = hostname, None

        host_policy = None
        if isinstance(hostname, str):
            host_policy = self.registry.snapshot(hostname)

        call_policy = None
        if isinstance(overrides, (HostPolicy, Mapping)):
            call_policy = coerce_host_policy(overrides)

        policy = resolve_policy(self.global_policy, host_policy, call_policy)
        logger.debug(
            "Resolved policy for host=%s: store_private=%s store_no_store=%s "
            "ignore_no_last_mod=%s",
            hostname, policy.store_private, policy.store_no_store,
            policy.ignore_no_last_mod,
        )
        return Evaluator.from_policy(policy)
