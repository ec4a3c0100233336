# src/policy/models.py — v1
"""Cache policy models: GlobalPolicy, HostPolicy and their merge rules.

Only the recognized policy fields take part in merging. Unknown fields
passed in host configuration are dropped on validation.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

# (request or response mapping, evaluator) -> decided
Validator = Callable[[Mapping[str, Any], Any], bool]

POLICY_FLAGS = ("store_private", "store_no_store", "ignore_no_last_mod")
POLICY_CHAINS = ("request_validators", "response_validators")


class _PolicyModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        arbitrary_types_allowed=True,
        extra="ignore",
    )


class GlobalPolicy(_PolicyModel):
    """Process-wide defaults applied to every evaluator."""

    store_private: bool = False
    store_no_store: bool = False
    ignore_no_last_mod: bool = False
    request_validators: list[Validator] = []
    response_validators: list[Validator] = []


class HostPolicy(_PolicyModel):
    """Partial policy override; ``None`` means "inherit"."""

    store_private: bool | None = None
    store_no_store: bool | None = None
    ignore_no_last_mod: bool | None = None
    request_validators: list[Validator] | None = None
    response_validators: list[Validator] | None = None

    def is_empty(self) -> bool:
        return all(
            getattr(self, name) is None for name in POLICY_FLAGS + POLICY_CHAINS
        )


class ResolvedPolicy(_PolicyModel):
    """Effective flags and chains for one evaluator."""

    store_private: bool = False
    store_no_store: bool = False
    ignore_no_last_mod: bool = False
    request_validators: list[Validator] = []
    response_validators: list[Validator] = []


def coerce_host_policy(config: HostPolicy | Mapping[str, Any] | None) -> HostPolicy:
    """Validate a host/call override, dropping unrecognized fields."""
    if config is None:
        return HostPolicy()
    if isinstance(config, HostPolicy):
        return config.model_copy()
    return HostPolicy.model_validate(dict(config))


def merge_host_policy(base: HostPolicy, update: HostPolicy) -> HostPolicy:
    """Field-by-field merge: fields defined on ``update`` replace ``base``."""
    merged = base.model_copy()
    for name in POLICY_FLAGS:
        value = getattr(update, name)
        if value is not None:
            setattr(merged, name, value)
    for name in POLICY_CHAINS:
        chain = getattr(update, name)
        if chain is not None:
            setattr(merged, name, list(chain))
    return merged


def resolve_policy(
    global_policy: GlobalPolicy,
    host_policy: HostPolicy | None = None,
    overrides: HostPolicy | None = None,
) -> ResolvedPolicy:
    """Layer global, host and per-call settings into one policy.

    Flags: the narrowest scope that defines a value wins.
    Chains: narrowest scope runs first (call, host, then global).
    """
    layers = [layer for layer in (host_policy, overrides) if layer is not None]

    flags = {name: getattr(global_policy, name) for name in POLICY_FLAGS}
    for layer in layers:
        for name in POLICY_FLAGS:
            value = getattr(layer, name)
            if value is not None:
                flags[name] = value

    chains: dict[str, list[Validator]] = {}
    for name in POLICY_CHAINS:
        chain = list(getattr(global_policy, name))
        for layer in layers:
            scoped = getattr(layer, name)
            if scoped:
                chain = list(scoped) + chain
        chains[name] = chain

    return ResolvedPolicy(**flags, **chains)
