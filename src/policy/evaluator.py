# src/policy/evaluator.py — v1
"""Single-use cacheability evaluator for one request/response cycle.

Decision flags are tri-state: ``None`` (undecided), ``True`` or ``False``.
Once a flag holds a boolean it never changes, so the first validator to
decide wins.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from rfccache.policy.models import ResolvedPolicy, Validator
from rfccache.policy.validators import REQUEST_VALIDATORS, RESPONSE_VALIDATORS

logger = logging.getLogger(__name__)


class Evaluator:
    """Memoizing evaluator built from a resolved policy.

    Not safe to share between concurrent request cycles.
    """

    def __init__(
        self,
        store_private: bool = False,
        store_no_store: bool = False,
        ignore_no_last_mod: bool = False,
        request_validators: Iterable[Validator] = (),
        response_validators: Iterable[Validator] = (),
    ) -> None:
        self.store_private = store_private
        self.store_no_store = store_no_store
        self.ignore_no_last_mod = ignore_no_last_mod
        self.request_validators: tuple[Validator, ...] = (
            tuple(request_validators) + REQUEST_VALIDATORS
        )
        self.response_validators: tuple[Validator, ...] = (
            tuple(response_validators) + RESPONSE_VALIDATORS
        )

        self.retrievable: bool | None = None
        self.storable: bool | None = None
        self.private: bool | None = None

        self._request_evaluated = False
        self._response_evaluated = False

    @classmethod
    def from_policy(cls, policy: ResolvedPolicy) -> Evaluator:
        return cls(
            store_private=policy.store_private,
            store_no_store=policy.store_no_store,
            ignore_no_last_mod=policy.ignore_no_last_mod,
            request_validators=policy.request_validators,
            response_validators=policy.response_validators,
        )

    # --- Set-once flag setters ---

    def flag_retrievable(self, flag: bool | None = True) -> None:
        if self.retrievable is None:
            self.retrievable = True if flag is None else bool(flag)

    def flag_storable(self, flag: bool | None = True) -> None:
        if self.storable is None:
            self.storable = True if flag is None else bool(flag)

    def flag_private(self, flag: bool | None = True) -> None:
        if self.private is None:
            self.private = True if flag is None else bool(flag)

    # --- Decisions ---

    def is_retrievable(self, request: Mapping[str, Any]) -> bool:
        """Whether a stored response may answer ``request``."""
        if self.retrievable is None and not self._request_evaluated:
            self._request_evaluated = True
            self._run_chain(self.request_validators, request)
        return bool(self.retrievable)

    def is_storable(self, response: Mapping[str, Any]) -> bool:
        """Whether ``response`` may be written to the cache."""
        if self.storable is None and not self._response_evaluated:
            self._response_evaluated = True
            self._run_chain(self.response_validators, response)
        return bool(self.storable)

    def _run_chain(
        self, chain: Iterable[Validator], subject: Mapping[str, Any]
    ) -> None:
        for validator in chain:
            if validator(subject, self):
                logger.debug(
                    "Decided by %s: retrievable=%s storable=%s private=%s",
                    getattr(validator, "__name__", repr(validator)),
                    self.retrievable, self.storable, self.private,
                )
                return

    def __repr__(self) -> str:
        return (
            f"Evaluator(retrievable={self.retrievable}, storable={self.storable}, "
            f"private={self.private})"
        )
