"""Admission policy: the reject rules consulted before an event is stored.

Rules are ``async (event) -> (reject, message)`` callables evaluated in
registration order. All rules run for every event; the first rejection
decides the message handed back to the submitting client. A rule that
raises or overruns the admission deadline rejects the event instead of
taking the relay down.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Awaitable, Callable

import bittensor as bt

from comicrelay.relay.models import Event, Verdict
from comicrelay.relay.network.interface import RelayClientFactory
from comicrelay.relay.store.interface import EventStore

from .content import validate_create_group
from .lookup import RemoteLookup
from .ownership import OwnershipResolver

if TYPE_CHECKING:
    from comicrelay.base.config import AdmissionSettings


RejectRule = Callable[[Event], Awaitable[Verdict]]


class AdmissionPolicy:
    """Ordered set of reject rules. Holds no per-event state."""

    def __init__(self, timeout: float | None = 10.0) -> None:
        self.timeout = timeout
        self._rules: list[tuple[str, RejectRule]] = []

    def register(self, rule: RejectRule, name: str | None = None) -> None:
        name = name or getattr(rule, "__name__", type(rule).__name__)
        if any(existing == name for existing, _ in self._rules):
            raise ValueError(f"Rule already registered: {name}")
        self._rules.append((name, rule))
        bt.logging.debug({"admission_rule_registered": name})

    @property
    def rules(self) -> list[str]:
        return [name for name, _ in self._rules]

    async def _run_rule(self, name: str, rule: RejectRule, event: Event) -> Verdict:
        try:
            reject, message = await asyncio.wait_for(rule(event), timeout=self.timeout)
        except asyncio.TimeoutError:
            bt.logging.warning({"admission": {"rule": name, "event_id": event.id, "error": "timeout"}})
            return Verdict.deny(f"error: {name} timed out after {self.timeout}s")
        except Exception as e:
            bt.logging.error({"admission": {"rule": name, "event_id": event.id, "error": str(e)}})
            return Verdict.deny(f"error: {e}")
        return Verdict(bool(reject), message)

    async def evaluate(self, event: Event) -> Verdict:
        """Run every rule and return the first rejection, or accept."""
        verdicts = [await self._run_rule(name, rule, event) for name, rule in self._rules]

        for (name, _), verdict in zip(self._rules, verdicts):
            if verdict.reject:
                bt.logging.info({"admission": {
                    "event_id": event.id,
                    "kind": event.kind,
                    "rule": name,
                    "status": "rejected",
                    "message": verdict.message,
                }})
                return verdict

        bt.logging.debug({"admission": {"event_id": event.id, "kind": event.kind, "status": "accepted"}})
        return Verdict.accept()


def build_admission_policy(
    store: EventStore,
    settings: AdmissionSettings,
    client_factory: RelayClientFactory | None = None,
) -> AdmissionPolicy:
    """Wire the channel rules: creation content first, then update ownership."""
    lookup = RemoteLookup(
        fallback_relays=settings.fallback_relays,
        timeout=settings.lookup_timeout,
        client_factory=client_factory,
    )
    resolver = OwnershipResolver(
        store=store,
        lookup=lookup,
        require_reference_tag=settings.require_reference_tag,
    )

    policy = AdmissionPolicy(timeout=settings.admission_timeout)
    policy.register(validate_create_group)
    policy.register(resolver, name="validate_update_group")
    return policy


__all__ = ["AdmissionPolicy", "RejectRule", "build_admission_policy"]
