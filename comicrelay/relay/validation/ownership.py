"""Ownership check for channel metadata updates (kind 41).

An update is legitimate only if the kind 40 event it references was
authored by the same pubkey. Lookups are scoped by the update's author, so
an update from anyone else never finds a matching creation event.

Order is fixed: local store first, remote relays only on a local miss.
The path is read-only.
"""

from __future__ import annotations

import bittensor as bt

from comicrelay.relay.models import (
    GROUP_CREATE_KIND,
    GROUP_UPDATE_KIND,
    CreationProof,
    Event,
    LookupSource,
    ReferenceTag,
    Verdict,
)
from comicrelay.relay.errors import CreationLookupError, EventStoreError, UnauthorizedUpdate
from comicrelay.relay.store.interface import EventStore

from .content import validate_group_content
from .lookup import RemoteLookup


MISSING_REFERENCE_MESSAGE = "missing channel reference"


class OwnershipResolver:
    """Validates kind 41 updates against their referenced kind 40 event."""

    def __init__(
        self,
        store: EventStore,
        lookup: RemoteLookup,
        require_reference_tag: bool = False,
    ):
        self.store = store
        self.lookup = lookup
        self.require_reference_tag = require_reference_tag

    async def __call__(self, event: Event) -> Verdict:
        return await self.validate(event)

    async def validate(self, event: Event) -> Verdict:
        if event.kind != GROUP_UPDATE_KIND:
            return Verdict.accept()

        ref = ReferenceTag.from_event(event)
        if not ref.present:
            if self.require_reference_tag:
                return Verdict.deny(MISSING_REFERENCE_MESSAGE)
            bt.logging.warning({"ownership": {"event_id": event.id, "missing_reference": True}})

        try:
            await self.resolve(event, ref)
        except EventStoreError as e:
            return Verdict.deny(f"41 channel select error: {e}")
        except CreationLookupError as e:
            return Verdict.deny(f"failed to get create event: {e}")

        return validate_group_content(event)

    async def resolve(self, event: Event, ref: ReferenceTag | None = None) -> CreationProof:
        """Find the creation event ``event`` references.

        Raises EventStoreError on a local store fault and a
        CreationLookupError subclass when the reference cannot be resolved.
        """
        ref = ref or ReferenceTag.from_event(event)
        event_id = ref.referenced_event_id

        count = await self.store.count_events(GROUP_CREATE_KIND, event.pubkey, event_id)
        if count > 0:
            return CreationProof(found=True, source=LookupSource.LOCAL)

        # Known locally, but under someone else's key
        if event_id and await self.store.count_by_id(GROUP_CREATE_KIND, event_id) > 0:
            bt.logging.info({"ownership": {
                "event_id": event.id,
                "referenced": event_id,
                "author": event.pubkey[:16],
                "status": "unauthorized",
            }})
            raise UnauthorizedUpdate()

        found, source = await self.lookup.get_create_event(
            event.pubkey, event_id, ref.relay_hint,
        )
        return CreationProof(found=True, source=source, event=found)


__all__ = ["MISSING_REFERENCE_MESSAGE", "OwnershipResolver"]
