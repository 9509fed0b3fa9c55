"""Channel (group) admission rules for the relay.

Kind 40 creates a channel; kind 41 updates its metadata and must point at
a kind 40 event by the same author, found in the local store or on another
relay.
"""

from .models import (
    GROUP_CREATE_KIND,
    GROUP_UPDATE_KIND,
    CreationProof,
    Event,
    Filter,
    GroupMetadata,
    LookupSource,
    ReferenceTag,
    Verdict,
)

__all__ = [
    "GROUP_CREATE_KIND",
    "GROUP_UPDATE_KIND",
    "CreationProof",
    "Event",
    "Filter",
    "GroupMetadata",
    "LookupSource",
    "ReferenceTag",
    "Verdict",
]
