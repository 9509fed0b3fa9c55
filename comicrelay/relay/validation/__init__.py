"""Reject rules for channel events.

Creation events get a content shape check; update events get an
ownership check (local store, then remote relays) followed by the same
content check.
"""

from comicrelay.relay.errors import (
    CreationLookupError,
    CreationNotFound,
    EventStoreError,
    LookupTimeout,
    RelayConnectionError,
    RelayQueryError,
    UnauthorizedUpdate,
)
from .admission import AdmissionPolicy, RejectRule, build_admission_policy
from .content import validate_create_group, validate_group_content
from .lookup import DEFAULT_FALLBACK_RELAYS, RemoteLookup
from .ownership import OwnershipResolver

__all__ = [
    "DEFAULT_FALLBACK_RELAYS",
    "AdmissionPolicy",
    "CreationLookupError",
    "CreationNotFound",
    "EventStoreError",
    "LookupTimeout",
    "OwnershipResolver",
    "RejectRule",
    "RelayConnectionError",
    "RelayQueryError",
    "RemoteLookup",
    "UnauthorizedUpdate",
    "build_admission_policy",
    "validate_create_group",
    "validate_group_content",
]
