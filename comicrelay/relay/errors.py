"""Failure taxonomy for channel admission.

None of these cross the admission boundary: the resolver turns each one
into a reject verdict whose message embeds ``str(error)``.
"""

from __future__ import annotations


class EventStoreError(Exception):
    """The local event store failed to answer a read (not "zero rows")."""


class CreationLookupError(Exception):
    """The referenced channel creation event could not be obtained."""


class CreationNotFound(CreationLookupError):
    """No unique matching creation event was returned."""

    def __init__(self, reason: str = "40 channel not found"):
        super().__init__(reason)


class UnauthorizedUpdate(CreationLookupError):
    """A creation event with the referenced id exists under another author."""

    def __init__(self, reason: str = "40 channel not owned by author"):
        super().__init__(reason)


class RelayConnectionError(CreationLookupError):
    """Could not open a connection to a relay."""


class RelayQueryError(CreationLookupError):
    """The relay connection failed or was closed mid-query."""


class LookupTimeout(CreationLookupError):
    """The remote lookup exceeded its deadline."""


__all__ = [
    "CreationLookupError",
    "CreationNotFound",
    "EventStoreError",
    "LookupTimeout",
    "RelayConnectionError",
    "RelayQueryError",
    "UnauthorizedUpdate",
]
