"""Pydantic models for relay events and the group (channel) object model.

Two event kinds are admission-controlled here:
- kind 40: channel creation, authored by the channel owner
- kind 41: channel metadata update, referencing a kind 40 event by id
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, NamedTuple

from pydantic import BaseModel, Field, StrictStr, field_validator, model_validator


# ---------------------------------------------------------------------------
# Kinds and tag markers
# ---------------------------------------------------------------------------

GROUP_CREATE_KIND = 40
GROUP_UPDATE_KIND = 41

REFERENCE_MARKER = "e"


# ---------------------------------------------------------------------------
# Wire-level event and filter
# ---------------------------------------------------------------------------


class Event(BaseModel):
    """A signed relay event. Signatures are verified before admission runs."""

    id: str
    pubkey: str
    created_at: int
    kind: int
    tags: list[list[str]] = Field(default_factory=list)
    content: str = ""
    sig: str = ""

    def first_tag(self, marker: str) -> list[str] | None:
        """Return the first tag whose marker (element 0) equals ``marker``."""
        for tag in self.tags:
            if tag and tag[0] == marker:
                return tag
        return None


class Filter(BaseModel):
    """Subscription filter, restricted to the fields admission needs."""

    ids: list[str] = Field(default_factory=list)
    authors: list[str] = Field(default_factory=list)
    kinds: list[int] = Field(default_factory=list)
    limit: int | None = None

    def matches(self, event: Event) -> bool:
        if self.ids and event.id not in self.ids:
            return False
        if self.authors and event.pubkey not in self.authors:
            return False
        if self.kinds and event.kind not in self.kinds:
            return False
        return True

    def to_wire(self) -> dict[str, Any]:
        """Serialize as a NIP-01 filter object, omitting empty constraints."""
        wire: dict[str, Any] = {}
        if self.ids:
            wire["ids"] = list(self.ids)
        if self.authors:
            wire["authors"] = list(self.authors)
        if self.kinds:
            wire["kinds"] = list(self.kinds)
        if self.limit is not None:
            wire["limit"] = self.limit
        return wire


def creation_filter(author: str, event_id: str) -> Filter:
    """Filter selecting one author's channel creation event by id."""
    return Filter(kinds=[GROUP_CREATE_KIND], authors=[author], ids=[event_id])


# ---------------------------------------------------------------------------
# Channel metadata (content of kind 40 / 41)
# ---------------------------------------------------------------------------


class GroupMetadata(BaseModel):
    """Display state of a channel.

    Carries no identity: the owner is the author of the event that
    carried it. Unknown keys are ignored and missing keys default to
    empty, but present keys must have the right JSON type.
    """

    model_config = {"strict": True, "extra": "ignore"}

    name: StrictStr = ""
    about: StrictStr = ""
    picture: StrictStr = ""
    relays: list[StrictStr] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        # JSON null leaves a field at its default
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data

    @field_validator("relays", mode="before")
    @classmethod
    def _null_relays_empty(cls, value: Any) -> Any:
        # null entries decode to empty strings
        if isinstance(value, list):
            return ["" if v is None else v for v in value]
        return value


def _reject_constant(token: str) -> Any:
    raise ValueError(f"non-standard JSON constant: {token}")


def parse_group_metadata(content: str) -> GroupMetadata:
    """Parse event content into GroupMetadata.

    Raises ValueError (json.JSONDecodeError or pydantic.ValidationError)
    when the payload does not have the metadata shape. A bare ``null``
    document parses to empty metadata. NaN and Infinity are not JSON.
    """
    data = json.loads(content, parse_constant=_reject_constant)
    if data is None:
        return GroupMetadata()
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    return GroupMetadata.model_validate(data)


# ---------------------------------------------------------------------------
# Reference tag and creation proof
# ---------------------------------------------------------------------------


class ReferenceTag(BaseModel):
    """``["e", <referenced_event_id>, <relay_hint>]`` extracted from an update."""

    referenced_event_id: str = ""
    relay_hint: str = ""
    present: bool = False

    @classmethod
    def from_event(cls, event: Event) -> ReferenceTag:
        tag = event.first_tag(REFERENCE_MARKER)
        if tag is None:
            return cls()
        return cls(
            referenced_event_id=tag[1] if len(tag) > 1 else "",
            relay_hint=tag[2] if len(tag) > 2 else "",
            present=True,
        )


class LookupSource(str, Enum):
    """Where a creation event was found."""

    LOCAL = "local"
    REMOTE_HINT = "remote_hint"
    REMOTE_POOL = "remote_pool"


@dataclass
class CreationProof:
    """Outcome of resolving a referenced creation event. Never cached."""

    found: bool
    source: LookupSource
    event: Event | None = None

    def __bool__(self) -> bool:
        return self.found


class Verdict(NamedTuple):
    """Admission verdict: ``(reject, message)``."""

    reject: bool
    message: str = ""

    @classmethod
    def accept(cls) -> Verdict:
        return cls(False, "")

    @classmethod
    def deny(cls, message: str) -> Verdict:
        return cls(True, message)


__all__ = [
    "GROUP_CREATE_KIND",
    "GROUP_UPDATE_KIND",
    "REFERENCE_MARKER",
    "CreationProof",
    "Event",
    "Filter",
    "GroupMetadata",
    "LookupSource",
    "ReferenceTag",
    "Verdict",
    "creation_filter",
    "parse_group_metadata",
]
