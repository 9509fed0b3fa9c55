"""Structural validation of channel metadata content."""

from __future__ import annotations

from pydantic import ValidationError

from comicrelay.relay.models import (
    GROUP_CREATE_KIND,
    GROUP_UPDATE_KIND,
    Event,
    Verdict,
    parse_group_metadata,
)


INVALID_CONTENT_MESSAGE = "Invalid content"


def validate_group_content(event: Event) -> Verdict:
    """Reject kind 40/41 events whose content is not channel metadata.

    Only the shape is checked; empty names or odd picture URIs pass.
    """
    if event.kind not in (GROUP_CREATE_KIND, GROUP_UPDATE_KIND):
        return Verdict.accept()

    try:
        parse_group_metadata(event.content)
    except (ValueError, ValidationError):
        return Verdict.deny(INVALID_CONTENT_MESSAGE)
    return Verdict.accept()


async def validate_create_group(event: Event) -> Verdict:
    """Admission rule for kind 40. Updates are left to OwnershipResolver."""
    if event.kind != GROUP_CREATE_KIND:
        return Verdict.accept()
    return validate_group_content(event)


__all__ = ["INVALID_CONTENT_MESSAGE", "validate_create_group", "validate_group_content"]
