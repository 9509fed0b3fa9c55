"""Tests for channel metadata content validation."""

import json

import pytest

from comicrelay.relay.models import GROUP_CREATE_KIND, GROUP_UPDATE_KIND, Event
from comicrelay.relay.validation.content import (
    INVALID_CONTENT_MESSAGE,
    validate_create_group,
    validate_group_content,
)


def _event(kind: int, content: str) -> Event:
    return Event(id="1" * 64, pubkey="a" * 64, created_at=1_700_000_000, kind=kind, content=content)


VALID = json.dumps({
    "name": "Demo Channel",
    "about": "A test channel.",
    "picture": "https://robohash.org/demo-channel?set=set4&size=200x200",
    "relays": ["ws://localhost:3334"],
})


class TestValidateGroupContent:

    @pytest.mark.parametrize("kind", [GROUP_CREATE_KIND, GROUP_UPDATE_KIND])
    def test_valid_metadata_accepted(self, kind):
        assert validate_group_content(_event(kind, VALID)) == (False, "")

    @pytest.mark.parametrize("content", [
        "",
        "{not json",
        '"just a string"',
        "[1, 2, 3]",
        "42",
        '{"name": 1}',
        '{"name": true}',
        '{"relays": "wss://one"}',
        '{"relays": [1]}',
        '{"picture": {"url": "x"}}',
        '{"name": "x", "extra": NaN}',
        '{"name": "x", "extra": Infinity}',
        '{"name": "x", "extra": -Infinity}',
    ])
    def test_malformed_metadata_rejected(self, content):
        assert validate_group_content(_event(GROUP_CREATE_KIND, content)) == (True, INVALID_CONTENT_MESSAGE)

    @pytest.mark.parametrize("content", [
        "{}",
        "null",
        '{"name": "only a name"}',
        '{"name": "x", "extra": [1, 2], "id": "abc"}',
        '{"name": null, "relays": null}',
        '{"relays": [null]}',
        '{"relays": ["wss://one", null]}',
        '{"name": "", "about": "", "picture": "not a uri", "relays": []}',
    ])
    def test_structurally_valid_edge_cases_accepted(self, content):
        assert validate_group_content(_event(GROUP_UPDATE_KIND, content)) == (False, "")

    @pytest.mark.parametrize("kind", [0, 1, 7, 42, 30023])
    def test_other_kinds_ignored(self, kind):
        assert validate_group_content(_event(kind, "{not json")) == (False, "")

    def test_message_text(self):
        assert INVALID_CONTENT_MESSAGE == "Invalid content"


@pytest.mark.asyncio
class TestValidateCreateGroup:

    async def test_creation_checked(self):
        assert await validate_create_group(_event(GROUP_CREATE_KIND, VALID)) == (False, "")
        assert await validate_create_group(_event(GROUP_CREATE_KIND, "nope")) == (True, "Invalid content")

    async def test_update_left_to_ownership_rule(self):
        assert await validate_create_group(_event(GROUP_UPDATE_KIND, "nope")) == (False, "")
