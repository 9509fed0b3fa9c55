"""Tests for remote creation-event lookup (hinted and pool modes)."""

import asyncio

import pytest

from comicrelay.relay.models import GROUP_CREATE_KIND, Event, Filter, LookupSource
from comicrelay.relay.errors import (
    CreationNotFound,
    LookupTimeout,
    RelayConnectionError,
    RelayQueryError,
)
from comicrelay.relay.validation.lookup import DEFAULT_FALLBACK_RELAYS, RemoteLookup


AUTHOR = "a" * 64
EVENT_ID = "e" * 64


def _creation(author=AUTHOR, event_id=EVENT_ID) -> Event:
    return Event(
        id=event_id, pubkey=author, created_at=1_700_000_000,
        kind=GROUP_CREATE_KIND, content='{"name": "x"}',
    )


class _ScriptedClient:
    """Relay client whose behaviour is scripted per URL."""

    def __init__(self, url, script, log):
        self.url = url
        self.script = script.get(url, {})
        self.log = log
        self.closed = False
        self.filters: list[Filter] = []
        log.append(self)

    async def connect(self):
        if self.script.get("connect_error"):
            raise RelayConnectionError(self.script["connect_error"])

    async def query_sync(self, flt):
        self.filters.append(flt)
        await asyncio.sleep(self.script.get("delay", 0))
        if self.script.get("query_error"):
            raise RelayQueryError(self.script["query_error"])
        return list(self.script.get("events", []))

    async def close(self):
        self.closed = True


def _lookup(script, relays=("wss://p1", "wss://p2", "wss://p3"), timeout=1.0):
    log: list[_ScriptedClient] = []
    lookup = RemoteLookup(
        fallback_relays=relays,
        timeout=timeout,
        client_factory=lambda url: _ScriptedClient(url, script, log),
    )
    return lookup, log


@pytest.mark.asyncio
class TestHintedLookup:

    async def test_single_result_is_returned(self):
        lookup, log = _lookup({"wss://hint": {"events": [_creation()]}})

        event, source = await lookup.get_create_event(AUTHOR, EVENT_ID, "wss://hint")

        assert event.id == EVENT_ID
        assert source == LookupSource.REMOTE_HINT
        assert len(log) == 1 and log[0].closed

    async def test_query_is_scoped_to_author_id_and_kind(self):
        lookup, log = _lookup({"wss://hint": {"events": [_creation()]}})
        await lookup.get_create_event(AUTHOR, EVENT_ID, "wss://hint")

        flt = log[0].filters[0]
        assert flt.kinds == [GROUP_CREATE_KIND]
        assert flt.authors == [AUTHOR]
        assert flt.ids == [EVENT_ID]

    async def test_zero_results_not_found(self):
        lookup, log = _lookup({"wss://hint": {"events": []}})
        with pytest.raises(CreationNotFound, match="40 channel not found"):
            await lookup.get_create_event(AUTHOR, EVENT_ID, "wss://hint")
        assert log[0].closed

    async def test_multiple_results_not_found(self):
        lookup, _ = _lookup({"wss://hint": {"events": [_creation(), _creation()]}})
        with pytest.raises(CreationNotFound):
            await lookup.get_create_event(AUTHOR, EVENT_ID, "wss://hint")

    async def test_connect_error_propagates_and_closes(self):
        lookup, log = _lookup({"wss://hint": {"connect_error": "refused"}})
        with pytest.raises(RelayConnectionError, match="refused"):
            await lookup.get_create_event(AUTHOR, EVENT_ID, "wss://hint")
        assert log[0].closed

    async def test_query_error_propagates_and_closes(self):
        lookup, log = _lookup({"wss://hint": {"query_error": "connection reset"}})
        with pytest.raises(RelayQueryError, match="connection reset"):
            await lookup.get_create_event(AUTHOR, EVENT_ID, "wss://hint")
        assert log[0].closed

    async def test_timeout(self):
        lookup, log = _lookup({"wss://hint": {"events": [_creation()], "delay": 1.0}}, timeout=0.05)
        with pytest.raises(LookupTimeout, match="timed out"):
            await lookup.get_create_event(AUTHOR, EVENT_ID, "wss://hint")
        assert log[0].closed

    async def test_hint_does_not_touch_pool(self):
        lookup, log = _lookup({"wss://hint": {"events": []}, "wss://p1": {"events": [_creation()]}})
        with pytest.raises(CreationNotFound):
            await lookup.get_create_event(AUTHOR, EVENT_ID, "wss://hint")
        assert [c.url for c in log] == ["wss://hint"]


@pytest.mark.asyncio
class TestPoolLookup:

    async def test_first_matching_relay_wins(self):
        lookup, log = _lookup({
            "wss://p1": {"events": [_creation()], "delay": 0.5},
            "wss://p2": {"events": [_creation()], "delay": 0.0},
            "wss://p3": {"events": [], "delay": 0.0},
        })

        event, source = await lookup.get_create_event(AUTHOR, EVENT_ID)

        assert event.id == EVENT_ID
        assert source == LookupSource.REMOTE_POOL
        # slow branch abandoned, every connection released
        assert len(log) == 3
        assert all(c.closed for c in log)

    async def test_failing_relays_are_skipped(self):
        lookup, _ = _lookup({
            "wss://p1": {"connect_error": "refused"},
            "wss://p2": {"query_error": "reset"},
            "wss://p3": {"events": [_creation()], "delay": 0.05},
        })

        event, _ = await lookup.get_create_event(AUTHOR, EVENT_ID)
        assert event.id == EVENT_ID

    async def test_all_relays_empty_not_found(self):
        lookup, log = _lookup({})
        with pytest.raises(CreationNotFound, match="40 channel not found"):
            await lookup.get_create_event(AUTHOR, EVENT_ID)
        assert all(c.closed for c in log)

    async def test_all_relays_failing_not_found(self):
        lookup, _ = _lookup({
            "wss://p1": {"connect_error": "refused"},
            "wss://p2": {"connect_error": "refused"},
            "wss://p3": {"query_error": "reset"},
        })
        with pytest.raises(CreationNotFound):
            await lookup.get_create_event(AUTHOR, EVENT_ID)

    async def test_deadline_not_found(self):
        lookup, log = _lookup(
            {url: {"events": [_creation()], "delay": 1.0} for url in ("wss://p1", "wss://p2", "wss://p3")},
            timeout=0.05,
        )
        with pytest.raises(CreationNotFound):
            await lookup.get_create_event(AUTHOR, EVENT_ID)
        assert all(c.closed for c in log)

    async def test_empty_pool_not_found(self):
        lookup, log = _lookup({}, relays=())
        with pytest.raises(CreationNotFound):
            await lookup.get_create_event(AUTHOR, EVENT_ID)
        assert log == []


def test_default_fallback_relays():
    lookup = RemoteLookup()
    assert lookup.fallback_relays == list(DEFAULT_FALLBACK_RELAYS)
    assert "wss://relay.damus.io" in lookup.fallback_relays
    assert len(lookup.fallback_relays) == 6
