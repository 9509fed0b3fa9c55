"""SQLite-backed EventStore reading the relay's eventstore database.

The table layout matches the sqlite eventstore the relay persists to:
  event(id, pubkey, created_at, kind, tags, content, sig), unique on id.

Admission only ever reads; ``save_event`` exists for seeding and dev tools.
"""

from __future__ import annotations

import json
from typing import Any

import bittensor as bt
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from comicrelay.relay.models import Event
from comicrelay.relay.errors import EventStoreError


_CREATE_EVENT_TABLE = text(
    """
    CREATE TABLE IF NOT EXISTS event (
        id TEXT NOT NULL,
        pubkey TEXT NOT NULL,
        created_at INTEGER NOT NULL,
        kind INTEGER NOT NULL,
        tags JSONB NOT NULL,
        content TEXT NOT NULL,
        sig TEXT NOT NULL
    )
    """
)

_CREATE_ID_INDEX = text("CREATE UNIQUE INDEX IF NOT EXISTS ididx ON event(id)")

_COUNT_BY_KIND_AUTHOR_ID = text(
    """
    SELECT COUNT(*) FROM event
    WHERE kind = :kind AND pubkey = :pubkey AND id = :id
    """
)

_COUNT_BY_KIND_ID = text(
    """
    SELECT COUNT(*) FROM event
    WHERE kind = :kind AND id = :id
    """
)

_INSERT_EVENT = text(
    """
    INSERT OR IGNORE INTO event (id, pubkey, created_at, kind, tags, content, sig)
    VALUES (:id, :pubkey, :created_at, :kind, :tags, :content, :sig)
    """
)


class SQLiteEventStore:
    """Async EventStore over the relay's sqlite file (aiosqlite driver)."""

    def __init__(self, db_path: str, engine: AsyncEngine | None = None):
        self.db_path = db_path
        self._engine = engine or create_async_engine(f"sqlite+aiosqlite:///{db_path}")

    async def init(self) -> None:
        """Create the event table if the database is fresh."""
        async with self._engine.begin() as conn:
            await conn.execute(_CREATE_EVENT_TABLE)
            await conn.execute(_CREATE_ID_INDEX)
        bt.logging.info({"event_store": {"status": "initialized", "db_path": self.db_path}})

    async def close(self) -> None:
        await self._engine.dispose()

    async def _scalar(self, query: Any, params: dict[str, Any]) -> int:
        try:
            async with self._engine.connect() as conn:
                result = await conn.execute(query, params)
                return int(result.scalar_one())
        except SQLAlchemyError as e:
            bt.logging.error({"event_store": {"query_error": str(e), "params": params}})
            raise EventStoreError(str(e)) from e

    # -- EventStore interface --

    async def count_events(self, kind: int, author: str, event_id: str) -> int:
        return await self._scalar(
            _COUNT_BY_KIND_AUTHOR_ID,
            {"kind": kind, "pubkey": author, "id": event_id},
        )

    async def count_by_id(self, kind: int, event_id: str) -> int:
        return await self._scalar(_COUNT_BY_KIND_ID, {"kind": kind, "id": event_id})

    # -- Seeding --

    async def save_event(self, event: Event) -> None:
        """Insert an event; an existing row with the same id is left as is."""
        try:
            async with self._engine.begin() as conn:
                await conn.execute(_INSERT_EVENT, {
                    "id": event.id,
                    "pubkey": event.pubkey,
                    "created_at": event.created_at,
                    "kind": event.kind,
                    "tags": json.dumps(event.tags),
                    "content": event.content,
                    "sig": event.sig,
                })
        except SQLAlchemyError as e:
            raise EventStoreError(str(e)) from e


__all__ = ["SQLiteEventStore"]
