"""Seed channel creation events into a local relay database.

Stores one or more kind 40 event JSON files in the sqlite event table so
that updates referencing them resolve locally during development.

Usage:
    uv run python scripts/dev/seed_channel.py channel.json
    COMICRELAY_DB__PATH=./db.sqlite uv run python scripts/dev/seed_channel.py a.json b.json
"""

import asyncio
import json
import os
import sys

# Ensure project root on sys.path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))


async def main(paths: list[str]) -> None:
    import bittensor as bt

    from comicrelay.relay.models import GROUP_CREATE_KIND, Event
    from comicrelay.relay.store.sqlite import SQLiteEventStore

    db_path = os.environ.get("COMICRELAY_DB__PATH", "./db.sqlite")
    store = SQLiteEventStore(db_path=db_path)
    await store.init()

    seeded = 0
    try:
        for path in paths:
            with open(path) as f:
                event = Event.model_validate(json.load(f))
            if event.kind != GROUP_CREATE_KIND:
                print(f"skip {path}: kind {event.kind} is not a channel creation")
                continue
            await store.save_event(event)
            seeded += 1
            print(f"seeded {event.id} from {path}")
    finally:
        await store.close()

    bt.logging.info({"seed_channel": {"db_path": db_path, "seeded": seeded}})


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("usage: seed_channel.py EVENT_JSON [EVENT_JSON ...]")
        sys.exit(1)
    asyncio.run(main(sys.argv[1:]))
