"""Admission check entrypoint.

Runs the relay's channel admission rules against one or more event JSON
files (or stdin) using the relay's sqlite database, without storing
anything. Exit status is 1 if any event is rejected.

Usage:
    python -m comicrelay.entrypoints.check_event update.json
    cat update.json | python -m comicrelay.entrypoints.check_event --db.path ./db.sqlite
"""

import asyncio
import json
import os
import sys

import bittensor as bt
from dotenv import load_dotenv
from pydantic import ValidationError


async def _check(paths: list[str], settings) -> int:
    from comicrelay.relay.models import Event
    from comicrelay.relay.store.sqlite import SQLiteEventStore
    from comicrelay.relay.validation.admission import build_admission_policy

    store = SQLiteEventStore(db_path=settings.db_path)
    policy = build_admission_policy(store, settings)
    rejected = 0

    try:
        for path in paths or ["-"]:
            try:
                if path == "-":
                    raw = sys.stdin.read()
                else:
                    with open(path) as f:
                        raw = f.read()
                event = Event.model_validate(json.loads(raw))
            except (OSError, json.JSONDecodeError, ValidationError) as e:
                print(f"{path}: unreadable event: {e}")
                rejected += 1
                continue

            verdict = await policy.evaluate(event)
            if verdict.reject:
                rejected += 1
                print(f"{path}: reject: {verdict.message}")
            else:
                print(f"{path}: accept")
    finally:
        await store.close()

    return 1 if rejected else 0


def main() -> None:
    # Load .env if not in test mode
    if os.environ.get("COMICRELAY_TEST_MODE") != "true":
        load_dotenv()

    from comicrelay.base.config import config, load_settings

    parser = config()
    parser.description = "Check events against the relay's channel admission rules"
    parser.add_argument("events", nargs="*", help="Event JSON files ('-' or none for stdin)")
    args = parser.parse_args()
    settings = load_settings(args)

    bt.logging.info({
        "check_event_config": {
            "db_path": settings.db_path,
            "lookup_timeout": settings.lookup_timeout,
            "fallback_relays": settings.fallback_relays,
            "require_reference_tag": settings.require_reference_tag,
        }
    })

    sys.exit(asyncio.run(_check(args.events, settings)))


if __name__ == "__main__":
    main()
