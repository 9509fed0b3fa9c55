# The MIT License (MIT)
# Copyright © 2023 Yuma Rao
# Copyright © 2023 Opentensor Foundation

# Permission is hereby granted, free of charge, to any person obtaining a copy of this software and associated
# documentation files (the “Software”), to deal in the Software without restriction, including without limitation
# the rights to use, copy, modify, merge, publish, distribute, sublicense, and/or sell copies of the Software,
# and to permit persons to whom the Software is furnished to do so, subject to the following conditions:

# The above copyright notice and this permission notice shall be included in all copies or substantial portions of
# the Software.

# THE SOFTWARE IS PROVIDED “AS IS”, WITHOUT WARRANTY OF ANY KIND, EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO
# THE WARRANTIES OF MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL
# THE AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN ACTION
# OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER
# DEALINGS IN THE SOFTWARE.

import argparse
import os
from typing import Any, Mapping, Optional

import bittensor as bt
from pydantic import BaseModel, Field

from comicrelay.relay.validation.lookup import DEFAULT_FALLBACK_RELAYS


class AdmissionSettings(BaseModel):
    """Runtime settings for channel admission."""

    db_path: str = "./db.sqlite"
    lookup_timeout: float = Field(default=5.0, gt=0)
    admission_timeout: float = Field(default=10.0, gt=0)
    fallback_relays: list[str] = Field(default_factory=lambda: list(DEFAULT_FALLBACK_RELAYS))
    require_reference_tag: bool = False


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _parse_relays(value: str) -> list[str]:
    return [url.strip() for url in value.split(",") if url.strip()]


# env var -> (settings field, parser)
_ENV_OVERRIDES = {
    "COMICRELAY_DB__PATH": ("db_path", str),
    "COMICRELAY_ADMISSION__LOOKUP_TIMEOUT": ("lookup_timeout", float),
    "COMICRELAY_ADMISSION__TIMEOUT": ("admission_timeout", float),
    "COMICRELAY_ADMISSION__FALLBACK_RELAYS": ("fallback_relays", _parse_relays),
    "COMICRELAY_ADMISSION__REQUIRE_REFERENCE_TAG": ("require_reference_tag", _parse_bool),
}


def add_args(parser: argparse.ArgumentParser) -> None:
    """
    Adds admission arguments to the parser.
    """

    parser.add_argument(
        "--db.path",
        type=str,
        help="Path to the relay's sqlite event database.",
        default=None,
    )

    parser.add_argument(
        "--admission.lookup_timeout",
        type=float,
        help="Seconds a remote creation-event lookup may take.",
        default=None,
    )

    parser.add_argument(
        "--admission.timeout",
        type=float,
        help="Seconds a single admission rule may take before the event is rejected.",
        default=None,
    )

    parser.add_argument(
        "--admission.fallback_relays",
        type=str,
        nargs="+",
        help="Relays queried when an update carries no relay hint.",
        default=None,
    )

    parser.add_argument(
        "--admission.require_reference_tag",
        action="store_true",
        help="Reject channel updates that carry no 'e' reference tag.",
        default=None,
    )


def load_settings(
    args: Optional[argparse.Namespace] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> AdmissionSettings:
    """Build settings from defaults, then CLI args, then env vars.

    Environment variables have the highest priority.
    """
    values: dict[str, Any] = {}

    if args is not None:
        cli = {
            "db_path": getattr(args, "db.path", None),
            "lookup_timeout": getattr(args, "admission.lookup_timeout", None),
            "admission_timeout": getattr(args, "admission.timeout", None),
            "fallback_relays": getattr(args, "admission.fallback_relays", None),
            "require_reference_tag": getattr(args, "admission.require_reference_tag", None),
        }
        values.update({k: v for k, v in cli.items() if v is not None})

    environ = os.environ if environ is None else environ
    for env_key, (field, parse) in _ENV_OVERRIDES.items():
        raw = environ.get(env_key)
        if raw:
            values[field] = parse(raw)

    settings = AdmissionSettings(**values)
    bt.logging.debug({"admission_config": settings.model_dump()})
    return settings


def config() -> argparse.ArgumentParser:
    """
    Returns a parser with logging and admission arguments registered.
    """
    parser = argparse.ArgumentParser()
    bt.logging.add_args(parser)
    add_args(parser)
    return parser
