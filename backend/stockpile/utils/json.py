"""JSON helpers for event payload columns."""

import json
from typing import Any


def dump_payload(payload: dict[str, Any]) -> str:
    """Serialize a payload dict for the item_events.payload column."""
    return json.dumps(payload, separators=(",", ":"))


def parse_payload(raw: str | dict | None) -> dict[str, Any]:
    """Parse a stored payload into a dict.

    Accepts dicts as-is. Returns an empty dict for None, empty strings,
    invalid JSON and JSON that is not an object, so a damaged row replays
    as a malformed event instead of aborting the read.
    """
    if raw is None:
        return {}
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, str):
        if not raw:
            return {}
        try:
            parsed = json.loads(raw)
        except (ValueError, TypeError):
            return {}
        if isinstance(parsed, dict):
            return parsed
    return {}
