"""Timestamp helpers.

Timestamps are stored as ISO-8601 strings in UTC.
"""

from datetime import datetime
from typing import Optional

import pytz


def utc_now() -> datetime:
    return datetime.now(pytz.utc)


def utc_now_iso() -> str:
    return utc_now().isoformat()


def parse_timestamp(value: str) -> datetime:
    """Parse a stored ISO timestamp; naive values are taken as UTC."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = pytz.utc.localize(parsed)
    return parsed


def to_utc_iso(value: Optional[datetime]) -> Optional[str]:
    """Normalize a client-supplied datetime to a UTC ISO string."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = pytz.utc.localize(value)
    return value.astimezone(pytz.utc).isoformat()
