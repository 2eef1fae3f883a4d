# backend/previewer/utils/time_utils.py
"""Time helpers shared by storage keys and metadata."""

import time
from datetime import datetime, timezone

UTC_TIMEZONE = timezone.utc


def utc_now() -> datetime:
    """
    Get current UTC timestamp.

    Returns:
        Current timezone-aware UTC datetime object
    """
    return datetime.now(UTC_TIMEZONE)


def utc_timestamp() -> str:
    """Current UTC timestamp in ISO format."""
    return utc_now().isoformat()


def unix_millis() -> int:
    """Milliseconds since the epoch, used as the preview key prefix."""
    return int(time.time() * 1000)


def parse_iso_timestamp(value: str):
    """Parse an ISO-8601 timestamp, returning None when it is unreadable."""
    try:
        return datetime.fromisoformat(value)
    except (TypeError, ValueError):
        return None
