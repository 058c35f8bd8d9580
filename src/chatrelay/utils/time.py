"""Time utilities for consistent UTC timestamp handling."""

import datetime


def utc_now() -> datetime.datetime:
    """Get current UTC time (timezone-aware)."""
    return datetime.datetime.now(datetime.timezone.utc)


def utc_now_ms() -> int:
    """Get current UTC time as Unix timestamp in milliseconds.

    Returns
    -------
    int
        Milliseconds since epoch, the format stamped on every chat message
    """
    return int(utc_now().timestamp() * 1000)
