"""Datetime helpers for the API layer.

DATE CONVENTION:
The daily challenge rolls over at midnight Eastern Time (America/New_York),
the same "game day" fans of US sports use. All datetime fields in responses
are UTC (ISO 8601).
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

EASTERN = ZoneInfo("America/New_York")


def now_utc() -> datetime:
    """Get the current time in UTC, timezone-aware."""
    return datetime.now(timezone.utc)


def today_eastern() -> date:
    """Return the current date in Eastern timezone."""
    return datetime.now(EASTERN).date()


def parse_iso_date(value: str) -> date:
    """Parse a strict ``YYYY-MM-DD`` string.

    Raises:
        ValueError: for anything else, including ``2024-1-05`` style input.
    """
    if len(value) != 10:
        raise ValueError(f"expected YYYY-MM-DD, got {value!r}")
    return date.fromisoformat(value)
