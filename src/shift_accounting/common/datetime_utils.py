from __future__ import annotations

from datetime import date, datetime, time


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def seconds_since_midnight(value: datetime | time) -> int:
    """Clock time of ``value`` in whole seconds; the date part is ignored."""
    return value.hour * 3600 + value.minute * 60 + value.second


def elapsed_seconds(start: datetime, end: datetime) -> int:
    """Whole seconds between two instants, truncated and never below 0."""
    return max(int((end - start).total_seconds()), 0)
