"""Timestamps for log directories, event records and file names."""

from datetime import date, datetime, timedelta
from typing import Optional

# (suffix, seconds), smallest first
RELATIVE_UNITS = (("s", 1), ("m", 60), ("h", 3600), ("d", 86400))


def now() -> str:
    """Compact local timestamp for directory names (e.g., "20261018_142501")."""
    return datetime.now().strftime("%Y%m%d_%H%M%S")


def now_exact() -> str:
    """ISO 8601 timestamp with microseconds, used for event records."""
    return datetime.now().isoformat()


def today(on: Optional[date] = None) -> str:
    """ISO calendar date (e.g., "2026-10-18")."""
    return (on or date.today()).isoformat()


def format_timestamp(iso_timestamp: str, relative: bool = False) -> str:
    """
    Render an event timestamp for the `events` listing.

    "2026-10-18T18:45:40.572549" becomes "2026-10-18 18:45:40", or "2h ago"
    with `relative`. Unparseable input is returned as given.
    """
    try:
        parsed = datetime.fromisoformat(iso_timestamp)
    except (ValueError, TypeError):
        return iso_timestamp
    return _format_relative_time(parsed) if relative else parsed.strftime("%Y-%m-%d %H:%M:%S")


def _format_relative_time(dt: datetime, reference: Optional[datetime] = None) -> str:
    """Compact relative time: "30s ago", "15m ago", "2h from now", "5d ago"."""
    delta = (reference or datetime.now()) - dt
    suffix = "ago" if delta >= timedelta(0) else "from now"
    remaining = abs(delta).total_seconds()

    # Largest unit that fits
    amount, unit = int(remaining), "s"
    for unit_name, size in RELATIVE_UNITS:
        if remaining >= size:
            amount, unit = int(remaining // size), unit_name
    return f"{amount}{unit} {suffix}"
