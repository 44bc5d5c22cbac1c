"""Date parsing and formatting utilities."""

from __future__ import annotations

import os
from datetime import date, datetime, timezone
from pathlib import Path

from dateutil import parser as dateutil_parser

# Fixed English month abbreviations; filenames must not depend on the locale
MONTH_ABBREVIATIONS = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)

MONTH_NUMBERS: dict[str, int] = {
    name.upper(): i for i, name in enumerate(MONTH_ABBREVIATIONS, start=1)
}


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime, truncated to seconds."""
    return datetime.now(timezone.utc).replace(microsecond=0)


def to_utc(dt: datetime) -> datetime:
    """Normalize a datetime to aware UTC with second precision.

    Naive datetimes are assumed to already be UTC.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).replace(microsecond=0)


def format_iso(dt: datetime) -> str:
    """Format a datetime as ISO-8601 UTC, e.g. 2025-11-06T10:39:00Z."""
    return to_utc(dt).isoformat().replace("+00:00", "Z")


def parse_iso(value: str | datetime | date) -> datetime:
    """Parse an ISO-8601 timestamp into an aware UTC datetime.

    Accepts already-parsed values (YAML loads timestamps as datetime/date).

    Raises:
        ValueError: If the string is not a valid ISO-8601 timestamp.

    """
    if isinstance(value, datetime):
        return to_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    return to_utc(dateutil_parser.isoparse(str(value).strip()))


def from_timestamp(ts: float) -> datetime:
    """Convert a POSIX timestamp to an aware UTC datetime.

    Sub-second precision is kept so that notes saved within the same second
    still sort by modification time. Pass the result through ``to_utc``
    before storing it.
    """
    return datetime.fromtimestamp(ts, tz=timezone.utc)


def file_timestamps(
    path: Path, stat: os.stat_result | None = None
) -> tuple[datetime, datetime]:
    """Get (created, modified) timestamps for a file.

    Creation time uses st_birthtime where the platform provides it and falls
    back to st_ctime. If the attributes cannot be read at all, both values
    fall back to the current time.
    """
    if stat is None:
        try:
            stat = path.stat()
        except OSError:
            now = utc_now()
            return now, now

    birth = getattr(stat, "st_birthtime", None)
    created = from_timestamp(birth if birth is not None else stat.st_ctime)
    modified = from_timestamp(stat.st_mtime)
    return created, modified


def format_display(dt: datetime) -> str:
    """Format a timestamp for humans in local time.

    Example: "Nov 6, 2025 at 10:39 AM"
    """
    local = to_utc(dt).astimezone()
    month = MONTH_ABBREVIATIONS[local.month - 1]
    hour = local.hour % 12 or 12
    meridiem = "AM" if local.hour < 12 else "PM"
    return f"{month} {local.day}, {local.year} at {hour}:{local.minute:02d} {meridiem}"


def format_relative(dt: datetime, now: datetime | None = None) -> str:
    """Get a human-readable label relative to now ("3 hours ago", "just now")."""
    if now is None:
        now = utc_now()
    seconds = int((to_utc(now) - to_utc(dt)).total_seconds())
    if seconds < 60:
        return "just now"

    for unit, size in (("day", 86400), ("hour", 3600), ("minute", 60)):
        if seconds >= size:
            count = seconds // size
            return f"{count} {unit}{'s' if count != 1 else ''} ago"
    return "just now"
