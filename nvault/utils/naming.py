"""Canonical note file names.

Generated names look like ``"2025 NOV 06 My Post [Blog/Section].md"``: the
creation date, the title and the breadcrumb of ancestor folders. The format
is deterministic so that it can also be used to locate existing files.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path

from nvault.utils.dates import MONTH_ABBREVIATIONS, MONTH_NUMBERS

NOTE_EXTENSION = ".md"
UNTITLED = "Untitled"

# A "/" inside a breadcrumb is stored on disk as U+2215 DIVISION SLASH so the
# name stays a single path component
DISK_SLASH = "∕"

_WHITESPACE_PATTERN = re.compile(r"\s+")
_TITLE_UNSAFE_PATTERN = re.compile(r"[/\\\x00-\x1f\x7f]")
_FILENAME_PATTERN = re.compile(
    r"^(?P<year>\d{4}) (?P<month>[A-Z]{3}) (?P<day>\d{2}) "
    r"(?P<title>.*?) \[(?P<breadcrumb>[^\]]*)\]"
    r"(?: (?P<suffix>\d+))?\.md$"
)
_DATE_PREFIX_PATTERN = re.compile(r"^(\d{4}) ([A-Z]{3}) (\d{2})(?: |$)")


@dataclass
class ParsedFilename:
    """Components recovered from a generated file name."""

    created: date
    title: str
    breadcrumb: str
    suffix: int | None = None


def format_filename_date(dt: date) -> str:
    """Format a date as ``YYYY MMM DD`` with an upper-case English month."""
    month = MONTH_ABBREVIATIONS[dt.month - 1].upper()
    return f"{dt.year:04d} {month} {dt.day:02d}"


def sanitize_title(title: str) -> str:
    """Clean a title for use in a file name.

    Collapses whitespace runs (including newlines), replaces path separators
    and control characters with "-", and substitutes "Untitled" when nothing
    is left.
    """
    cleaned = _TITLE_UNSAFE_PATTERN.sub(
        "-", _WHITESPACE_PATTERN.sub(" ", title or "").strip()
    )
    return cleaned or UNTITLED


def join_breadcrumb(breadcrumb: str | list[str] | tuple[str, ...] | None) -> str:
    """Join breadcrumb parts with "/", dropping empty parts."""
    if breadcrumb is None:
        return ""
    if isinstance(breadcrumb, str):
        parts = breadcrumb.split("/")
    else:
        parts = list(breadcrumb)
    return "/".join(p.strip() for p in parts if p and p.strip())


def generate_filename(
    title: str,
    created: date | datetime,
    breadcrumb: str | list[str] | tuple[str, ...] | None,
) -> str:
    """Generate the canonical file name for a note.

    Example:
        >>> generate_filename("My Post", date(2025, 11, 6), "Blog/Section")
        '2025 NOV 06 My Post [Blog/Section].md'

    This does not guarantee the name is free on disk; see unique_note_path.
    """
    if isinstance(created, datetime):
        created = created.date()
    return (
        f"{format_filename_date(created)} {sanitize_title(title)} "
        f"[{join_breadcrumb(breadcrumb)}]{NOTE_EXTENSION}"
    )


def to_disk_name(filename: str) -> str:
    """Convert a generated name into a single valid path component."""
    return filename.replace("/", DISK_SLASH)


def from_disk_name(name: str) -> str:
    """Inverse of to_disk_name."""
    return name.replace(DISK_SLASH, "/")


def parse_filename_date(filename: str) -> date | None:
    """Extract the creation date from a generated file name.

    Example: "2025 NOV 06 My Post [Blog].md" -> date(2025, 11, 6)
    """
    match = _DATE_PREFIX_PATTERN.match(filename)
    if not match:
        return None
    month = MONTH_NUMBERS.get(match.group(2))
    if month is None:
        return None
    try:
        return date(int(match.group(1)), month, int(match.group(3)))
    except ValueError:
        return None


def parse_filename(filename: str) -> ParsedFilename | None:
    """Parse a generated file name back into its components.

    Accepts both the generated form and the on-disk form. Returns None for
    names that do not follow the convention.
    """
    match = _FILENAME_PATTERN.match(from_disk_name(filename))
    if not match:
        return None
    created = parse_filename_date(filename)
    if created is None:
        return None
    suffix = match.group("suffix")
    return ParsedFilename(
        created=created,
        title=match.group("title"),
        breadcrumb=match.group("breadcrumb"),
        suffix=int(suffix) if suffix else None,
    )


def unique_note_path(directory: Path, filename: str) -> Path:
    """Return a path in directory that does not exist yet.

    Collisions get a numeric suffix before the extension:
    "... [x].md", "... [x] 2.md", "... [x] 3.md", ...
    """
    name = to_disk_name(filename)
    candidate = directory / name
    if not candidate.exists():
        return candidate

    stem = name[: -len(NOTE_EXTENSION)] if name.endswith(NOTE_EXTENSION) else name
    counter = 2
    while True:
        candidate = directory / f"{stem} {counter}{NOTE_EXTENSION}"
        if not candidate.exists():
            return candidate
        counter += 1
