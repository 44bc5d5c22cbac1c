"""Markdown and frontmatter parsing utilities."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

import yaml
from frontmatter.default_handlers import YAMLHandler

from nvault.utils.dates import format_iso, parse_iso

_logger = logging.getLogger(__name__)

# Opening marker must be the very first line of the text
FRONTMATTER_MARKER = "---"

# Pattern for first H1 heading
H1_PATTERN = re.compile(r"^#\s+(.+)$", re.MULTILINE)

# Leading heading markers stripped from preview lines
HEADING_PREFIX_PATTERN = re.compile(r"^#{1,6}\s*", re.MULTILINE)

WORD_PATTERN = re.compile(r"\S+")

PREVIEW_LENGTH = 150

# Keys with dedicated Frontmatter fields; everything else is a custom field
KNOWN_KEYS = ("title", "tags", "created", "modified")

# A marker line and its own line break, nothing more, so blank lines after
# the closing marker stay in the body
FRONTMATTER_BOUNDARY = re.compile(r"^-{3,}[ \t]*(?:\r?\n|\Z)", re.MULTILINE)

_yaml_handler = YAMLHandler(fm_boundary=FRONTMATTER_BOUNDARY)


@dataclass
class Frontmatter:
    """Structured header block at the top of a note."""

    title: str | None = None
    tags: list[str] = field(default_factory=list)
    created: datetime | None = None
    modified: datetime | None = None
    custom_fields: dict[str, str] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return (
            self.title is None
            and not self.tags
            and self.created is None
            and self.modified is None
            and not self.custom_fields
        )


def has_frontmatter_marker(text: str) -> bool:
    """Check whether text opens with a frontmatter marker line."""
    first_line = text.split("\n", 1)[0].rstrip("\r")
    return first_line.rstrip() == FRONTMATTER_MARKER


def _parse_tags(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        items: list[Any] = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = list(value)
    else:
        items = [value]
    return [str(t).strip() for t in items if t is not None and str(t).strip()]


def _parse_timestamp(key: str, value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    try:
        return parse_iso(value)
    except (ValueError, OverflowError):
        _logger.debug("Ignoring unparsable %s timestamp: %r", key, value)
        return None


def _stringify(value: Any) -> str:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


def parse_frontmatter(raw_text: str) -> tuple[Frontmatter | None, str]:
    """Split a note into its frontmatter and body.

    Returns (Frontmatter, body) when the text opens with a "---" line and a
    matching closing "---" line follows. In every other case, including an
    unterminated block or YAML that does not parse into a mapping, returns
    (None, raw_text) with the text untouched. Never raises.

    The body starts right after the closing marker line; blank lines that
    follow it belong to the body.
    """
    if not has_frontmatter_marker(raw_text):
        return None, raw_text

    try:
        fm_text, content = _yaml_handler.split(raw_text)
    except ValueError:
        # Opening marker without a closing marker
        return None, raw_text

    try:
        meta = _yaml_handler.load(fm_text)
    except yaml.YAMLError as e:
        _logger.debug("Treating malformed frontmatter as body: %s", e)
        return None, raw_text

    if meta is None:
        meta = {}
    if not isinstance(meta, dict):
        return None, raw_text

    title = meta.get("title")
    fm = Frontmatter(
        title=None if title is None else _stringify(title),
        tags=_parse_tags(meta.get("tags")),
        created=_parse_timestamp("created", meta.get("created")),
        modified=_parse_timestamp("modified", meta.get("modified")),
        custom_fields={
            str(k): _stringify(v) for k, v in meta.items() if k not in KNOWN_KEYS
        },
    )
    return fm, content


def serialize_frontmatter(fm: Frontmatter) -> str:
    """Render a Frontmatter block with sorted keys and ISO-8601 timestamps.

    Returns an empty string when there is nothing to write.
    """
    meta: dict[str, Any] = dict(fm.custom_fields)
    if fm.title is not None:
        meta["title"] = fm.title
    if fm.tags:
        meta["tags"] = list(fm.tags)
    if fm.created is not None:
        meta["created"] = format_iso(fm.created)
    if fm.modified is not None:
        meta["modified"] = format_iso(fm.modified)

    if not meta:
        return ""

    yaml_str = yaml.safe_dump(
        meta, default_flow_style=False, sort_keys=True, allow_unicode=True
    )
    return f"{FRONTMATTER_MARKER}\n{yaml_str}{FRONTMATTER_MARKER}\n"


def extract_heading_title(body: str) -> str | None:
    """Return the text of the first H1 heading in body, if any."""
    match = H1_PATTERN.search(body)
    if match:
        return match.group(1).strip()
    return None


def make_preview(body: str, length: int = PREVIEW_LENGTH) -> str:
    """Build a short single-line preview of note text."""
    text = " ".join(HEADING_PREFIX_PATTERN.sub("", body).split())
    if len(text) <= length:
        return text
    return text[: length - 1].rstrip() + "…"


def count_words(text: str) -> int:
    """Count whitespace-separated words."""
    return len(WORD_PATTERN.findall(text))
