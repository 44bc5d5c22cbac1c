"""Note operations for nvault.

A note is a UTF-8 markdown file: an optional frontmatter block, a ``# title``
heading, then the body. Saving a note whose title and body are both empty
deletes the file instead of writing it.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime
from pathlib import Path

from nvault.core.notebooks import list_note_files
from nvault.errors import DecodeError, NotFoundError, StorageIOError
from nvault.models import PageMetadata
from nvault.utils.dates import file_timestamps, to_utc, utc_now
from nvault.utils.fs import atomic_write_text, path_lock
from nvault.utils.markdown import (
    count_words,
    make_preview,
    parse_frontmatter,
    serialize_frontmatter,
)
from nvault.utils.naming import generate_filename, unique_note_path

_logger = logging.getLogger(__name__)

LINE_BREAK_PATTERN = re.compile(r"[\r\n]+")


def read_note_text(path: Path) -> str:
    """Read a note file as UTF-8 text.

    Raises:
        NotFoundError: If the file does not exist.
        DecodeError: If the file is not valid UTF-8.
        StorageIOError: For any other read failure.

    """
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise NotFoundError(f"Note not found: {path}") from e
    except UnicodeDecodeError as e:
        raise DecodeError(f"Note is not valid UTF-8: {path}") from e
    except OSError as e:
        raise StorageIOError(f"Cannot read note {path}: {e}") from e


def split_title(text: str) -> tuple[str, str]:
    """Split note text (without frontmatter) into (title, body).

    The title comes from the first non-blank line, with a leading "# "
    heading marker removed. One blank separator line after the title is
    dropped; the remainder is returned verbatim as the body.
    """
    rest = text
    while True:
        line, sep, remainder = rest.partition("\n")
        if line.strip() or not sep:
            break
        rest = remainder

    if not line.strip():
        return "", ""

    line = line.rstrip("\r")
    if line == "#" or line.startswith("# "):
        title = line[2:]
    else:
        title = line.strip()

    body = remainder
    if body.startswith("\r\n"):
        body = body[2:]
    elif body.startswith("\n"):
        body = body[1:]
    return title, body


def load_note(path: Path) -> tuple[str, str]:
    """Load a note's title and body.

    Any frontmatter block is skipped. Returns ("", "") for an empty file.
    """
    _, content = parse_frontmatter(read_note_text(path))
    return split_title(content)


def delete_note(path: Path) -> None:
    """Delete a note file. Deleting a file that is already gone is not an error."""
    with path_lock(path):
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageIOError(f"Cannot delete note {path}: {e}") from e
    _logger.debug("Deleted note %s", path)


def single_line_title(title: str) -> str:
    """Collapse a multi-line title into one line joined by single spaces."""
    if not LINE_BREAK_PATTERN.search(title):
        return title
    parts = (part.strip() for part in LINE_BREAK_PATTERN.split(title))
    return " ".join(part for part in parts if part)


def _existing_frontmatter(path: Path, title: str) -> str:
    """Serialized frontmatter to carry over from the current file, if any."""
    try:
        text = read_note_text(path)
    except NotFoundError:
        return ""
    except DecodeError:
        _logger.warning("Overwriting undecodable note %s", path)
        return ""

    fm, _ = parse_frontmatter(text)
    if fm is None:
        return ""
    if fm.title is not None:
        fm.title = title
    fm.modified = utc_now()
    return serialize_frontmatter(fm) + "\n"


def save_note(title: str, body: str, path: Path) -> Path | None:
    """Save a note, or delete it when there is nothing to save.

    If both the trimmed title and the trimmed body are empty the file at
    path is deleted (a no-op if it does not exist) and None is returned.
    Otherwise "# <title>\\n\\n<body>" is written atomically, keeping any
    frontmatter block already present in the file.

    A title is always a single line: line breaks in it are collapsed to
    spaces so that the title read back is the one that was saved.

    Returns:
        The path written, or None if the note was deleted.

    Raises:
        NotFoundError: If the note's directory does not exist.
        StorageIOError: If the file cannot be written.

    """
    if not title.strip() and not body.strip():
        delete_note(path)
        return None

    title = single_line_title(title)
    with path_lock(path):
        prefix = _existing_frontmatter(path, title)
        content = f"{prefix}# {title}\n\n{body}"
        try:
            atomic_write_text(path, content)
        except FileNotFoundError as e:
            raise NotFoundError(f"Notebook directory not found: {path.parent}") from e
        except OSError as e:
            raise StorageIOError(f"Cannot write note {path}: {e}") from e

    _logger.debug("Saved note %s", path)
    return path


def create_note(
    notebook_path: Path,
    title: str,
    body: str = "",
    created: date | datetime | None = None,
    breadcrumb: str | list[str] | None = None,
) -> Path:
    """Create a new note named by the file naming convention.

    Args:
        notebook_path: Notebook directory to create the note in
        title: Note title
        body: Note body
        created: Creation date used in the file name (defaults to today)
        breadcrumb: Ancestor path for the file name (defaults to the
            notebook's directory name)

    Returns:
        Path to the created note. Name collisions get a numeric suffix.

    Raises:
        ValueError: If title and body are both empty.
        NotFoundError: If the notebook does not exist.

    """
    if not title.strip() and not body.strip():
        raise ValueError("Cannot create a note with no title and no body")
    if not notebook_path.is_dir():
        raise NotFoundError(f"Notebook not found: {notebook_path}")

    if created is None:
        created = date.today()
    if breadcrumb is None:
        breadcrumb = notebook_path.name

    title = single_line_title(title)
    path = unique_note_path(notebook_path, generate_filename(title, created, breadcrumb))
    save_note(title, body, path)
    return path


def read_page_metadata(path: Path) -> PageMetadata:
    """Compute derived metadata for a note file.

    Frontmatter values win over inferred ones. Without frontmatter the title
    comes from the heading or first line (then the file name), and the
    timestamps from the file system.
    """
    text = read_note_text(path)
    fm, content = parse_frontmatter(text)
    heading, body = split_title(content)
    created, modified = file_timestamps(path)
    created, modified = to_utc(created), to_utc(modified)

    title = heading.strip() or path.stem
    tags: list[str] = []
    if fm is not None:
        title = fm.title or title
        tags = list(fm.tags)
        created = fm.created or created
        modified = fm.modified or modified

    return PageMetadata(
        id=path.name,
        title=title,
        tags=tags,
        preview=make_preview(body),
        word_count=count_words(body),
        created=created,
        modified=modified,
        has_frontmatter=fm is not None,
    )


def list_pages(notebook_path: Path) -> list[PageMetadata]:
    """List derived metadata for every page in a notebook.

    Ordered newest first by modification time, then by file name. Files that
    cannot be read are logged and skipped.
    """
    pages = []
    for path in list_note_files(notebook_path):
        try:
            pages.append(read_page_metadata(path))
        except (StorageIOError, DecodeError) as e:
            _logger.warning("Skipping unreadable note %s: %s", path, e)

    pages.sort(key=lambda p: p.id)
    pages.sort(key=lambda p: p.modified or utc_now(), reverse=True)
    return pages
