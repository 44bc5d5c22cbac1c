"""Per-notebook table of contents.

Every update rescans the notebook directory and regenerates two files:
``.toc.json`` (the structured cache) and ``Index.md`` (a human-readable
mirror). Both can be deleted at any time and rebuilt from the notes.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from urllib.parse import quote

from nvault.core.notebooks import (
    INDEX_MARKDOWN_FILE,
    TOC_FILE,
    ensure_media_folder,
    list_note_files,
)
from nvault.core.notes import load_note
from nvault.errors import DecodeError, NotFoundError, StorageIOError
from nvault.models import NoteEntry, TableOfContents
from nvault.utils.dates import file_timestamps, format_display, to_utc, utc_now
from nvault.utils.fs import atomic_write_text

_logger = logging.getLogger(__name__)


def dump_json(data: dict) -> str:
    """Serialize a cache document: sorted keys, indented, trailing newline."""
    return json.dumps(data, indent=2, sort_keys=True, ensure_ascii=False) + "\n"


def _build_entry(path: Path) -> NoteEntry:
    created, modified = file_timestamps(path)
    title, _ = load_note(path)
    return NoteEntry(
        filename=path.name,
        title=title.strip() or path.stem,
        created=created,
        modified=modified,
    )


def sort_entries(entries: list[NoteEntry]) -> list[NoteEntry]:
    """Order entries newest first, ties broken by file name, and number them.

    Sorting uses the full precision of the timestamps; once ordered, they are
    truncated to whole seconds, which is what the cache files store.
    """
    ordered = sorted(entries, key=lambda e: e.filename)
    ordered.sort(key=lambda e: e.modified, reverse=True)
    for position, entry in enumerate(ordered):
        entry.order = position
        entry.created = to_utc(entry.created)
        entry.modified = to_utc(entry.modified)
    return ordered


def build_toc(notebook_path: Path) -> TableOfContents:
    """Scan a notebook and build its table of contents without writing it.

    Notes that cannot be read are logged and left out.

    Raises:
        NotFoundError: If the notebook directory does not exist.
        StorageIOError: If the directory cannot be listed.

    """
    entries = []
    for path in list_note_files(notebook_path):
        try:
            entries.append(_build_entry(path))
        except (StorageIOError, DecodeError) as e:
            _logger.warning("Skipping unreadable note %s: %s", path, e)

    return TableOfContents(
        notebook_name=notebook_path.name,
        last_updated=utc_now(),
        notes=sort_entries(entries),
    )


def render_index_markdown(toc: TableOfContents) -> str:
    """Render the human-readable Index.md for a table of contents."""
    lines = [
        f"# {toc.notebook_name}",
        "",
        f"*Last updated: {format_display(toc.last_updated)}*",
        "",
        "---",
        "",
    ]

    if not toc.notes:
        lines.append("*No notes yet*")
    else:
        lines.append(f"## Notes ({len(toc.notes)})")
        lines.append("")
        for entry in toc.notes:
            lines.append(f"### [{entry.title}]({quote(entry.filename)})")
            lines.append(f"- **Created:** {format_display(entry.created)}")
            lines.append(f"- **Modified:** {format_display(entry.modified)}")
            lines.append("")

    return "\n".join(lines).rstrip("\n") + "\n"


def write_toc(notebook_path: Path, toc: TableOfContents) -> None:
    """Persist .toc.json and Index.md for a notebook.

    Raises:
        StorageIOError: If either file cannot be written.

    """
    try:
        atomic_write_text(notebook_path / TOC_FILE, dump_json(toc.to_dict()))
        atomic_write_text(
            notebook_path / INDEX_MARKDOWN_FILE, render_index_markdown(toc)
        )
    except OSError as e:
        raise StorageIOError(f"Cannot write table of contents for {notebook_path}: {e}") from e


def update_notebook_toc(notebook_path: Path) -> TableOfContents:
    """Rescan a notebook and regenerate its .toc.json and Index.md.

    Returns:
        The freshly built table of contents.

    Raises:
        NotFoundError: If the notebook directory does not exist.
        StorageIOError: If the notebook cannot be listed or the cache files
            cannot be written.

    """
    toc = build_toc(notebook_path)
    try:
        ensure_media_folder(notebook_path)
    except OSError as e:
        _logger.warning("Cannot create media folder in %s: %s", notebook_path, e)
    write_toc(notebook_path, toc)
    _logger.debug("Updated TOC for %s (%d notes)", notebook_path, len(toc.notes))
    return toc


def read_notebook_toc(notebook_path: Path) -> TableOfContents:
    """Read a notebook's persisted table of contents.

    Raises:
        NotFoundError: If the notebook has not been indexed yet.
        DecodeError: If .toc.json is malformed.
        StorageIOError: If the file cannot be read.

    """
    toc_path = notebook_path / TOC_FILE
    try:
        text = toc_path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise NotFoundError(f"No table of contents for {notebook_path}") from e
    except OSError as e:
        raise StorageIOError(f"Cannot read {toc_path}: {e}") from e

    try:
        return TableOfContents.from_dict(json.loads(text))
    except (ValueError, KeyError, TypeError) as e:
        raise DecodeError(f"Malformed table of contents {toc_path}: {e}") from e
