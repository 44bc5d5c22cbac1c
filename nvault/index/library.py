"""Library-wide notebook index.

``index.json`` at the library root lists every notebook with metadata the
user can edit (display name, description, tags, icon, color) next to facts
observed by scanning (note count, last modification). Rebuilding refreshes
the observed facts and never discards the user's edits.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path

from nvault.core.notebooks import (
    LIBRARY_INDEX_FILE,
    create_notebook,
    list_notebooks,
    remove_notebook,
)
from nvault.errors import DecodeError, NotFoundError, StorageIOError
from nvault.index.toc import dump_json, update_notebook_toc
from nvault.models import (
    DEFAULT_ICON,
    LibraryIndex,
    NotebookMetadata,
    TableOfContents,
)
from nvault.utils.dates import file_timestamps, to_utc, utc_now
from nvault.utils.fs import atomic_write_text

_logger = logging.getLogger(__name__)


def _library_name(library_path: Path) -> str:
    return library_path.name or library_path.resolve().name


def load_library_index(library_path: Path) -> LibraryIndex:
    """Read the persisted library index.

    Raises:
        NotFoundError: If the library has not been indexed yet.
        DecodeError: If index.json is malformed.
        StorageIOError: If the file cannot be read.

    """
    index_path = library_path / LIBRARY_INDEX_FILE
    try:
        text = index_path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise NotFoundError(f"No library index in {library_path}") from e
    except OSError as e:
        raise StorageIOError(f"Cannot read {index_path}: {e}") from e

    try:
        return LibraryIndex.from_dict(json.loads(text))
    except (ValueError, KeyError, TypeError) as e:
        raise DecodeError(f"Malformed library index {index_path}: {e}") from e


def save_library_index(library_path: Path, index: LibraryIndex) -> None:
    """Persist the library index atomically.

    Raises:
        StorageIOError: If index.json cannot be written.

    """
    try:
        atomic_write_text(library_path / LIBRARY_INDEX_FILE, dump_json(index.to_dict()))
    except OSError as e:
        raise StorageIOError(f"Cannot write library index for {library_path}: {e}") from e


def _load_previous(library_path: Path) -> LibraryIndex | None:
    try:
        return load_library_index(library_path)
    except NotFoundError:
        return None
    except (DecodeError, StorageIOError) as e:
        _logger.warning("Ignoring unusable library index in %s: %s", library_path, e)
        return None


def _default_metadata(
    notebook_path: Path, default_icon: str | None
) -> NotebookMetadata:
    created, modified = file_timestamps(notebook_path)
    return NotebookMetadata(
        id=notebook_path.name,
        display_name=notebook_path.name,
        icon=default_icon,
        created_date=to_utc(created),
        last_modified=to_utc(modified),
    )


def _refresh(
    meta: NotebookMetadata, notebook_path: Path, toc: TableOfContents
) -> NotebookMetadata:
    meta.note_count = len(toc.notes)
    latest = toc.latest_modified
    if latest is None:
        _, latest = file_timestamps(notebook_path)
    meta.last_modified = to_utc(latest)
    return meta


def rebuild_library_index(
    library_path: Path,
    tocs: Mapping[str, TableOfContents] | None = None,
    default_icon: str | None = DEFAULT_ICON,
) -> LibraryIndex:
    """Rebuild index.json from the notebooks currently on disk.

    For each notebook directory the user-editable fields of its previous
    entry are kept as they are; note_count and last_modified come from the
    notebook's table of contents. Notebooks that no longer exist are dropped.
    Existing notebooks keep their position; new ones are appended by name.

    Args:
        library_path: Library directory
        tocs: Fresh tables of contents by notebook name. When None, every
            notebook is rescanned. When given, notebooks missing from it keep
            their previous entry unchanged; ones with no previous entry are
            scanned. A notebook that cannot be scanned gets default metadata
            dated by its directory mtime.
        default_icon: Icon given to notebooks seen for the first time

    Returns:
        The rebuilt and persisted index.

    Raises:
        NotFoundError: If the library directory does not exist.
        StorageIOError: If the library cannot be listed or index.json cannot
            be written.

    """
    names = list_notebooks(library_path)
    previous = _load_previous(library_path)
    previous_entries = (
        {nb.id: nb for nb in previous.notebooks} if previous is not None else {}
    )

    merged: dict[str, NotebookMetadata] = {}
    for name in names:
        notebook_path = library_path / name
        toc = tocs.get(name) if tocs is not None else None
        meta = previous_entries.get(name)
        # A notebook without a previous entry always gets a fresh TOC
        if toc is None and (tocs is None or meta is None):
            try:
                toc = update_notebook_toc(notebook_path)
            except NotFoundError:
                _logger.warning("Notebook disappeared during rebuild: %s", name)
                continue
            except StorageIOError as e:
                _logger.warning("Cannot index notebook %s: %s", name, e)

        if toc is None:
            if not notebook_path.is_dir():
                continue
            merged[name] = meta or _default_metadata(notebook_path, default_icon)
            continue

        if meta is None:
            meta = _default_metadata(notebook_path, default_icon)
        merged[name] = _refresh(meta, notebook_path, toc)

    ordered = [merged.pop(nb_id) for nb_id in previous_entries if nb_id in merged]
    ordered.extend(merged[name] for name in sorted(merged))

    if previous is not None:
        library_name = previous.library_name
        created_date = previous.created_date
    else:
        library_name = _library_name(library_path)
        created_date, _ = file_timestamps(library_path)
        created_date = to_utc(created_date)

    index = LibraryIndex(
        library_name=library_name,
        created_date=created_date,
        last_modified=utc_now(),
        notebooks=ordered,
    )
    save_library_index(library_path, index)
    _logger.info(
        "Rebuilt library index for %s (%d notebooks)", library_path, len(ordered)
    )
    return index


def _clean_tags(tags: list[str] | None) -> list[str]:
    if not tags:
        return []
    return [t.strip() for t in tags if t and t.strip()]


def update_notebook_metadata(
    library_path: Path,
    notebook_id: str,
    display_name: str,
    description: str = "",
    tags: list[str] | None = None,
    icon: str | None = None,
    color: str | None = None,
) -> NotebookMetadata:
    """Update the user-editable metadata of one notebook.

    Other notebooks' entries are left untouched.

    Returns:
        The updated metadata.

    Raises:
        NotFoundError: If there is no index yet or it has no such notebook.
        DecodeError: If index.json is malformed.

    """
    index = load_library_index(library_path)
    meta = index.get_notebook(notebook_id)
    if meta is None:
        raise NotFoundError(f"Notebook not in library index: {notebook_id}")

    now = utc_now()
    meta.display_name = display_name.strip() or notebook_id
    meta.description = description.strip()
    meta.tags = _clean_tags(tags)
    meta.icon = icon or None
    meta.color = color or None
    meta.last_modified = now
    index.last_modified = now

    save_library_index(library_path, index)
    return meta


def reorder_notebooks(library_path: Path, notebook_id: str, position: int) -> LibraryIndex:
    """Move a notebook to a new position in the library order.

    Positions are 0-based and clamped to the valid range. The order is kept
    by later rebuilds.

    Raises:
        NotFoundError: If there is no index yet or it has no such notebook.

    """
    index = load_library_index(library_path)
    meta = index.get_notebook(notebook_id)
    if meta is None:
        raise NotFoundError(f"Notebook not in library index: {notebook_id}")

    index.notebooks.remove(meta)
    position = max(0, min(position, len(index.notebooks)))
    index.notebooks.insert(position, meta)
    index.last_modified = utc_now()

    save_library_index(library_path, index)
    return index


def group_by_section(index: LibraryIndex) -> dict[str, list[NotebookMetadata]]:
    """Group notebooks by section (first tag), sections sorted by name.

    Untagged notebooks go to "General Section". Within a section the library
    order is kept.
    """
    grouped: dict[str, list[NotebookMetadata]] = {}
    for nb in index.notebooks:
        grouped.setdefault(nb.section, []).append(nb)
    return {name: grouped[name] for name in sorted(grouped)}


def refresh_library_index(
    library_path: Path,
    tocs: Mapping[str, TableOfContents],
    default_icon: str | None = DEFAULT_ICON,
) -> LibraryIndex:
    """Update the index for just the given notebooks.

    Entries of notebooks not in tocs are kept as they are.
    """
    # Without a previous index there are no entries to keep, so rescan everything
    if not (library_path / LIBRARY_INDEX_FILE).exists():
        return rebuild_library_index(library_path, default_icon=default_icon)
    return rebuild_library_index(library_path, tocs=tocs, default_icon=default_icon)


def create_section(
    library_path: Path, section: str, default_icon: str | None = DEFAULT_ICON
) -> NotebookMetadata:
    """Start a new section with its first notebook, "<section> Binder 1".

    Raises:
        ValueError: If the section name is empty.
        FileExistsError: If the first notebook already exists.

    """
    section = section.strip()
    if not section:
        raise ValueError("Section name cannot be empty")

    notebook_path = create_notebook(library_path, f"{section} Binder 1")
    index = refresh_library_index(
        library_path,
        {notebook_path.name: update_notebook_toc(notebook_path)},
        default_icon=default_icon,
    )
    meta = index.get_notebook(notebook_path.name)
    if meta is None:
        raise NotFoundError(f"Notebook vanished after creation: {notebook_path}")

    return update_notebook_metadata(
        library_path,
        meta.id,
        display_name=meta.display_name,
        description=meta.description,
        tags=[section],
        icon=meta.icon,
        color=meta.color,
    )


def delete_notebook(library_path: Path, notebook_id: str) -> LibraryIndex:
    """Delete a notebook directory and drop it from the library index.

    Raises:
        NotFoundError: If the notebook does not exist.

    """
    remove_notebook(library_path, notebook_id)
    return refresh_library_index(library_path, {})
