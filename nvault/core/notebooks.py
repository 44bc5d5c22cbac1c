"""Notebook operations for nvault.

A library is a directory of notebooks; a notebook is a directory of note
files plus a ``media`` folder for attachments.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from nvault.errors import NotFoundError, StorageIOError
from nvault.utils.fs import is_hidden
from nvault.utils.naming import NOTE_EXTENSION

_logger = logging.getLogger(__name__)

MEDIA_FOLDER = "media"
TOC_FILE = ".toc.json"
INDEX_MARKDOWN_FILE = "Index.md"
LIBRARY_INDEX_FILE = "index.json"

RESERVED_NAMES = frozenset({MEDIA_FOLDER, TOC_FILE, INDEX_MARKDOWN_FILE, LIBRARY_INDEX_FILE})


def _list_dir(path: Path, what: str) -> list[Path]:
    try:
        return list(path.iterdir())
    except FileNotFoundError as e:
        raise NotFoundError(f"{what} not found: {path}") from e
    except NotADirectoryError as e:
        raise NotFoundError(f"{what} is not a directory: {path}") from e
    except OSError as e:
        raise StorageIOError(f"Cannot list {what.lower()} {path}: {e}") from e


def list_notebooks(library_path: Path) -> list[str]:
    """List all notebook directories in a library.

    Returns directory names directly under library_path, sorted. Hidden
    directories and the reserved media folder are excluded.

    Raises:
        NotFoundError: If the library directory does not exist.
        StorageIOError: If the library cannot be listed.

    """
    notebooks = []
    for item in _list_dir(library_path, "Library"):
        if is_hidden(item) or item.name == MEDIA_FOLDER:
            continue
        try:
            if item.is_dir():
                notebooks.append(item.name)
        except OSError:
            _logger.warning("Skipping unreadable library entry: %s", item)

    return sorted(notebooks)


def is_page_file(path: Path) -> bool:
    """Check if a directory entry name is a note page.

    Pages are visible ``.md`` files other than the generated Index.md.
    """
    return (
        path.suffix == NOTE_EXTENSION
        and not is_hidden(path)
        and path.name != INDEX_MARKDOWN_FILE
    )


def list_note_files(notebook_path: Path) -> list[Path]:
    """List all page files in a notebook, sorted by name.

    Only the notebook directory itself is scanned; media and other
    subdirectories are not pages.

    Raises:
        NotFoundError: If the notebook directory does not exist.
        StorageIOError: If the directory cannot be listed.

    """
    notes = []
    for item in _list_dir(notebook_path, "Notebook"):
        if not is_page_file(item):
            continue
        try:
            if item.is_file():
                notes.append(item)
        except OSError:
            _logger.warning("Skipping unreadable note entry: %s", item)

    return sorted(notes, key=lambda p: p.name)


def validate_notebook_name(name: str) -> str:
    """Trim and validate a notebook directory name.

    Raises:
        ValueError: If the name is empty, hidden, reserved, or contains a
            path separator.

    """
    trimmed = name.strip()
    if not trimmed:
        raise ValueError("Notebook name cannot be empty")
    if "/" in trimmed or "\\" in trimmed:
        raise ValueError(f"Notebook name cannot contain path separators: {name}")
    if trimmed.startswith(".") or trimmed in RESERVED_NAMES:
        raise ValueError(f"Reserved notebook name: {name}")
    return trimmed


def ensure_media_folder(notebook_path: Path) -> Path:
    """Create the notebook's media folder if it is missing."""
    media = notebook_path / MEDIA_FOLDER
    media.mkdir(exist_ok=True)
    return media


def create_notebook(library_path: Path, name: str) -> Path:
    """Create a new notebook directory with its media folder.

    Args:
        library_path: Library the notebook belongs to
        name: Name of the notebook (used as the directory name)

    Returns:
        Path to the created notebook directory.

    Raises:
        ValueError: If the name is not a valid notebook name.
        FileExistsError: If the notebook already exists.
        NotFoundError: If the library directory does not exist.

    """
    name = validate_notebook_name(name)
    if not library_path.is_dir():
        raise NotFoundError(f"Library not found: {library_path}")

    notebook_path = library_path / name
    if notebook_path.exists():
        raise FileExistsError(f"Notebook already exists: {name}")

    try:
        notebook_path.mkdir()
        ensure_media_folder(notebook_path)
    except OSError as e:
        raise StorageIOError(f"Cannot create notebook {notebook_path}: {e}") from e

    _logger.info("Created notebook %s", notebook_path)
    return notebook_path


def remove_notebook(library_path: Path, name: str) -> None:
    """Delete a notebook directory and everything in it.

    Raises:
        NotFoundError: If the notebook does not exist.

    """
    notebook_path = library_path / validate_notebook_name(name)
    if not notebook_path.is_dir():
        raise NotFoundError(f"Notebook not found: {name}")
    try:
        shutil.rmtree(notebook_path)
    except OSError as e:
        raise StorageIOError(f"Cannot delete notebook {notebook_path}: {e}") from e
    _logger.info("Deleted notebook %s", notebook_path)


def notebook_exists(library_path: Path, name: str) -> bool:
    """Check if a notebook exists."""
    return (library_path / name).is_dir()
