"""Public engine operations.

Every function takes explicit paths; the engine keeps no global state, so
any caller (CLI, UI, another process) can use it and a restart only needs a
rescan. Errors are raised as nvault.errors exceptions.
"""

from __future__ import annotations

from nvault.core.access import LocalAccessProvider, StorageAccessProvider
from nvault.core.notebooks import create_notebook, list_notebooks
from nvault.core.notes import (
    create_note,
    delete_note,
    list_pages,
    load_note,
    read_page_metadata,
    save_note,
)
from nvault.index.library import (
    create_section,
    delete_notebook,
    group_by_section,
    load_library_index,
    rebuild_library_index,
    refresh_library_index,
    reorder_notebooks,
    update_notebook_metadata,
)
from nvault.index.scanner import ScanCoordinator, ScanReport, scan_library
from nvault.index.toc import read_notebook_toc, update_notebook_toc

__all__ = [
    "LocalAccessProvider",
    "ScanCoordinator",
    "ScanReport",
    "StorageAccessProvider",
    "create_note",
    "create_notebook",
    "create_section",
    "delete_note",
    "delete_notebook",
    "group_by_section",
    "list_notebooks",
    "list_pages",
    "load_library_index",
    "load_note",
    "read_notebook_toc",
    "read_page_metadata",
    "rebuild_library_index",
    "refresh_library_index",
    "reorder_notebooks",
    "save_note",
    "scan_library",
    "update_notebook_metadata",
    "update_notebook_toc",
]
