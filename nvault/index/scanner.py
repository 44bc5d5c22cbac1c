"""Library scanning.

A scan rebuilds every notebook's table of contents and then the library
index. Failures in a single notebook are collected and reported; only a
library that cannot be listed at all aborts the scan.

Scans are tagged with a generation number per library. When a newer scan
has been requested the older one stops between notebooks, and callers drop
any report whose generation is no longer current.
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path

from nvault.core.notebooks import list_notebooks
from nvault.errors import VaultError
from nvault.index.library import rebuild_library_index
from nvault.index.toc import update_notebook_toc
from nvault.models import DEFAULT_ICON, LibraryIndex, TableOfContents

_logger = logging.getLogger(__name__)


@dataclass
class NotebookError:
    """A notebook that could not be indexed during a scan."""

    notebook: str
    error: Exception

    def __str__(self) -> str:
        return f"{self.notebook}: {self.error}"


@dataclass
class ScanReport:
    """Outcome of a library scan."""

    library_path: Path
    generation: int = 0
    tocs: dict[str, TableOfContents] = field(default_factory=dict)
    errors: list[NotebookError] = field(default_factory=list)
    index: LibraryIndex | None = None
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        """True when every notebook was indexed and the scan finished."""
        return not self.errors and not self.cancelled

    @property
    def note_count(self) -> int:
        return sum(len(toc.notes) for toc in self.tocs.values())


@dataclass(frozen=True)
class ScanToken:
    """Identifies one scan request for a library."""

    coordinator: ScanCoordinator
    library_key: str
    generation: int

    def is_current(self) -> bool:
        return self.coordinator.is_current(self)


class ScanCoordinator:
    """Hands out monotonically increasing scan generations per library."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._generations: dict[str, int] = {}

    @staticmethod
    def _key(library_path: Path) -> str:
        return os.path.normcase(os.path.abspath(library_path))

    def begin(self, library_path: Path) -> ScanToken:
        """Start a new scan generation, superseding any earlier one."""
        key = self._key(library_path)
        with self._lock:
            generation = self._generations.get(key, 0) + 1
            self._generations[key] = generation
        return ScanToken(self, key, generation)

    def current_generation(self, library_path: Path) -> int:
        with self._lock:
            return self._generations.get(self._key(library_path), 0)

    def is_current(self, token: ScanToken) -> bool:
        with self._lock:
            return self._generations.get(token.library_key, 0) == token.generation

    def accept(self, report: ScanReport) -> bool:
        """Check whether a finished report is still the latest for its library.

        Stale reports must be discarded by the caller.
        """
        return (
            not report.cancelled
            and report.generation == self.current_generation(report.library_path)
        )


def _index_notebook(notebook_path: Path) -> TableOfContents:
    return update_notebook_toc(notebook_path)


def scan_library(
    library_path: Path,
    token: ScanToken | None = None,
    max_workers: int = 1,
    default_icon: str | None = DEFAULT_ICON,
    on_progress: Callable[[str], None] | None = None,
) -> ScanReport:
    """Rebuild every notebook TOC in a library, then the library index.

    Args:
        library_path: Library directory
        token: Generation token from a ScanCoordinator. Checked before each
            notebook and before the index rebuild; a superseded scan stops
            early and reports cancelled=True without writing the index.
        max_workers: Number of notebooks indexed in parallel
        default_icon: Icon for notebooks seen for the first time
        on_progress: Optional callback called with each notebook name after
            it has been processed.

    Returns:
        A ScanReport with the fresh TOCs, per-notebook errors, and the
        rebuilt index.

    Raises:
        NotFoundError: If the library directory does not exist.
        StorageIOError: If the library cannot be listed or index.json cannot
            be written.

    """
    names = list_notebooks(library_path)
    report = ScanReport(
        library_path=library_path,
        generation=token.generation if token is not None else 0,
    )

    def superseded() -> bool:
        if token is not None and not token.is_current():
            _logger.info(
                "Scan generation %d of %s superseded", token.generation, library_path
            )
            report.cancelled = True
            return True
        return False

    def record(name: str, toc: TableOfContents | None, error: Exception | None) -> None:
        if error is not None:
            _logger.warning("Failed to index notebook %s: %s", name, error)
            report.errors.append(NotebookError(name, error))
        elif toc is not None:
            report.tocs[name] = toc
        if on_progress:
            on_progress(name)

    if max_workers <= 1 or len(names) <= 1:
        for name in names:
            if superseded():
                return report
            try:
                record(name, _index_notebook(library_path / name), None)
            except (VaultError, OSError) as e:
                record(name, None, e)
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = {}
            for name in names:
                if superseded():
                    break
                futures[executor.submit(_index_notebook, library_path / name)] = name
            for future in as_completed(futures):
                name = futures[future]
                try:
                    record(name, future.result(), None)
                except (VaultError, OSError) as e:
                    record(name, None, e)
        if report.cancelled:
            return report

    if superseded():
        return report

    report.index = rebuild_library_index(
        library_path, tocs=report.tocs, default_icon=default_icon
    )
    report.errors.sort(key=lambda e: e.notebook)
    _logger.info(
        "Scanned %s: %d notebooks, %d notes, %d errors",
        library_path,
        len(report.tocs),
        report.note_count,
        len(report.errors),
    )
    return report
