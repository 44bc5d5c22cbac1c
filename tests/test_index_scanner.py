"""Tests for nvault.index.scanner module."""

from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from nvault.core.notebooks import LIBRARY_INDEX_FILE, TOC_FILE
from nvault.errors import NotFoundError, StorageIOError
from nvault.index import scanner as scanner_module
from nvault.index.library import load_library_index
from nvault.index.scanner import ScanCoordinator, scan_library


@pytest.fixture
def three_notebooks(create_note, library: Path) -> Path:
    create_note("Journal", "a.md", "# A\n")
    create_note("Journal", "b.md", "# B\n")
    create_note("Recipes", "r.md", "# R\n")
    create_note("Work", "w.md", "# W\n")
    return library


class TestScanLibrary:
    """Tests for scan_library function."""

    def test_indexes_everything(self, three_notebooks: Path):
        report = scan_library(three_notebooks)

        assert report.ok
        assert sorted(report.tocs) == ["Journal", "Recipes", "Work"]
        assert report.note_count == 4
        assert report.index is not None
        assert report.index.notebook_ids() == ["Journal", "Recipes", "Work"]
        for name in ("Journal", "Recipes", "Work"):
            assert (three_notebooks / name / TOC_FILE).exists()
        assert load_library_index(three_notebooks) == report.index

    def test_empty_library(self, library: Path):
        report = scan_library(library)

        assert report.ok
        assert report.tocs == {}
        assert report.index is not None
        assert report.index.notebooks == []

    def test_missing_library_is_fatal(self, tmp_path: Path):
        with pytest.raises(NotFoundError):
            scan_library(tmp_path / "missing")

    def test_notebook_deleted_mid_scan(
        self, three_notebooks: Path, monkeypatch: pytest.MonkeyPatch
    ):
        real_update = scanner_module.update_notebook_toc

        def flaky_update(notebook_path: Path):
            if notebook_path.name == "Recipes":
                shutil.rmtree(notebook_path)
            return real_update(notebook_path)

        monkeypatch.setattr(scanner_module, "update_notebook_toc", flaky_update)

        report = scan_library(three_notebooks)

        assert not report.ok
        assert [e.notebook for e in report.errors] == ["Recipes"]
        assert isinstance(report.errors[0].error, NotFoundError)
        assert sorted(report.tocs) == ["Journal", "Work"]
        assert report.index.notebook_ids() == ["Journal", "Work"]

    def test_failed_notebook_keeps_previous_entry(
        self, three_notebooks: Path, monkeypatch: pytest.MonkeyPatch
    ):
        scan_library(three_notebooks)
        real_update = scanner_module.update_notebook_toc

        def failing_update(notebook_path: Path):
            if notebook_path.name == "Work":
                raise StorageIOError("permission denied")
            return real_update(notebook_path)

        monkeypatch.setattr(scanner_module, "update_notebook_toc", failing_update)

        report = scan_library(three_notebooks)

        assert [e.notebook for e in report.errors] == ["Work"]
        work = report.index.get_notebook("Work")
        assert work is not None
        assert work.note_count == 1

    def test_failed_new_notebook_still_indexed(
        self, three_notebooks: Path, monkeypatch: pytest.MonkeyPatch
    ):
        real_update = scanner_module.update_notebook_toc

        def failing_update(notebook_path: Path):
            if notebook_path.name == "Work":
                raise StorageIOError("busy")
            return real_update(notebook_path)

        monkeypatch.setattr(scanner_module, "update_notebook_toc", failing_update)

        report = scan_library(three_notebooks)

        assert [e.notebook for e in report.errors] == ["Work"]
        work = report.index.get_notebook("Work")
        assert work.note_count == 1
        assert work.last_modified is not None

    def test_parallel_workers(self, three_notebooks: Path):
        seen: list[str] = []

        report = scan_library(three_notebooks, max_workers=4, on_progress=seen.append)

        assert report.ok
        assert sorted(report.tocs) == ["Journal", "Recipes", "Work"]
        assert sorted(seen) == ["Journal", "Recipes", "Work"]

    def test_default_icon(self, three_notebooks: Path):
        report = scan_library(three_notebooks, default_icon=None)
        assert all(nb.icon is None for nb in report.index.notebooks)


class TestScanCoordinator:
    """Tests for ScanCoordinator generations."""

    def test_generations_increase(self, library: Path):
        coordinator = ScanCoordinator()
        first = coordinator.begin(library)
        second = coordinator.begin(library)

        assert second.generation == first.generation + 1
        assert not first.is_current()
        assert second.is_current()

    def test_libraries_are_independent(self, tmp_path: Path):
        coordinator = ScanCoordinator()
        a = coordinator.begin(tmp_path / "a")
        coordinator.begin(tmp_path / "b")
        assert a.is_current()

    def test_stale_scan_is_cancelled(self, three_notebooks: Path):
        coordinator = ScanCoordinator()
        stale = coordinator.begin(three_notebooks)
        coordinator.begin(three_notebooks)

        report = scan_library(three_notebooks, token=stale)

        assert report.cancelled
        assert report.index is None
        assert not (three_notebooks / LIBRARY_INDEX_FILE).exists()
        assert not coordinator.accept(report)

    def test_superseded_mid_scan(self, three_notebooks: Path):
        coordinator = ScanCoordinator()
        token = coordinator.begin(three_notebooks)

        def on_progress(name: str) -> None:
            if name == "Journal":
                coordinator.begin(three_notebooks)

        report = scan_library(three_notebooks, token=token, on_progress=on_progress)

        assert report.cancelled
        assert list(report.tocs) == ["Journal"]
        assert not (three_notebooks / LIBRARY_INDEX_FILE).exists()

    def test_accept_current_report(self, three_notebooks: Path):
        coordinator = ScanCoordinator()
        token = coordinator.begin(three_notebooks)

        report = scan_library(three_notebooks, token=token)

        assert coordinator.accept(report)
        coordinator.begin(three_notebooks)
        assert not coordinator.accept(report)
