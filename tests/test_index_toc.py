"""Tests for nvault.index.toc module."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from nvault.core.notebooks import INDEX_MARKDOWN_FILE, MEDIA_FOLDER, TOC_FILE
from nvault.errors import DecodeError, NotFoundError
from nvault.index.toc import (
    build_toc,
    read_notebook_toc,
    render_index_markdown,
    update_notebook_toc,
)
from nvault.models import NoteEntry, TableOfContents

T1 = 1_700_000_000
T2 = T1 + 60
T3 = T1 + 120


class TestUpdateNotebookToc:
    """Tests for update_notebook_toc function."""

    def test_empty_notebook(self, create_notebook_dir):
        notebook = create_notebook_dir("Empty")

        toc = update_notebook_toc(notebook)

        assert toc.notebook_name == "Empty"
        assert toc.notes == []
        data = json.loads((notebook / TOC_FILE).read_text(encoding="utf-8"))
        assert data["notes"] == []
        assert data["notebookName"] == "Empty"
        assert "*No notes yet*" in (notebook / INDEX_MARKDOWN_FILE).read_text(
            encoding="utf-8"
        )
        assert (notebook / MEDIA_FOLDER).is_dir()

    def test_newest_first(self, create_note, library: Path):
        create_note("Journal", "a.md", "# First\n", mtime=T1)
        create_note("Journal", "b.md", "# Second\n", mtime=T2)
        create_note("Journal", "c.md", "# Third\n", mtime=T3)

        toc = update_notebook_toc(library / "Journal")

        assert [e.filename for e in toc.notes] == ["c.md", "b.md", "a.md"]
        assert [e.order for e in toc.notes] == [0, 1, 2]
        assert [e.title for e in toc.notes] == ["Third", "Second", "First"]

    def test_ties_broken_by_filename(self, create_note, library: Path):
        create_note("Journal", "zeta.md", "# Z\n", mtime=T1)
        create_note("Journal", "alpha.md", "# A\n", mtime=T1)

        toc = update_notebook_toc(library / "Journal")

        assert [e.filename for e in toc.notes] == ["alpha.md", "zeta.md"]

    def test_same_second_ordered_by_mtime(self, create_note, library: Path):
        create_note("Journal", "a.md", "# A\n", mtime=T1 + 0.1)
        create_note("Journal", "b.md", "# B\n", mtime=T1 + 0.5)
        create_note("Journal", "c.md", "# C\n", mtime=T1 + 0.9)

        toc = update_notebook_toc(library / "Journal")

        assert [e.filename for e in toc.notes] == ["c.md", "b.md", "a.md"]
        assert all(e.modified.microsecond == 0 for e in toc.notes)

    def test_title_fallback_to_stem(self, create_note, library: Path):
        create_note("Journal", "blank.md", "\n\n")
        toc = update_notebook_toc(library / "Journal")
        assert toc.notes[0].title == "blank"

    def test_frontmatter_skipped_for_title(self, create_note, library: Path):
        create_note("Journal", "fm.md", "---\ntags: [x]\n---\n# Real Title\n\nbody\n")
        toc = update_notebook_toc(library / "Journal")
        assert toc.notes[0].title == "Real Title"

    def test_excludes_generated_and_media(self, create_note, library: Path):
        create_note("Journal", "note.md", "# Note\n")
        create_note(f"Journal/{MEDIA_FOLDER}", "pic.md", "# media\n")

        update_notebook_toc(library / "Journal")
        toc = update_notebook_toc(library / "Journal")

        assert [e.filename for e in toc.notes] == ["note.md"]

    def test_unreadable_note_skipped(self, create_note, library: Path):
        create_note("Journal", "good.md", "# Good\n")
        (library / "Journal" / "bad.md").write_bytes(b"\xff\xfe\xfd")

        toc = update_notebook_toc(library / "Journal")

        assert [e.filename for e in toc.notes] == ["good.md"]

    def test_idempotent_except_last_updated(self, create_note, library: Path):
        create_note("Journal", "a.md", "# A\n", mtime=T1)
        create_note("Journal", "b.md", "# B\n", mtime=T2)
        notebook = library / "Journal"

        update_notebook_toc(notebook)
        first = json.loads((notebook / TOC_FILE).read_text(encoding="utf-8"))
        update_notebook_toc(notebook)
        second = json.loads((notebook / TOC_FILE).read_text(encoding="utf-8"))

        first.pop("lastUpdated")
        second.pop("lastUpdated")
        assert first == second

    def test_timestamps_are_iso_utc(self, create_note, library: Path):
        create_note("Journal", "a.md", "# A\n", mtime=T1)
        notebook = library / "Journal"

        update_notebook_toc(notebook)

        data = json.loads((notebook / TOC_FILE).read_text(encoding="utf-8"))
        assert data["notes"][0]["modified"] == "2023-11-14T22:13:20Z"
        assert data["lastUpdated"].endswith("Z")

    def test_missing_notebook(self, library: Path):
        with pytest.raises(NotFoundError):
            update_notebook_toc(library / "missing")


class TestReadNotebookToc:
    """Tests for read_notebook_toc function."""

    def test_round_trip(self, create_note, library: Path):
        create_note("Journal", "a.md", "# A\n", mtime=T1)
        written = update_notebook_toc(library / "Journal")

        loaded = read_notebook_toc(library / "Journal")

        assert loaded == written

    def test_not_indexed(self, create_notebook_dir):
        with pytest.raises(NotFoundError):
            read_notebook_toc(create_notebook_dir("Journal"))

    def test_malformed(self, create_notebook_dir):
        notebook = create_notebook_dir("Journal")
        (notebook / TOC_FILE).write_text("{not json", encoding="utf-8")
        with pytest.raises(DecodeError):
            read_notebook_toc(notebook)


class TestRenderIndexMarkdown:
    """Tests for render_index_markdown function."""

    def test_lists_notes(self):
        when = datetime(2025, 11, 6, 10, 39, tzinfo=timezone.utc)
        toc = TableOfContents(
            notebook_name="Blog",
            last_updated=when,
            notes=[
                NoteEntry(
                    filename="2025 NOV 06 My Post [Blog].md",
                    title="My Post",
                    created=when,
                    modified=when,
                )
            ],
        )

        text = render_index_markdown(toc)

        assert text.startswith("# Blog\n")
        assert "## Notes (1)" in text
        assert "### [My Post](2025%20NOV%2006%20My%20Post%20%5BBlog%5D.md)" in text
        assert "- **Created:**" in text
        assert "- **Modified:**" in text
        assert text.endswith("\n")

    def test_build_toc_does_not_write(self, create_note, library: Path):
        create_note("Journal", "a.md", "# A\n")
        build_toc(library / "Journal")
        assert not (library / "Journal" / TOC_FILE).exists()
