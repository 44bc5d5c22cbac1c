"""Data models for nvault.

The dataclasses use snake_case attributes; the on-disk JSON caches use the
camelCase keys produced by ``to_dict``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from nvault.utils.dates import format_iso, parse_iso

DEFAULT_ICON = "📓"
DEFAULT_SECTION = "General Section"


@dataclass
class PageMetadata:
    """Derived metadata for a single note file.

    Never persisted on its own; always recomputed from the file.
    """

    id: str  # File name, doubles as the page's address within its notebook
    title: str
    tags: list[str] = field(default_factory=list)
    preview: str = ""
    word_count: int = 0
    created: datetime | None = None
    modified: datetime | None = None
    has_frontmatter: bool = False


@dataclass
class NoteEntry:
    """One row of a notebook table of contents."""

    filename: str
    title: str
    created: datetime
    modified: datetime
    order: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "filename": self.filename,
            "title": self.title,
            "created": format_iso(self.created),
            "modified": format_iso(self.modified),
            "order": self.order,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NoteEntry:
        return cls(
            filename=str(data["filename"]),
            title=str(data["title"]),
            created=parse_iso(data["created"]),
            modified=parse_iso(data["modified"]),
            order=int(data.get("order", 0)),
        )


@dataclass
class TableOfContents:
    """Cached summary of a notebook, persisted as ``.toc.json``."""

    notebook_name: str
    last_updated: datetime
    notes: list[NoteEntry] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "notebookName": self.notebook_name,
            "lastUpdated": format_iso(self.last_updated),
            "notes": [entry.to_dict() for entry in self.notes],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TableOfContents:
        return cls(
            notebook_name=str(data["notebookName"]),
            last_updated=parse_iso(data["lastUpdated"]),
            notes=[NoteEntry.from_dict(item) for item in data["notes"]],
        )

    @property
    def latest_modified(self) -> datetime | None:
        """Most recent modification time among the notes."""
        if not self.notes:
            return None
        return max(entry.modified for entry in self.notes)


@dataclass
class NotebookMetadata:
    """Library-level metadata for one notebook.

    display_name, description, tags, icon, color and created_date belong to
    the user; note_count and last_modified are refreshed by every scan.
    """

    id: str  # Directory name
    display_name: str
    description: str = ""
    tags: list[str] = field(default_factory=list)
    icon: str | None = None
    color: str | None = None
    note_count: int = 0
    last_modified: datetime | None = None
    created_date: datetime | None = None

    @property
    def section(self) -> str:
        """Section this notebook is shelved under (its first tag)."""
        return self.tags[0] if self.tags else DEFAULT_SECTION

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "displayName": self.display_name,
            "description": self.description,
            "tags": list(self.tags),
            "icon": self.icon,
            "color": self.color,
            "noteCount": self.note_count,
            "lastModified": (
                format_iso(self.last_modified) if self.last_modified else None
            ),
            "createdDate": format_iso(self.created_date) if self.created_date else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NotebookMetadata:
        last_modified = data.get("lastModified")
        created_date = data.get("createdDate")
        return cls(
            id=str(data["id"]),
            display_name=str(data.get("displayName") or data["id"]),
            description=str(data.get("description") or ""),
            tags=[str(t) for t in data.get("tags") or []],
            icon=data.get("icon"),
            color=data.get("color"),
            note_count=int(data.get("noteCount", 0)),
            last_modified=parse_iso(last_modified) if last_modified else None,
            created_date=parse_iso(created_date) if created_date else None,
        )


@dataclass
class LibraryIndex:
    """Cached summary of a library, persisted as ``index.json``."""

    library_name: str
    created_date: datetime
    last_modified: datetime
    notebooks: list[NotebookMetadata] = field(default_factory=list)

    def get_notebook(self, notebook_id: str) -> NotebookMetadata | None:
        """Get a notebook's metadata by directory name."""
        for nb in self.notebooks:
            if nb.id == notebook_id:
                return nb
        return None

    def notebook_ids(self) -> list[str]:
        return [nb.id for nb in self.notebooks]

    def to_dict(self) -> dict[str, Any]:
        return {
            "libraryName": self.library_name,
            "createdDate": format_iso(self.created_date),
            "lastModified": format_iso(self.last_modified),
            "notebooks": [nb.to_dict() for nb in self.notebooks],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LibraryIndex:
        return cls(
            library_name=str(data["libraryName"]),
            created_date=parse_iso(data["createdDate"]),
            last_modified=parse_iso(data["lastModified"]),
            notebooks=[NotebookMetadata.from_dict(item) for item in data["notebooks"]],
        )
