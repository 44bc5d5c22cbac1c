"""Storage access capability.

Some platforms only grant access to a user-chosen location through an
opaque handle that must be resolved again after a restart. The engine never
deals with those handles: callers resolve a handle to a path through a
StorageAccessProvider and pass the path in.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from nvault.errors import NotFoundError


class StorageAccessProvider(Protocol):
    """Grants continued access to a location across process restarts."""

    def acquire(self, path: Path) -> str:
        """Return a persistable handle for path."""
        ...

    def resolve(self, handle: str) -> Path:
        """Turn a handle back into a usable path.

        Raises:
            NotFoundError: If the location is no longer reachable.

        """
        ...


class LocalAccessProvider:
    """Provider for plain file systems where the handle is just the path."""

    def acquire(self, path: Path) -> str:
        return str(Path(path).expanduser().resolve())

    def resolve(self, handle: str) -> Path:
        path = Path(handle)
        if not path.exists():
            raise NotFoundError(f"Storage location is no longer available: {handle}")
        return path
