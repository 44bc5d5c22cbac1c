"""File system helpers: atomic writes and per-path write locks."""

from __future__ import annotations

import os
import threading
import weakref
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from tempfile import NamedTemporaryFile

_locks_guard = threading.Lock()
# Entries disappear once no writer holds the lock
_path_locks: weakref.WeakValueDictionary[str, threading.Lock] = (
    weakref.WeakValueDictionary()
)


def _lock_for(path: Path) -> threading.Lock:
    key = os.path.normcase(os.path.abspath(path))
    with _locks_guard:
        lock = _path_locks.get(key)
        if lock is None:
            lock = threading.Lock()
            _path_locks[key] = lock
        return lock


@contextmanager
def path_lock(path: Path) -> Iterator[None]:
    """Serialize writers of the same path within this process."""
    lock = _lock_for(path)
    with lock:
        yield


def atomic_write_text(path: Path, text: str) -> None:
    """Write text to path so readers see either the old or the new content.

    The content goes to a temporary file in the same directory, is fsynced,
    and then renamed over the target.

    Raises:
        OSError: If the directory is missing or not writable.

    """
    tmp = NamedTemporaryFile(
        "w",
        encoding="utf-8",
        newline="",
        dir=str(path.parent),
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
    )
    try:
        with tmp:
            tmp.write(text)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp.name, path)
    finally:
        if os.path.exists(tmp.name):
            os.unlink(tmp.name)


def is_hidden(path: Path) -> bool:
    """Check if a path's final component is hidden (starts with ".")."""
    return path.name.startswith(".")
