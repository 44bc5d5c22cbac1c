"""Exception types raised by the nvault engine."""

from __future__ import annotations


class VaultError(Exception):
    """Base exception for vault operations."""

    pass


class StorageIOError(VaultError, OSError):
    """Raised when a file or directory cannot be read, written, or listed."""

    pass


class NotFoundError(StorageIOError, FileNotFoundError):
    """Raised when a note, notebook, or cache file does not exist.

    Reading a TOC or library index before the first scan raises this.
    """

    pass


class DecodeError(VaultError, ValueError):
    """Raised when a cache file or note cannot be decoded."""

    pass
