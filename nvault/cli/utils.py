"""Shared utilities for CLI commands."""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from nvault.config import get_config
from nvault.core.notebooks import notebook_exists

# Main console for stdout (user-facing output)
console = Console(highlight=False)

# Stderr console for progress indicators (doesn't interfere with piped output)
stderr_console = Console(file=sys.stderr, highlight=False)

# Maximum stdin size (1MB) to prevent accidental huge input
MAX_STDIN_SIZE = 1024 * 1024

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def setup_logging(level: str) -> None:
    """Configure root logging for a CLI run."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )


def get_library_root() -> Path:
    """Get the configured library directory, exiting if it does not exist."""
    root = get_config().library_root
    if not root.is_dir():
        console.print(f"[red]Library not found:[/red] {root}")
        console.print("[dim]Use --library or set NVAULT_LIBRARY.[/dim]")
        raise SystemExit(1)
    return root


def resolve_notebook(name: str) -> Path:
    """Get a notebook's path, exiting with an error if it does not exist."""
    root = get_library_root()
    if not notebook_exists(root, name):
        console.print(f"[red]Notebook not found:[/red] {name}")
        raise SystemExit(1)
    return root / name


def resolve_note_path(path_arg: str) -> Path:
    """Resolve a note argument.

    Absolute paths and paths that exist relative to the working directory
    are used as-is; anything else is taken relative to the library root
    (e.g. "Journal/2025 NOV 06 Note [Journal].md").
    """
    path = Path(path_arg).expanduser()
    if path.is_absolute() or path.exists():
        return path
    return get_config().library_root / path


def get_stdin_content() -> str | None:
    """Read content from stdin if available.

    Returns:
        Content from stdin, or None if stdin is a TTY (interactive
        terminal) or empty.

    Raises:
        SystemExit: If stdin contains binary data or exceeds size limit.
    """
    if sys.stdin is None or sys.stdin.isatty():
        return None

    try:
        content = sys.stdin.read()
    except UnicodeDecodeError:
        console.print("[red]Error: stdin appears to contain binary data.[/red]")
        raise SystemExit(1) from None

    if not content:
        return None

    if "\x00" in content:
        console.print("[red]Error: stdin appears to contain binary data.[/red]")
        raise SystemExit(1)

    if len(content) > MAX_STDIN_SIZE:
        console.print(
            f"[red]Error: stdin content exceeds size limit ({MAX_STDIN_SIZE // 1024}KB).[/red]"
        )
        raise SystemExit(1)

    return content


@contextmanager
def spinner(description: str) -> Iterator[Callable[[str], None]]:
    """Context manager for a spinner with status updates.

    Usage:
        with spinner("Scanning library") as update:
            for item in items:
                update(f"Indexing {item}")
                process(item)

    Yields:
        A function to update the status text.
    """
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=stderr_console,
        transient=True,
    ) as progress:
        task = progress.add_task(description, total=None)

        def update(new_description: str) -> None:
            progress.update(task, description=new_description)

        yield update
