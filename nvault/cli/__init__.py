"""CLI package for nvault."""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure stdout handles Unicode when piped (e.g., `nvault toc Journal | less`)
if hasattr(sys.stdout, "reconfigure"):
    sys.stdout.reconfigure(encoding="utf-8", errors="replace")

import click
import yaml

from nvault import __version__
from nvault.cli.config_cmd import register_config_commands
from nvault.cli.notebooks import register_notebook_commands
from nvault.cli.notes import register_note_commands
from nvault.cli.scan import register_scan_commands
from nvault.cli.utils import console, setup_logging
from nvault.config import get_config, load_config, set_config


@click.group()
@click.version_option(version=__version__, prog_name="nvault")
@click.option(
    "--library",
    "-L",
    type=click.Path(file_okay=False, path_type=Path),
    help="Library directory (overrides config and NVAULT_LIBRARY)",
)
@click.option("--verbose", "-v", is_flag=True, help="Log engine activity to stderr")
def cli(library: Path | None, verbose: bool) -> None:
    """Index and manage a library of plain-text notebooks.

    A library is a directory of notebooks; each notebook is a directory of
    markdown notes. nvault keeps a table of contents per notebook and an
    index of the whole library next to the files.
    """
    try:
        if library is not None:
            set_config(load_config(library_root=library))
        config = get_config()
    except (ValueError, yaml.YAMLError) as e:
        console.print(f"[red]Invalid configuration:[/red] {e}")
        raise SystemExit(1) from None

    setup_logging("INFO" if verbose else config.log_level)


# Register all command groups
register_scan_commands(cli)
register_notebook_commands(cli)
register_note_commands(cli)
register_config_commands(cli)


def main() -> None:
    """Entry point for the CLI."""
    cli()


__all__ = ["cli", "main"]
