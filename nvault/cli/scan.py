"""Indexing CLI commands: scan, toc, and index."""

from __future__ import annotations

import click
from rich.markup import escape
from rich.table import Table

from nvault.cli.utils import console, get_library_root, resolve_notebook, spinner
from nvault.config import get_config
from nvault.errors import DecodeError, NotFoundError, VaultError
from nvault.index.library import load_library_index, rebuild_library_index
from nvault.index.scanner import ScanCoordinator, scan_library
from nvault.index.toc import read_notebook_toc, update_notebook_toc
from nvault.models import LibraryIndex


def register_scan_commands(cli: click.Group) -> None:
    """Register all indexing commands with the CLI."""
    cli.add_command(scan_cmd)
    cli.add_command(toc_cmd)
    cli.add_command(index_cmd)


def _print_index(index: LibraryIndex) -> None:
    config = get_config()
    table = Table(show_header=True, title=index.library_name)
    table.add_column("Notebook")
    table.add_column("Name")
    table.add_column("Tags")
    table.add_column("Notes", justify="right")
    table.add_column("Last modified")

    for nb in index.notebooks:
        name = escape(f"{nb.icon} {nb.display_name}" if nb.icon else nb.display_name)
        if nb.color:
            name = f"[{nb.color}]{name}[/{nb.color}]"
        modified = "-"
        if nb.last_modified:
            modified = nb.last_modified.astimezone().strftime(config.date_format)
        table.add_row(nb.id, name, ", ".join(nb.tags), str(nb.note_count), modified)

    console.print(table)


@click.command("scan")
@click.option("--workers", "-w", type=int, help="Notebooks to index in parallel")
def scan_cmd(workers: int | None) -> None:
    """Rebuild every notebook TOC and the library index.

    Notebooks that fail are reported; the rest of the library is still
    indexed.
    """
    root = get_library_root()
    config = get_config()
    coordinator = ScanCoordinator()
    token = coordinator.begin(root)

    try:
        with spinner("Scanning library") as update:
            report = scan_library(
                root,
                token=token,
                max_workers=workers or config.scan_workers,
                default_icon=config.default_icon,
                on_progress=lambda name: update(f"Indexed {name}"),
            )
    except VaultError as e:
        console.print(f"[red]Scan failed:[/red] {e}")
        raise SystemExit(1) from None

    console.print(
        f"[green]Indexed {len(report.tocs)} notebooks[/green] "
        f"[dim]({report.note_count} notes)[/dim]"
    )
    if report.index is not None and report.index.notebooks:
        _print_index(report.index)
    for error in report.errors:
        console.print(f"[yellow]Skipped {error.notebook}:[/yellow] {error.error}")


@click.command("toc")
@click.argument("notebook")
@click.option("--rebuild", "-r", is_flag=True, help="Rescan the notebook first")
def toc_cmd(notebook: str, rebuild: bool) -> None:
    """Show a notebook's table of contents."""
    notebook_path = resolve_notebook(notebook)
    config = get_config()

    try:
        if rebuild:
            toc = update_notebook_toc(notebook_path)
        else:
            try:
                toc = read_notebook_toc(notebook_path)
            except (NotFoundError, DecodeError):
                toc = update_notebook_toc(notebook_path)
    except VaultError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1) from None

    if not toc.notes:
        console.print(f"[bold]{toc.notebook_name}[/bold]")
        console.print("[dim]No notes yet[/dim]")
        return

    table = Table(show_header=True, title=toc.notebook_name)
    table.add_column("#", justify="right")
    table.add_column("Title")
    table.add_column("Modified")
    table.add_column("File", style="dim")
    for entry in toc.notes:
        table.add_row(
            str(entry.order + 1),
            escape(entry.title),
            entry.modified.astimezone().strftime(config.date_format),
            escape(entry.filename),
        )
    console.print(table)


@click.group("index", invoke_without_command=True)
@click.pass_context
def index_cmd(ctx: click.Context) -> None:
    """Show or rebuild the library index.

    Run without a subcommand to show the index.
    """
    if ctx.invoked_subcommand is None:
        ctx.invoke(index_show)


@index_cmd.command("show")
def index_show() -> None:
    """Show the persisted library index."""
    root = get_library_root()
    try:
        index = load_library_index(root)
    except NotFoundError:
        console.print("[dim]Library not indexed yet. Run 'nvault scan'.[/dim]")
        return
    except DecodeError as e:
        console.print(f"[red]Error:[/red] {e}")
        console.print("[dim]Run 'nvault index rebuild' to regenerate it.[/dim]")
        raise SystemExit(1) from None

    _print_index(index)


@index_cmd.command("rebuild")
def index_rebuild() -> None:
    """Rebuild the library index, keeping notebook metadata."""
    root = get_library_root()
    try:
        with spinner("Rebuilding library index"):
            index = rebuild_library_index(root, default_icon=get_config().default_icon)
    except VaultError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1) from None

    console.print(f"[green]Rebuilt index:[/green] {len(index.notebooks)} notebooks")
