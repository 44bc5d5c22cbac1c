"""Note-related CLI commands."""

from __future__ import annotations

from pathlib import Path

import click
from rich.markup import escape
from rich.table import Table

from nvault.cli.utils import (
    console,
    get_stdin_content,
    resolve_note_path,
    resolve_notebook,
)
from nvault.config import get_config
from nvault.core.notes import create_note, delete_note, list_pages, load_note, save_note
from nvault.errors import VaultError
from nvault.index.toc import update_notebook_toc


def register_note_commands(cli: click.Group) -> None:
    """Register all note-related commands with the CLI."""
    cli.add_command(new_note)
    cli.add_command(show_note)
    cli.add_command(save_cmd)
    cli.add_command(rm_note)
    cli.add_command(pages_cmd)


def _refresh_toc(notebook_path: Path) -> None:
    """Rewrite a notebook's TOC after a note changed, warning on failure."""
    try:
        update_notebook_toc(notebook_path)
    except VaultError as e:
        console.print(f"[yellow]Warning:[/yellow] could not update TOC: {e}")


@click.command("new")
@click.argument("notebook")
@click.argument("title")
@click.option("--body", "-b", help="Note body (also read from stdin)")
@click.option(
    "--breadcrumb",
    help="Ancestor path for the file name, e.g. 'Blog/Section' (default: notebook)",
)
def new_note(notebook: str, title: str, body: str | None, breadcrumb: str | None) -> None:
    """Create a new note in NOTEBOOK.

    \b
    Examples:
      nvault new Journal "Morning pages"
      nvault new Blog "My Post" --breadcrumb "Blog/Section"
      echo "Body text" | nvault new Journal "Piped note"
    """
    notebook_path = resolve_notebook(notebook)
    if body is None:
        body = get_stdin_content() or ""

    try:
        path = create_note(notebook_path, title, body, breadcrumb=breadcrumb)
    except (ValueError, VaultError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1) from None

    _refresh_toc(notebook_path)
    console.print(f"[green]Created:[/green] {escape(path.name)}")


@click.command("show")
@click.argument("path")
def show_note(path: str) -> None:
    """Print a note's title and body.

    PATH is a file path, or a path relative to the library root.
    """
    note_path = resolve_note_path(path)
    try:
        title, body = load_note(note_path)
    except VaultError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1) from None

    console.print(f"[bold]{escape(title) or '(untitled)'}[/bold]")
    if body:
        console.print()
        console.print(body, markup=False)


@click.command("save")
@click.argument("path")
@click.option("--title", "-t", default="", help="Note title")
@click.option("--body", "-b", help="Note body (also read from stdin)")
def save_cmd(path: str, title: str, body: str | None) -> None:
    """Write a note's title and body to PATH.

    Saving an empty title and body deletes the note.
    """
    note_path = resolve_note_path(path)
    if body is None:
        body = get_stdin_content() or ""

    try:
        written = save_note(title, body, note_path)
    except VaultError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1) from None

    _refresh_toc(note_path.parent)
    if written is None:
        console.print(f"[yellow]Empty note deleted:[/yellow] {escape(note_path.name)}")
    else:
        console.print(f"[green]Saved:[/green] {escape(note_path.name)}")


@click.command("rm")
@click.argument("path")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
def rm_note(path: str, yes: bool) -> None:
    """Delete a note."""
    note_path = resolve_note_path(path)
    if not yes and not click.confirm(f"Delete {note_path.name}?"):
        console.print("[dim]Cancelled.[/dim]")
        return

    try:
        delete_note(note_path)
    except VaultError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1) from None

    _refresh_toc(note_path.parent)
    console.print(f"[green]Deleted:[/green] {escape(note_path.name)}")


@click.command("pages")
@click.argument("notebook")
def pages_cmd(notebook: str) -> None:
    """List a notebook's pages with tags, word counts and previews."""
    notebook_path = resolve_notebook(notebook)
    config = get_config()
    try:
        pages = list_pages(notebook_path)
    except VaultError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1) from None

    if not pages:
        console.print("[dim]No notes yet[/dim]")
        return

    table = Table(show_header=True, title=notebook_path.name)
    table.add_column("Title")
    table.add_column("Tags")
    table.add_column("Words", justify="right")
    table.add_column("Modified")
    table.add_column("Preview", style="dim")
    for page in pages:
        modified = "-"
        if page.modified:
            modified = page.modified.astimezone().strftime(config.date_format)
        table.add_row(
            escape(page.title),
            ", ".join(page.tags),
            str(page.word_count),
            modified,
            escape(page.preview),
        )
    console.print(table)
