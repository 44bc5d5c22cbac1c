"""Notebook-related CLI commands."""

from __future__ import annotations

import click
from rich.markup import escape
from rich.table import Table

from nvault.cli.utils import console, get_library_root
from nvault.config import get_config
from nvault.core.notebooks import create_notebook
from nvault.errors import NotFoundError, VaultError
from nvault.index.library import (
    create_section,
    delete_notebook,
    group_by_section,
    load_library_index,
    rebuild_library_index,
    refresh_library_index,
    reorder_notebooks,
    update_notebook_metadata,
)
from nvault.index.toc import update_notebook_toc
from nvault.models import LibraryIndex
from nvault.utils.dates import format_relative


def register_notebook_commands(cli: click.Group) -> None:
    """Register all notebook-related commands with the CLI."""
    cli.add_command(notebooks_cmd)


def _load_or_rebuild_index() -> LibraryIndex:
    root = get_library_root()
    try:
        return load_library_index(root)
    except VaultError:
        return rebuild_library_index(root, default_icon=get_config().default_icon)


@click.group("notebooks", invoke_without_command=True)
@click.option("--verbose", "-v", is_flag=True, help="Show details")
@click.pass_context
def notebooks_cmd(ctx: click.Context, verbose: bool) -> None:
    """Manage notebooks.

    Run without a subcommand to list all notebooks.
    """
    if ctx.invoked_subcommand is None:
        _list_notebooks(verbose)


def _list_notebooks(verbose: bool = False) -> None:
    """List all notebooks in library order."""
    try:
        index = _load_or_rebuild_index()
    except VaultError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise SystemExit(1) from None

    if not index.notebooks:
        console.print("[dim]No notebooks found.[/dim]")
        return

    if verbose:
        table = Table(show_header=True)
        table.add_column("Notebook")
        table.add_column("Name")
        table.add_column("Description")
        table.add_column("Tags")
        table.add_column("Notes", justify="right")
        table.add_column("Updated")

        for nb in index.notebooks:
            updated = format_relative(nb.last_modified) if nb.last_modified else "-"
            table.add_row(
                escape(nb.id),
                escape(f"{nb.icon or ''} {nb.display_name}".strip()),
                escape(nb.description),
                escape(", ".join(nb.tags)),
                str(nb.note_count),
                updated,
            )
        console.print(table)
    else:
        for nb in index.notebooks:
            suffix = ""
            if nb.display_name != nb.id:
                suffix = f" [dim]({escape(nb.display_name)})[/dim]"
            console.print(f"{escape(nb.id)}{suffix}")


@notebooks_cmd.command("list")
@click.option("--verbose", "-v", is_flag=True, help="Show details")
def notebooks_list(verbose: bool) -> None:
    """List all notebooks."""
    _list_notebooks(verbose)


@notebooks_cmd.command("create")
@click.argument("name")
def notebooks_create(name: str) -> None:
    """Create a new notebook (with its media folder).

    Examples:
        nvault notebooks create Journal
        nvault notebooks create "Claude Sessions"

    """
    root = get_library_root()
    try:
        notebook_path = create_notebook(root, name)
        refresh_library_index(
            root,
            {notebook_path.name: update_notebook_toc(notebook_path)},
            default_icon=get_config().default_icon,
        )
    except (ValueError, FileExistsError, VaultError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise SystemExit(1) from None

    console.print(f"[green]Created notebook:[/green] {escape(notebook_path.name)}")
    console.print(f"[dim]Location: {escape(str(notebook_path))}[/dim]")


@notebooks_cmd.command("edit")
@click.argument("notebook_id")
@click.option("--name", "display_name", help="Display name")
@click.option("--description", "-d", help="Description")
@click.option("--tag", "-t", "tags", multiple=True, help="Tag (repeatable; replaces tags)")
@click.option("--clear-tags", is_flag=True, help="Remove all tags")
@click.option("--icon", "-i", help="Icon (emoji)")
@click.option("--color", "-c", help="Display color")
def notebooks_edit(
    notebook_id: str,
    display_name: str | None,
    description: str | None,
    tags: tuple[str, ...],
    clear_tags: bool,
    icon: str | None,
    color: str | None,
) -> None:
    """Edit a notebook's display metadata.

    Options not given keep their current value.
    """
    root = get_library_root()
    try:
        index = _load_or_rebuild_index()
        current = index.get_notebook(notebook_id)
        if current is None:
            raise NotFoundError(f"Notebook not found: {notebook_id}")

        if clear_tags:
            new_tags: list[str] = []
        elif tags:
            new_tags = list(tags)
        else:
            new_tags = current.tags

        meta = update_notebook_metadata(
            root,
            notebook_id,
            display_name=display_name if display_name is not None else current.display_name,
            description=description if description is not None else current.description,
            tags=new_tags,
            icon=icon if icon is not None else current.icon,
            color=color if color is not None else current.color,
        )
    except VaultError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise SystemExit(1) from None

    console.print(f"[green]Updated notebook:[/green] {escape(meta.display_name)}")


@notebooks_cmd.command("move")
@click.argument("notebook_id")
@click.argument("position", type=int)
def notebooks_move(notebook_id: str, position: int) -> None:
    """Move a notebook to POSITION (1-based) in the library order."""
    root = get_library_root()
    try:
        _load_or_rebuild_index()
        index = reorder_notebooks(root, notebook_id, position - 1)
    except VaultError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise SystemExit(1) from None

    console.print(f"[green]Moved {escape(notebook_id)}[/green]")
    for i, nb in enumerate(index.notebooks, start=1):
        console.print(f"[dim]{i}.[/dim] {escape(nb.id)}")


@notebooks_cmd.command("delete")
@click.argument("notebook_id")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
def notebooks_delete(notebook_id: str, yes: bool) -> None:
    """Delete a notebook and ALL of its notes and media."""
    root = get_library_root()
    if not yes:
        console.print(f"Delete notebook '{escape(notebook_id)}' and all of its files?")
        if not click.confirm("Continue?"):
            console.print("[dim]Cancelled.[/dim]")
            return

    try:
        delete_notebook(root, notebook_id)
    except (ValueError, VaultError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise SystemExit(1) from None

    console.print(f"[green]Deleted notebook:[/green] {escape(notebook_id)}")


@notebooks_cmd.command("sections")
@click.option("--create", "new_section", help="Start a new section with its first notebook")
def notebooks_sections(new_section: str | None) -> None:
    """List notebooks grouped by section (their first tag)."""
    root = get_library_root()
    try:
        if new_section:
            meta = create_section(root, new_section, default_icon=get_config().default_icon)
            console.print(
                f"[green]Created section:[/green] {escape(new_section)} ({escape(meta.id)})"
            )
        index = _load_or_rebuild_index()
    except (ValueError, FileExistsError, VaultError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise SystemExit(1) from None

    for section, notebooks in group_by_section(index).items():
        console.print(f"[bold]{escape(section)}[/bold]")
        for nb in notebooks:
            console.print(escape(f"  {nb.icon or ''} {nb.display_name}".rstrip()))
