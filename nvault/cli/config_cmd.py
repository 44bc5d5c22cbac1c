"""Configuration CLI commands."""

from __future__ import annotations

import click

from nvault.cli.utils import console
from nvault.config import get_config, init_config, set_config


def register_config_commands(cli: click.Group) -> None:
    """Register all config-related commands with the CLI."""
    cli.add_command(config_cmd)


@click.group("config", invoke_without_command=True)
@click.pass_context
def config_cmd(ctx: click.Context) -> None:
    """Show or initialize configuration.

    \b
    Subcommands:
      show    Show the effective settings
      init    Create the library and a default config file

    When called without a subcommand, shows the effective settings.
    """
    if ctx.invoked_subcommand is None:
        ctx.invoke(config_show)


@config_cmd.command("show")
def config_show() -> None:
    """Show the effective configuration."""
    config = get_config()
    source = config.config_path if config.config_path.exists() else "defaults"

    console.print(f"[dim]Source: {source}[/dim]")
    console.print(f"library_root = {config.library_root}")
    console.print(f"default_icon = {config.default_icon or ''}")
    console.print(f"scan_workers = {config.scan_workers}")
    console.print(f"log_level = {config.log_level}")
    console.print(f"date_format = {config.date_format}")


@config_cmd.command("init")
def config_init() -> None:
    """Create the library directory and a default config file."""
    config = get_config()
    existed = config.config_path.exists()

    try:
        config = init_config(config.library_root)
    except (OSError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1) from None

    set_config(config)
    if existed:
        console.print(f"[dim]Config already exists: {config.config_path}[/dim]")
    else:
        console.print(f"[green]Created config:[/green] {config.config_path}")
