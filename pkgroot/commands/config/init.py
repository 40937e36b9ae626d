"""Initialize config command implementation."""

import sys

import click

from pkgroot.config import Config, write_config
from pkgroot.errors import format_error
from pkgroot.commands.utils import get_config_file


@click.command(name="init")
@click.option(
    "--force",
    "-f",
    is_flag=True,
    help="Force re-initialization, overwriting existing config",
)
@click.pass_context
def config_init(ctx, force: bool):
    """Initialize or re-initialize the user config file.

    Writes the default configuration to ~/.config/pkgroot/pkgroot.json (or
    the --config path). Use --force to overwrite an existing config (creates
    a backup first).
    """
    config_path = get_config_file(ctx)

    if config_path.exists() and not force:
        click.echo(f"Config file already exists: {config_path}")
        click.echo("Use --force to re-initialize (creates backup first).")
        sys.exit(1)

    if config_path.exists():
        backup_path = config_path.with_suffix(".json.bak")
        click.echo(f"Backing up existing config to {backup_path}...")
        config_path.replace(backup_path)
        click.echo("✅ Backup created")

    click.echo(f"Initializing config at {config_path}...")
    try:
        write_config(config_path, Config())
    except OSError as e:
        click.echo(format_error(f"initialization failed: {e}"), err=True)
        sys.exit(1)

    click.echo("✅ Config initialized successfully")
