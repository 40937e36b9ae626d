"""Show effective config command implementation."""

import json
import sys

import click

from pkgroot.config import config_to_dict
from pkgroot.errors import ConfigError, format_error
from pkgroot.commands.utils import get_config_file, load_cli_config


@click.command(name="show")
@click.pass_context
def config_show(ctx):
    """Print the effective configuration as JSON."""
    try:
        config = load_cli_config(ctx)
    except ConfigError as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(1)

    config_path = get_config_file(ctx)
    source = str(config_path) if config_path.exists() else "defaults"
    click.echo(f"// source: {source}")
    click.echo(json.dumps(config_to_dict(config), indent=2))
