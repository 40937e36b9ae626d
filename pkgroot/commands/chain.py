"""Dependency chain command implementation."""

import sys

import click

from pkgroot import setup_logging
from pkgroot.errors import ConfigError, format_error
from pkgroot.tui import display_dependency_chain

from .utils import load_cli_config, make_installer, select_installed


@click.command()
@click.argument("name")
@click.option("--version", "version_", help="Installed version to inspect")
@click.option("--all", "ignore_enabled", is_flag=True, help="Include disabled packages")
@click.pass_context
def chain(ctx, name: str, version_: str | None, ignore_enabled: bool):
    """Show the installed dependency chain of a package."""
    setup_logging(ctx.obj.get("debug", False))

    try:
        installer = make_installer(load_cli_config(ctx))
        package = select_installed(installer, name, version_)
        entries = installer.dependency_chain(package, ignore_enabled=ignore_enabled)
    except (ConfigError, ValueError) as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(1)

    display_dependency_chain(package, entries)
