"""Cleanup commands: orphaned and disabled packages."""

import sys

import click

from pkgroot import setup_logging
from pkgroot.errors import ConfigError, format_error

from .utils import echo_log, load_cli_config, make_installer


def _run(ctx, operation: str) -> None:
    setup_logging(ctx.obj.get("debug", False))

    try:
        installer = make_installer(load_cli_config(ctx))
    except (ConfigError, ValueError) as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(1)

    log = getattr(installer, operation)()
    echo_log(log)
    if log.has_errors:
        sys.exit(1)


@click.command(name="remove-orphans")
@click.pass_context
def remove_orphans(ctx):
    """Remove dependency packages no installed package references."""
    _run(ctx, "remove_orphaned_packages")


@click.command(name="remove-disabled")
@click.pass_context
def remove_disabled(ctx):
    """Remove installed packages marked as disabled."""
    _run(ctx, "remove_disabled_packages")
