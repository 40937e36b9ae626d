"""CLI command definitions for pkgroot."""

from pathlib import Path

import click

from pkgroot.commands.chain import chain
from pkgroot.commands.clean import remove_disabled, remove_orphans
from pkgroot.commands.config import config
from pkgroot.commands.install import install
from pkgroot.commands.list import list_packages
from pkgroot.commands.pack import pack
from pkgroot.commands.pin import pin
from pkgroot.commands.uninstall import uninstall, uninstall_all


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug output for troubleshooting")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: ~/.config/pkgroot/pkgroot.json or $PKGROOT_CONFIG)",
)
@click.pass_context
def cli(ctx, debug, config_path):
    """Install packages and their dependencies into a local install root."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = config_path


cli.add_command(install)
cli.add_command(uninstall)
cli.add_command(uninstall_all, name="uninstall-all")
cli.add_command(remove_orphans, name="remove-orphans")
cli.add_command(remove_disabled, name="remove-disabled")
cli.add_command(list_packages, name="list")
cli.add_command(chain)
cli.add_command(pack)
cli.add_command(pin)
cli.add_command(config)

__all__ = [
    "cli",
]


if __name__ == "__main__":
    cli()
