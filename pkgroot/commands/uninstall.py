"""Uninstall command implementations."""

import sys

import click

from pkgroot import setup_logging
from pkgroot.errors import ConfigError, format_error

from .utils import echo_log, load_cli_config, make_installer, select_installed


@click.command()
@click.argument("name")
@click.option("--version", "version_", help="Installed version to remove")
@click.option("--remove-orphans", is_flag=True, help="Remove orphaned dependency packages afterwards")
@click.pass_context
def uninstall(ctx, name: str, version_: str | None, remove_orphans: bool):
    """Uninstall a package and the dependencies nothing else needs."""
    setup_logging(ctx.obj.get("debug", False))

    try:
        installer = make_installer(load_cli_config(ctx))
        package = select_installed(installer, name, version_)
        log = installer.uninstall(package, remove_orphans=remove_orphans)
    except (ConfigError, ValueError) as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(1)

    echo_log(log)
    if log.has_errors:
        sys.exit(1)


@click.command(name="uninstall-all")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def uninstall_all(ctx, yes: bool):
    """Remove every installed package."""
    setup_logging(ctx.obj.get("debug", False))

    try:
        installer = make_installer(load_cli_config(ctx))
    except (ConfigError, ValueError) as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(1)

    packages = installer.installed_packages()
    if not packages:
        click.echo("No packages installed.")
        return

    if not yes and not click.confirm(
        f"Remove all {len(packages)} installed package(s) from {installer.install_root}?",
        default=False,
    ):
        click.echo("Cancelled.")
        return

    log = installer.uninstall_all()
    echo_log(log)
    if log.has_errors:
        sys.exit(1)
