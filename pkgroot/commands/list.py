"""List command implementation."""

import sys

import click

from pkgroot import setup_logging
from pkgroot.errors import ConfigError, format_error
from pkgroot.versions import format_version

from .utils import load_cli_config, make_catalog, make_installer


def _flags(descriptor) -> str:
    flags = []
    if descriptor.is_dependency_package:
        flags.append("dependency")
    if not descriptor.is_enabled:
        flags.append("disabled")
    return f" ({', '.join(flags)})" if flags else ""


@click.command(name="list")
@click.option("--catalog", "show_catalog", is_flag=True, help="List catalog packages instead")
@click.option("--orphans", is_flag=True, help="Only orphaned dependency packages")
@click.option("--disabled", is_flag=True, help="Only disabled packages")
@click.option("--verbose", "-v", is_flag=True, help="Show install paths and dependencies")
@click.pass_context
def list_packages(ctx, show_catalog: bool, orphans: bool, disabled: bool, verbose: bool):
    """List installed packages."""
    setup_logging(ctx.obj.get("debug", False))

    try:
        config = load_cli_config(ctx)
        if show_catalog:
            catalog = make_catalog(config)
            entries = [(p.descriptor, p.root_filename) for p in catalog.packages]
            empty = "No packages in catalog."
        else:
            installer = make_installer(config)
            if orphans:
                packages = installer.installed_orphaned_packages()
            elif disabled:
                packages = installer.installed_disabled_packages()
            else:
                packages = installer.installed_packages()
            entries = [(p.descriptor, str(p.install_path)) for p in packages]
            empty = "No packages installed."
    except (ConfigError, ValueError) as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(1)

    if not entries:
        click.echo(empty)
        return

    for descriptor, location in entries:
        click.echo(f"{descriptor.name:<20} v{format_version(descriptor.version)}{_flags(descriptor)}")
        if verbose:
            click.echo(f"    location: {location}")
            for dep in descriptor.dependencies:
                click.echo(f"    requires: {dep.display}")
