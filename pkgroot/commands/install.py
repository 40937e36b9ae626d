"""Install command implementation."""

import logging
import sys
from dataclasses import replace

import click

from pkgroot import setup_logging
from pkgroot.data_loader import parse_install_mode
from pkgroot.errors import CatalogError, ConfigError, format_error, format_suggestion
from pkgroot.installer import InstallationSettings, render_plan
from pkgroot.versions import parse_version

from .utils import echo_log, load_cli_config, make_catalog, make_installer

_logging = logging.getLogger(__name__)


def build_settings(
    defaults: InstallationSettings,
    mode: str | None,
    clean: bool,
    update: bool,
    remove_orphans: bool,
    refresh: bool,
) -> InstallationSettings:
    """Apply command-line flags on top of the configured settings."""
    settings = defaults
    if mode:
        settings = replace(settings, mode=parse_install_mode(mode))
    if clean:
        settings = replace(settings, clean_install=True)
    if update:
        settings = replace(settings, enable_updates=True)
    if remove_orphans:
        settings = replace(settings, remove_orphans=True)
    if refresh:
        settings = replace(settings, update_before_installing=True)
    return settings


@click.command()
@click.argument("name", required=False)
@click.option("--version", "version_", help="Exact version to install (default: highest enabled)")
@click.option(
    "--mode",
    type=click.Choice(["side-by-side", "highest-version-only"]),
    default=None,
    help="Resolution mode (default from config)",
)
@click.option("--clean", is_flag=True, help="Remove and re-add packages already installed")
@click.option("--update", is_flag=True, help="Update packages already installed")
@click.option("--remove-orphans", is_flag=True, help="Remove orphaned dependency packages afterwards")
@click.option("--refresh", is_flag=True, help="Re-verify package archives before using them")
@click.option("--dry-run", is_flag=True, help="Show the plan without changing anything")
@click.option("--interactive", "-i", is_flag=True, help="Pick the package interactively")
@click.pass_context
def install(
    ctx,
    name: str | None,
    version_: str | None,
    mode: str | None,
    clean: bool,
    update: bool,
    remove_orphans: bool,
    refresh: bool,
    dry_run: bool,
    interactive: bool,
):
    """Install a package and its dependencies from the catalog."""
    setup_logging(ctx.obj.get("debug", False))

    try:
        config = load_cli_config(ctx)
        catalog = make_catalog(config)

        if interactive:
            from pkgroot.tui import select_package_interactive

            try:
                package = select_package_interactive(catalog, name)
            except RuntimeError as e:
                click.echo(format_error(str(e)), err=True)
                sys.exit(1)
            if package is None:
                click.echo("Installation cancelled.")
                return
        else:
            if not name:
                click.echo(format_error("package name is required (or use --interactive)"), err=True)
                sys.exit(1)
            version = parse_version(version_) if version_ else None
            package = catalog.find_package(name, version)
            if package is None:
                wanted = f"'{name}' v{version_}" if version_ else f"'{name}'"
                click.echo(
                    format_suggestion(
                        f"package {wanted} not found",
                        "run 'pkgroot list --catalog' to see available packages",
                    ),
                    err=True,
                )
                sys.exit(1)

        settings = build_settings(
            config.installation_settings, mode, clean, update, remove_orphans, refresh
        )
        installer = make_installer(config)
        _logging.debug(f"Installing {package.id} into {installer.install_root}")

        if dry_run:
            plan = installer.plan(package, catalog, settings)
            click.echo(render_plan(plan))
            if not plan.is_ready():
                sys.exit(1)
            return

        ok, log = installer.try_install(package, catalog, settings)
        echo_log(log)
        if not ok:
            sys.exit(1)
    except (ConfigError, CatalogError, ValueError) as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(1)
