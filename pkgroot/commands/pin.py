"""Pin command implementation."""

import sys
from dataclasses import replace

import click

from pkgroot import setup_logging
from pkgroot.errors import CatalogError, ConfigError, format_error

from .utils import load_cli_config, make_catalog, make_installer


@click.command()
@click.argument("name")
@click.argument("version")
@click.argument("dependency")
@click.argument("dependency_version")
@click.pass_context
def pin(ctx, name: str, version: str, dependency: str, dependency_version: str):
    """Pin DEPENDENCY of an installed package to DEPENDENCY_VERSION.

    Rewrites the installed package's configuration file and, when the same
    package is in the catalog, its archive's configuration too.
    """
    setup_logging(ctx.obj.get("debug", False))

    try:
        config = load_cli_config(ctx)
        installer = make_installer(config)
        package = installer.find_installed_package(name, version)
        if package is None:
            raise ValueError(f"package '{name}' v{version} is not installed")

        try:
            descriptor = package.descriptor.with_pinned_dependency(dependency, dependency_version)
        except KeyError as e:
            raise ValueError(e.args[0]) from e

        installer.write_configuration_file(replace(package, descriptor=descriptor))
        click.echo(f"Pinned {dependency} to v{dependency_version} in {package.fully_qualified_name}")

        catalog = make_catalog(config)
        source = catalog.find_package(name, descriptor.version)
        if source is not None and source.descriptor.find_dependency(dependency) is not None:
            catalog.write_configuration(
                source, source.descriptor.with_pinned_dependency(dependency, dependency_version)
            )
            click.echo(f"Updated catalog package {source.fully_qualified_name}")
    except (ConfigError, CatalogError, ValueError) as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(1)
