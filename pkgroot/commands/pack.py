"""Pack command implementation."""

import sys
from pathlib import Path

import click

from pkgroot import setup_logging
from pkgroot.errors import CatalogError, ConfigError, format_error
from pkgroot.installer import PackageDescriptor

from .utils import load_cli_config, make_catalog, parse_dependency_spec


@click.command()
@click.argument("source_dir", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--name", required=True, help="Package name")
@click.option("--version", "version_", required=True, help="Package version")
@click.option(
    "--dependency",
    "-d",
    "dependencies",
    multiple=True,
    help="Dependency as name, name>=VERSION or name==VERSION (repeatable)",
)
@click.option("--dependency-package", is_flag=True, help="Only installable as a dependency")
@click.option("--disabled", is_flag=True, help="Mark the package as disabled")
@click.option("--priority", type=int, default=0, show_default=True)
@click.option("--force", "-f", is_flag=True, help="Overwrite an existing archive")
@click.pass_context
def pack(
    ctx,
    source_dir: Path,
    name: str,
    version_: str,
    dependencies: tuple[str, ...],
    dependency_package: bool,
    disabled: bool,
    priority: int,
    force: bool,
):
    """Create a catalog package archive from SOURCE_DIR."""
    setup_logging(ctx.obj.get("debug", False))

    try:
        descriptor = PackageDescriptor(
            name=name,
            version=version_,
            is_enabled=not disabled,
            is_dependency_package=dependency_package,
            priority=priority,
            dependencies=tuple(parse_dependency_spec(d) for d in dependencies),
        )
        catalog = make_catalog(load_cli_config(ctx))
        package = catalog.create_package(source_dir, descriptor, overwrite=force)
    except (ConfigError, CatalogError, ValueError) as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(1)

    click.echo(f"✅ Created {catalog.packages_dir / package.root_filename}")
