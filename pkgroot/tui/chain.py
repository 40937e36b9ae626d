"""Dependency chain display."""

import click

from ..installer import InstalledPackage


def get_color_for_package(package: InstalledPackage) -> str:
    """Map a chain entry to a display color.

    Returns:
        "red" for missing dependencies, "yellow" for disabled packages,
        "green" otherwise
    """
    if package.is_missing:
        return "red"
    if not package.descriptor.is_enabled:
        return "yellow"
    return "green"


def format_chain_line(package: InstalledPackage) -> str:
    if package.is_missing:
        return f"❌ missing  {package.fully_qualified_name}"
    if not package.descriptor.is_enabled:
        return f"⚠️  disabled {package.fully_qualified_name}"
    kind = "dependency" if package.descriptor.is_dependency_package else "package"
    return f"✅ {kind:<10} {package.fully_qualified_name}"


def display_dependency_chain(
    package: InstalledPackage, chain: list[InstalledPackage]
) -> int:
    """Print a package's dependency chain with colored status lines.

    Returns:
        Number of missing dependencies in the chain
    """
    header = f"Dependency chain for {package.fully_qualified_name}"
    click.echo("")
    click.secho(f"  {header}", bold=True)
    click.secho("  " + "-" * len(header), dim=True)

    if not chain:
        click.echo("  (no dependencies)")

    for entry in chain:
        click.secho(f"  {format_chain_line(entry)}", fg=get_color_for_package(entry))

    missing = sum(1 for entry in chain if entry.is_missing)
    click.echo("")
    if missing:
        click.secho(f"  {missing} missing dependencies", fg="red")
    else:
        click.secho(f"  [{len(chain)}] All dependencies installed", fg="green")
    return missing


__all__ = [
    "get_color_for_package",
    "format_chain_line",
    "display_dependency_chain",
]
