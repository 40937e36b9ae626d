"""Interactive package selection."""

import sys

from ..catalog import CatalogPackage, PackageCatalog
from ..versions import format_version


def format_package_choice(package: CatalogPackage) -> str:
    """Format a catalog package for the selection list.

    Args:
        package: The catalog package to format

    Returns:
        Label with name, version and flags
    """
    label = f"{package.name:<20} v{format_version(package.version)}"
    if package.is_dependency_package:
        label += "  (dependency)"
    if not package.is_enabled:
        label += "  (disabled)"
    return label


def select_package_interactive(
    catalog: PackageCatalog, name: str | None = None
) -> CatalogPackage | None:
    """Prompt for a catalog package to install.

    Top-level packages are listed; when ``name`` is given only its versions
    are offered. Disabled packages are shown but cannot be picked.

    Returns:
        The selected package, or None if the user cancels or there is
        nothing to choose from

    Raises:
        RuntimeError: If not running in a TTY
    """
    if not sys.stdin.isatty():
        raise RuntimeError("Interactive package selector requires a TTY")

    import questionary
    from prompt_toolkit.styles import Style

    if name:
        packages = catalog.find_packages(name)
    else:
        packages = catalog.non_dependency_packages

    if not packages:
        return None

    style = Style(
        [
            ("disabled-package", "fg:ansired"),
            ("available", ""),
        ]
    )

    choices = []
    for package in packages:
        label = format_package_choice(package)
        if package.is_enabled:
            choices.append(questionary.Choice(title=[("class:available", label)], value=package))
        else:
            choices.append(
                questionary.Choice(
                    title=[("class:disabled-package", label)],
                    value=package,
                    disabled="disabled",
                )
            )

    try:
        return questionary.select(
            "Select package to install:",
            choices=choices,
            style=style,
        ).ask()
    except KeyboardInterrupt:
        return None


__all__ = [
    "format_package_choice",
    "select_package_interactive",
]
