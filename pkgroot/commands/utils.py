"""Shared utility functions for commands."""

import re
from pathlib import Path

import click

from pkgroot import is_debug
from pkgroot.catalog import PackageCatalog
from pkgroot.config import Config, load_effective_config
from pkgroot.errors import WARNING_MARKER
from pkgroot.installer import InstalledPackage, Installer, InstallLog, VersionConstraint
from pkgroot.paths import get_config_path

_DEPENDENCY_SPEC = re.compile(r"^\s*([^<>=\s]+)\s*(?:(>=|==)\s*(\S+))?\s*$")


def get_config_file(ctx: click.Context) -> Path:
    """Return the config path from --config or the default location."""
    obj = ctx.find_root().obj or {}
    path = obj.get("config_path")
    return Path(path) if path else get_config_path()


def load_cli_config(ctx: click.Context) -> Config:
    """Load the effective config once per invocation.

    Raises:
        ConfigError: If the config file exists but is malformed
    """
    obj = ctx.find_root().obj
    if obj.get("config") is None:
        obj["config"] = load_effective_config(get_config_file(ctx))
    return obj["config"]


def make_installer(config: Config) -> Installer:
    return Installer.from_config(config.installer)


def make_catalog(config: Config) -> PackageCatalog:
    return PackageCatalog(
        config.installer.packages_dir,
        configuration_filename=config.installer.configuration_filename,
        serializer=config.installer.serializer,
    )


def parse_dependency_spec(spec: str) -> VersionConstraint:
    """Parse ``name``, ``name>=1.0`` or ``name==1.0`` into a constraint.

    ``==`` pins the specific version (and uses it as the minimum).

    Raises:
        ValueError: If the dependency spec cannot be parsed
    """
    match = _DEPENDENCY_SPEC.match(spec)
    if not match:
        raise ValueError(f"Invalid dependency '{spec}'. Use name, name>=VERSION or name==VERSION")

    name, operator, version = match.groups()
    if operator is None:
        return VersionConstraint(name=name, minimum_version="0")
    if operator == "==":
        return VersionConstraint(name=name, minimum_version=version, specific_version=version)
    return VersionConstraint(name=name, minimum_version=version)


def select_installed(
    installer: Installer, name: str, version: str | None
) -> InstalledPackage:
    """Find one installed package by name and optional version.

    Raises:
        ValueError: If nothing matches or the name is ambiguous
    """
    if version:
        package = installer.find_installed_package(name, version)
        if package is None:
            raise ValueError(f"package '{name}' v{version} is not installed")
        return package

    packages = installer.find_installed_packages(name)
    if not packages:
        raise ValueError(f"package '{name}' is not installed")
    if len(packages) > 1:
        versions = ", ".join(str(p.version) for p in packages)
        raise ValueError(
            f"multiple versions of '{name}' are installed ({versions}); use --version"
        )
    return packages[0]


def echo_log(log: InstallLog) -> None:
    """Print an audit log: errors red, warnings yellow."""
    if is_debug():
        click.echo(f"[DEBUG] Log entries={len(log)}, Errors={log.error_count}", err=True)
    for entry in log:
        if entry.is_error:
            click.secho(entry.message, fg="red")
        elif entry.message.startswith(WARNING_MARKER):
            click.secho(entry.message, fg="yellow")
        else:
            click.echo(entry.message)


__all__ = [
    "get_config_file",
    "load_cli_config",
    "make_installer",
    "make_catalog",
    "parse_dependency_spec",
    "select_installed",
    "echo_log",
]
