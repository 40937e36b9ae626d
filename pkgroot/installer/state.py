"""Installed-package state: the install root directory is the database.

Every child directory of the install root that holds a readable package
configuration file is one installed package. Nothing else is persisted; every
query re-scans the directory.
"""

import logging
from pathlib import Path

from pkgroot.data_loader import descriptor_from_dict, descriptor_to_dict
from pkgroot.errors import ConfigError
from pkgroot.serializers import get_serializer
from pkgroot.versions import Version

from .models import (
    ConfigReadResult,
    ConfigReadStatus,
    InstalledPackage,
    PackageDescriptor,
)

_logging = logging.getLogger(__name__)


class InstallRoot:
    def __init__(
        self,
        path: Path,
        configuration_filename: str = "package.json",
        serializer: str = "json",
    ):
        if path is None or not str(path).strip():
            raise ValueError("install root must be a non-empty path")
        if not configuration_filename or not isinstance(configuration_filename, str):
            raise ValueError("configuration_filename must be a non-empty string")
        self.path = Path(path)
        self.configuration_filename = configuration_filename
        self.serializer = get_serializer(serializer)

    def path_for(self, descriptor: PackageDescriptor) -> Path:
        return self.path / descriptor.id

    def configuration_path(self, install_path: Path) -> Path:
        return Path(install_path) / self.configuration_filename

    def read_configuration_file(self, install_path: Path) -> ConfigReadResult:
        """Read the package configuration stored in ``install_path``.

        Returns:
            ConfigReadResult with status OK (descriptor set), MISSING (no
            file) or CORRUPT (error set)
        """
        config_path = self.configuration_path(install_path)
        if not config_path.is_file():
            return ConfigReadResult(ConfigReadStatus.MISSING, config_path)

        try:
            text = config_path.read_text(encoding="utf-8")
            descriptor = descriptor_from_dict(self.serializer.loads(text))
        except (ConfigError, OSError, UnicodeDecodeError) as e:
            return ConfigReadResult(ConfigReadStatus.CORRUPT, config_path, error=str(e))

        return ConfigReadResult(ConfigReadStatus.OK, config_path, descriptor=descriptor)

    def write_configuration_file(self, install_path: Path, descriptor: PackageDescriptor) -> Path:
        config_path = self.configuration_path(install_path)
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(
            self.serializer.dumps(descriptor_to_dict(descriptor)), encoding="utf-8"
        )
        return config_path

    def installed_packages(self) -> list[InstalledPackage]:
        """Scan the install root; sorted by name then version."""
        if not self.path.is_dir():
            return []

        packages = []
        for child in sorted(self.path.iterdir()):
            if not child.is_dir():
                continue
            result = self.read_configuration_file(child)
            if result.status == ConfigReadStatus.MISSING:
                continue
            if result.status == ConfigReadStatus.CORRUPT:
                _logging.warning(f"Skipping {child}: {result.error}")
                continue
            packages.append(InstalledPackage(install_path=child, descriptor=result.descriptor))

        packages.sort(key=lambda p: (p.name.lower(), p.version))
        return packages

    def enabled_packages(self) -> list[InstalledPackage]:
        return [p for p in self.installed_packages() if p.descriptor.is_enabled]

    def disabled_packages(self) -> list[InstalledPackage]:
        return [p for p in self.installed_packages() if not p.descriptor.is_enabled]

    def dependency_packages(self) -> list[InstalledPackage]:
        return [p for p in self.installed_packages() if p.descriptor.is_dependency_package]

    def non_dependency_packages(self) -> list[InstalledPackage]:
        return [p for p in self.installed_packages() if not p.descriptor.is_dependency_package]

    def highest_version_packages(self) -> list[InstalledPackage]:
        return highest_versions(self.installed_packages())

    def find_installed_package(self, name: str, version: Version) -> InstalledPackage | None:
        return next(
            (p for p in self.installed_packages() if p.name == name and p.version == version),
            None,
        )

    def find_installed_packages(self, name: str) -> list[InstalledPackage]:
        """All installed versions of ``name``, highest first."""
        return sorted(
            (p for p in self.installed_packages() if p.name == name),
            key=lambda p: p.version,
            reverse=True,
        )


def highest_versions(packages: list[InstalledPackage]) -> list[InstalledPackage]:
    """Reduce a package list to its highest version per name."""
    highest: dict[str, InstalledPackage] = {}
    for package in packages:
        current = highest.get(package.name)
        if current is None or package.version > current.version:
            highest[package.name] = package
    return sorted(highest.values(), key=lambda p: p.name.lower())


__all__ = [
    "InstallRoot",
    "highest_versions",
]
