"""Package catalog over a directory of package archives.

Each ``*.zip`` in the packages directory is one package. Its configuration
file (``package.json`` by default) sits at the archive root and describes
the package; every other member is payload extracted into the install
directory.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from pkgroot.data_loader import descriptor_from_dict, descriptor_to_dict
from pkgroot.errors import CatalogError, ConfigError
from pkgroot.installer.models import PackageDescriptor, VersionConstraint
from pkgroot.serializers import get_serializer
from pkgroot.versions import Version, format_version

from .archive import ArchiveFileStore, replace_members, write_archive

_logging = logging.getLogger(__name__)

ARCHIVE_SUFFIX = ".zip"


@dataclass(frozen=True)
class CatalogPackage:
    root_filename: str
    descriptor: PackageDescriptor

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def version(self) -> Version:
        return self.descriptor.version

    @property
    def id(self) -> str:
        return self.descriptor.id

    @property
    def is_enabled(self) -> bool:
        return self.descriptor.is_enabled

    @property
    def is_dependency_package(self) -> bool:
        return self.descriptor.is_dependency_package

    @property
    def priority(self) -> int:
        return self.descriptor.priority

    @property
    def dependencies(self) -> tuple[VersionConstraint, ...]:
        return self.descriptor.dependencies

    @property
    def fully_qualified_name(self) -> str:
        return f"({self.name}, v{format_version(self.version)}, {self.root_filename})"

    def __str__(self) -> str:
        return self.fully_qualified_name


class PackageCatalog:
    """Read/write access to the package archives in ``packages_dir``.

    The scan is cached; ``refresh``, ``create_package`` and
    ``write_configuration`` clear the cache.
    """

    def __init__(
        self,
        packages_dir: Path,
        configuration_filename: str = "package.json",
        serializer: str = "json",
    ):
        if packages_dir is None or not str(packages_dir).strip():
            raise ValueError("packages_dir must be a non-empty path")
        if not configuration_filename:
            raise ValueError("configuration_filename must be a non-empty string")
        self.packages_dir = Path(packages_dir)
        self.configuration_filename = configuration_filename
        self.serializer = get_serializer(serializer)
        self._packages: list[CatalogPackage] | None = None

    def clear_cache(self) -> None:
        self._packages = None

    def _archive_path(self, root_filename: str) -> Path:
        return self.packages_dir / root_filename

    def _read_descriptor(self, archive_path: Path) -> PackageDescriptor:
        store = ArchiveFileStore(archive_path)
        try:
            raw = store.read_bytes(self.configuration_filename)
        except KeyError as e:
            raise CatalogError(
                f"Package archive {archive_path.name} has no {self.configuration_filename}"
            ) from e
        try:
            return descriptor_from_dict(self.serializer.loads(raw.decode("utf-8")))
        except (ConfigError, UnicodeDecodeError) as e:
            raise CatalogError(f"Package archive {archive_path.name} has an invalid configuration: {e}") from e

    @property
    def packages(self) -> list[CatalogPackage]:
        """All readable packages, sorted by name then version."""
        if self._packages is not None:
            return self._packages

        packages = []
        if self.packages_dir.is_dir():
            for archive_path in sorted(self.packages_dir.glob(f"*{ARCHIVE_SUFFIX}")):
                try:
                    descriptor = self._read_descriptor(archive_path)
                except CatalogError as e:
                    _logging.warning(f"Skipping package archive: {e}")
                    continue
                packages.append(CatalogPackage(archive_path.name, descriptor))

        packages.sort(key=lambda p: (p.name.lower(), p.version))
        self._packages = packages
        return packages

    @property
    def highest_enabled_packages(self) -> list[CatalogPackage]:
        """One package per name: the highest enabled version."""
        highest: dict[str, CatalogPackage] = {}
        for package in self.packages:
            if not package.is_enabled:
                continue
            current = highest.get(package.name)
            if current is None or package.version > current.version:
                highest[package.name] = package
        return sorted(highest.values(), key=lambda p: p.name.lower())

    @property
    def dependency_packages(self) -> list[CatalogPackage]:
        return [p for p in self.packages if p.is_dependency_package]

    @property
    def non_dependency_packages(self) -> list[CatalogPackage]:
        return [p for p in self.packages if not p.is_dependency_package]

    def find_package(self, name: str, version: "Version | None" = None) -> CatalogPackage | None:
        """Find a package by name and exact version.

        Without a version, the highest enabled version is returned.
        """
        if version is None:
            return next((p for p in self.highest_enabled_packages if p.name == name), None)
        return next(
            (p for p in self.packages if p.name == name and p.version == version), None
        )

    def find_packages(self, name: str) -> list[CatalogPackage]:
        """All versions of ``name``, highest first."""
        return sorted(
            (p for p in self.packages if p.name == name),
            key=lambda p: p.version,
            reverse=True,
        )

    def connect(self, root_filename: str) -> ArchiveFileStore:
        """Open the payload of a package.

        Raises:
            CatalogError: If no archive with that name exists
        """
        archive_path = self._archive_path(root_filename)
        if not archive_path.is_file():
            raise CatalogError(f"Unknown package archive: {root_filename}")
        return ArchiveFileStore(archive_path)

    def refresh(self, root_filename: str) -> CatalogPackage:
        """Re-verify a package archive and re-read its configuration.

        Raises:
            CatalogError: If the archive is missing or corrupt
        """
        store = self.connect(root_filename)
        store.test()
        self.clear_cache()
        return CatalogPackage(root_filename, self._read_descriptor(store.archive_path))

    def read_configuration(self, package: CatalogPackage) -> PackageDescriptor:
        return self._read_descriptor(self._archive_path(package.root_filename))

    def write_configuration(
        self, package: CatalogPackage, descriptor: PackageDescriptor
    ) -> CatalogPackage:
        """Replace the configuration stored in a package archive.

        Raises:
            CatalogError: If the descriptor describes a different package
        """
        if descriptor.id != package.id:
            raise CatalogError(
                f"Cannot write configuration for {descriptor.fully_qualified_name} "
                f"into {package.fully_qualified_name}"
            )
        content = self.serializer.dumps(descriptor_to_dict(descriptor)).encode("utf-8")
        replace_members(self._archive_path(package.root_filename), {self.configuration_filename: content})
        self.clear_cache()
        return CatalogPackage(package.root_filename, descriptor)

    def create_package(
        self,
        source_dir: Path,
        descriptor: PackageDescriptor,
        overwrite: bool = False,
    ) -> CatalogPackage:
        """Build a package archive from a directory of payload files.

        Args:
            source_dir: Directory whose files become the payload
            descriptor: Package description written as the configuration file
            overwrite: Replace an existing archive for the same package id

        Returns:
            The new catalog entry

        Raises:
            CatalogError: If the source is not a directory or the archive exists
        """
        source_dir = Path(source_dir)
        if not source_dir.is_dir():
            raise CatalogError(f"Package source is not a directory: {source_dir}")

        root_filename = f"{descriptor.id}{ARCHIVE_SUFFIX}"
        archive_path = self._archive_path(root_filename)
        if archive_path.exists() and not overwrite:
            raise CatalogError(f"Package archive already exists: {archive_path}")

        content = self.serializer.dumps(descriptor_to_dict(descriptor)).encode("utf-8")
        write_archive(archive_path, source_dir, {self.configuration_filename: content})
        _logging.debug(f"Created package archive {archive_path}")
        self.clear_cache()
        return CatalogPackage(root_filename, descriptor)


__all__ = [
    "ARCHIVE_SUFFIX",
    "CatalogPackage",
    "PackageCatalog",
]
