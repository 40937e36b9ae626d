"""Pytest fixtures and utilities for pkgroot tests."""

import json
import tempfile
from pathlib import Path
from typing import Generator
from unittest.mock import patch

import pytest

from pkgroot.catalog import CatalogPackage, PackageCatalog
from pkgroot.commands.utils import parse_dependency_spec
from pkgroot.installer import (
    InstalledPackage,
    Installer,
    PackageDescriptor,
    VersionConstraint,
)


def make_descriptor(
    name: str,
    version: str,
    deps: tuple = (),
    is_dependency: bool = False,
    enabled: bool = True,
    priority: int = 0,
) -> PackageDescriptor:
    """Build a descriptor; deps may be VersionConstraints or specs like 'Y>=1.0'."""
    return PackageDescriptor(
        name=name,
        version=version,
        is_enabled=enabled,
        is_dependency_package=is_dependency,
        priority=priority,
        dependencies=tuple(
            d if isinstance(d, VersionConstraint) else parse_dependency_spec(d)
            for d in deps
        ),
    )


def make_installed(name: str, version: str, deps: tuple = (), **kwargs) -> InstalledPackage:
    """An in-memory installed package record (no files on disk)."""
    descriptor = make_descriptor(name, version, deps, **kwargs)
    return InstalledPackage(install_path=Path("/installed") / descriptor.id, descriptor=descriptor)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def packages_dir(temp_dir: Path) -> Path:
    path = temp_dir / "packages"
    path.mkdir()
    return path


@pytest.fixture
def install_dir(temp_dir: Path) -> Path:
    return temp_dir / "installed"


@pytest.fixture
def catalog(packages_dir: Path) -> PackageCatalog:
    return PackageCatalog(packages_dir)


@pytest.fixture
def installer(install_dir: Path) -> Installer:
    """Installer that never sleeps after removing a directory."""
    return Installer(install_dir, remove_delay=0)


@pytest.fixture
def make_package(temp_dir: Path, catalog: PackageCatalog):
    """Factory that builds a package archive in the catalog.

    Each package gets a README.txt payload unless ``files`` is given.
    """

    def _create(
        name: str,
        version: str,
        deps: tuple = (),
        files: dict[str, str] | None = None,
        is_dependency: bool = False,
        enabled: bool = True,
        priority: int = 0,
    ) -> CatalogPackage:
        source = temp_dir / "sources" / f"{name}_{version}"
        source.mkdir(parents=True, exist_ok=True)
        if files is None:
            files = {"README.txt": f"{name} {version}\n"}
        for relative, content in files.items():
            path = source / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)

        descriptor = make_descriptor(name, version, deps, is_dependency, enabled, priority)
        return catalog.create_package(source, descriptor, overwrite=True)

    return _create


@pytest.fixture
def config_file(temp_dir: Path, install_dir: Path, packages_dir: Path) -> Path:
    """A pkgroot config pointing at the temporary install root and catalog."""
    path = temp_dir / "pkgroot.json"
    path.write_text(
        json.dumps(
            {
                "installer": {
                    "install_root": str(install_dir),
                    "packages_dir": str(packages_dir),
                    "remove_delay": 0,
                }
            }
        )
    )
    return path


@pytest.fixture
def mock_tty() -> Generator[None, None, None]:
    """Mock sys.stdin.isatty to return True."""
    with patch("sys.stdin.isatty", return_value=True):
        yield


@pytest.fixture
def mock_no_tty() -> Generator[None, None, None]:
    """Mock sys.stdin.isatty to return False."""
    with patch("sys.stdin.isatty", return_value=False):
        yield
