"""Tests for the package catalog."""

from pathlib import Path

import pytest

from pkgroot.catalog import ArchiveFileStore, PackageCatalog, write_archive
from pkgroot.errors import CatalogError
from pkgroot.versions import Version
from tests.conftest import make_descriptor


class TestScan:
    def test_empty_directory(self, catalog: PackageCatalog):
        assert catalog.packages == []

    def test_missing_directory(self, temp_dir: Path):
        assert PackageCatalog(temp_dir / "absent").packages == []

    def test_sorted_by_name_then_version(self, catalog, make_package):
        make_package("zeta", "1.0")
        make_package("alpha", "2.0")
        make_package("alpha", "1.10")
        make_package("alpha", "1.9")
        assert [p.id for p in catalog.packages] == [
            "alpha_v1.9",
            "alpha_v1.10",
            "alpha_v2.0",
            "zeta_v1.0",
        ]

    def test_bad_archives_skipped(self, catalog, make_package, packages_dir: Path):
        make_package("good", "1.0")
        (packages_dir / "corrupt.zip").write_bytes(b"garbage")
        assert [p.name for p in catalog.packages] == ["good"]

    def test_archive_without_configuration_skipped(self, catalog, packages_dir: Path):
        write_archive(packages_dir / "bare.zip", None, {"README.txt": b"hi"})
        assert catalog.packages == []

    def test_non_zip_files_ignored(self, catalog, make_package, packages_dir: Path):
        make_package("good", "1.0")
        (packages_dir / "notes.txt").write_text("not a package")
        assert len(catalog.packages) == 1


class TestViews:
    def test_highest_enabled_packages(self, catalog, make_package):
        make_package("core", "1.0")
        make_package("core", "2.0")
        make_package("core", "3.0", enabled=False)
        make_package("util", "1.0")
        assert [p.id for p in catalog.highest_enabled_packages] == ["core_v2.0", "util_v1.0"]

    def test_dependency_views(self, catalog, make_package):
        make_package("lib", "1.0", is_dependency=True)
        make_package("app", "1.0")
        assert [p.name for p in catalog.dependency_packages] == ["lib"]
        assert [p.name for p in catalog.non_dependency_packages] == ["app"]

    def test_find_package(self, catalog, make_package):
        make_package("core", "1.0")
        make_package("core", "2.0")
        make_package("core", "3.0", enabled=False)
        assert catalog.find_package("core").version == Version("2.0")
        assert catalog.find_package("core", Version("3.0")).is_enabled is False
        assert catalog.find_package("core", Version("9.0")) is None
        assert catalog.find_package("other") is None

    def test_find_packages_highest_first(self, catalog, make_package):
        make_package("core", "1.0")
        make_package("core", "2.0")
        assert [str(p.version) for p in catalog.find_packages("core")] == ["2.0", "1.0"]


class TestCreatePackage:
    def test_round_trip_descriptor(self, catalog, make_package):
        package = make_package("app", "1.0", deps=("lib>=1.0", "util==2.0"), priority=7)
        assert package.root_filename == "app_v1.0.zip"
        assert catalog.read_configuration(package) == package.descriptor

    def test_payload_and_configuration_in_archive(self, catalog, make_package):
        package = make_package("app", "1.0", files={"bin/app.sh": "run"})
        store = catalog.connect(package.root_filename)
        assert sorted(i.root_path for i in store.items()) == ["bin/app.sh", "package.json"]

    def test_existing_archive_rejected(self, catalog, make_package, temp_dir: Path):
        make_package("app", "1.0")
        with pytest.raises(CatalogError, match="already exists"):
            catalog.create_package(temp_dir / "sources" / "app_1.0", make_descriptor("app", "1.0"))

    def test_source_must_be_directory(self, catalog, temp_dir: Path):
        with pytest.raises(CatalogError, match="not a directory"):
            catalog.create_package(temp_dir / "absent", make_descriptor("app", "1.0"))

    def test_cache_cleared(self, catalog, make_package):
        make_package("app", "1.0")
        assert len(catalog.packages) == 1
        make_package("app", "2.0")
        assert len(catalog.packages) == 2

    def test_yaml_serializer(self, packages_dir: Path, temp_dir: Path):
        catalog = PackageCatalog(packages_dir, "package.yaml", "yaml")
        source = temp_dir / "src"
        source.mkdir()
        package = catalog.create_package(source, make_descriptor("app", "1.0", ("lib>=1.0",)))
        raw = ArchiveFileStore(packages_dir / package.root_filename).read_bytes("package.yaml")
        assert b"name: app" in raw
        assert catalog.packages[0].descriptor == package.descriptor


class TestWriteConfiguration:
    def test_replaces_descriptor(self, catalog, make_package):
        package = make_package("app", "1.0", deps=("lib>=1.0",), files={"data.txt": "keep"})
        pinned = package.descriptor.with_pinned_dependency("lib", "1.2")
        updated = catalog.write_configuration(package, pinned)

        assert updated.descriptor == pinned
        assert catalog.find_package("app").descriptor == pinned
        assert catalog.connect(package.root_filename).read_bytes("data.txt") == b"keep"

    def test_id_mismatch(self, catalog, make_package):
        package = make_package("app", "1.0")
        with pytest.raises(CatalogError, match="Cannot write configuration"):
            catalog.write_configuration(package, make_descriptor("app", "2.0"))


class TestRefresh:
    def test_refresh_rereads(self, catalog, make_package):
        package = make_package("app", "1.0")
        assert catalog.refresh(package.root_filename).descriptor == package.descriptor

    def test_refresh_unknown_archive(self, catalog):
        with pytest.raises(CatalogError, match="Unknown package archive"):
            catalog.refresh("absent.zip")

    def test_refresh_corrupt_archive(self, catalog, packages_dir: Path):
        (packages_dir / "broken.zip").write_bytes(b"garbage")
        with pytest.raises(CatalogError):
            catalog.refresh("broken.zip")
