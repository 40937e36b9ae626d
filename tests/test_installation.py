"""Tests for executing install instructions against an install root."""

import os
import stat
import zipfile
from pathlib import Path

import pytest

from pkgroot.catalog import ArchiveFileStore
from pkgroot.installer import (
    InstallationSettings,
    InstallLog,
    InstallMode,
    InstallRoot,
    add_package,
    apply_instructions,
    plan_install,
    refresh_package,
    remove_package,
    update_package,
)

OLD = 1_600_000_000


@pytest.fixture
def root(install_dir: Path) -> InstallRoot:
    return InstallRoot(install_dir)


class TestAddPackage:
    def test_extracts_payload_and_configuration(self, root, catalog, make_package):
        package = make_package("app", "1.0", files={"README.txt": "hello", "bin/run.sh": "run"})
        log = InstallLog()

        added = add_package(root, catalog, package, log)

        target = root.path / "app_v1.0"
        assert (target / "README.txt").read_text() == "hello"
        assert (target / "bin" / "run.sh").read_text() == "run"
        assert root.read_configuration_file(target).descriptor == package.descriptor
        assert added == 3
        assert f"Creating directory={target}" in log.messages
        assert "Adding File=bin/run.sh" in log.messages
        assert "Files: Added=3" in log.messages
        assert not log.has_errors

    def test_existing_directory_reused(self, root, catalog, make_package):
        package = make_package("app", "1.0")
        (root.path / "app_v1.0").mkdir(parents=True)
        log = InstallLog()
        add_package(root, catalog, package, log)
        assert any(m.startswith("Using existing directory=") for m in log.messages)

    def test_failed_file_does_not_stop_others(self, root, catalog, make_package, mocker):
        package = make_package("app", "1.0", files={"a.txt": "a", "b.txt": "b"})
        original = ArchiveFileStore.extract

        def flaky(self, root_path, destination):
            if root_path == "a.txt":
                raise OSError("disk full")
            return original(self, root_path, destination)

        mocker.patch.object(ArchiveFileStore, "extract", flaky)
        log = InstallLog()
        add_package(root, catalog, package, log)

        target = root.path / "app_v1.0"
        assert not (target / "a.txt").exists()
        assert (target / "b.txt").read_text() == "b"
        assert log.lines_starting_with("Error: Unable to extract file. File=a.txt")
        assert log.error_count == 1
        assert root.read_configuration_file(target).ok

    def test_member_escaping_install_directory_is_not_written(
        self, root, catalog, make_package, packages_dir
    ):
        package = make_package("evil", "1.0")
        with zipfile.ZipFile(packages_dir / package.root_filename, "a") as zf:
            zf.writestr("../../escaped.txt", "x")
        log = InstallLog()

        added = add_package(root, catalog, package, log)

        assert not (root.path.parent / "escaped.txt").exists()
        assert not (root.path.parent.parent / "escaped.txt").exists()
        assert log.lines_starting_with("Error: Unable to extract file. File=../../escaped.txt")
        assert added == 2
        assert (root.path / "evil_v1.0" / "README.txt").exists()

    def test_update_before_installing_refreshes(self, root, catalog, make_package):
        package = make_package("app", "1.0")
        log = InstallLog()
        add_package(root, catalog, package, log, update_before_installing=True)
        assert log.messages[0] == f"Updating Package {package.fully_qualified_name}"
        assert not log.has_errors


class TestUpdatePackage:
    def test_mirrors_payload(self, root, catalog, make_package):
        package = make_package("app", "1.0", files={"README.txt": "v1"})
        add_package(root, catalog, package, InstallLog())
        target = root.path / "app_v1.0"
        os.utime(target / "README.txt", (OLD, OLD))
        (target / "stale.txt").write_text("left behind")

        package = make_package("app", "1.0", files={"README.txt": "v2", "extra.txt": "x"})
        log = InstallLog()
        counts = update_package(root, catalog, package, log)

        assert (target / "README.txt").read_text() == "v2"
        assert (target / "extra.txt").exists()
        assert not (target / "stale.txt").exists()
        assert (target / "package.json").exists()
        assert counts["updated"] == 1
        assert counts["added"] == 1
        assert counts["removed"] == 1
        assert "Removing File=stale.txt" in log.messages
        assert log.lines_starting_with("Files: OK=")

    def test_configuration_file_never_removed(self, root, catalog, make_package):
        package = make_package("app", "1.0")
        add_package(root, catalog, package, InstallLog())
        log = InstallLog()
        update_package(root, catalog, package, log)
        assert "Removing File=package.json" not in log.messages
        assert root.read_configuration_file(root.path / "app_v1.0").ok


class TestRemovePackage:
    def test_absent_directory_is_noop(self, temp_dir: Path):
        log = InstallLog()
        assert remove_package(temp_dir / "absent", "(x, v1.0)", log, remove_delay=0) is False
        assert len(log) == 0

    def test_read_only_files_removed(self, temp_dir: Path):
        target = temp_dir / "pkg"
        target.mkdir()
        locked = target / "locked.txt"
        locked.write_text("x")
        locked.chmod(stat.S_IREAD)

        log = InstallLog()
        assert remove_package(target, "(pkg, v1.0)", log, remove_delay=0) is True
        assert not target.exists()
        assert log.messages == [
            "Removing files and directory for package (pkg, v1.0)",
            f"Deleting directory={target}",
        ]


def test_refresh_corrupt_archive_logs_error(catalog, make_package, packages_dir: Path):
    package = make_package("app", "1.0")
    (packages_dir / package.root_filename).write_bytes(b"garbage")
    log = InstallLog()
    assert refresh_package(catalog, package, log) is False
    assert log.has_errors


class TestApplyInstructions:
    def test_apply_plan(self, root, catalog, make_package):
        app = make_package("app", "1.0", deps=("lib>=1.0",))
        make_package("lib", "1.0")
        settings = InstallationSettings(mode=InstallMode.SIDE_BY_SIDE)
        plan = plan_install(app, catalog, [], settings)

        log = InstallLog()
        apply_instructions(plan, root, catalog, log, remove_delay=0)
        assert [p.id for p in root.installed_packages()] == ["app_v1.0", "lib_v1.0"]

        plan = plan_install(app, catalog, root.enabled_packages(), settings)
        log = InstallLog()
        apply_instructions(plan, root, catalog, log, remove_delay=0)
        assert f"Skipping package {app.fully_qualified_name}. Package already installed." in log.messages

    def test_error_instructions_logged(self, root, catalog, make_package):
        app = make_package("app", "1.0", deps=("ghost>=1.0",))
        plan = plan_install(app, catalog, [], InstallationSettings())
        log = InstallLog()
        apply_instructions(plan, root, catalog, log, remove_delay=0)
        assert log.lines_starting_with("Error: Dependency Package [ghost, v1.0] not found")
        assert (root.path / "app_v1.0").is_dir()

    def test_clean_install_replaces_files(self, root, catalog, make_package):
        app = make_package("app", "1.0")
        add_package(root, catalog, app, InstallLog())
        (root.path / "app_v1.0" / "junk.txt").write_text("junk")

        settings = InstallationSettings(clean_install=True)
        plan = plan_install(app, catalog, root.enabled_packages(), settings)
        apply_instructions(plan, root, catalog, InstallLog(), remove_delay=0)
        assert not (root.path / "app_v1.0" / "junk.txt").exists()
        assert (root.path / "app_v1.0" / "README.txt").exists()
