"""Tests for directory and archive file stores."""

import os
import zipfile
from pathlib import Path

import pytest

from pkgroot.catalog import (
    ArchiveFileStore,
    CompareAction,
    DirectoryFileStore,
    compare,
    mirror,
    target_path,
    write_archive,
)
from pkgroot.errors import CatalogError

OLD = 1_600_000_000
NEW = OLD + 3600


def write(root: Path, relative: str, content: str, mtime: float) -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    os.utime(path, (mtime, mtime))
    return path


class TestDirectoryFileStore:
    def test_items_are_relative_posix_paths(self, temp_dir: Path):
        write(temp_dir, "a.txt", "a", OLD)
        write(temp_dir, "sub/b.txt", "bb", OLD)
        items = DirectoryFileStore(temp_dir).items()
        assert [i.root_path for i in items] == ["a.txt", "sub/b.txt"]
        assert items[1].size == 2

    def test_missing_root_is_empty(self, temp_dir: Path):
        assert DirectoryFileStore(temp_dir / "absent").items() == []

    def test_extract_keeps_modified_time(self, temp_dir: Path):
        source = temp_dir / "src"
        write(source, "sub/file.txt", "payload", OLD)
        target = DirectoryFileStore(source).extract("sub/file.txt", temp_dir / "dst")
        assert target.read_text() == "payload"
        assert target.stat().st_mtime == OLD

    def test_extract_unknown_path(self, temp_dir: Path):
        with pytest.raises(KeyError):
            DirectoryFileStore(temp_dir).extract("nope.txt", temp_dir / "dst")


class TestCompare:
    def test_actions(self, temp_dir: Path):
        source, dest = temp_dir / "src", temp_dir / "dst"
        write(source, "same.txt", "x", OLD)
        write(dest, "same.txt", "x", OLD)
        write(source, "newer.txt", "v2", NEW)
        write(dest, "newer.txt", "v1", OLD)
        write(source, "older.txt", "v1", OLD)
        write(dest, "older.txt", "v2", NEW)
        write(source, "added.txt", "a", OLD)
        write(dest, "stale.txt", "s", OLD)

        results = {
            r.root_path: r.action
            for r in compare(DirectoryFileStore(source), DirectoryFileStore(dest))
        }
        assert results == {
            "same.txt": CompareAction.OK,
            "newer.txt": CompareAction.UPDATE,
            "older.txt": CompareAction.OLD,
            "added.txt": CompareAction.NEW,
            "stale.txt": CompareAction.REMOVE,
        }

    def test_small_time_difference_is_ok(self, temp_dir: Path):
        source, dest = temp_dir / "src", temp_dir / "dst"
        write(source, "f.txt", "x", OLD + 0.5)
        write(dest, "f.txt", "x", OLD)
        [result] = compare(DirectoryFileStore(source), DirectoryFileStore(dest))
        assert result.action == CompareAction.OK


class TestMirror:
    def test_destination_matches_source(self, temp_dir: Path):
        source, dest = temp_dir / "src", temp_dir / "dst"
        write(source, "newer.txt", "v2", NEW)
        write(dest, "newer.txt", "v1", OLD)
        write(source, "added.txt", "a", OLD)
        write(dest, "stale.txt", "s", OLD)

        src_store, dst_store = DirectoryFileStore(source), DirectoryFileStore(dest)
        seen = []
        mirror(compare(src_store, dst_store), src_store, dst_store, lambda r, e: seen.append((r.action, e)))

        assert (dest / "newer.txt").read_text() == "v2"
        assert (dest / "added.txt").exists()
        assert not (dest / "stale.txt").exists()
        assert all(error is None for _, error in seen)
        assert len(seen) == 3

    def test_failure_reported_and_remaining_files_processed(self, temp_dir: Path):
        source, dest = temp_dir / "src", temp_dir / "dst"
        write(source, "a.txt", "a", OLD)
        write(source, "b.txt", "b", OLD)
        src_store, dst_store = DirectoryFileStore(source), DirectoryFileStore(dest)
        results = compare(src_store, dst_store)
        (source / "a.txt").unlink()

        errors = {}
        mirror(results, src_store, dst_store, lambda r, e: errors.setdefault(r.root_path, e))
        assert errors["a.txt"] is not None
        assert errors["b.txt"] is None
        assert (dest / "b.txt").read_text() == "b"


class TestArchiveFileStore:
    def test_items_include_extra_members(self, temp_dir: Path):
        source = temp_dir / "src"
        write(source, "bin/tool.sh", "echo", OLD)
        archive = temp_dir / "pkg.zip"
        write_archive(archive, source, {"package.json": b"{}"})

        store = ArchiveFileStore(archive)
        assert sorted(i.root_path for i in store.items()) == ["bin/tool.sh", "package.json"]
        assert store.read_bytes("package.json") == b"{}"

    def test_extract_round_trips_modified_time(self, temp_dir: Path):
        source = temp_dir / "src"
        write(source, "data.txt", "payload", OLD)
        archive = temp_dir / "pkg.zip"
        write_archive(archive, source, {})

        store = ArchiveFileStore(archive)
        target = store.extract("data.txt", temp_dir / "out")
        [item] = store.items()
        assert target.read_text() == "payload"
        assert target.stat().st_mtime == item.modified

    def test_missing_member(self, temp_dir: Path):
        archive = temp_dir / "pkg.zip"
        write_archive(archive, None, {"package.json": b"{}"})
        with pytest.raises(KeyError):
            ArchiveFileStore(archive).read_bytes("absent.txt")

    def test_corrupt_archive(self, temp_dir: Path):
        archive = temp_dir / "broken.zip"
        archive.write_bytes(b"not a zip file")
        with pytest.raises(CatalogError, match="corrupt"):
            ArchiveFileStore(archive).items()

    def test_missing_archive(self, temp_dir: Path):
        with pytest.raises(CatalogError, match="not found"):
            ArchiveFileStore(temp_dir / "absent.zip").test()

    def test_valid_archive_passes_test(self, temp_dir: Path):
        archive = temp_dir / "pkg.zip"
        write_archive(archive, None, {"package.json": b"{}"})
        ArchiveFileStore(archive).test()

    def test_find(self, temp_dir: Path):
        archive = temp_dir / "pkg.zip"
        write_archive(archive, None, {"package.json": b"{}"})
        store = ArchiveFileStore(archive)
        assert store.find("package.json").size == 2
        assert store.find("absent.txt") is None

    def test_open_store_reads_archive_once(self, temp_dir: Path, mocker):
        source = temp_dir / "src"
        for name in ("a.txt", "b.txt", "c/d.txt"):
            write(source, name, name, OLD)
        archive = temp_dir / "pkg.zip"
        write_archive(archive, source, {})
        store = ArchiveFileStore(archive)
        spy = mocker.spy(store, "_open")

        with store:
            for item in store.items():
                store.extract(item.root_path, temp_dir / "out")

        assert spy.call_count == 1
        assert (temp_dir / "out" / "c" / "d.txt").read_text() == "c/d.txt"

    def test_member_outside_destination_rejected(self, temp_dir: Path):
        archive = temp_dir / "pkg.zip"
        write_archive(archive, None, {"package.json": b"{}"})
        with zipfile.ZipFile(archive, "a") as zf:
            zf.writestr("../../escaped.txt", "x")
        destination = temp_dir / "root" / "pkg"

        with pytest.raises(CatalogError, match="Unsafe file path"):
            ArchiveFileStore(archive).extract("../../escaped.txt", destination)
        assert not (temp_dir / "escaped.txt").exists()


class TestTargetPath:
    def test_nested_path(self, temp_dir: Path):
        assert target_path(temp_dir, "bin/run.sh") == temp_dir / "bin" / "run.sh"

    @pytest.mark.parametrize("root_path", ["../x", "a/../../x", "/etc/passwd", "", "a/.."])
    def test_rejected(self, temp_dir: Path, root_path):
        with pytest.raises(CatalogError):
            target_path(temp_dir / "pkg", root_path)

    def test_symlink_escape_rejected(self, temp_dir: Path):
        destination = temp_dir / "pkg"
        destination.mkdir()
        (destination / "link").symlink_to(temp_dir)
        with pytest.raises(CatalogError):
            target_path(destination, "link/escaped.txt")
