"""Zip-archive backed file store."""

import time
import zipfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from pkgroot.errors import CatalogError

from .filestore import FileStore, FileStoreItem


def _zip_time(date_time: tuple) -> float:
    return time.mktime(date_time + (0, 0, -1))


def _to_item(info: zipfile.ZipInfo) -> FileStoreItem:
    return FileStoreItem(
        root_path=info.filename,
        size=info.file_size,
        modified=_zip_time(info.date_time),
    )


class ArchiveFileStore(FileStore):
    """Read-only view of a package archive's payload.

    Each call opens the archive on its own unless the store is used as a
    context manager (or ``open`` was called), in which case one handle is
    shared until the block exits.
    """

    def __init__(self, archive_path: Path):
        self.archive_path = Path(archive_path)
        self._zip: zipfile.ZipFile | None = None

    def _open(self) -> zipfile.ZipFile:
        try:
            return zipfile.ZipFile(self.archive_path)
        except FileNotFoundError as e:
            raise CatalogError(f"Package archive not found: {self.archive_path}") from e
        except zipfile.BadZipFile as e:
            raise CatalogError(f"Package archive is corrupt: {self.archive_path}") from e

    def open(self) -> "ArchiveFileStore":
        """Keep the archive open until ``close``.

        Raises:
            CatalogError: If the archive is missing or corrupt
        """
        if self._zip is None:
            self._zip = self._open()
        return self

    def close(self) -> None:
        if self._zip is not None:
            self._zip.close()
            self._zip = None

    def __enter__(self) -> "ArchiveFileStore":
        return self.open()

    def __exit__(self, *exc) -> None:
        self.close()

    @contextmanager
    def _reader(self) -> Iterator[zipfile.ZipFile]:
        if self._zip is not None:
            yield self._zip
        else:
            with self._open() as zf:
                yield zf

    def items(self) -> list[FileStoreItem]:
        with self._reader() as zf:
            return [_to_item(info) for info in zf.infolist() if not info.is_dir()]

    def find(self, root_path: str) -> FileStoreItem | None:
        with self._reader() as zf:
            try:
                info = zf.getinfo(root_path)
            except KeyError:
                return None
        return None if info.is_dir() else _to_item(info)

    def read_bytes(self, root_path: str) -> bytes:
        with self._reader() as zf:
            try:
                return zf.read(root_path)
            except zipfile.BadZipFile as e:
                raise CatalogError(f"Unable to read {root_path} from {self.archive_path}: {e}") from e

    def test(self) -> None:
        """Verify every member's checksum.

        Raises:
            CatalogError: If the archive or one of its members is corrupt
        """
        with self._reader() as zf:
            bad = zf.testzip()
        if bad is not None:
            raise CatalogError(f"Package archive {self.archive_path} has a corrupt member: {bad}")


def write_archive(archive_path: Path, source_dir: Path | None, extra: dict[str, bytes]) -> None:
    """Write a new archive from the files in ``source_dir`` plus ``extra``.

    Entries in ``extra`` (relative posix path -> content) replace files of
    the same name from ``source_dir``. The archive is written next to its
    final location and moved into place.
    """
    archive_path.parent.mkdir(parents=True, exist_ok=True)
    partial = archive_path.with_name(archive_path.name + ".partial")

    with zipfile.ZipFile(partial, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        if source_dir is not None:
            for path in sorted(Path(source_dir).rglob("*")):
                arcname = path.relative_to(source_dir).as_posix()
                if path.is_file() and arcname not in extra:
                    zf.write(path, arcname)
        for arcname, content in extra.items():
            info = zipfile.ZipInfo(arcname, date_time=time.localtime()[:6])
            info.compress_type = zipfile.ZIP_DEFLATED
            zf.writestr(info, content)

    partial.replace(archive_path)


def replace_members(archive_path: Path, replacements: dict[str, bytes]) -> None:
    """Rewrite an archive with some members replaced; others keep their timestamps."""
    partial = archive_path.with_name(archive_path.name + ".partial")

    with ArchiveFileStore(archive_path)._open() as src:
        with zipfile.ZipFile(partial, "w", compression=zipfile.ZIP_DEFLATED) as dst:
            for info in src.infolist():
                if info.filename not in replacements:
                    dst.writestr(info, src.read(info.filename))
            for arcname, content in replacements.items():
                info = zipfile.ZipInfo(arcname, date_time=time.localtime()[:6])
                info.compress_type = zipfile.ZIP_DEFLATED
                dst.writestr(info, content)

    partial.replace(archive_path)


__all__ = [
    "ArchiveFileStore",
    "write_archive",
    "replace_members",
]
