"""File-store primitives: enumerate, extract, compare and mirror package payloads."""

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable

from pkgroot.errors import CatalogError

# Modified times closer than this are considered equal (zip stores 2s steps).
MODIFIED_TOLERANCE = 1.0


@dataclass(frozen=True)
class FileStoreItem:
    root_path: str
    size: int
    modified: float


class FileStore:
    """A read-only set of payload files addressed by relative posix path."""

    def items(self) -> list[FileStoreItem]:
        raise NotImplementedError

    def read_bytes(self, root_path: str) -> bytes:
        raise NotImplementedError

    def find(self, root_path: str) -> FileStoreItem | None:
        return next((i for i in self.items() if i.root_path == root_path), None)

    def extract(self, root_path: str, destination: Path) -> Path:
        """Write one item below ``destination``, keeping its modified time.

        Raises:
            OSError: If the file cannot be written
            KeyError: If ``root_path`` is not in the store
            CatalogError: If ``root_path`` would land outside ``destination``
        """
        item = self.find(root_path)
        if item is None:
            raise KeyError(root_path)

        target = target_path(destination, root_path)
        target.parent.mkdir(parents=True, exist_ok=True)
        if target.exists():
            _make_writable(target)
        target.write_bytes(self.read_bytes(root_path))
        os.utime(target, (item.modified, item.modified))
        return target


def target_path(destination: Path, root_path: str) -> Path:
    """Map a payload path to its file below ``destination``.

    Raises:
        CatalogError: If the path is absolute or climbs out of ``destination``
    """
    parts = root_path.split("/")
    if not root_path or root_path.startswith("/") or ".." in parts:
        raise CatalogError(f"Unsafe file path in package: {root_path}")

    target = destination.joinpath(*parts)
    base = destination.resolve()
    if base not in target.resolve().parents:
        raise CatalogError(f"Unsafe file path in package: {root_path}")
    return target


class DirectoryFileStore(FileStore):
    """File store backed by a plain directory tree."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def items(self) -> list[FileStoreItem]:
        if not self.root.is_dir():
            return []
        result = []
        for path in sorted(self.root.rglob("*")):
            if path.is_file():
                stat = path.stat()
                result.append(
                    FileStoreItem(
                        root_path=path.relative_to(self.root).as_posix(),
                        size=stat.st_size,
                        modified=stat.st_mtime,
                    )
                )
        return result

    def read_bytes(self, root_path: str) -> bytes:
        return self.root.joinpath(*root_path.split("/")).read_bytes()

    def delete(self, root_path: str) -> None:
        target = self.root.joinpath(*root_path.split("/"))
        _make_writable(target)
        target.unlink()


class CompareAction(Enum):
    OK = "ok"
    NEW = "new"
    UPDATE = "update"
    OLD = "old"
    REMOVE = "remove"


@dataclass(frozen=True)
class CompareResult:
    action: CompareAction
    root_path: str
    source: FileStoreItem | None = None
    destination: FileStoreItem | None = None


def compare(source: FileStore, destination: FileStore) -> list[CompareResult]:
    """Three-way compare of a payload against an installed directory.

    NEW files exist only in the source, REMOVE files only in the destination.
    For files in both, UPDATE means the source is newer, OLD means the
    destination is newer and OK means the modified times match.
    """
    source_items = {i.root_path: i for i in source.items()}
    dest_items = {i.root_path: i for i in destination.items()}
    results = []

    for root_path, item in source_items.items():
        existing = dest_items.get(root_path)
        if existing is None:
            action = CompareAction.NEW
        elif item.modified - existing.modified > MODIFIED_TOLERANCE:
            action = CompareAction.UPDATE
        elif existing.modified - item.modified > MODIFIED_TOLERANCE:
            action = CompareAction.OLD
        else:
            action = CompareAction.OK
        results.append(CompareResult(action, root_path, item, existing))

    for root_path, existing in dest_items.items():
        if root_path not in source_items:
            results.append(CompareResult(CompareAction.REMOVE, root_path, None, existing))

    return results


def mirror(
    results: list[CompareResult],
    source: FileStore,
    destination: DirectoryFileStore,
    callback: Callable[[CompareResult, Exception | None], None] | None = None,
) -> None:
    """Apply compare results so ``destination`` matches ``source``.

    NEW and UPDATE files are extracted, REMOVE files deleted; OK and OLD
    files are left alone. ``callback`` is called once per result with the
    exception raised for that file, if any; a failure does not stop the
    remaining files.
    """
    for result in results:
        error = None
        try:
            if result.action in (CompareAction.NEW, CompareAction.UPDATE):
                source.extract(result.root_path, destination.root)
            elif result.action == CompareAction.REMOVE:
                destination.delete(result.root_path)
        except (OSError, KeyError, CatalogError) as e:
            error = e
        if callback is not None:
            callback(result, error)


def _make_writable(path: Path) -> None:
    mode = path.stat().st_mode
    os.chmod(path, mode | 0o200)


def make_tree_writable(root: Path) -> None:
    """Clear read-only bits on every file and directory below ``root``."""
    for path in root.rglob("*"):
        _make_writable(path)
    _make_writable(root)


__all__ = [
    "MODIFIED_TOLERANCE",
    "FileStoreItem",
    "FileStore",
    "target_path",
    "DirectoryFileStore",
    "CompareAction",
    "CompareResult",
    "compare",
    "mirror",
    "make_tree_writable",
]
