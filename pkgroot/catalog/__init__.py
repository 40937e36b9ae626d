"""Package catalog and file-store primitives."""

from .archive import ArchiveFileStore, replace_members, write_archive
from .filestore import (
    CompareAction,
    CompareResult,
    DirectoryFileStore,
    FileStore,
    FileStoreItem,
    compare,
    make_tree_writable,
    mirror,
    target_path,
)
from .provider import ARCHIVE_SUFFIX, CatalogPackage, PackageCatalog

__all__ = [
    "ARCHIVE_SUFFIX",
    "ArchiveFileStore",
    "CatalogPackage",
    "CompareAction",
    "CompareResult",
    "DirectoryFileStore",
    "FileStore",
    "FileStoreItem",
    "PackageCatalog",
    "compare",
    "make_tree_writable",
    "mirror",
    "replace_members",
    "target_path",
    "write_archive",
]
