"""Installation execution: apply planned instructions to the install root."""

from __future__ import annotations

import shutil
import time
from pathlib import Path
from typing import TYPE_CHECKING

from pkgroot.catalog.filestore import (
    CompareAction,
    CompareResult,
    DirectoryFileStore,
    compare,
    make_tree_writable,
    mirror,
)
from pkgroot.errors import CatalogError

from .logs import InstallLog
from .models import Action, InstallPlan
from .state import InstallRoot

if TYPE_CHECKING:
    from pkgroot.catalog.provider import CatalogPackage, PackageCatalog


def refresh_package(catalog: PackageCatalog, package: CatalogPackage, log: InstallLog) -> bool:
    """Re-verify the package's archive before its payload is used."""
    log.info(f"Updating Package {package.fully_qualified_name}")
    try:
        catalog.refresh(package.root_filename)
    except CatalogError as e:
        log.error(f"Unable to update package {package.fully_qualified_name}. {e}")
        return False
    return True


def add_package(
    install_root: InstallRoot,
    catalog: PackageCatalog,
    package: CatalogPackage,
    log: InstallLog,
    update_before_installing: bool = False,
) -> int:
    """Extract a package's payload into ``install_root/{id}``.

    A file that fails to extract is logged as an error and the remaining
    files are still extracted. The package configuration file is written
    last.

    Returns:
        Number of files extracted
    """
    if update_before_installing and not refresh_package(catalog, package, log):
        return 0

    log.info(f"Adding files from package {package.fully_qualified_name}")
    target = install_root.path_for(package.descriptor)
    if target.is_dir():
        log.info(f"Using existing directory={target}")
    else:
        log.info(f"Creating directory={target}")
        target.mkdir(parents=True)

    try:
        store = catalog.connect(package.root_filename).open()
    except CatalogError as e:
        log.error(f"Unable to open package {package.fully_qualified_name}. {e}")
        return 0

    added = 0
    with store:
        for item in store.items():
            try:
                store.extract(item.root_path, target)
            except (OSError, KeyError, CatalogError) as e:
                log.error(f"Unable to extract file. File={item.root_path}. {e}")
                continue
            added += 1
            log.info(f"Adding File={item.root_path}")
    log.info(f"Files: Added={added}")

    install_root.write_configuration_file(target, package.descriptor)
    return added


def update_package(
    install_root: InstallRoot,
    catalog: PackageCatalog,
    package: CatalogPackage,
    log: InstallLog,
    update_before_installing: bool = False,
) -> dict[str, int]:
    """Mirror a package's payload onto its existing install directory.

    New and newer files are extracted, files no longer in the payload are
    deleted and everything else is left alone. The configuration file is
    never deleted and is rewritten from the catalog descriptor afterwards.

    Returns:
        Counts keyed by ok, removed, added, old and updated
    """
    counts = {"ok": 0, "removed": 0, "added": 0, "old": 0, "updated": 0}
    if update_before_installing and not refresh_package(catalog, package, log):
        return counts

    log.info(f"Updating files from package {package.fully_qualified_name}")
    target = install_root.path_for(package.descriptor)
    target.mkdir(parents=True, exist_ok=True)

    try:
        store = catalog.connect(package.root_filename).open()
    except CatalogError as e:
        log.error(f"Unable to open package {package.fully_qualified_name}. {e}")
        return counts

    def on_file(result: CompareResult, error: Exception | None) -> None:
        if error is not None:
            log.error(f"Unable to update file. File={result.root_path}. {error}")
            return
        if result.action == CompareAction.NEW:
            counts["added"] += 1
            log.info(f"Adding File={result.root_path}")
        elif result.action == CompareAction.UPDATE:
            counts["updated"] += 1
            log.info(f"Updating File={result.root_path}")
        elif result.action == CompareAction.REMOVE:
            counts["removed"] += 1
            log.info(f"Removing File={result.root_path}")
        elif result.action == CompareAction.OLD:
            counts["old"] += 1
        else:
            counts["ok"] += 1

    destination = DirectoryFileStore(target)
    with store:
        results = [
            r for r in compare(store, destination)
            if not (
                r.action == CompareAction.REMOVE
                and r.root_path == install_root.configuration_filename
            )
        ]
        mirror(results, store, destination, on_file)
    log.info(
        f"Files: OK={counts['ok']}, Removed={counts['removed']}, Added={counts['added']}, "
        f"Old={counts['old']}, Updated={counts['updated']}"
    )

    install_root.write_configuration_file(target, package.descriptor)
    return counts


def remove_package(
    install_path: Path,
    label: str,
    log: InstallLog,
    remove_delay: float = 0.25,
) -> bool:
    """Delete an install directory and everything in it.

    A directory that does not exist is a no-op. After deletion the call
    waits ``remove_delay`` seconds so the path can be safely reused.

    Returns:
        True if the directory was deleted
    """
    install_path = Path(install_path)
    if not install_path.is_dir():
        return False

    log.info(f"Removing files and directory for package {label}")
    try:
        make_tree_writable(install_path)
        log.info(f"Deleting directory={install_path}")
        shutil.rmtree(install_path)
    except OSError as e:
        log.error(f"Unable to delete directory={install_path}. {e}")
        return False

    if remove_delay > 0:
        time.sleep(remove_delay)
    return True


def apply_instructions(
    plan: InstallPlan,
    install_root: InstallRoot,
    catalog: PackageCatalog,
    log: InstallLog,
    remove_delay: float = 0.25,
) -> None:
    """Execute a plan's instructions in the order they were planned."""
    update_first = plan.settings.update_before_installing

    for instruction in plan.instructions:
        package = instruction.package
        if instruction.action == Action.OK:
            log.info(f"Skipping package {package.fully_qualified_name}. Package already installed.")
        elif instruction.action == Action.ADD:
            add_package(install_root, catalog, package, log, update_first)
        elif instruction.action == Action.UPDATE:
            update_package(install_root, catalog, package, log, update_first)
        elif instruction.action == Action.REMOVE:
            remove_package(
                install_root.path_for(package.descriptor),
                package.fully_qualified_name,
                log,
                remove_delay,
            )
        elif instruction.action == Action.ERROR:
            log.error(instruction.message or f"Unable to install {package.fully_qualified_name}")
        else:
            raise ValueError(f"Unknown action: {instruction.action}")


__all__ = [
    "refresh_package",
    "add_package",
    "update_package",
    "remove_package",
    "apply_instructions",
]
