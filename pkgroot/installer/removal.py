"""Uninstall and orphan removal."""

from dataclasses import dataclass

from .dependencies import dependency_chain, orphaned_packages
from .installation import remove_package
from .logs import InstallLog
from .models import InstalledPackage
from .state import InstallRoot


@dataclass
class RemovalCounters:
    removed: int = 0
    skipped: int = 0
    missing: int = 0


def remove_orphaned_packages(
    install_root: InstallRoot,
    log: InstallLog,
    remove_delay: float = 0.25,
    max_passes: int = 3,
) -> int:
    """Remove orphaned dependency packages until none are left.

    Each orphan is uninstalled together with the part of its dependency
    chain no other package needs. The installed set is re-scanned after
    every pass. The sweep stops when no orphans remain, when a pass finds
    the same orphans as the previous one, or after ``max_passes`` passes.
    Orphans left behind produce a warning.

    Returns:
        Number of packages removed
    """
    if max_passes < 1:
        raise ValueError("max_passes must be at least 1")

    removed = 0
    previous: set[str] | None = None
    for pass_number in range(1, max_passes + 1):
        orphans = orphaned_packages(install_root.installed_packages())
        if not orphans:
            return removed

        ids = {o.id for o in orphans}
        if ids == previous:
            break
        previous = ids

        log.info(f"Removing orphaned packages. Pass={pass_number}, Count={len(orphans)}")
        for orphan in orphans:
            # already removed with an earlier orphan's chain
            if not orphan.install_path.is_dir():
                continue
            removed += uninstall_package(install_root, orphan, log, remove_delay).removed

    remaining = orphaned_packages(install_root.installed_packages())
    if remaining:
        log.warning(
            f"Orphaned packages remain after {pass_number} pass(es). Count={len(remaining)}"
        )
        for orphan in remaining:
            log.info(f"Orphaned package {orphan.fully_qualified_name}")
    return removed


def uninstall_package(
    install_root: InstallRoot,
    package: InstalledPackage,
    log: InstallLog,
    remove_delay: float = 0.25,
) -> RemovalCounters:
    """Remove a package and every chain member no other package still needs.

    A chain member is kept when any installed package outside the removal
    set (the target plus its own chain) has it in its dependency chain.
    Missing-dependency sentinels in the chain are only logged.
    """
    installed = install_root.installed_packages()
    chain = dependency_chain(package, installed)
    removal_set = {package.id} | {p.id for p in chain if not p.is_missing}
    others = [p for p in installed if p.id not in removal_set]
    other_chains = {o.id: {p.id for p in dependency_chain(o, installed)} for o in others}

    counters = RemovalCounters()
    if remove_package(package.install_path, package.fully_qualified_name, log, remove_delay):
        counters.removed += 1

    missing_lines: set[str] = set()
    for member in chain:
        if member.is_missing:
            line = f"Missing package {member.fully_qualified_name}"
            log.info(line)
            missing_lines.add(line)
            continue

        sharing = [o for o in others if member.id in other_chains[o.id]]
        if sharing:
            counters.skipped += 1
            log.info(
                f"Leaving package {member.fully_qualified_name}. "
                f"Package shared by {len(sharing)} other package(s)."
            )
            for i, other in enumerate(sharing, 1):
                log.info(f"#{i}={other.fully_qualified_name}")
            continue

        if remove_package(member.install_path, member.fully_qualified_name, log, remove_delay):
            counters.removed += 1

    counters.missing = len(missing_lines)
    return counters


__all__ = [
    "RemovalCounters",
    "remove_orphaned_packages",
    "uninstall_package",
]
