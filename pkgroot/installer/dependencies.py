"""Dependency chains over the installed set.

All functions here work on a snapshot list of installed packages; none of
them touch the filesystem.
"""

from .models import InstalledPackage, VersionConstraint


def _usable(package: InstalledPackage, ignore_enabled: bool) -> bool:
    return not package.is_missing and (ignore_enabled or package.descriptor.is_enabled)


def find_installed_dependency(
    constraint: VersionConstraint,
    installed: list[InstalledPackage],
    ignore_enabled: bool = False,
) -> InstalledPackage | None:
    """Resolve a constraint against installed packages.

    Priority:
    1. The pinned specific version, if that exact version is installed
    2. The highest installed version of the name, if it meets the minimum
    3. Any installed version that meets the minimum (highest first)

    Disabled packages are skipped unless ``ignore_enabled`` is set.
    """
    same_name = [p for p in installed if p.name == constraint.name and not p.is_missing]
    if not same_name:
        return None

    if constraint.specific_version is not None:
        pinned = next(
            (
                p for p in same_name
                if p.version == constraint.specific_version and _usable(p, ignore_enabled)
            ),
            None,
        )
        if pinned is not None:
            return pinned

    highest = max(same_name, key=lambda p: p.version)
    if highest.version >= constraint.minimum_version and _usable(highest, ignore_enabled):
        return highest

    candidates = sorted(
        (
            p for p in same_name
            if p.version >= constraint.minimum_version and _usable(p, ignore_enabled)
        ),
        key=lambda p: p.version,
        reverse=True,
    )
    return candidates[0] if candidates else None


def dependency_chain(
    package: InstalledPackage,
    installed: list[InstalledPackage],
    ignore_enabled: bool = False,
) -> list[InstalledPackage]:
    """Transitive closure of a package's resolved dependencies.

    Each installed package appears at most once and ``package`` itself is
    never included, so diamonds and cycles terminate. Constraints that
    cannot be resolved appear as missing-dependency sentinels, one per
    (constraint, dependent package).
    """
    accumulator: dict[tuple[str, str, str], InstalledPackage] = {}
    root_key = package.key

    def walk(current: InstalledPackage) -> None:
        for constraint in current.descriptor.dependencies:
            found = find_installed_dependency(constraint, installed, ignore_enabled)
            if found is None:
                sentinel = InstalledPackage.missing(constraint, current.descriptor)
                accumulator.setdefault(sentinel.key, sentinel)
                continue
            if found.key == root_key or found.key in accumulator:
                continue
            accumulator[found.key] = found
            walk(found)

    walk(package)
    return list(accumulator.values())


def packages_referencing(
    candidate: InstalledPackage, installed: list[InstalledPackage]
) -> list[InstalledPackage]:
    """Installed packages whose direct constraint resolves to ``candidate``.

    Matching is by package id, so a package depending on another version
    of the same name does not count.
    """
    referencing = []
    for package in installed:
        if package.id == candidate.id:
            continue
        for constraint in package.descriptor.dependencies:
            if constraint.name != candidate.name:
                continue
            found = find_installed_dependency(constraint, installed)
            if found is not None and found.id == candidate.id:
                referencing.append(package)
                break
    return referencing


def orphaned_packages(installed: list[InstalledPackage]) -> list[InstalledPackage]:
    """Enabled dependency packages that no installed package references."""
    return [
        p for p in installed
        if p.descriptor.is_dependency_package
        and p.descriptor.is_enabled
        and not packages_referencing(p, installed)
    ]


def missing_dependencies(
    installed: list[InstalledPackage],
) -> list[tuple[InstalledPackage, VersionConstraint]]:
    """(package, constraint) pairs for enabled packages with unmet constraints."""
    pairs = []
    for package in installed:
        if not package.descriptor.is_enabled:
            continue
        for constraint in package.descriptor.dependencies:
            if find_installed_dependency(constraint, installed) is None:
                pairs.append((package, constraint))
    return pairs


def packages_with_missing_dependencies(
    installed: list[InstalledPackage],
) -> list[InstalledPackage]:
    result: list[InstalledPackage] = []
    for package, _ in missing_dependencies(installed):
        if package not in result:
            result.append(package)
    return result


__all__ = [
    "find_installed_dependency",
    "dependency_chain",
    "packages_referencing",
    "orphaned_packages",
    "missing_dependencies",
    "packages_with_missing_dependencies",
]
