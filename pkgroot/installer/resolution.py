"""Dependency resolution: turn a target package into install instructions."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pkgroot.versions import format_version

from .models import (
    Action,
    InstalledPackage,
    InstallMode,
    InstallPlan,
    VersionConstraint,
)

if TYPE_CHECKING:
    from pkgroot.catalog.provider import CatalogPackage, PackageCatalog

_logging = logging.getLogger(__name__)


def resolve_catalog_candidate(
    catalog: PackageCatalog,
    constraint: VersionConstraint,
    mode: InstallMode,
) -> CatalogPackage | None:
    """Pick the catalog package that satisfies a dependency constraint.

    A pinned specific version is preferred when that exact version is
    enabled in the catalog. Otherwise the highest enabled version at or
    above the minimum wins; side-by-side mode falls back to every enabled
    version when the highest-only view has no match.
    """
    if constraint.specific_version is not None:
        pinned = next(
            (
                p for p in catalog.packages
                if p.is_enabled
                and p.name == constraint.name
                and p.version == constraint.specific_version
            ),
            None,
        )
        if pinned is not None:
            return pinned
        _logging.debug(f"Pinned version of {constraint.display} not available, using minimum version")

    highest = [
        p for p in catalog.highest_enabled_packages
        if p.name == constraint.name and p.version >= constraint.minimum_version
    ]
    if highest:
        return max(highest, key=lambda p: p.version)

    if mode == InstallMode.SIDE_BY_SIDE:
        candidates = [
            p for p in catalog.packages
            if p.is_enabled
            and p.name == constraint.name
            and p.version >= constraint.minimum_version
        ]
        if candidates:
            return max(candidates, key=lambda p: p.version)

    return None


def _plan_existing(plan: InstallPlan, package: CatalogPackage) -> None:
    """Plan a package whose exact version is already installed."""
    settings = plan.settings
    instructions = plan.instructions
    if settings.clean_install:
        instructions.add(Action.REMOVE, package)
        if instructions.add(Action.ADD, package):
            plan.counters.updated += 1
    elif settings.enable_updates:
        if instructions.add(Action.UPDATE, package):
            plan.counters.updated += 1
    else:
        if instructions.add(Action.OK, package):
            plan.counters.skipped += 1


def _planned_additions(plan: InstallPlan, package: CatalogPackage) -> list[CatalogPackage]:
    """Other versions of ``package`` already planned for addition."""
    return [
        i.package for i in plan.instructions.of(Action.ADD)
        if i.package.name == package.name and i.package.id != package.id
    ]


def _planned_dependency(plan: InstallPlan, constraint: VersionConstraint) -> CatalogPackage | None:
    return next(
        (
            i.package for i in plan.instructions.of(Action.ADD)
            if i.package.name == constraint.name and constraint.accepts(i.package.version)
        ),
        None,
    )


def _plan_add(plan: InstallPlan, package: CatalogPackage) -> None:
    if plan.instructions.add(Action.ADD, package):
        plan.counters.added += 1


def resolve_package(
    plan: InstallPlan,
    catalog: PackageCatalog,
    package: CatalogPackage,
    installed: list[InstalledPackage],
    visited: set[str] | None = None,
) -> None:
    """Add instructions for ``package`` and its dependency tree to ``plan``.

    Conflicts and unsatisfiable constraints become ERROR instructions and
    resolution continues with the remaining branches. ``visited`` holds the
    ids already planned so shared and circular dependencies are planned once.

    In highest-version-only mode a name is added in at most one version per
    plan: a dependency already met by a planned package reuses it, and any
    other version of a planned name is rejected.
    """
    if visited is None:
        visited = set()
    if package.id in visited:
        return
    visited.add(package.id)

    settings = plan.settings
    if settings.mode == InstallMode.HIGHEST_VERSION_ONLY:
        planned = _planned_additions(plan, package)
        if planned:
            other = planned[0]
            if package.version < other.version:
                reason = f"Package {package.fully_qualified_name} version too low."
            else:
                reason = f"Package {package.fully_qualified_name} conflicts with a planned version."
            message = (
                "HighestVersionOnly rules will not allow installation of this package. "
                f"{reason} Planned Package={other.fully_qualified_name}"
            )
            _logging.debug(message)
            plan.instructions.add(Action.ERROR, package, message)
            return

    same_name = [p for p in installed if p.name == package.name]

    if not same_name:
        _plan_add(plan, package)
    elif settings.mode == InstallMode.SIDE_BY_SIDE:
        if any(p.version == package.version for p in same_name):
            _plan_existing(plan, package)
        else:
            _plan_add(plan, package)
    else:
        highest = max(same_name, key=lambda p: p.version)
        if package.version > highest.version:
            _plan_add(plan, package)
        elif package.version == highest.version:
            _plan_existing(plan, package)
        else:
            message = (
                "HighestVersionOnly rules will not allow installation of this package. "
                f"Package {package.fully_qualified_name} version too low. "
                f"Installed Package={highest.fully_qualified_name}"
            )
            _logging.debug(message)
            plan.instructions.add(Action.ERROR, package, message)
            return

    for constraint in package.dependencies:
        candidate = None
        if settings.mode == InstallMode.HIGHEST_VERSION_ONLY:
            candidate = _planned_dependency(plan, constraint)
        if candidate is None:
            candidate = resolve_catalog_candidate(catalog, constraint, settings.mode)
        if candidate is None:
            message = (
                f"Dependency Package [{constraint.display}] not found. "
                f"Required by {package.fully_qualified_name}"
            )
            _logging.debug(message)
            plan.instructions.add(Action.ERROR, package, message)
            continue
        _logging.debug(
            f"Resolved {constraint.display} to {candidate.name} v{format_version(candidate.version)}"
        )
        resolve_package(plan, catalog, candidate, installed, visited)


__all__ = [
    "resolve_catalog_candidate",
    "resolve_package",
]
