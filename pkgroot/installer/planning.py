"""Installation planning and rendering."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .models import Action, InstallationSettings, InstalledPackage, InstallPlan
from .resolution import resolve_package

if TYPE_CHECKING:
    from pkgroot.catalog.provider import CatalogPackage, PackageCatalog


def plan_install(
    package: CatalogPackage,
    catalog: PackageCatalog,
    installed: list[InstalledPackage],
    settings: InstallationSettings,
) -> InstallPlan:
    """Compute the instruction set for installing ``package``.

    Planning never touches the filesystem; ``installed`` is the snapshot of
    enabled installed packages the plan is computed against.
    """
    if package is None:
        raise ValueError("package is required")
    if catalog is None:
        raise ValueError("catalog is required")

    plan = InstallPlan(package=package, settings=settings)
    resolve_package(plan, catalog, package, installed)
    return plan


_ACTION_LABELS = {
    Action.OK: "skip",
    Action.ADD: "add",
    Action.UPDATE: "update",
    Action.REMOVE: "remove",
    Action.ERROR: "error",
}


def render_plan(plan: InstallPlan) -> str:
    settings = plan.settings
    lines = [
        f"Installation Plan: {plan.package.fully_qualified_name}",
        f"Mode: {settings.mode.value}",
        "",
    ]

    if plan.errors:
        lines.append("Errors:")
        for instruction in plan.errors:
            lines.append(f"   • {instruction.message}")
        lines.append("")

    lines.append("Steps:")
    steps = [i for i in plan.instructions if i.action != Action.ERROR]
    if not steps:
        lines.append("  (nothing to do)")
    for i, instruction in enumerate(steps, 1):
        label = _ACTION_LABELS[instruction.action]
        lines.append(f"  {i}. {label:<6} {instruction.package.fully_qualified_name}")

    counters = plan.counters
    lines.append("")
    lines.append(
        f"Skipped={counters.skipped}, Added={counters.added}, "
        f"Updated={counters.updated}, Errors={len(plan.errors)}"
    )
    return "\n".join(lines)


__all__ = [
    "plan_install",
    "render_plan",
]
