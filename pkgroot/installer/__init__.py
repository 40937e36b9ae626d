"""Installer engine: dependency resolution, execution and uninstall."""

from .models import (
    MISSING_INSTALL_PATH,
    Action,
    ConfigReadResult,
    ConfigReadStatus,
    InstallationSettings,
    InstalledPackage,
    InstallMode,
    InstallPlan,
    Instruction,
    InstructionSet,
    PackageDescriptor,
    PlanCounters,
    VersionConstraint,
)
from .logs import InstallLog, LogEntry, LogLevel
from .state import InstallRoot, highest_versions
from .dependencies import (
    dependency_chain,
    find_installed_dependency,
    missing_dependencies,
    orphaned_packages,
    packages_referencing,
    packages_with_missing_dependencies,
)
from .resolution import resolve_catalog_candidate, resolve_package
from .planning import plan_install, render_plan
from .installation import (
    add_package,
    apply_instructions,
    refresh_package,
    remove_package,
    update_package,
)
from .removal import RemovalCounters, remove_orphaned_packages, uninstall_package
from .engine import Installer

__all__ = [
    "MISSING_INSTALL_PATH",
    "Action",
    "ConfigReadResult",
    "ConfigReadStatus",
    "InstallationSettings",
    "InstalledPackage",
    "InstallMode",
    "InstallPlan",
    "Instruction",
    "InstructionSet",
    "PackageDescriptor",
    "PlanCounters",
    "VersionConstraint",
    "InstallLog",
    "LogEntry",
    "LogLevel",
    "InstallRoot",
    "highest_versions",
    "dependency_chain",
    "find_installed_dependency",
    "missing_dependencies",
    "orphaned_packages",
    "packages_referencing",
    "packages_with_missing_dependencies",
    "resolve_catalog_candidate",
    "resolve_package",
    "plan_install",
    "render_plan",
    "add_package",
    "apply_instructions",
    "refresh_package",
    "remove_package",
    "update_package",
    "RemovalCounters",
    "remove_orphaned_packages",
    "uninstall_package",
    "Installer",
]
