"""Installer facade: install, uninstall and query an install root."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import TYPE_CHECKING

from pkgroot.versions import Version, format_version, parse_version

from .dependencies import (
    dependency_chain,
    missing_dependencies,
    orphaned_packages,
    packages_referencing,
    packages_with_missing_dependencies,
)
from .installation import apply_instructions, remove_package
from .logs import InstallLog
from .models import (
    ConfigReadResult,
    InstallationSettings,
    InstalledPackage,
    InstallMode,
    InstallPlan,
    VersionConstraint,
)
from .planning import plan_install
from .removal import remove_orphaned_packages, uninstall_package
from .state import InstallRoot, highest_versions

if TYPE_CHECKING:
    from pkgroot.catalog.provider import CatalogPackage, PackageCatalog
    from pkgroot.config import InstallerConfig

_logging = logging.getLogger(__name__)


def _elapsed(start: float) -> str:
    return f"{time.monotonic() - start:.3f}s"


class Installer:
    """Installs catalog packages into an install root.

    Every operation returns an ``InstallLog``. Expected failures (version
    conflicts, missing dependencies, unreadable files) are written to the
    log as ``Error:`` lines rather than raised; ``ValueError`` is raised
    only for invalid arguments.

    Calls against the same install root must not run concurrently.
    """

    def __init__(
        self,
        install_root: Path,
        configuration_filename: str = "package.json",
        serializer: str = "json",
        log_source_id: str = "Installer",
        verbose_logs: bool = False,
        remove_delay: float = 0.25,
        max_orphan_passes: int = 3,
    ):
        if max_orphan_passes < 1:
            raise ValueError("max_orphan_passes must be at least 1")
        if remove_delay < 0:
            raise ValueError("remove_delay must not be negative")
        self.root = InstallRoot(install_root, configuration_filename, serializer)
        self.log_source_id = log_source_id
        self.verbose_logs = verbose_logs
        self.remove_delay = remove_delay
        self.max_orphan_passes = max_orphan_passes

    @classmethod
    def from_config(cls, config: InstallerConfig) -> Installer:
        return cls(
            install_root=config.install_root,
            configuration_filename=config.configuration_filename,
            serializer=config.serializer,
            log_source_id=config.log_source_id,
            verbose_logs=config.verbose_logs,
            remove_delay=config.remove_delay,
            max_orphan_passes=config.max_orphan_passes,
        )

    @property
    def install_root(self) -> Path:
        return self.root.path

    def _new_log(self) -> InstallLog:
        return InstallLog(self.log_source_id)

    # Installed-set views

    def installed_packages(self) -> list[InstalledPackage]:
        return self.root.installed_packages()

    def installed_enabled_packages(self) -> list[InstalledPackage]:
        return self.root.enabled_packages()

    def installed_disabled_packages(self) -> list[InstalledPackage]:
        return self.root.disabled_packages()

    def installed_dependency_packages(self) -> list[InstalledPackage]:
        return self.root.dependency_packages()

    def installed_non_dependency_packages(self) -> list[InstalledPackage]:
        return self.root.non_dependency_packages()

    def installed_highest_version_packages(self) -> list[InstalledPackage]:
        return highest_versions(self.root.installed_packages())

    def installed_orphaned_packages(self) -> list[InstalledPackage]:
        return orphaned_packages(self.root.installed_packages())

    def installed_packages_referencing(self, package: InstalledPackage) -> list[InstalledPackage]:
        return packages_referencing(package, self.root.installed_packages())

    def installed_packages_with_missing_dependencies(self) -> list[InstalledPackage]:
        return packages_with_missing_dependencies(self.root.installed_packages())

    def installed_missing_dependencies(self) -> list[tuple[InstalledPackage, VersionConstraint]]:
        return missing_dependencies(self.root.installed_packages())

    def find_installed_package(self, name: str, version: "Version | str") -> InstalledPackage | None:
        if not name or not name.strip():
            raise ValueError("name must be a non-empty string")
        return self.root.find_installed_package(name, parse_version(version))

    def find_installed_packages(self, name: str) -> list[InstalledPackage]:
        if not name or not name.strip():
            raise ValueError("name must be a non-empty string")
        return self.root.find_installed_packages(name)

    def dependency_chain(
        self, package: InstalledPackage, ignore_enabled: bool = False
    ) -> list[InstalledPackage]:
        if package is None:
            raise ValueError("package is required")
        return dependency_chain(package, self.root.installed_packages(), ignore_enabled)

    def read_configuration_file(self, package: "InstalledPackage | Path") -> ConfigReadResult:
        install_path = package.install_path if isinstance(package, InstalledPackage) else Path(package)
        return self.root.read_configuration_file(install_path)

    def write_configuration_file(self, package: InstalledPackage) -> Path:
        """Persist ``package.descriptor`` into its install directory.

        Raises:
            ValueError: If the package is a missing-dependency sentinel or
                its directory does not exist
        """
        if package is None or package.is_missing:
            raise ValueError("cannot write configuration for a missing package")
        if not package.install_path.is_dir():
            raise ValueError(f"install directory does not exist: {package.install_path}")
        return self.root.write_configuration_file(package.install_path, package.descriptor)

    def log_installed_packages(self, log: InstallLog | None = None) -> InstallLog:
        """Write the enabled, disabled and orphaned installed packages to a log."""
        log = log if log is not None else self._new_log()
        installed = self.root.installed_packages()
        groups = [
            ("Enabled", [p for p in installed if p.descriptor.is_enabled]),
            ("Disabled", [p for p in installed if not p.descriptor.is_enabled]),
            ("Orphaned", orphaned_packages(installed)),
        ]
        for title, packages in groups:
            log.info(f"Installed Packages ({title}): Count={len(packages)}")
            for package in packages:
                log.info(f"  {package.fully_qualified_name}")
        return log

    # Install

    def plan(
        self,
        package: CatalogPackage,
        catalog: PackageCatalog,
        settings: InstallationSettings,
    ) -> InstallPlan:
        """Compute the install plan without touching the filesystem."""
        if settings is None:
            raise ValueError("settings is required")
        return plan_install(package, catalog, self.root.enabled_packages(), settings)

    def install(
        self,
        package: CatalogPackage,
        catalog: PackageCatalog,
        settings: InstallationSettings,
    ) -> InstallLog:
        start = time.monotonic()
        plan = self.plan(package, catalog, settings)
        _logging.debug(f"Planned {len(plan.instructions)} instruction(s) for {package.id}")

        log = self._new_log()
        log.info(f"Installing package {package.fully_qualified_name}")
        log.info(f"Install root={self.root.path}")
        log.info(
            f"Settings: Mode={settings.mode.value}, CleanInstall={settings.clean_install}, "
            f"EnableUpdates={settings.enable_updates}, RemoveOrphans={settings.remove_orphans}, "
            f"UpdateBeforeInstalling={settings.update_before_installing}"
        )
        if self.verbose_logs:
            self.log_installed_packages(log)

        self.root.path.mkdir(parents=True, exist_ok=True)
        apply_instructions(plan, self.root, catalog, log, self.remove_delay)

        removed = plan.counters.removed
        orphans = orphaned_packages(self.root.installed_packages())
        if settings.remove_orphans and orphans:
            removed += remove_orphaned_packages(
                self.root, log, self.remove_delay, self.max_orphan_passes
            )
        elif settings.mode == InstallMode.HIGHEST_VERSION_ONLY:
            # Superseded versions of the target itself
            for orphan in orphans:
                if orphan.name == package.name and orphan.version < package.version:
                    if remove_package(
                        orphan.install_path, orphan.fully_qualified_name, log, self.remove_delay
                    ):
                        removed += 1

        if self.verbose_logs:
            self.log_installed_packages(log)

        counters = plan.counters
        log.info(
            f"Total packages processed: Skipped={counters.skipped}, Added={counters.added}, "
            f"Updated={counters.updated}, Removed={removed}, Errors={log.error_count}"
        )
        log.info(
            f"Installation of {package.name} v{format_version(package.version)} completed. "
            f"Elapsed time={_elapsed(start)}"
        )
        return log

    def try_install(
        self,
        package: CatalogPackage,
        catalog: PackageCatalog,
        settings: InstallationSettings,
    ) -> tuple[bool, InstallLog]:
        """Install and report success as False if any log line is an error."""
        log = self.install(package, catalog, settings)
        return not log.has_errors, log

    # Uninstall

    def uninstall(self, package: InstalledPackage, remove_orphans: bool = False) -> InstallLog:
        if package is None:
            raise ValueError("package is required")
        if package.is_missing:
            raise ValueError(f"cannot uninstall a missing package: {package.fully_qualified_name}")

        start = time.monotonic()
        log = self._new_log()
        log.info(f"Uninstalling package {package.fully_qualified_name}")
        if self.verbose_logs:
            self.log_installed_packages(log)

        counters = uninstall_package(self.root, package, log, self.remove_delay)
        if remove_orphans:
            counters.removed += remove_orphaned_packages(
                self.root, log, self.remove_delay, self.max_orphan_passes
            )

        log.info(
            f"Total packages processed: Removed={counters.removed}, Skipped={counters.skipped}, "
            f"Missing={counters.missing}, Errors={log.error_count}"
        )
        log.info(f"Uninstall of {package.name} completed. Elapsed time={_elapsed(start)}")
        return log

    def _remove_all(self, packages: list[InstalledPackage], title: str) -> InstallLog:
        start = time.monotonic()
        log = self._new_log()
        log.info(title)
        removed = 0
        for package in packages:
            if remove_package(
                package.install_path, package.fully_qualified_name, log, self.remove_delay
            ):
                removed += 1
        log.info(f"Total packages processed: Removed={removed}, Errors={log.error_count}")
        log.info(f"Completed. Elapsed time={_elapsed(start)}")
        return log

    def uninstall_all(self) -> InstallLog:
        return self._remove_all(self.root.installed_packages(), "Uninstalling all packages")

    def remove_disabled_packages(self) -> InstallLog:
        return self._remove_all(self.root.disabled_packages(), "Removing disabled packages")

    def remove_orphaned_packages(self) -> InstallLog:
        start = time.monotonic()
        log = self._new_log()
        log.info("Removing orphaned packages")
        removed = remove_orphaned_packages(
            self.root, log, self.remove_delay, self.max_orphan_passes
        )
        log.info(f"Total packages processed: Removed={removed}, Errors={log.error_count}")
        log.info(f"Completed. Elapsed time={_elapsed(start)}")
        return log


__all__ = [
    "Installer",
]
