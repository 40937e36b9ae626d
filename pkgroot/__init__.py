import logging
import sys

# installer is imported first: data_loader and catalog depend on its models
from pkgroot.installer import (
    Action,
    InstallationSettings,
    InstalledPackage,
    Installer,
    InstallLog,
    InstallMode,
    InstallPlan,
    PackageDescriptor,
    VersionConstraint,
)
from pkgroot.catalog import CatalogPackage, PackageCatalog
from pkgroot.config import (
    Config,
    InstallerConfig,
    load_config,
    load_effective_config,
    validate_config,
    write_config,
)
from pkgroot.errors import (
    CatalogError,
    ConfigError,
    format_error,
    format_warning,
    is_error_message,
)
from pkgroot.paths import get_config_dir, get_config_path, get_data_dir
from pkgroot.versions import parse_version


_debug_enabled = False


def set_debug(enabled: bool):
    """Enable or disable debug mode globally."""
    global _debug_enabled
    _debug_enabled = enabled


def is_debug() -> bool:
    """Check if debug mode is enabled."""
    return _debug_enabled


def setup_logging(debug: bool = False) -> None:
    """Configure the ``pkgroot`` logger: DEBUG with --debug, WARNING otherwise."""
    set_debug(debug)
    logger = logging.getLogger("pkgroot")
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
        logger.addHandler(handler)


__all__ = [
    "Action",
    "CatalogError",
    "CatalogPackage",
    "Config",
    "ConfigError",
    "InstallationSettings",
    "InstalledPackage",
    "Installer",
    "InstallerConfig",
    "InstallLog",
    "InstallMode",
    "InstallPlan",
    "PackageCatalog",
    "PackageDescriptor",
    "VersionConstraint",
    "format_error",
    "format_warning",
    "get_config_dir",
    "get_config_path",
    "get_data_dir",
    "is_debug",
    "is_error_message",
    "load_config",
    "load_effective_config",
    "parse_version",
    "set_debug",
    "setup_logging",
    "validate_config",
    "write_config",
]
