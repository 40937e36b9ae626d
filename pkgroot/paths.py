"""Configuration and data path helpers for pkgroot."""

import os
from pathlib import Path

CONFIG_FILENAME = "pkgroot.json"


def get_config_dir() -> Path:
    """Return XDG-compliant config directory: ~/.config/pkgroot"""
    return Path.home() / ".config" / "pkgroot"


def get_data_dir() -> Path:
    """Return XDG-compliant data directory: ~/.local/share/pkgroot"""
    if "XDG_DATA_HOME" in os.environ:
        return Path(os.environ["XDG_DATA_HOME"]) / "pkgroot"
    return Path.home() / ".local" / "share" / "pkgroot"


def get_default_install_root() -> Path:
    """Return the default install root (one subdirectory per installed package)."""
    return get_data_dir() / "installed"


def get_default_packages_dir() -> Path:
    """Return the default directory holding package archives."""
    return get_data_dir() / "packages"


def get_config_path(create: bool = False) -> Path:
    """Return path to user config file.

    Priority:
    1. PKGROOT_CONFIG environment variable (if set)
    2. ~/.config/pkgroot/pkgroot.json (default XDG location)

    Args:
        create: If True, create the config directory if missing

    Returns:
        Path to config file
    """
    if "PKGROOT_CONFIG" in os.environ:
        config_path = Path(os.environ["PKGROOT_CONFIG"])
    else:
        config_path = get_config_dir() / CONFIG_FILENAME

    if create:
        config_path.parent.mkdir(parents=True, exist_ok=True)
    return config_path
