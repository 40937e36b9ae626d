"""Version parsing utilities."""

import re

from packaging.version import InvalidVersion, Version

_LEADING_V = re.compile(r"^[vV](?=\d)")


def parse_version(value: "str | Version") -> Version:
    """Parse a version string into a comparable Version.

    Accepts an optional leading 'v' (``v1.2.3``) and four-part versions
    (``1.0.0.0``). Versions compare numerically, so ``1.0`` equals ``1.0.0``.

    Args:
        value: Version string or an already-parsed Version

    Returns:
        Parsed Version instance

    Raises:
        ValueError: If the value is empty or not a valid version
    """
    if isinstance(value, Version):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError("version must be a non-empty string")

    text = _LEADING_V.sub("", value.strip())
    try:
        return Version(text)
    except InvalidVersion as e:
        raise ValueError(f"Invalid version: '{value}'") from e


def format_version(version: Version) -> str:
    """Render a version the way it appears in package ids and log lines."""
    return str(version)


__all__ = [
    "Version",
    "parse_version",
    "format_version",
]
