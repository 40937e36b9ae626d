"""Conversion between configuration documents and installer models.

Package configuration files, catalog manifests and the installation settings
section of the user config are all plain dicts once deserialized. This module
validates those dicts and turns them into the frozen models used by the
installer (and back).

Document shape for a package::

    {
      "kind": "package",
      "name": "core",
      "version": "1.0.0",
      "is_enabled": true,
      "is_dependency_package": true,
      "priority": 0,
      "dependencies": [
        {"name": "base", "minimum_version": "1.0", "specific_version": null}
      ]
    }
"""

from pkgroot.errors import ConfigError, format_field_error
from pkgroot.installer.models import (
    InstallationSettings,
    InstallMode,
    PackageDescriptor,
    VersionConstraint,
)
from pkgroot.versions import format_version, parse_version

PACKAGE_KIND = "package"


def _require_str_field(data: dict, field: str, entity_name: str) -> None:
    """Validate required string field.

    Args:
        data: Raw dict
        field: Field name to validate
        entity_name: Entity name for error messages

    Raises:
        ConfigError: If field missing, not str, or empty
    """
    if field not in data:
        raise ConfigError(f"{entity_name} missing required field: {field}")
    if not isinstance(data[field], str) or not data[field].strip():
        raise ConfigError(format_field_error(entity_name, field, "must be a non-empty string"))


def _optional_field(data: dict, field: str, entity_name: str, field_type: type) -> None:
    """Validate optional field with type check.

    Raises:
        ConfigError: If field present, not None, and wrong type
    """
    if field in data and data[field] is not None:
        value = data[field]
        # bool is an int subclass
        if field_type is int and isinstance(value, bool):
            raise ConfigError(format_field_error(entity_name, field, "must be a int or null"))
        if not isinstance(value, field_type):
            type_name = field_type.__name__
            raise ConfigError(format_field_error(entity_name, field, f"must be a {type_name} or null"))


def _require_version_field(data: dict, field: str, entity_name: str):
    _require_str_field(data, field, entity_name)
    try:
        return parse_version(data[field])
    except ValueError as e:
        raise ConfigError(format_field_error(entity_name, field, f"is invalid: {e}")) from e


def parse_install_mode(value: str) -> InstallMode:
    """Convert a mode string to InstallMode.

    Accepts both ``side_by_side`` and ``side-by-side`` spellings.

    Raises:
        ValueError: If value is not a valid mode
    """
    normalized = value.strip().lower().replace("-", "_")
    try:
        return InstallMode(normalized)
    except ValueError as e:
        valid = [m.value for m in InstallMode]
        raise ValueError(
            f"Invalid install mode '{value}'. Must be one of: {', '.join(valid)}"
        ) from e


def constraint_from_dict(data: dict, entity_name: str) -> VersionConstraint:
    if not isinstance(data, dict):
        raise ConfigError(f"{entity_name} must be an object, got {type(data).__name__}")

    _require_str_field(data, "name", entity_name)
    minimum = _require_version_field(data, "minimum_version", entity_name)
    specific = None
    if data.get("specific_version") is not None:
        specific = _require_version_field(data, "specific_version", entity_name)

    return VersionConstraint(
        name=data["name"], minimum_version=minimum, specific_version=specific
    )


def constraint_to_dict(constraint: VersionConstraint) -> dict:
    return {
        "name": constraint.name,
        "minimum_version": format_version(constraint.minimum_version),
        "specific_version": (
            format_version(constraint.specific_version)
            if constraint.specific_version is not None
            else None
        ),
    }


def descriptor_from_dict(data: dict) -> PackageDescriptor:
    """Validate a package document and build its descriptor.

    Args:
        data: Raw dict deserialized from a package configuration file

    Returns:
        PackageDescriptor with its dependency constraints

    Raises:
        ConfigError: If the document has the wrong kind or invalid fields
    """
    if not isinstance(data, dict):
        raise ConfigError(f"Package document must be an object, got {type(data).__name__}")

    kind = data.get("kind", PACKAGE_KIND)
    if kind != PACKAGE_KIND:
        raise ConfigError(f"Unexpected document kind '{kind}', expected '{PACKAGE_KIND}'")

    entity = f"Package '{data.get('name', '?')}'"
    _require_str_field(data, "name", entity)
    version = _require_version_field(data, "version", entity)
    _optional_field(data, "is_enabled", entity, bool)
    _optional_field(data, "is_dependency_package", entity, bool)
    _optional_field(data, "priority", entity, int)

    deps_data = data.get("dependencies") or []
    if not isinstance(deps_data, list):
        raise ConfigError(format_field_error(entity, "dependencies", "must be an array"))

    dependencies = tuple(
        constraint_from_dict(item, f"{entity} dependencies[{i}]")
        for i, item in enumerate(deps_data)
    )

    return PackageDescriptor(
        name=data["name"],
        version=version,
        is_enabled=data["is_enabled"] if data.get("is_enabled") is not None else True,
        is_dependency_package=bool(data.get("is_dependency_package") or False),
        priority=data.get("priority") or 0,
        dependencies=dependencies,
    )


def descriptor_to_dict(descriptor: PackageDescriptor) -> dict:
    return {
        "kind": PACKAGE_KIND,
        "name": descriptor.name,
        "version": format_version(descriptor.version),
        "is_enabled": descriptor.is_enabled,
        "is_dependency_package": descriptor.is_dependency_package,
        "priority": descriptor.priority,
        "dependencies": [constraint_to_dict(d) for d in descriptor.dependencies],
    }


def settings_from_dict(data: dict, entity_name: str = "installation_settings") -> InstallationSettings:
    """Build InstallationSettings; absent keys keep their defaults.

    Raises:
        ConfigError: If a key is unknown or has the wrong type
    """
    defaults = InstallationSettings()
    flags = ("clean_install", "enable_updates", "remove_orphans", "update_before_installing")

    for key in data:
        if key != "mode" and key not in flags:
            raise ConfigError(f"Wrong configuration key: {entity_name}.{key}")

    for flag in flags:
        _optional_field(data, flag, entity_name, bool)

    mode = defaults.mode
    if data.get("mode") is not None:
        _require_str_field(data, "mode", entity_name)
        try:
            mode = parse_install_mode(data["mode"])
        except ValueError as e:
            raise ConfigError(f"{entity_name}: {e}") from e

    values = {
        flag: data[flag] if data.get(flag) is not None else getattr(defaults, flag)
        for flag in flags
    }
    return InstallationSettings(mode=mode, **values)


def settings_to_dict(settings: InstallationSettings) -> dict:
    return {
        "mode": settings.mode.value,
        "clean_install": settings.clean_install,
        "enable_updates": settings.enable_updates,
        "remove_orphans": settings.remove_orphans,
        "update_before_installing": settings.update_before_installing,
    }


__all__ = [
    "PACKAGE_KIND",
    "parse_install_mode",
    "constraint_from_dict",
    "constraint_to_dict",
    "descriptor_from_dict",
    "descriptor_to_dict",
    "settings_from_dict",
    "settings_to_dict",
]
