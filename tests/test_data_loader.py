"""Tests for document <-> model conversion."""

import pytest

from pkgroot.data_loader import (
    constraint_from_dict,
    descriptor_from_dict,
    descriptor_to_dict,
    parse_install_mode,
    settings_from_dict,
    settings_to_dict,
)
from pkgroot.errors import ConfigError
from pkgroot.installer import InstallationSettings, InstallMode
from pkgroot.versions import Version


def package_doc(**overrides) -> dict:
    doc = {
        "kind": "package",
        "name": "core",
        "version": "1.2.0",
        "is_enabled": True,
        "is_dependency_package": False,
        "priority": 3,
        "dependencies": [
            {"name": "base", "minimum_version": "1.0"},
            {"name": "util", "minimum_version": "2.0", "specific_version": "2.1"},
        ],
    }
    doc.update(overrides)
    return doc


class TestDescriptorFromDict:
    def test_valid_document(self):
        descriptor = descriptor_from_dict(package_doc())
        assert descriptor.name == "core"
        assert descriptor.version == Version("1.2.0")
        assert descriptor.priority == 3
        assert descriptor.id == "core_v1.2.0"
        assert [d.name for d in descriptor.dependencies] == ["base", "util"]
        assert descriptor.dependencies[0].specific_version is None
        assert descriptor.dependencies[1].specific_version == Version("2.1")

    def test_optional_fields_default(self):
        descriptor = descriptor_from_dict({"name": "core", "version": "1.0"})
        assert descriptor.is_enabled is True
        assert descriptor.is_dependency_package is False
        assert descriptor.priority == 0
        assert descriptor.dependencies == ()

    def test_wrong_kind(self):
        with pytest.raises(ConfigError, match="Unexpected document kind 'settings'"):
            descriptor_from_dict(package_doc(kind="settings"))

    def test_missing_name(self):
        doc = package_doc()
        del doc["name"]
        with pytest.raises(ConfigError, match="missing required field: name"):
            descriptor_from_dict(doc)

    def test_invalid_version(self):
        with pytest.raises(ConfigError, match="field 'version' is invalid"):
            descriptor_from_dict(package_doc(version="latest"))

    def test_wrong_flag_type(self):
        with pytest.raises(ConfigError, match="field 'is_enabled' must be a bool"):
            descriptor_from_dict(package_doc(is_enabled="yes"))

    def test_bool_priority_rejected(self):
        with pytest.raises(ConfigError, match="field 'priority'"):
            descriptor_from_dict(package_doc(priority=True))

    def test_dependencies_not_a_list(self):
        with pytest.raises(ConfigError, match="field 'dependencies' must be an array"):
            descriptor_from_dict(package_doc(dependencies={"base": "1.0"}))

    def test_dependency_error_has_path(self):
        doc = package_doc(dependencies=[{"name": "base"}])
        with pytest.raises(ConfigError, match=r"dependencies\[0\] missing required field: minimum_version"):
            descriptor_from_dict(doc)

    def test_not_an_object(self):
        with pytest.raises(ConfigError, match="must be an object"):
            descriptor_from_dict(["core"])


def test_descriptor_round_trip():
    descriptor = descriptor_from_dict(package_doc())
    assert descriptor_from_dict(descriptor_to_dict(descriptor)) == descriptor


def test_descriptor_to_dict_carries_kind():
    assert descriptor_to_dict(descriptor_from_dict(package_doc()))["kind"] == "package"


def test_constraint_from_dict():
    constraint = constraint_from_dict({"name": "base", "minimum_version": "v1.0"}, "dep")
    assert constraint.minimum_version == Version("1.0")


class TestSettings:
    def test_defaults(self):
        assert settings_from_dict({}) == InstallationSettings()

    def test_round_trip(self):
        settings = InstallationSettings(
            mode=InstallMode.SIDE_BY_SIDE, clean_install=True, remove_orphans=True
        )
        assert settings_from_dict(settings_to_dict(settings)) == settings

    def test_unknown_key(self):
        with pytest.raises(ConfigError, match="Wrong configuration key"):
            settings_from_dict({"dry_run": True})

    def test_wrong_type(self):
        with pytest.raises(ConfigError, match="clean_install"):
            settings_from_dict({"clean_install": "true"})


@pytest.mark.parametrize(
    "value, expected",
    [
        ("side_by_side", InstallMode.SIDE_BY_SIDE),
        ("side-by-side", InstallMode.SIDE_BY_SIDE),
        ("Highest-Version-Only", InstallMode.HIGHEST_VERSION_ONLY),
    ],
)
def test_parse_install_mode(value, expected):
    assert parse_install_mode(value) == expected


def test_parse_install_mode_invalid():
    with pytest.raises(ValueError, match="Invalid install mode"):
        parse_install_mode("newest")
