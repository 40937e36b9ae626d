"""Tests for version parsing."""

import pytest

from pkgroot.versions import (
    Version,
    format_version,
    parse_version,
)


class TestParseVersion:
    def test_plain_version(self):
        assert parse_version("1.2.3") == Version("1.2.3")

    def test_leading_v_is_stripped(self):
        assert parse_version("v2.0") == Version("2.0")
        assert parse_version("V2.0") == Version("2.0")

    def test_four_part_version(self):
        assert parse_version("1.0.0.4") > parse_version("1.0.0.3")

    def test_trailing_zeros_compare_equal(self):
        assert parse_version("1.0") == parse_version("1.0.0")

    def test_already_parsed_passes_through(self):
        v = Version("3.1")
        assert parse_version(v) is v

    @pytest.mark.parametrize("value", ["", "   ", "not-a-version", "1..2"])
    def test_invalid_raises_value_error(self, value):
        with pytest.raises(ValueError):
            parse_version(value)

    def test_non_string_raises_value_error(self):
        with pytest.raises(ValueError):
            parse_version(None)


def test_format_version_round_trips():
    assert format_version(parse_version("v1.2.0")) == "1.2.0"

