"""Tests for version label parsing and ordering."""

import pytest

from squadron.templates.versioning import (
    compare_versions,
    is_newer,
    parse_version,
    same_version,
)


class TestParseVersion:
    """Tests for parse_version."""

    def test_strips_leading_v(self) -> None:
        assert parse_version("v1.2") == ((1, 2), "")

    def test_drops_trailing_zeros(self) -> None:
        assert parse_version("v1.0.0") == ((1,), "")

    def test_keeps_suffix(self) -> None:
        assert parse_version("v2.0-beta") == ((2,), "-beta")

    def test_non_numeric_returns_none(self) -> None:
        assert parse_version("latest") is None


class TestCompareVersions:
    """Tests for compare_versions."""

    @pytest.mark.parametrize(
        ("left", "right", "expected"),
        [
            ("v1.10", "v1.9", 1),
            ("v1.0", "v2.0", -1),
            ("v1", "1.0.0", 0),
            ("V3.1", "v3.1", 0),
            ("v2.0-beta", "v2.0", -1),
            ("v2.0-rc1", "v2.0-beta", 1),
        ],
    )
    def test_ordering(self, left: str, right: str, expected: int) -> None:
        assert compare_versions(left, right) == expected

    def test_non_numeric_falls_back_to_string_order(self) -> None:
        assert compare_versions("beta", "alpha") == 1
        assert compare_versions("alpha", "alpha") == 0


class TestHelpers:
    """Tests for is_newer and same_version."""

    def test_is_newer_is_strict(self) -> None:
        assert is_newer("v1.1", "v1.0")
        assert not is_newer("v1.0", "1.0")

    def test_same_version_normalizes(self) -> None:
        assert same_version("v1.0", "1.0.0")

    def test_same_version_false_when_missing(self) -> None:
        assert not same_version(None, "v1.0")
        assert not same_version("v1.0", None)
        assert not same_version(None, None)
