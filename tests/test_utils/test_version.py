"""Unit tests for version parsing utilities.

Tests cover:
- Semantic version parsing with prefixes, prerelease and build metadata
- Major version extraction from package manager output
"""

import pytest

from pkgpublish.utils.version import (
    InvalidVersionError,
    is_valid_version,
    major_version,
    parse_version,
)


class TestParseVersion:
    """Tests for parse_version()."""

    @pytest.mark.parametrize(
        ("version", "expected"),
        [
            ("1.2.3", (1, 2, 3)),
            ("v1.22.19", (1, 22, 19)),
            ("9.0.0-alpha.4", (9, 0, 0)),
            ("4.1.0+git.20240101", (4, 1, 0)),
            (" 8.15.1\n", (8, 15, 1)),
        ],
    )
    def test_valid(self, version: str, expected: tuple[int, int, int]) -> None:
        assert parse_version(version) == expected

    @pytest.mark.parametrize("version", ["", "   ", "1.2", "latest", "1.2.3.4"])
    def test_invalid(self, version: str) -> None:
        with pytest.raises(InvalidVersionError):
            parse_version(version)


class TestMajorVersion:
    """Tests for major_version() and is_valid_version()."""

    def test_major(self) -> None:
        assert major_version("3.6.4") == 3
        assert major_version("10.0.0-rc.1") == 10

    def test_unparsable_is_none(self) -> None:
        """Warnings or errors printed instead of a version yield None."""
        assert major_version("command not found: pnpm") is None
        assert major_version("") is None

    def test_is_valid_version(self) -> None:
        assert is_valid_version("1.0.0") is True
        assert is_valid_version("1.0") is False
