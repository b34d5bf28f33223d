"""Semantic version parsing utilities.

Package managers report versions such as ``8.15.1``, ``4.0.0-rc.2`` or
``v1.22.19``. Only the numeric core matters for flag decisions; prerelease
and build metadata are accepted and ignored.
"""

import re

from pkgpublish.exceptions import PkgPublishError

# Type alias for clarity
VersionTuple = tuple[int, int, int]

# MAJOR.MINOR.PATCH with optional leading 'v', prerelease and build metadata
SEMVER_PATTERN = re.compile(
    r"^v?(\d+)\.(\d+)\.(\d+)"
    r"(?:-[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?"
    r"(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?$"
)


class InvalidVersionError(PkgPublishError):
    """A version string does not follow semantic versioning."""


def parse_version(version_str: str) -> VersionTuple:
    """Parse a semantic version string into a tuple of integers.

    Args:
        version_str: Version string to parse (e.g., '1.2.3', 'v1.2.3-beta.1')

    Returns:
        Tuple of (major, minor, patch) as integers

    Raises:
        InvalidVersionError: If version string doesn't match semver format

    Examples:
        >>> parse_version('1.2.3')
        (1, 2, 3)
        >>> parse_version('9.0.0-alpha.4')
        (9, 0, 0)
    """
    if not version_str or not version_str.strip():
        raise InvalidVersionError(
            "Empty version string",
            details="Version string cannot be empty or whitespace",
        )

    match = SEMVER_PATTERN.match(version_str.strip())
    if not match:
        raise InvalidVersionError(
            f"Invalid version format: '{version_str}'",
            details="Version must follow semantic versioning: MAJOR.MINOR.PATCH",
        )

    return (int(match.group(1)), int(match.group(2)), int(match.group(3)))


def is_valid_version(version_str: str) -> bool:
    """Check if a version string is valid semver.

    Examples:
        >>> is_valid_version('1.2.3')
        True
        >>> is_valid_version('1.2')
        False
    """
    if not version_str or not version_str.strip():
        return False
    return SEMVER_PATTERN.match(version_str.strip()) is not None


def major_version(version_str: str) -> int | None:
    """Return the major component of a version string, or None if unparsable."""
    if not is_valid_version(version_str):
        return None
    return parse_version(version_str)[0]
