"""Utility modules for the publish tool."""

from pkgpublish.utils.shell import ShellError, SpawnResult, spawn, strip_ansi
from pkgpublish.utils.version import (
    SEMVER_PATTERN,
    InvalidVersionError,
    VersionTuple,
    is_valid_version,
    major_version,
    parse_version,
)

__all__ = [
    # Shell utilities
    "spawn",
    "strip_ansi",
    "ShellError",
    "SpawnResult",
    # Version utilities
    "parse_version",
    "is_valid_version",
    "major_version",
    "InvalidVersionError",
    "VersionTuple",
    "SEMVER_PATTERN",
]
