"""Node.js package directories: package.json, package manager, workspaces.

Package manager detection priority:
1. packageManager field in the nearest package.json
2. Lock files (pnpm-lock.yaml, yarn.lock, package-lock.json, bun.lockb)
   in the directory or any parent
3. pnpm-workspace.yaml in the directory or any parent
"""

import json
from pathlib import Path
from typing import Any

import yaml

from pkgpublish.exceptions import PublishError

KNOWN_PACKAGE_MANAGERS = ("npm", "pnpm", "yarn", "bun")

# Checked in order within each directory
LOCK_FILES = {
    "pnpm-lock.yaml": "pnpm",
    "yarn.lock": "yarn",
    "package-lock.json": "npm",
    "bun.lockb": "bun",
}


def read_package_json(directory: Path) -> dict[str, Any] | None:
    """Parse package.json from a directory.

    Args:
        directory: Package directory

    Returns:
        Parsed package.json dict, or None if not found or invalid
    """
    package_json_path = directory / "package.json"
    if not package_json_path.exists():
        return None

    try:
        with open(package_json_path, encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError):
        return None
    return data if isinstance(data, dict) else None


def _package_manager_field(directory: Path) -> str | None:
    data = read_package_json(directory)
    if not data:
        return None
    pm_field = data.get("packageManager")
    if not isinstance(pm_field, str) or not pm_field:
        return None
    # "pnpm@8.0.0" or "yarn@4.1.0+sha224.abc"
    manager = pm_field.split("@")[0]
    return manager if manager in KNOWN_PACKAGE_MANAGERS else None


def detect_package_manager(cwd: Path) -> str | None:
    """Detect which package manager a directory prefers.

    Walks from cwd up to the filesystem root. The packageManager field
    counts only in the first package.json found on the way.

    Args:
        cwd: Directory to inspect

    Returns:
        Package manager name ("npm", "pnpm", "yarn", "bun"), or None if
        nothing indicates one
    """
    start = cwd.resolve()
    directories = [start, *start.parents]

    for directory in directories:
        if (directory / "package.json").exists():
            manager = _package_manager_field(directory)
            if manager:
                return manager
            break

    for directory in directories:
        for lock_file, manager in LOCK_FILES.items():
            if (directory / lock_file).exists():
                return manager
        if (directory / "pnpm-workspace.yaml").exists():
            return "pnpm"

    return None


class NodePackage:
    """A publishable package directory."""

    def __init__(self, directory: Path) -> None:
        """Load the package at a directory.

        Args:
            directory: Directory containing package.json

        Raises:
            PublishError: If package.json is missing, invalid, or lacks name/version
        """
        self.directory = directory
        data = read_package_json(directory)
        if data is None:
            raise PublishError(
                f"No valid package.json in {directory}",
                fix_hint="Point at a directory containing a package.json",
            )
        name = data.get("name")
        version = data.get("version")
        if not isinstance(name, str) or not name:
            raise PublishError(
                f"package.json in {directory} has no name",
                fix_hint='Add "name" to package.json',
            )
        if not isinstance(version, str) or not version:
            raise PublishError(
                f"package.json of {name} has no version",
                fix_hint='Add "version": "1.0.0" to package.json',
            )
        self.package_json = data
        self.name = name
        self.version = version

    @property
    def private(self) -> bool:
        return bool(self.package_json.get("private", False))

    @property
    def access(self) -> str | None:
        publish_config = self.package_json.get("publishConfig")
        if isinstance(publish_config, dict):
            access = publish_config.get("access")
            if isinstance(access, str):
                return access
        return None

    def __repr__(self) -> str:
        return f"NodePackage({self.name}@{self.version}, {self.directory})"


def _workspace_patterns(root: Path) -> list[str]:
    patterns: list[str] = []

    data = read_package_json(root)
    if data:
        # Array format: ["packages/*"], object format: {"packages": ["packages/*"]}
        workspaces = data.get("workspaces")
        if isinstance(workspaces, list):
            patterns.extend(workspaces)
        elif isinstance(workspaces, dict):
            patterns.extend(workspaces.get("packages", []))

    pnpm_workspace = root / "pnpm-workspace.yaml"
    if pnpm_workspace.exists():
        try:
            with open(pnpm_workspace, encoding="utf-8") as f:
                pnpm_data = yaml.safe_load(f) or {}
        except (yaml.YAMLError, OSError):
            pnpm_data = {}
        if isinstance(pnpm_data, dict):
            patterns.extend(pnpm_data.get("packages", []) or [])

    return [p for p in patterns if isinstance(p, str)]


def get_workspace_packages(root: Path) -> list[Path]:
    """Resolve workspace globs to package directories.

    Reads the "workspaces" field of package.json and the "packages" list
    of pnpm-workspace.yaml. Each returned path is a directory containing
    a package.json. Patterns starting with "!" exclude matches.

    Args:
        root: Workspace root

    Returns:
        Sorted absolute package paths; empty if root is not a workspace
    """
    package_paths: set[Path] = set()
    excluded: set[Path] = set()
    for pattern in _workspace_patterns(root):
        target = excluded if pattern.startswith("!") else package_paths
        pattern = pattern.lstrip("!")
        if "*" in pattern:
            for match in root.glob(pattern):
                if match.is_dir() and (match / "package.json").exists():
                    target.add(match.resolve())
        else:
            direct_path = root / pattern
            if direct_path.is_dir() and (direct_path / "package.json").exists():
                target.add(direct_path.resolve())

    return sorted(package_paths - excluded)
