"""Unit tests for package directory handling.

Tests cover:
- Package manager detection (packageManager field, lock files, parents)
- NodePackage loading and validation
- Workspace package discovery (npm/yarn workspaces, pnpm-workspace.yaml)
"""

import json
from pathlib import Path

import pytest

from pkgpublish.exceptions import PublishError
from pkgpublish.project import (
    NodePackage,
    detect_package_manager,
    get_workspace_packages,
    read_package_json,
)


class TestDetectPackageManager:
    """Tests for detect_package_manager()."""

    def test_package_manager_field(self, package_dir: Path) -> None:
        """packageManager field takes priority over lock files."""
        data = json.loads((package_dir / "package.json").read_text())
        data["packageManager"] = "pnpm@8.15.1"
        (package_dir / "package.json").write_text(json.dumps(data))
        (package_dir / "yarn.lock").write_text("")

        assert detect_package_manager(package_dir) == "pnpm"

    def test_package_manager_field_with_hash(self, package_dir: Path) -> None:
        """packageManager values carrying a hash suffix are understood."""
        data = json.loads((package_dir / "package.json").read_text())
        data["packageManager"] = "yarn@4.1.0+sha224.953c8233f7a92884eee2de69a1b92d1f2ec1655e66d08071ba9a02fa"
        (package_dir / "package.json").write_text(json.dumps(data))

        assert detect_package_manager(package_dir) == "yarn"

    @pytest.mark.parametrize(
        ("lock_file", "expected"),
        [
            ("pnpm-lock.yaml", "pnpm"),
            ("yarn.lock", "yarn"),
            ("package-lock.json", "npm"),
            ("bun.lockb", "bun"),
        ],
    )
    def test_lock_files(self, package_dir: Path, lock_file: str, expected: str) -> None:
        """Each lock file maps to its package manager."""
        (package_dir / lock_file).write_text("")
        assert detect_package_manager(package_dir) == expected

    def test_lock_file_in_parent(self, workspace_dir: Path) -> None:
        """A workspace package inherits the root lock file."""
        (workspace_dir / "yarn.lock").write_text("")
        assert detect_package_manager(workspace_dir / "packages" / "pkg-a") == "yarn"

    def test_pnpm_workspace_marker(self, workspace_dir: Path) -> None:
        """pnpm-workspace.yaml without a lock file still means pnpm."""
        (workspace_dir / "pnpm-workspace.yaml").write_text("packages:\n  - packages/*\n")
        assert detect_package_manager(workspace_dir / "packages" / "pkg-b") == "pnpm"

    def test_nothing_found(self, package_dir: Path) -> None:
        """No indicators returns None."""
        assert detect_package_manager(package_dir) is None


class TestNodePackage:
    """Tests for NodePackage loading."""

    def test_loads_name_and_version(self, package_dir: Path) -> None:
        package = NodePackage(package_dir)
        assert package.name == "test-package"
        assert package.version == "1.0.0"
        assert package.private is False
        assert package.access is None

    def test_reads_publish_config_access(self, package_dir: Path) -> None:
        data = json.loads((package_dir / "package.json").read_text())
        data["publishConfig"] = {"access": "public"}
        (package_dir / "package.json").write_text(json.dumps(data))

        assert NodePackage(package_dir).access == "public"

    def test_missing_package_json(self, project_dir: Path) -> None:
        with pytest.raises(PublishError) as exc_info:
            NodePackage(project_dir)
        assert "No valid package.json" in str(exc_info.value)

    def test_missing_version(self, project_dir: Path) -> None:
        (project_dir / "package.json").write_text('{"name": "no-version"}')
        with pytest.raises(PublishError) as exc_info:
            NodePackage(project_dir)
        assert "has no version" in str(exc_info.value)

    def test_invalid_json_is_treated_as_missing(self, project_dir: Path) -> None:
        (project_dir / "package.json").write_text("{not json")
        assert read_package_json(project_dir) is None


class TestGetWorkspacePackages:
    """Tests for get_workspace_packages()."""

    def test_npm_workspaces(self, workspace_dir: Path) -> None:
        packages = get_workspace_packages(workspace_dir)
        assert [p.name for p in packages] == ["internal", "pkg-a", "pkg-b"]
        assert all(p.is_absolute() for p in packages)

    def test_workspaces_object_format(self, workspace_dir: Path) -> None:
        root = json.loads((workspace_dir / "package.json").read_text())
        root["workspaces"] = {"packages": ["packages/pkg-a"]}
        (workspace_dir / "package.json").write_text(json.dumps(root))

        packages = get_workspace_packages(workspace_dir)
        assert [p.name for p in packages] == ["pkg-a"]

    def test_pnpm_workspace_yaml(self, workspace_dir: Path) -> None:
        root = json.loads((workspace_dir / "package.json").read_text())
        del root["workspaces"]
        (workspace_dir / "package.json").write_text(json.dumps(root))
        (workspace_dir / "pnpm-workspace.yaml").write_text(
            "packages:\n  - 'packages/*'\n  - '!packages/internal'\n"
        )

        packages = get_workspace_packages(workspace_dir)
        assert [p.name for p in packages] == ["pkg-a", "pkg-b"]

    def test_not_a_workspace(self, package_dir: Path) -> None:
        assert get_workspace_packages(package_dir) == []
