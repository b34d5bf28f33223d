"""Pytest fixtures for publish tool tests.

Provides common fixtures for:
- Temporary package directories
- A clean, non-CI process environment
- A recording logger
- Scripted package manager output
"""

import json
import os
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest

from pkgpublish.config.models import CI_VENDOR_VARIABLES, Environment
from pkgpublish.utils.shell import SpawnResult


class RecordingLogger:
    """Logger double that keeps every message per level."""

    def __init__(self) -> None:
        self.messages: dict[str, list[str]] = {"info": [], "warn": [], "error": []}

    def _record(self, level: str, messages: tuple[object, ...]) -> None:
        self.messages[level].append(" ".join(str(m) for m in messages if m))

    def info(self, *messages: object) -> None:
        self._record("info", messages)

    def warn(self, *messages: object) -> None:
        self._record("warn", messages)

    def error(self, *messages: object) -> None:
        self._record("error", messages)


class ScriptedSpawn:
    """Stand-in for pkgpublish.utils.shell.spawn returning queued stdout texts."""

    def __init__(self, outputs: list[str]) -> None:
        self.outputs = list(outputs)
        self.calls: list[dict[str, Any]] = []

    async def __call__(
        self,
        cmd: list[str],
        cwd: Path | str | None = None,
        env: dict[str, str] | None = None,
        check: bool = False,
        strip_output: bool = True,
    ) -> SpawnResult:
        self.calls.append({"cmd": list(cmd), "cwd": cwd, "env": env})
        if not self.outputs:
            raise AssertionError(f"Unexpected spawn: {cmd}")
        return SpawnResult(args=list(cmd), returncode=0, stdout=self.outputs.pop(0), stderr="")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Remove CI markers and registry overrides so tests behave the same everywhere."""
    for key in ("CI", "npm_config_registry", "NPM_CONFIG_REGISTRY", *CI_VENDOR_VARIABLES):
        monkeypatch.delenv(key, raising=False)
    for key in list(os.environ):
        if key.startswith("PKGPUBLISH_"):
            monkeypatch.delenv(key, raising=False)
    yield


@pytest.fixture
def local_env() -> Environment:
    """Interactive (non-CI) environment with no registry override."""
    return Environment()


@pytest.fixture
def ci_env(monkeypatch: pytest.MonkeyPatch) -> Environment:
    """Environment of a CI run."""
    monkeypatch.setenv("CI", "true")
    return Environment()


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def scripted_spawn() -> type[ScriptedSpawn]:
    """Factory for scripted spawn doubles: scripted_spawn([stdout, ...])."""
    return ScriptedSpawn


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Create a temporary project directory.

    Returns:
        Path to project directory
    """
    project = tmp_path / "test-project"
    project.mkdir()
    return project


@pytest.fixture
def package_dir(project_dir: Path) -> Path:
    """Create a single package with package.json.

    Returns:
        Path to the package directory
    """
    package_json = {
        "name": "test-package",
        "version": "1.0.0",
        "description": "Test package",
        "main": "index.js",
    }
    (project_dir / "package.json").write_text(json.dumps(package_json, indent=2))
    return project_dir


@pytest.fixture
def workspace_dir(project_dir: Path) -> Path:
    """Create an npm workspace with two public packages and a private one.

    Returns:
        Path to workspace root
    """
    root_json = {"name": "root", "private": True, "workspaces": ["packages/*"]}
    (project_dir / "package.json").write_text(json.dumps(root_json, indent=2))

    for name, version, private in (
        ("pkg-a", "1.0.0", False),
        ("pkg-b", "2.1.0", False),
        ("internal", "0.0.1", True),
    ):
        package = project_dir / "packages" / name
        package.mkdir(parents=True)
        data: dict[str, Any] = {"name": f"@scope/{name}", "version": version}
        if private:
            data["private"] = True
        (package / "package.json").write_text(json.dumps(data, indent=2))

    return project_dir
