"""Publish tool detection and command construction.

The package manager a directory prefers decides which executable runs
``publish`` and which flags it understands:

- npm: plain ``npm publish``
- pnpm: 5+ refuses to publish from a dirty git tree unless ``--no-git-checks``
- yarn: berry (2+) namespaces the command as ``yarn npm publish``

Detection runs for every publish attempt; it is not cached.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar, Literal, assert_never

from pkgpublish.project import detect_package_manager
from pkgpublish.utils.shell import ShellError, spawn
from pkgpublish.utils.version import major_version


@dataclass(frozen=True)
class NpmTool:
    name: ClassVar[Literal["npm"]] = "npm"


@dataclass(frozen=True)
class PnpmTool:
    should_add_no_git_checks: bool = False
    name: ClassVar[Literal["pnpm"]] = "pnpm"


@dataclass(frozen=True)
class YarnTool:
    berry: bool = False
    name: ClassVar[Literal["yarn"]] = "yarn"


PublishTool = NpmTool | PnpmTool | YarnTool


async def probe_major_version(executable: str, cwd: Path) -> int | None:
    """Run ``<executable> --version`` and return its major version.

    Returns:
        Major version, or None if the tool cannot be run or its output
        is not a semantic version
    """
    try:
        result = await spawn([executable, "--version"], cwd=cwd, check=True)
    except ShellError:
        return None
    return major_version(result.stdout.strip())


async def get_publish_tool(cwd: Path) -> PublishTool:
    """Decide which tool publishes the package at cwd.

    Never raises for a failed version probe: pnpm falls back to no
    ``--no-git-checks`` and yarn to classic.

    Args:
        cwd: Package directory

    Returns:
        The publish tool variant with its version-dependent flags
    """
    package_manager = detect_package_manager(cwd)

    if package_manager == "pnpm":
        major = await probe_major_version("pnpm", cwd)
        return PnpmTool(should_add_no_git_checks=major is not None and major >= 5)

    if package_manager == "yarn":
        major = await probe_major_version("yarn", cwd)
        return YarnTool(berry=major is not None and major >= 2)

    return NpmTool()


def build_publish_args(
    tool: PublishTool,
    cwd: Path | str,
    tag: str,
    access: str | None = None,
    otp: str | None = None,
) -> list[str]:
    """Build the argument vector for a publish invocation (tool name excluded).

    Args:
        tool: Detected publish tool
        cwd: Package directory to publish
        tag: Distribution tag
        access: Access level, omitted when None
        otp: One-time password, omitted when None

    Returns:
        Arguments to pass to ``tool.name``
    """
    args: list[str] = []

    if isinstance(tool, YarnTool):
        if tool.berry:
            args.append("npm")
    elif isinstance(tool, (NpmTool, PnpmTool)):
        pass
    else:
        assert_never(tool)

    args.extend(["publish", str(cwd), "--json"])

    if access:
        args.extend(["--access", access])

    args.extend(["--tag", tag])

    if otp is not None:
        args.extend(["--otp", otp])

    if isinstance(tool, PnpmTool):
        if tool.should_add_no_git_checks:
            args.append("--no-git-checks")
    elif isinstance(tool, (NpmTool, YarnTool)):
        pass
    else:
        assert_never(tool)

    return args
