"""Async subprocess execution utilities.

Provides package-manager invocation with:
- ANSI escape code stripping (keeps JSON and version output parseable)
- Environment variable injection for the child process only
- Exit codes reported, not trusted (callers decide what failure means)
"""

import asyncio
import os
import re
from dataclasses import dataclass
from pathlib import Path


class ShellError(Exception):
    """Exception raised when a command cannot be run or exits non-zero.

    Attributes:
        cmd: The command that failed
        returncode: Exit code of the failed command (None if it never started)
        stdout: Standard output (ANSI stripped)
        stderr: Standard error (ANSI stripped)
    """

    def __init__(
        self,
        cmd: str,
        returncode: int | None,
        stdout: str,
        stderr: str,
    ) -> None:
        self.cmd = cmd
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(f"Command failed with exit code {returncode}: {cmd}")

    def __str__(self) -> str:
        parts = [f"Command failed: {self.cmd}"]
        parts.append(f"Exit code: {self.returncode}")
        if self.stderr:
            parts.append(f"Stderr: {self.stderr}")
        if self.stdout:
            parts.append(f"Stdout: {self.stdout}")
        return "\n".join(parts)


@dataclass
class SpawnResult:
    """Captured output of a finished process."""

    args: list[str]
    returncode: int
    stdout: str
    stderr: str


# Regex pattern for ANSI escape sequences
# Matches: ESC[...m, ESC[...;...m, and other control sequences
ANSI_PATTERN = re.compile(
    r"\x1b\[[0-9;]*[a-zA-Z]|\x1b\][^\x07]*\x07|\x1b[PX^_][^\x1b]*\x1b\\"
)

# Control characters other than tab and newlines
CONTROL_CHARS_PATTERN = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")


def strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences and control characters from text.

    Args:
        text: Input text potentially containing ANSI codes

    Returns:
        Clean text with all ANSI sequences removed
    """
    if not text:
        return ""
    result = ANSI_PATTERN.sub("", text)
    result = CONTROL_CHARS_PATTERN.sub("", result)
    return result


async def spawn(
    cmd: list[str],
    cwd: Path | str | None = None,
    env: dict[str, str] | None = None,
    check: bool = False,
    strip_output: bool = True,
) -> SpawnResult:
    """Run a command and capture its output without blocking the event loop.

    No timeout is applied; a spawned package manager runs to completion.

    Args:
        cmd: Command and arguments (never passed through a shell)
        cwd: Working directory for the command
        env: Variables overriding the inherited environment
        check: Whether to raise ShellError on non-zero exit
        strip_output: Whether to strip ANSI codes from output

    Returns:
        SpawnResult with decoded stdout/stderr

    Raises:
        ShellError: If the command cannot be started, or exits non-zero
            and check=True
    """
    merged_env = {**os.environ}
    if env:
        merged_env.update(env)

    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            cwd=cwd,
            env=merged_env,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise ShellError(
            cmd=" ".join(cmd), returncode=None, stdout="", stderr=str(e)
        ) from e

    raw_stdout, raw_stderr = await process.communicate()
    stdout = raw_stdout.decode("utf-8", errors="replace")
    stderr = raw_stderr.decode("utf-8", errors="replace")

    if strip_output:
        stdout = strip_ansi(stdout)
        stderr = strip_ansi(stderr)

    returncode = process.returncode if process.returncode is not None else -1
    if check and returncode != 0:
        raise ShellError(
            cmd=" ".join(cmd),
            returncode=returncode,
            stdout=stdout,
            stderr=stderr,
        )

    return SpawnResult(args=list(cmd), returncode=returncode, stdout=stdout, stderr=stderr)
