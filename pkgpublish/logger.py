"""Operator-facing log output.

Every line goes to stderr so that stdout stays free for machine-readable
output, prefixed with a coloured level tag.
"""

from typing import Protocol

from rich.console import Console
from rich.markup import escape


class Logger(Protocol):
    """Anything with the three severity methods the publisher reports through."""

    def info(self, *messages: object) -> None: ...

    def warn(self, *messages: object) -> None: ...

    def error(self, *messages: object) -> None: ...


class ConsoleLogger:
    """Logger backed by a rich Console."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(stderr=True, highlight=False)

    def _print(self, tag: str, messages: tuple[object, ...]) -> None:
        text = " ".join(str(m) for m in messages if m is not None and m != "")
        for line in text.splitlines() or [""]:
            self.console.print(f"{tag} {escape(line)}")

    def info(self, *messages: object) -> None:
        self._print("[cyan]info[/cyan]", messages)

    def warn(self, *messages: object) -> None:
        self._print("[yellow]warn[/yellow]", messages)

    def error(self, *messages: object) -> None:
        self._print("[red]error[/red]", messages)


logger = ConsoleLogger()
