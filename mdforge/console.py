"""Operator-facing status lines and logging setup.

Every message is a single line with a coloured category prefix:
``[INFO]``, ``[SUCCESS]``, ``[WARNING]``, ``[ERROR]``. Messages are rendered
as plain text so paths and flags containing brackets are never read as
Rich markup.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

_PREFIX_STYLES: dict[str, str] = {
    "INFO": "bold blue",
    "SUCCESS": "bold green",
    "WARNING": "bold yellow",
    "ERROR": "bold red",
}


class StatusPrinter:
    """Prints categorised status lines to a Rich console."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(highlight=False)

    def _emit(self, level: str, message: str) -> None:
        line = Text.assemble((f"[{level}]", _PREFIX_STYLES[level]), " ", message)
        self.console.print(line)

    def info(self, message: str) -> None:
        self._emit("INFO", message)

    def success(self, message: str) -> None:
        self._emit("SUCCESS", message)

    def warning(self, message: str) -> None:
        self._emit("WARNING", message)

    def error(self, message: str) -> None:
        self._emit("ERROR", message)

    def plain(self, text: str = "") -> None:
        self.console.print(text, markup=False, highlight=False)


def configure_logging(level: str = "INFO", console: Console | None = None) -> None:
    """Route stdlib logging through Rich at *level*."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=False)],
        force=True,
    )
