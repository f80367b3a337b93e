"""Console output abstraction.

Services write through ConsoleProtocol; RichConsole prints to the terminal
and MockConsole records everything for tests. Once the run's Stopwatch is
started, each line is prefixed with the elapsed milliseconds.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "OutputRecord",
    "RichConsole",
    "Stopwatch",
    "Style",
]


class Style(Enum):
    """Text styles for console output."""

    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    WARNING = auto()
    INFO = auto()
    DIM = auto()
    BOLD = auto()
    HEADER = auto()

    def __str__(self) -> str:
        return self.name.lower()


class Stopwatch:
    """Elapsed-time clock for diagnostic timestamps."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._started_at: float | None = None

    def start(self) -> None:
        if self._started_at is None:
            self._started_at = self._clock()

    @property
    def running(self) -> bool:
        return self._started_at is not None

    @property
    def elapsed_ms(self) -> int:
        if self._started_at is None:
            return 0
        return int((self._clock() - self._started_at) * 1000)

    def prefix(self) -> str:
        """Elapsed milliseconds padded to 8 columns, or "" before start."""
        elapsed = self.elapsed_ms
        if elapsed <= 0:
            return ""
        return str(elapsed).ljust(8)


class ConsoleProtocol(Protocol):
    """Operator-facing output and the interactive acknowledgment pause."""

    stopwatch: Stopwatch

    def print(self, message: str, style: Style = Style.DEFAULT) -> None: ...

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def header(self, message: str) -> None: ...

    def newline(self) -> None: ...

    def pause(self) -> None:
        """Block until the operator presses Enter."""
        ...


class RichConsole:
    """Console implementation using Rich."""

    def __init__(self, stopwatch: Stopwatch | None = None) -> None:
        from rich.console import Console

        self._console = Console(highlight=False)
        self.stopwatch = stopwatch or Stopwatch()
        self._style_map = {
            Style.DEFAULT: "",
            Style.SUCCESS: "green",
            Style.ERROR: "red bold",
            Style.WARNING: "yellow",
            Style.INFO: "cyan",
            Style.DIM: "dim",
            Style.BOLD: "bold",
            Style.HEADER: "blue bold",
        }

    def _emit(self, markup: str) -> None:
        prefix = self.stopwatch.prefix()
        if prefix:
            markup = f"[green]{prefix}[/green]{markup}"
        self._console.print(markup)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        from rich.markup import escape

        rich_style = self._style_map.get(style, "")
        text = escape(message)
        self._emit(f"[{rich_style}]{text}[/{rich_style}]" if rich_style else text)

    def success(self, message: str) -> None:
        from rich.markup import escape

        self._emit(f"[green]OK[/green] {escape(message)}")

    def error(self, message: str) -> None:
        from rich.markup import escape

        self._emit(f"[red bold]FATAL ERROR:[/red bold] {escape(message)}")

    def warning(self, message: str) -> None:
        from rich.markup import escape

        self._emit(f"[yellow]WARNING:[/yellow] {escape(message)}")

    def info(self, message: str) -> None:
        from rich.markup import escape

        self._emit(f"[cyan]info:[/cyan] {escape(message)}")

    def header(self, message: str) -> None:
        from rich.markup import escape

        self._console.print(f"\n[red]{escape(message)}[/red]\n")

    def newline(self) -> None:
        self._console.print()

    def pause(self) -> None:
        try:
            self._console.input()
        except EOFError:
            # stdin is closed; nobody is there to press Enter
            pass


@dataclass
class OutputRecord:
    """A single output record for MockConsole."""

    message: str
    style: Style


def _empty_outputs() -> list[OutputRecord]:
    return []


@dataclass
class MockConsole:
    """Console implementation that captures output for testing.

    `pause()` never blocks; it only counts how often it was called.
    """

    outputs: list[OutputRecord] = field(default_factory=_empty_outputs)
    stopwatch: Stopwatch = field(default_factory=Stopwatch)
    pauses: int = 0

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.outputs.append(OutputRecord(message, style))

    def success(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"OK {message}", Style.SUCCESS))

    def error(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"FATAL ERROR: {message}", Style.ERROR))

    def warning(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"WARNING: {message}", Style.WARNING))

    def info(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"info: {message}", Style.INFO))

    def header(self, message: str) -> None:
        self.outputs.append(OutputRecord(message, Style.HEADER))

    def newline(self) -> None:
        self.outputs.append(OutputRecord("", Style.DEFAULT))

    def pause(self) -> None:
        self.pauses += 1

    # Test helper methods

    def clear(self) -> None:
        self.outputs.clear()

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    def has_error(self) -> bool:
        return any(o.style == Style.ERROR for o in self.outputs)

    def has_warning(self) -> bool:
        return any(o.style == Style.WARNING for o in self.outputs)

    def find(self, substring: str) -> list[OutputRecord]:
        """Find all outputs containing a substring."""
        return [o for o in self.outputs if substring in o.message]
