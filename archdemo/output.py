"""Colour-coded console output, same palette as the TUI log panel."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape

console = Console(highlight=False, soft_wrap=True)
err_console = Console(stderr=True, highlight=False, soft_wrap=True)


def heading(message: str) -> None:
    console.print(f"[bold #39ff14]{escape(message)}[/]")


def info(message: str) -> None:
    console.print(f"  [bold #00ffcc]ℹ[/] [#8892a4]{escape(message)}[/]")


def success(message: str) -> None:
    console.print(f"  [bold #39ff14]✓[/] {escape(message)}")


def warning(message: str) -> None:
    console.print(f"  [bold #ffaa00]![/] [#ffaa00]{escape(message)}[/]")


def error(message: str) -> None:
    err_console.print(f"[bold #ff3366]Error:[/] {escape(message)}")


def field(label: str, value: object) -> None:
    console.print(f"  [#8892a4]{escape(label)}:[/] {escape(str(value))}")


class ConsoleReporter:
    """Progress sink used by the CLI."""

    def heading(self, message: str) -> None:
        heading(message)

    def info(self, message: str) -> None:
        info(message)

    def success(self, message: str) -> None:
        success(message)

    def warning(self, message: str) -> None:
        warning(message)
