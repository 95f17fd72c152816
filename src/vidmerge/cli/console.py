"""Shared Rich console for CLI output.

Diagnostics and errors go to stderr so that stdout stays clean for
machine-readable output (``vidmerge keys create`` prints the bare key).
"""

from __future__ import annotations

from rich.console import Console

from vidmerge.exceptions import VidmergeError

console = Console(stderr=True)
"""Human-facing messages, tables and errors."""

out = Console(highlight=False)
"""Plain results meant for piping."""


def print_error(exc: VidmergeError) -> None:
    """Render a domain error and its hint, if any."""
    console.print(f"[bold red]Error:[/bold red] {exc}")
    if exc.hint:
        console.print(f"[yellow]Hint:[/yellow] {exc.hint}")
