"""``vidmerge doctor`` — environment diagnostics command.

Collects the facts the server depends on (Python version, the yt-dlp
distribution, the ``yt-dlp`` and ``ffmpeg`` executables, a writable
scratch directory) and renders them as a Rich table.

This module lives in the CLI layer — it may import from ``infra`` and
``core``.  No business logic resides here.
"""

from __future__ import annotations

import os
import platform
import sys
from pathlib import Path

from rich.table import Table

from vidmerge.cli import exit_codes
from vidmerge.cli.console import console
from vidmerge.config import AppSettings, load_settings
from vidmerge.core.commands import FDK_AAC
from vidmerge.infra.tool_detector import ToolStatus, detect_tool
from vidmerge.version import __version__

OK = "[green]OK[/green]"
WARN = "[yellow]WARN[/yellow]"
FAIL = "[red]FAIL[/red]"

Check = tuple[str, str, str]


# ---------------------------------------------------------------------------
# Diagnostic collectors
# ---------------------------------------------------------------------------

def _vidmerge_version_check() -> Check:
    return "vidmerge", __version__, OK


def _python_version_check() -> Check:
    """Return (label, value, status) for the Python version row."""
    version = platform.python_version()
    ok = sys.version_info[:2] >= (3, 10)
    return "Python", version, OK if ok else "[red]FAIL (>=3.10 required)[/red]"


def _ytdlp_package_check() -> Check:
    """Return (label, value, status) for the yt-dlp distribution row.

    Missing is only a warning: a standalone ``yt-dlp`` executable works
    just as well.
    """
    try:
        from yt_dlp.version import __version__ as ydl_ver
    except ImportError:
        return "yt-dlp (package)", "NOT INSTALLED", WARN
    return "yt-dlp (package)", ydl_ver, OK


def _tool_check(label: str, status: ToolStatus) -> Check:
    if status.found:
        return label, str(status.path), OK
    return label, "not found", FAIL


def _scratch_dir_check(scratch_root: Path) -> Check:
    """Return (label, value, status) for the scratch directory row."""
    target = scratch_root
    # Walk up to the nearest existing ancestor; that is where mkdir lands.
    while not target.exists() and target != target.parent:
        target = target.parent
    if target.is_dir() and os.access(target, os.W_OK | os.X_OK):
        return "scratch dir", str(scratch_root), OK
    return "scratch dir", f"{scratch_root} (not writable)", FAIL


def _os_check() -> Check:
    system_raw = platform.system()
    system_display = {"Darwin": "macOS"}.get(system_raw, system_raw)
    value = f"{system_display} {platform.release()} ({platform.machine()})"
    return "OS", value, OK


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def run_doctor(settings: AppSettings | None = None) -> int:
    """Execute all diagnostic checks and render a Rich summary table.

    Returns
    -------
    int
        :data:`exit_codes.SUCCESS` when no check failed,
        :data:`exit_codes.GENERAL_ERROR` otherwise.
    """
    settings = settings or load_settings()
    tools = [
        ("yt-dlp", detect_tool(settings.tools.ytdlp_binary)),
        ("ffmpeg", detect_tool(settings.tools.ffmpeg_binary)),
    ]

    checks = [
        _vidmerge_version_check(),
        _python_version_check(),
        _ytdlp_package_check(),
        *(_tool_check(label, status) for label, status in tools),
        _scratch_dir_check(settings.workspace.scratch_root),
        _os_check(),
    ]

    table = Table(
        title="vidmerge doctor",
        show_header=True,
        header_style="bold cyan",
        border_style="dim",
    )
    table.add_column("Component", style="bold", min_width=12)
    table.add_column("Value", min_width=20)
    table.add_column("Status", justify="center", min_width=8)
    for label, value, status in checks:
        table.add_row(label, value, status)

    console.print()
    console.print(table)
    console.print()

    for _, status in tools:
        if not status.found and status.install_commands:
            console.print(f"[yellow]{status.name} is not installed.[/yellow]")
            console.print("Install using one of the following commands:\n")
            for cmd in status.install_commands:
                console.print(f"  [bold]{cmd}[/bold]")
            console.print()

    if settings.media.default_audio_codec == FDK_AAC:
        console.print(
            "[dim]The default audio codec libfdk_aac needs an ffmpeg build "
            "with --enable-libfdk-aac.[/dim]"
        )

    if any("FAIL" in status for _, _, status in checks):
        console.print("[bold red]Some checks failed.[/bold red]")
        return exit_codes.GENERAL_ERROR

    console.print("[bold green]All checks passed.[/bold green]")
    return exit_codes.SUCCESS
