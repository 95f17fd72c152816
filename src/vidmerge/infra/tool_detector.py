"""Infrastructure: external tool detection and platform guidance.

Locates the ``yt-dlp`` and ``ffmpeg`` executables the pipeline shells
out to, and supplies platform-specific installation guidance when one is
missing.

Rules
-----
* Detection via :func:`shutil.which` only — no subprocess.
* No automatic installation.
* No ``print()`` — callers handle user-facing output.
"""

from __future__ import annotations

import platform
import shutil
from dataclasses import dataclass
from pathlib import Path


# ---------------------------------------------------------------------------
# Detection result
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ToolStatus:
    """Result of looking up one executable on PATH.

    Attributes
    ----------
    name : str
        Display name of the tool (``"ffmpeg"``, ``"yt-dlp"``).
    found : bool
        Whether the executable was located.
    path : Path | None
        Absolute path to the executable, or ``None``.
    install_commands : tuple[str, ...]
        Suggested shell commands for installing the tool on the current
        platform.  Empty when it is already present.
    """

    name: str
    found: bool
    path: Path | None
    install_commands: tuple[str, ...]

    @property
    def summary(self) -> str:
        return f"found at {self.path}" if self.found else "not found"


# ---------------------------------------------------------------------------
# Detection logic
# ---------------------------------------------------------------------------

def detect_tool(binary: str) -> ToolStatus:
    """Probe for *binary*, either a bare name on PATH or an explicit path.

    Returns a :class:`ToolStatus` regardless of the outcome; the caller
    decides whether to abort or merely warn.
    """
    name = Path(binary).stem
    result = shutil.which(binary)

    if result is not None:
        return ToolStatus(
            name=name,
            found=True,
            path=Path(result).resolve(),
            install_commands=(),
        )

    return ToolStatus(
        name=name,
        found=False,
        path=None,
        install_commands=install_commands_for(name),
    )


# ---------------------------------------------------------------------------
# Platform-specific install guidance
# ---------------------------------------------------------------------------

_INSTALL_COMMANDS: dict[str, dict[str, tuple[str, ...]]] = {
    "ffmpeg": {
        "windows": ("winget install Gyan.FFmpeg", "choco install ffmpeg"),
        "linux": (
            "sudo apt install ffmpeg",
            "sudo dnf install ffmpeg",
            "sudo pacman -S ffmpeg",
        ),
        "darwin": ("brew install ffmpeg",),
    },
    "yt-dlp": {
        "windows": ("winget install yt-dlp", "pip install -U yt-dlp"),
        "linux": ("pip install -U yt-dlp",),
        "darwin": ("brew install yt-dlp", "pip install -U yt-dlp"),
    },
}

_DOWNLOAD_PAGES: dict[str, str] = {
    "ffmpeg": "https://ffmpeg.org/download.html",
    "yt-dlp": "https://github.com/yt-dlp/yt-dlp#installation",
}


def install_commands_for(name: str, system: str | None = None) -> tuple[str, ...]:
    """Return install commands for *name* on *system* (default: this OS)."""
    system = (system or platform.system()).lower()
    commands = _INSTALL_COMMANDS.get(name, {}).get(system)
    if commands:
        return commands
    page = _DOWNLOAD_PAGES.get(name)
    if page:
        return (f"Please install {name} from {page}",)
    return ()
