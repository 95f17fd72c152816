"""Tests for tool detection (infra/tool_detector.py).

``shutil.which`` and ``platform.system`` are mocked — the result never
depends on what is installed on the test machine.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from vidmerge.infra.tool_detector import (
    ToolStatus,
    detect_tool,
    install_commands_for,
)


class TestDetectTool:
    def test_found(self, tmp_path: Path) -> None:
        fake = tmp_path / "ffmpeg"
        with patch("vidmerge.infra.tool_detector.shutil.which", return_value=str(fake)):
            status = detect_tool("ffmpeg")
        assert isinstance(status, ToolStatus)
        assert status.found
        assert status.path == fake.resolve()
        assert status.install_commands == ()
        assert status.summary.startswith("found at")

    def test_missing(self) -> None:
        with (
            patch("vidmerge.infra.tool_detector.shutil.which", return_value=None),
            patch("vidmerge.infra.tool_detector.platform.system", return_value="Darwin"),
        ):
            status = detect_tool("ffmpeg")
        assert not status.found
        assert status.path is None
        assert status.install_commands == ("brew install ffmpeg",)
        assert status.summary == "not found"

    def test_name_from_explicit_path(self) -> None:
        with patch("vidmerge.infra.tool_detector.shutil.which", return_value=None):
            status = detect_tool("/opt/tools/yt-dlp")
        assert status.name == "yt-dlp"


class TestInstallCommands:
    @pytest.mark.parametrize("system", ["Windows", "Linux", "Darwin"])
    @pytest.mark.parametrize("name", ["ffmpeg", "yt-dlp"])
    def test_known_platforms(self, name: str, system: str) -> None:
        commands = install_commands_for(name, system)
        assert commands
        assert all(isinstance(c, str) for c in commands)

    def test_unknown_platform_points_to_download_page(self) -> None:
        (command,) = install_commands_for("ffmpeg", "Plan9")
        assert "https://ffmpeg.org" in command

    def test_unknown_tool(self) -> None:
        assert install_commands_for("mystery", "Linux") == ()
