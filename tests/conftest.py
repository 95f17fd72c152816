"""Shared pytest fixtures and configuration for the vidmerge test suite.

Guidelines
----------
* No internet access in any test.
* yt-dlp and ffmpeg are never executed: :class:`FakeRunner` stands in at
  the ``CommandRunner`` boundary and writes the files the real tools
  would produce.
* Core tests must be pure — no side effects outside ``tmp_path``.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

from vidmerge.api.app import create_app
from vidmerge.config import AppSettings, DatabaseConfig, ToolsConfig, WorkspaceConfig
from vidmerge.core.commands import Command
from vidmerge.exceptions import ExternalToolFailure
from vidmerge.infra.credential_store import SqlCredentialStore


# ---------------------------------------------------------------------------
# Sample metadata
# ---------------------------------------------------------------------------

def raw_format(
    *,
    format_id: str = "137",
    ext: str = "mp4",
    height: int | None = 1080,
    fps: int | float | None = 30,
    filesize: int | None = None,
    filesize_approx: int | None = None,
    vcodec: str | None = "avc1.640028",
    acodec: str | None = "none",
    tbr: float | None = None,
    vbr: float | None = None,
) -> dict[str, Any]:
    """Factory for a raw format dict matching yt-dlp's ``-J`` output."""
    return {
        "format_id": format_id,
        "ext": ext,
        "height": height,
        "fps": fps,
        "filesize": filesize,
        "filesize_approx": filesize_approx,
        "vcodec": vcodec,
        "acodec": acodec,
        "tbr": tbr,
        "vbr": vbr,
    }


def sample_info(
    *,
    title: str = "Sample Video",
    duration: float | None = 600,
    formats: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Minimal info document: one progressive 720p and one adaptive 1080p."""
    if formats is None:
        formats = [
            raw_format(
                format_id="22",
                height=720,
                filesize=50_000_000,
                vcodec="avc1.64001F",
                acodec="mp4a.40.2",
            ),
            raw_format(format_id="137", height=1080, vbr=4000),
        ]
    return {
        "id": "abc123",
        "title": title,
        "duration": duration,
        "thumbnail": "https://i.example.com/abc123.jpg",
        "formats": formats,
    }


# ---------------------------------------------------------------------------
# Fake command runner
# ---------------------------------------------------------------------------

def command_kind(command: Command) -> str:
    """Classify a command as ``metadata``, ``video``, ``audio`` or ``merge``."""
    args = command.args
    if "-J" in args:
        return "metadata"
    if "-f" in args:
        selector = args[args.index("-f") + 1]
        return "audio" if selector.startswith("bestaudio") else "video"
    return "merge"


class FakeRunner:
    """In-memory :class:`~vidmerge.core.protocols.CommandRunner`.

    * ``metadata`` commands return *info* as JSON (or *metadata_output*
      verbatim when given).
    * ``video`` / ``audio`` commands write a small file to the ``-o`` path.
    * ``merge`` commands concatenate their ``-i`` inputs into the output.

    Any kind listed in *fail_on* raises :class:`ExternalToolFailure`
    instead.  *delay* makes every call yield to the event loop first.
    """

    def __init__(
        self,
        info: dict[str, Any] | None = None,
        *,
        fail_on: tuple[str, ...] = (),
        metadata_output: str | None = None,
        delay: float = 0,
    ) -> None:
        self.info = info if info is not None else sample_info()
        self.fail_on = set(fail_on)
        self.metadata_output = metadata_output
        self.delay = delay
        self.commands: list[Command] = []
        self.written: list[Path] = []

    def kinds(self) -> list[str]:
        return [command_kind(c) for c in self.commands]

    async def run(self, command: Command) -> str:
        self.commands.append(command)
        kind = command_kind(command)
        await asyncio.sleep(self.delay)

        if kind in self.fail_on:
            raise ExternalToolFailure(
                f"{kind} failed",
                command=command.argv,
                returncode=1,
                stderr=f"ERROR: simulated {kind} failure",
            )

        args = command.args
        if kind == "metadata":
            if self.metadata_output is not None:
                return self.metadata_output
            return json.dumps(self.info)

        if kind in ("video", "audio"):
            output = Path(args[args.index("-o") + 1])
            output.write_bytes(f"{kind}:{args[-1]}|".encode())
            self.written.append(output)
            return ""

        inputs = [Path(args[i + 1]) for i, arg in enumerate(args) if arg == "-i"]
        output = Path(args[-1])
        output.write_bytes(b"".join(path.read_bytes() for path in inputs))
        self.written.append(output)
        return ""


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def scratch_root(tmp_path: Path) -> Path:
    return tmp_path / "scratch"


@pytest.fixture()
def settings(scratch_root: Path) -> AppSettings:
    return AppSettings(
        database=DatabaseConfig(url="sqlite://"),
        tools=ToolsConfig(ytdlp_binary="yt-dlp", ffmpeg_binary="ffmpeg"),
        workspace=WorkspaceConfig(scratch_root=scratch_root),
    )


@pytest.fixture()
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture()
def store() -> Iterator[SqlCredentialStore]:
    credential_store = SqlCredentialStore("sqlite://")
    credential_store.open()
    yield credential_store
    credential_store.close()


@pytest.fixture()
def client(settings: AppSettings, fake_runner: FakeRunner) -> Iterator[TestClient]:
    app = create_app(
        settings,
        runner=fake_runner,
        store=SqlCredentialStore(settings.database.url),
    )
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def api_key(client: TestClient) -> str:
    response = client.post("/v1/keys")
    assert response.status_code == 201
    return response.json()["key"]


@pytest.fixture()
def auth_headers(api_key: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {api_key}"}
