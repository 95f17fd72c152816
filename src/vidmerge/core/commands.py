"""Typed command descriptors for the external tools.

Every external invocation is described by a :class:`Command` — program
name plus an ordered argument tuple — and executed without a shell.
The builder functions here are **pure**: they only assemble argument
lists, so argument order and flag spelling are unit-testable without
spawning anything.

User-supplied values (URLs, format selectors) are always placed as
separate arguments; URLs go after ``--`` so a value starting with a dash
can never be parsed as an option.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass
from pathlib import Path

from vidmerge.core.models import AudioSettings

FDK_AAC: str = "libfdk_aac"


@dataclass(frozen=True, slots=True)
class Command:
    """An external program invocation."""

    program: str
    args: tuple[str, ...]
    success_codes: frozenset[int] = frozenset({0})

    @property
    def argv(self) -> list[str]:
        return [self.program, *self.args]

    def is_success(self, returncode: int | None) -> bool:
        return returncode in self.success_codes

    def describe(self) -> str:
        """Shell-quoted rendering, for logs only."""
        return shlex.join(self.argv)


# ---------------------------------------------------------------------------
# yt-dlp
# ---------------------------------------------------------------------------

def metadata_command(ytdlp: str, url: str) -> Command:
    """Dump the single-document JSON metadata for *url*."""
    return Command(ytdlp, ("-J", "--no-playlist", "--", url))


def video_selector(format_id: str | None, container: str) -> str:
    """Explicit format id when given, else the best video in *container*."""
    if format_id:
        return format_id
    return f"bestvideo[ext={container}]/bestvideo"


def audio_selector(audio_container: str) -> str:
    return f"bestaudio[ext={audio_container}]/bestaudio"


def fetch_stream_command(ytdlp: str, selector: str, output: Path, url: str) -> Command:
    """Fetch the stream matching *selector* to exactly *output*."""
    return Command(
        ytdlp,
        (
            "-f", selector,
            "--no-playlist",
            "--no-part",
            "-o", str(output),
            "--", url,
        ),
    )


# ---------------------------------------------------------------------------
# ffmpeg
# ---------------------------------------------------------------------------

def audio_quality_args(
    audio: AudioSettings,
    *,
    profile: str,
    vbr_quality: str,
) -> tuple[str, ...]:
    """Quality flags for the audio re-encode.

    ``libfdk_aac`` gets the HE-AAC profile with VBR mode *vbr_quality*,
    which lands near the bitrate used for size estimation.  Encoders
    without ``-vbr`` support get the requested constant bitrate instead.
    """
    if audio.codec == FDK_AAC:
        return ("-profile:a", profile, "-vbr", vbr_quality)
    return ("-b:a", audio.bitrate)


def merge_command(
    ffmpeg: str,
    video: Path,
    audio_input: Path,
    output: Path,
    audio: AudioSettings,
    *,
    profile: str = "aac_he",
    vbr_quality: str = "2",
    language: str = "eng",
) -> Command:
    """Mux *video* and *audio_input*: copy video, re-encode and tag audio."""
    return Command(
        ffmpeg,
        (
            "-hide_banner",
            "-nostdin",
            "-y",
            "-i", str(video),
            "-i", str(audio_input),
            "-map", "0:v:0",
            "-map", "1:a:0",
            "-c:v", "copy",
            "-c:a", audio.codec,
            *audio_quality_args(audio, profile=profile, vbr_quality=vbr_quality),
            "-metadata:s:a:0", f"language={language}",
            str(output),
        ),
    )
