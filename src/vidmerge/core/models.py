"""Domain models for vidmerge.

Metadata models are **frozen** dataclasses — immutable value objects
with no behaviour beyond data access and a few derived properties.
:class:`Job` is the one mutable model: it records the pipeline stages a
single request has passed through.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, unique
from pathlib import Path
from typing import Any

NO_CODEC: str = "none"
"""Codec sentinel reported by yt-dlp for a missing video or audio track."""


# ---------------------------------------------------------------------------
# Source metadata
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class EncodingVariant:
    """One selectable encoding offered by the source.

    Adaptive variants carry video only and need a separately fetched
    audio stream; progressive variants already contain audio.
    """

    format_id: str
    """Backend-specific identifier for this format."""

    ext: str
    """Container extension (e.g. ``mp4``, ``webm``)."""

    vcodec: str
    """Video codec name.  ``"none"`` when the stream has no video, ``""``
    when the source does not say."""

    acodec: str
    """Audio codec name.  ``"none"`` when the stream has no audio, ``""``
    when the source does not say."""

    height: int | None = None
    """Vertical resolution in pixels, or ``None`` if unknown."""

    fps: float | None = None
    """Frames per second, or ``None`` if unknown."""

    filesize: int | None = None
    """Exact size in bytes, when the source reports it."""

    filesize_approx: int | None = None
    """Approximate size in bytes, when the source reports it."""

    tbr: float | None = None
    """Total bitrate in kbps."""

    vbr: float | None = None
    """Video-only bitrate in kbps."""

    @property
    def has_video(self) -> bool:
        return self.vcodec != NO_CODEC

    @property
    def is_adaptive(self) -> bool:
        """``True`` for video-only streams that need audio muxed in."""
        return self.acodec == NO_CODEC


@dataclass(frozen=True, slots=True)
class MediaDescriptor:
    """Parsed metadata for one source URL."""

    title: str
    duration: float | None
    """Duration in seconds, or ``None`` if unavailable."""

    thumbnail: str | None
    variants: tuple[EncodingVariant, ...] = ()


# ---------------------------------------------------------------------------
# Format listing (estimate-annotated variants)
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class FormatOption:
    """A renderable variant annotated with its estimated merged size."""

    format_id: str
    resolution: str
    height: int
    fps: float
    filesize: int
    """Estimated size of the *merged* output file, in bytes."""

    ext: str
    vcodec: str
    acodec: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "format_id": self.format_id,
            "resolution": self.resolution,
            "height": self.height,
            "fps": self.fps,
            "filesize": self.filesize,
            "ext": self.ext,
            "vcodec": self.vcodec,
            "acodec": self.acodec,
        }


@dataclass(frozen=True, slots=True)
class FormatListing:
    """Result of a format listing: source details plus ordered options."""

    title: str
    duration: float | None
    thumbnail: str | None
    formats: tuple[FormatOption, ...]


# ---------------------------------------------------------------------------
# Jobs
# ---------------------------------------------------------------------------

@unique
class JobStage(str, Enum):
    CREATED = "created"
    DIR_ALLOCATED = "dir_allocated"
    METADATA_FETCHED = "metadata_fetched"
    VIDEO_FETCHED = "video_fetched"
    AUDIO_FETCHED = "audio_fetched"
    MERGED = "merged"
    STREAMING = "streaming"
    CLEANED_UP = "cleaned_up"


@dataclass(frozen=True, slots=True)
class AudioSettings:
    """Audio encoding requested for the merged output."""

    codec: str
    bitrate: str


@dataclass(frozen=True, slots=True)
class DownloadRequest:
    """Caller input for one download-and-merge job."""

    url: str
    format_id: str | None = None
    audio_codec: str | None = None
    audio_bitrate: str | None = None


@dataclass
class Job:
    """One in-flight download-and-merge request and its scratch state."""

    id: str
    workdir: Path
    url: str
    audio: AudioSettings
    format_id: str | None = None
    history: list[JobStage] = field(default_factory=lambda: [JobStage.CREATED])

    @classmethod
    def create(
        cls,
        scratch_root: Path,
        url: str,
        audio: AudioSettings,
        format_id: str | None = None,
    ) -> Job:
        job_id = uuid.uuid4().hex
        return cls(
            id=job_id,
            workdir=scratch_root / job_id,
            url=url,
            audio=audio,
            format_id=format_id,
        )

    @property
    def stage(self) -> JobStage:
        return self.history[-1]

    @property
    def is_released(self) -> bool:
        return self.stage is JobStage.CLEANED_UP

    def advance(self, stage: JobStage) -> None:
        self.history.append(stage)

    def scratch_file(self, *parts: str) -> Path:
        return self.workdir.joinpath(*parts)


@dataclass(frozen=True, slots=True)
class MergedDownload:
    """A merged file ready to be streamed to the caller."""

    job: Job
    path: Path
    filename: str
    size: int
    media_type: str


# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class CredentialRecord:
    """An issued API key."""

    id: int
    key: str
    created_at: datetime
