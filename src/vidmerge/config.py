"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
import shutil
from pathlib import Path

from pydantic import BaseModel, Field, computed_field


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_float(name: str) -> float | None:
    raw = os.getenv(name, "").strip()
    return float(raw) if raw else None


class ServerConfig(BaseModel, frozen=True):
    """HTTP listener and process-level options."""

    host: str = "0.0.0.0"
    port: int = 4000
    cors_origins: tuple[str, ...] = ("*",)
    log_level: str = "INFO"


class DatabaseConfig(BaseModel, frozen=True):
    """Credential store connection configuration."""

    url: str = "sqlite:///./vidmerge.db"


class ToolsConfig(BaseModel, frozen=True):
    """Locations of the external binaries and how long they may run."""

    ytdlp_binary: str = "yt-dlp"
    ffmpeg_binary: str = "ffmpeg"
    command_timeout: float | None = None


class WorkspaceConfig(BaseModel, frozen=True):
    """Per-job scratch space settings."""

    scratch_root: Path = Path("temp")
    title_max_length: int = 200
    title_max_bytes: int = 240
    stream_chunk_size: int = 64 * 1024


class MediaConfig(BaseModel, frozen=True):
    """Target container and the audio encoding applied at merge time."""

    container: str = "mp4"
    audio_container: str = "m4a"
    default_audio_codec: str = "libfdk_aac"
    default_audio_bitrate: str = "30k"
    audio_profile: str = "aac_he"
    audio_vbr_quality: str = "2"
    audio_language: str = "eng"

    @computed_field
    @property
    def media_type(self) -> str:
        return f"video/{self.container}"


class EstimationConfig(BaseModel, frozen=True):
    """Empirical constants of the merged-size estimate.

    Both values were calibrated against HE-AAC at 30 kbps with the video
    stream copied; they are not derived per request.
    """

    target_audio_kbps: float = 30
    correction_factor: float = Field(default=0.60, gt=0)


class PipelineConfig(BaseModel, frozen=True):
    """Job pipeline scheduling options."""

    concurrent_extraction: bool = True


class AppSettings(BaseModel, frozen=True):
    """Root application configuration."""

    server: ServerConfig = ServerConfig()
    database: DatabaseConfig = DatabaseConfig()
    tools: ToolsConfig = ToolsConfig()
    workspace: WorkspaceConfig = WorkspaceConfig()
    media: MediaConfig = MediaConfig()
    estimation: EstimationConfig = EstimationConfig()
    pipeline: PipelineConfig = PipelineConfig()


def load_settings() -> AppSettings:
    """Loads configuration from environment variables."""
    origins = os.getenv("CORS_ORIGINS", "*")
    return AppSettings(
        server=ServerConfig(
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "4000")),
            cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        ),
        database=DatabaseConfig(
            url=os.getenv("DATABASE_URL", "sqlite:///./vidmerge.db"),
        ),
        tools=ToolsConfig(
            ytdlp_binary=os.getenv(
                "YTDLP_BINARY_PATH", shutil.which("yt-dlp") or "yt-dlp"
            ),
            ffmpeg_binary=os.getenv(
                "FFMPEG_BINARY_PATH", shutil.which("ffmpeg") or "ffmpeg"
            ),
            command_timeout=_env_float("COMMAND_TIMEOUT_SECONDS"),
        ),
        workspace=WorkspaceConfig(
            scratch_root=Path(os.getenv("SCRATCH_DIR", "temp")).resolve(),
        ),
        media=MediaConfig(
            default_audio_codec=os.getenv("DEFAULT_AUDIO_CODEC", "libfdk_aac"),
            default_audio_bitrate=os.getenv("DEFAULT_AUDIO_BITRATE", "30k"),
        ),
        estimation=EstimationConfig(
            target_audio_kbps=float(os.getenv("TARGET_AUDIO_KBPS", "30")),
            correction_factor=float(os.getenv("SIZE_CORRECTION_FACTOR", "0.60")),
        ),
        pipeline=PipelineConfig(
            concurrent_extraction=_env_bool("CONCURRENT_EXTRACTION", True),
        ),
    )
