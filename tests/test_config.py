"""Tests for environment-driven configuration (config.py)."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError as PydanticValidationError

from vidmerge.config import AppSettings, EstimationConfig, load_settings


class TestDefaults:
    def test_defaults(self) -> None:
        settings = AppSettings()
        assert settings.server.port == 4000
        assert settings.server.cors_origins == ("*",)
        assert settings.media.default_audio_codec == "libfdk_aac"
        assert settings.media.default_audio_bitrate == "30k"
        assert settings.media.media_type == "video/mp4"
        assert settings.estimation.target_audio_kbps == 30
        assert settings.estimation.correction_factor == 0.60
        assert settings.pipeline.concurrent_extraction is True
        assert settings.workspace.title_max_length == 200

    def test_frozen(self) -> None:
        settings = AppSettings()
        with pytest.raises(PydanticValidationError):
            settings.server.port = 1  # type: ignore[misc]

    def test_correction_factor_must_be_positive(self) -> None:
        with pytest.raises(PydanticValidationError):
            EstimationConfig(correction_factor=0)


class TestLoadSettings:
    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("DATABASE_URL", "sqlite:///keys.db")
        monkeypatch.setenv("FFMPEG_BINARY_PATH", "/opt/ffmpeg/bin/ffmpeg")
        monkeypatch.setenv("COMMAND_TIMEOUT_SECONDS", "120")
        monkeypatch.setenv("SCRATCH_DIR", str(tmp_path / "scratch"))
        monkeypatch.setenv("DEFAULT_AUDIO_CODEC", "aac")
        monkeypatch.setenv("SIZE_CORRECTION_FACTOR", "0.75")
        monkeypatch.setenv("CONCURRENT_EXTRACTION", "false")

        settings = load_settings()

        assert settings.server.port == 8080
        assert settings.server.cors_origins == ("https://a.example", "https://b.example")
        assert settings.server.log_level == "DEBUG"
        assert settings.database.url == "sqlite:///keys.db"
        assert settings.tools.ffmpeg_binary == "/opt/ffmpeg/bin/ffmpeg"
        assert settings.tools.command_timeout == 120
        assert settings.workspace.scratch_root == (tmp_path / "scratch").resolve()
        assert settings.media.default_audio_codec == "aac"
        assert settings.estimation.correction_factor == 0.75
        assert settings.pipeline.concurrent_extraction is False

    def test_no_timeout_by_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("COMMAND_TIMEOUT_SECONDS", raising=False)
        assert load_settings().tools.command_timeout is None
