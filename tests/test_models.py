"""Tests for domain models (core/models.py)."""

from __future__ import annotations

import dataclasses
from pathlib import Path

import pytest

from vidmerge.core.models import (
    NO_CODEC,
    AudioSettings,
    EncodingVariant,
    FormatOption,
    Job,
    JobStage,
)


def _option(height: int = 720) -> FormatOption:
    return FormatOption(
        format_id="22",
        resolution=f"{height}p",
        height=height,
        fps=30,
        filesize=1000,
        ext="mp4",
        vcodec="avc1",
        acodec="mp4a",
    )


class TestEncodingVariant:
    def test_frozen(self) -> None:
        variant = EncodingVariant(format_id="1", ext="mp4", vcodec="avc1", acodec=NO_CODEC)
        with pytest.raises(dataclasses.FrozenInstanceError):
            variant.height = 720  # type: ignore[misc]

    def test_adaptive_when_audio_missing(self) -> None:
        variant = EncodingVariant(format_id="1", ext="mp4", vcodec="avc1", acodec=NO_CODEC)
        assert variant.is_adaptive
        assert variant.has_video

    def test_progressive(self) -> None:
        variant = EncodingVariant(format_id="1", ext="mp4", vcodec="avc1", acodec="mp4a.40.2")
        assert not variant.is_adaptive

    def test_audio_only_has_no_video(self) -> None:
        variant = EncodingVariant(format_id="140", ext="m4a", vcodec=NO_CODEC, acodec="mp4a")
        assert not variant.has_video

    def test_unknown_codecs(self) -> None:
        variant = EncodingVariant(format_id="hls-720", ext="mp4", vcodec="", acodec="")
        assert variant.has_video
        assert not variant.is_adaptive


class TestFormatOption:
    def test_to_dict_keys(self) -> None:
        assert list(_option().to_dict()) == [
            "format_id", "resolution", "height", "fps",
            "filesize", "ext", "vcodec", "acodec",
        ]


class TestJob:
    def _job(self, root: Path) -> Job:
        return Job.create(root, "https://example.com/v", AudioSettings("libfdk_aac", "30k"))

    def test_starts_created(self, tmp_path: Path) -> None:
        job = self._job(tmp_path)
        assert job.stage is JobStage.CREATED
        assert job.history == [JobStage.CREATED]
        assert not job.is_released

    def test_workdir_is_named_after_id(self, tmp_path: Path) -> None:
        job = self._job(tmp_path)
        assert job.workdir == tmp_path / job.id
        assert job.scratch_file("video.mp4") == tmp_path / job.id / "video.mp4"
        assert job.scratch_file("sources", "a.m4a") == tmp_path / job.id / "sources" / "a.m4a"

    def test_ids_are_unique(self, tmp_path: Path) -> None:
        ids = {self._job(tmp_path).id for _ in range(50)}
        assert len(ids) == 50

    def test_advance_records_history(self, tmp_path: Path) -> None:
        job = self._job(tmp_path)
        job.advance(JobStage.DIR_ALLOCATED)
        job.advance(JobStage.CLEANED_UP)
        assert job.stage is JobStage.CLEANED_UP
        assert job.is_released
        assert job.history == [
            JobStage.CREATED, JobStage.DIR_ALLOCATED, JobStage.CLEANED_UP,
        ]
