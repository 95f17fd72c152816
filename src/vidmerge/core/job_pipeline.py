"""Job pipeline — download, merge and stream one video per request.

This service drives a :class:`~vidmerge.core.models.Job` through its
stages using the collaborators injected at construction time:

* a :class:`~vidmerge.core.protocols.CommandRunner` for yt-dlp and ffmpeg,
* a :class:`~vidmerge.core.format_catalog.FormatCatalog` for metadata,
* a :class:`~vidmerge.core.protocols.ScratchArea` for the job directory.

Stages
------
``CREATED → DIR_ALLOCATED → METADATA_FETCHED → VIDEO_FETCHED →
AUDIO_FETCHED → MERGED → STREAMING → CLEANED_UP``

Any failure jumps straight to ``CLEANED_UP``.  The job directory is
released exactly once: by :meth:`JobPipeline.prepare` when a stage
fails, otherwise by :meth:`JobPipeline.stream` when streaming ends for
any reason.  :meth:`JobPipeline.release` is idempotent so response
teardown hooks may call it again safely.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable
from pathlib import Path

from vidmerge.config import AppSettings
from vidmerge.core.commands import (
    Command,
    audio_selector,
    fetch_stream_command,
    merge_command,
    video_selector,
)
from vidmerge.core.format_catalog import FormatCatalog, validate_source_url
from vidmerge.core.models import (
    AudioSettings,
    DownloadRequest,
    Job,
    JobStage,
    MergedDownload,
)
from vidmerge.core.protocols import CommandRunner, ScratchArea
from vidmerge.exceptions import (
    ExternalToolFailure,
    ExtractionFailure,
    MergeFailure,
)
from vidmerge.utils.filenames import sanitize_title

logger = logging.getLogger(__name__)

DEFAULT_TITLE: str = "video"
VIDEO_FILENAME: str = "video"
AUDIO_FILENAME: str = "audio"
SOURCES_DIRNAME: str = "sources"
"""Subdirectory for fetched streams, kept apart from the titled output."""


class JobPipeline:
    """Runs download-and-merge jobs, each in a private scratch directory.

    Parameters
    ----------
    runner:
        Executes the external tools.
    catalog:
        Fetches the source metadata (title).
    scratch:
        Allocates, reads and removes job directories.
    settings:
        Application configuration.
    """

    def __init__(
        self,
        runner: CommandRunner,
        catalog: FormatCatalog,
        scratch: ScratchArea,
        settings: AppSettings,
    ) -> None:
        self._runner: CommandRunner = runner
        self._catalog: FormatCatalog = catalog
        self._scratch: ScratchArea = scratch
        self._settings: AppSettings = settings

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def new_job(self, request: DownloadRequest) -> Job:
        """Create a :class:`Job` for *request*, filling in audio defaults.

        Raises
        ------
        ValidationError
            If the request URL is missing or malformed.
        """
        media = self._settings.media
        return Job.create(
            self._settings.workspace.scratch_root,
            validate_source_url(request.url),
            AudioSettings(
                codec=request.audio_codec or media.default_audio_codec,
                bitrate=request.audio_bitrate or media.default_audio_bitrate,
            ),
            format_id=request.format_id or None,
        )

    async def prepare(self, request: DownloadRequest) -> MergedDownload:
        """Run every stage up to ``MERGED`` and describe the result.

        On any failure (including cancellation) the job directory is
        released before the exception propagates.

        Raises
        ------
        ValidationError
            If the request URL is missing or malformed.
        WorkspaceError
            If the job directory cannot be created.
        MetadataUnavailable
            If the source metadata cannot be fetched or parsed.
        ExtractionFailure
            If the video or audio stream fetch fails.
        MergeFailure
            If ffmpeg fails to mux the streams.
        """
        job = self.new_job(request)
        log = {"job_id": job.id}
        succeeded = False

        try:
            self._scratch.allocate(job.workdir)
            job.advance(JobStage.DIR_ALLOCATED)
            self._scratch.allocate(job.scratch_file(SOURCES_DIRNAME))
            logger.info("Starting download", extra={**log, "url": job.url})

            descriptor = await self._catalog.fetch_descriptor(job.url)
            job.advance(JobStage.METADATA_FETCHED)
            title = self._safe_title(descriptor.title)

            video_path, audio_path = await self._fetch_streams(job)

            media = self._settings.media
            filename = f"{title}.{media.container}"
            output_path = job.scratch_file(filename)
            await self._merge(job, video_path, audio_path, output_path)
            job.advance(JobStage.MERGED)

            download = MergedDownload(
                job=job,
                path=output_path,
                filename=filename,
                size=self._scratch.size_of(output_path),
                media_type=media.media_type,
            )
            succeeded = True
            return download
        finally:
            if not succeeded:
                logger.warning(
                    "Job failed before streaming",
                    extra={**log, "stage": job.stage.value},
                )
                self.release(job)

    async def stream(self, download: MergedDownload) -> AsyncIterator[bytes]:
        """Yield the merged file in chunks, then release the job.

        Errors while reading are logged and re-raised: once headers are
        out, the only remaining signal is an aborted connection.
        """
        job = download.job
        log = {"job_id": job.id}
        job.advance(JobStage.STREAMING)
        logger.info(
            "Sending file to client",
            extra={**log, "filename": download.filename, "size": download.size},
        )

        try:
            async for chunk in self._scratch.read_chunks(
                download.path, self._settings.workspace.stream_chunk_size,
            ):
                yield chunk
            logger.info("File sent successfully", extra=log)
        except Exception:
            logger.exception("Error streaming file", extra=log)
            raise
        finally:
            self.release(job)

    def release(self, job: Job) -> None:
        """Remove the job directory once; later calls are no-ops."""
        if job.is_released:
            return
        allocated = JobStage.DIR_ALLOCATED in job.history
        job.advance(JobStage.CLEANED_UP)
        if allocated:
            self._scratch.release(job.workdir)
            logger.info("Cleaned up temporary files", extra={"job_id": job.id})

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def _safe_title(self, title: str) -> str:
        workspace = self._settings.workspace
        return sanitize_title(
            title or DEFAULT_TITLE,
            max_length=workspace.title_max_length,
            max_bytes=workspace.title_max_bytes,
        ) or DEFAULT_TITLE

    async def _fetch_streams(self, job: Job) -> tuple[Path, Path]:
        """Fetch the video-only and audio-only streams into the job dir."""
        media = self._settings.media
        ytdlp = self._settings.tools.ytdlp_binary
        video_path = job.scratch_file(
            SOURCES_DIRNAME, f"{VIDEO_FILENAME}.{media.container}",
        )
        audio_path = job.scratch_file(
            SOURCES_DIRNAME, f"{AUDIO_FILENAME}.{media.audio_container}",
        )

        video_command = fetch_stream_command(
            ytdlp, video_selector(job.format_id, media.container), video_path, job.url,
        )
        audio_command = fetch_stream_command(
            ytdlp, audio_selector(media.audio_container), audio_path, job.url,
        )

        # Audio is always "best available", independent of the video choice.
        if self._settings.pipeline.concurrent_extraction:
            await _gather_or_cancel(
                self._extract(job, video_command, JobStage.VIDEO_FETCHED),
                self._extract(job, audio_command, JobStage.AUDIO_FETCHED),
            )
        else:
            await self._extract(job, video_command, JobStage.VIDEO_FETCHED)
            await self._extract(job, audio_command, JobStage.AUDIO_FETCHED)
        return video_path, audio_path

    async def _extract(self, job: Job, command: Command, stage: JobStage) -> None:
        logger.info(
            "Fetching stream",
            extra={"job_id": job.id, "stage": stage.value, "command": command.describe()},
        )
        try:
            await self._runner.run(command)
        except ExternalToolFailure as exc:
            raise ExtractionFailure(f"Stream fetch for {stage.value} failed: {exc}") from exc
        job.advance(stage)

    async def _merge(
        self,
        job: Job,
        video_path: Path,
        audio_path: Path,
        output_path: Path,
    ) -> None:
        media = self._settings.media
        logger.info(
            "Merging files with FFmpeg",
            extra={"job_id": job.id, "audio_codec": job.audio.codec},
        )
        command = merge_command(
            self._settings.tools.ffmpeg_binary,
            video_path,
            audio_path,
            output_path,
            job.audio,
            profile=media.audio_profile,
            vbr_quality=media.audio_vbr_quality,
            language=media.audio_language,
        )
        try:
            await self._runner.run(command)
        except ExternalToolFailure as exc:
            raise MergeFailure(f"ffmpeg merge failed: {exc}") from exc


async def _gather_or_cancel(*aws: Awaitable[None]) -> None:
    """Await all of *aws*; on the first failure cancel the rest and re-raise."""
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
