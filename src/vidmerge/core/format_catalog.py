"""Format catalog — fetches source metadata and lists renderable formats.

The catalog depends on a :class:`~vidmerge.core.protocols.CommandRunner`
injected at construction time (dependency inversion); it never spawns
processes itself.

Guarantees
----------
* Only :class:`~vidmerge.exceptions.VidmergeError` subclasses escape.
* Listing is a pure function of the fetched descriptor and the
  configured constants — the same metadata always yields the same
  options and estimates.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from vidmerge.config import EstimationConfig, MediaConfig
from vidmerge.core.commands import metadata_command
from vidmerge.core.format_filter import build_format_options
from vidmerge.core.models import (
    EncodingVariant,
    FormatListing,
    MediaDescriptor,
)
from vidmerge.core.protocols import CommandRunner
from vidmerge.exceptions import (
    ExternalToolFailure,
    MetadataUnavailable,
    ValidationError,
)

logger = logging.getLogger(__name__)


def validate_source_url(url: str | None) -> str:
    """Return the stripped URL or raise :class:`ValidationError`."""
    stripped = (url or "").strip()
    if not stripped:
        raise ValidationError('Missing "url" in request body')
    if not stripped.startswith(("http://", "https://")):
        raise ValidationError(
            f"Invalid URL: {stripped}",
            hint="URL must start with http:// or https://",
        )
    return stripped


class FormatCatalog:
    """Stateless service that fetches metadata and lists formats.

    Parameters
    ----------
    runner:
        Any object satisfying the :class:`CommandRunner` protocol.
    ytdlp_binary:
        Executable used for metadata extraction.
    media:
        Target container settings.
    estimation:
        Constants of the merged-size estimate.
    """

    def __init__(
        self,
        runner: CommandRunner,
        *,
        ytdlp_binary: str = "yt-dlp",
        media: MediaConfig | None = None,
        estimation: EstimationConfig | None = None,
    ) -> None:
        self._runner: CommandRunner = runner
        self._ytdlp: str = ytdlp_binary
        self._media: MediaConfig = media or MediaConfig()
        self._estimation: EstimationConfig = estimation or EstimationConfig()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def fetch_descriptor(self, url: str) -> MediaDescriptor:
        """Fetch and parse the metadata document for *url*.

        Raises
        ------
        ValidationError
            If *url* is empty or not an HTTP(S) URL.
        MetadataUnavailable
            If the tool fails or its output cannot be parsed.
        """
        url = validate_source_url(url)
        command = metadata_command(self._ytdlp, url)

        try:
            output = await self._runner.run(command)
        except ExternalToolFailure as exc:
            raise MetadataUnavailable(
                f"Metadata extraction failed for {url}: {exc}",
            ) from exc

        try:
            info: Any = json.loads(output)
        except json.JSONDecodeError as exc:
            raise MetadataUnavailable(
                f"Metadata for {url} is not valid JSON: {exc}",
            ) from exc

        if not isinstance(info, dict):
            raise MetadataUnavailable(
                "yt-dlp returned an unexpected data structure.",
            )

        return self.parse_descriptor(info)

    async def list_formats(self, url: str) -> FormatListing:
        """List renderable formats of *url* with merged-size estimates.

        Returns an empty ``formats`` tuple (not an error) when nothing
        survives filtering.
        """
        logger.info("Fetching formats", extra={"url": url})
        descriptor = await self.fetch_descriptor(url)
        options = build_format_options(
            descriptor,
            container=self._media.container,
            target_audio_kbps=self._estimation.target_audio_kbps,
            correction_factor=self._estimation.correction_factor,
        )
        return FormatListing(
            title=descriptor.title,
            duration=descriptor.duration,
            thumbnail=descriptor.thumbnail,
            formats=tuple(options),
        )

    # ------------------------------------------------------------------
    # Raw-dict → domain-model parsers (pure)
    # ------------------------------------------------------------------

    @classmethod
    def parse_descriptor(cls, info: dict[str, Any]) -> MediaDescriptor:
        """Convert a raw info dict into a :class:`MediaDescriptor`."""
        raw_thumbnail = info.get("thumbnail")
        return MediaDescriptor(
            title=str(info.get("title") or ""),
            duration=_optional_number(info.get("duration")),
            thumbnail=str(raw_thumbnail) if raw_thumbnail else None,
            variants=tuple(
                cls._parse_variant(entry)
                for entry in cls._extract_raw_formats(info)
            ),
        )

    @staticmethod
    def _extract_raw_formats(info: dict[str, Any]) -> list[dict[str, Any]]:
        """Safely pull the ``formats`` list from a raw info dict."""
        raw: object = info.get("formats")
        if not isinstance(raw, list):
            return []
        # Each element is expected to be a dict; skip malformed entries.
        return [entry for entry in raw if isinstance(entry, dict)]

    @staticmethod
    def _parse_variant(raw: dict[str, Any]) -> EncodingVariant:
        """Convert one raw format dict to an :class:`EncodingVariant`."""
        raw_height = raw.get("height")
        return EncodingVariant(
            format_id=str(raw.get("format_id", "")),
            ext=str(raw.get("ext", "")),
            vcodec=_codec(raw.get("vcodec")),
            acodec=_codec(raw.get("acodec")),
            height=raw_height if isinstance(raw_height, int) else None,
            fps=_optional_number(raw.get("fps")),
            filesize=_optional_int(raw.get("filesize")),
            filesize_approx=_optional_int(raw.get("filesize_approx")),
            tbr=_optional_number(raw.get("tbr")),
            vbr=_optional_number(raw.get("vbr")),
        )


def _optional_number(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def _optional_int(value: object) -> int | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return int(value)


def _codec(value: object) -> str:
    # An absent codec is unknown, not the explicit "none" of a missing track.
    return str(value) if value else ""
