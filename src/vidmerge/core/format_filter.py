"""Pure format filtering, size estimation, sorting and deduplication.

Every function in this module is a **pure** transformation — no I/O,
no side effects, fully deterministic, and trivially unit-testable.

Pipeline order (enforced by :func:`build_format_options`):

1. **Filter** — keep variants renderable in the target container.
2. **Estimate** — predict the size of the merged output per variant.
3. **Sort** — ascending by height.
4. **Deduplicate** — first entry per distinct height wins.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from vidmerge.core.models import EncodingVariant, FormatOption, MediaDescriptor

DEFAULT_FPS: int = 30
"""Frame rate reported when the source does not give one."""

_H264_MARKERS: tuple[str, ...] = ("avc", "h264")


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties away from zero for positives."""
    return int(math.floor(value + 0.5))


def kbps_to_bytes(kbps: float, duration: float) -> int:
    """Bytes produced by *kbps* over *duration* seconds."""
    return round_half_up(kbps * 1000 / 8 * duration)


# ---------------------------------------------------------------------------
# 1. Filter
# ---------------------------------------------------------------------------

def is_container_compatible(variant: EncodingVariant, container: str) -> bool:
    """Already in *container*, or an H.264 stream that can be copied into it."""
    if variant.ext == container:
        return True
    vcodec = variant.vcodec.lower()
    return any(marker in vcodec for marker in _H264_MARKERS)


def filter_renderable(
    variants: Sequence[EncodingVariant],
    container: str,
) -> list[EncodingVariant]:
    """Return variants with video, a known height, and a compatible codec."""
    return [
        v
        for v in variants
        if v.has_video and v.height and is_container_compatible(v, container)
    ]


# ---------------------------------------------------------------------------
# 2. Estimate
# ---------------------------------------------------------------------------

def reference_audio_size(target_audio_kbps: float, duration: float | None) -> int:
    """Size of the audio track the merge step will add, ``0`` without duration."""
    if not duration:
        return 0
    return kbps_to_bytes(target_audio_kbps, duration)


def stream_size(variant: EncodingVariant, duration: float | None) -> int:
    """Byte size of the variant's own stream.

    Exact size first, then approximate size, then bitrate × duration.
    Adaptive variants use the video bitrate (total bitrate as fallback);
    progressive variants use the total bitrate.
    """
    size = variant.filesize or variant.filesize_approx or 0
    if size or not duration:
        return size

    if variant.is_adaptive:
        bitrate = variant.vbr or variant.tbr
    else:
        bitrate = variant.tbr
    if not bitrate:
        return 0
    return kbps_to_bytes(bitrate, duration)


def estimate_final_size(
    variant: EncodingVariant,
    duration: float | None,
    audio_bytes: int,
    correction_factor: float,
) -> int:
    """Predicted size of the merged file for *variant*.

    Adaptive variants get *audio_bytes* added because the pipeline muxes
    in a separately fetched audio track; the sum is then scaled by the
    calibrated *correction_factor*.
    """
    total = stream_size(variant, duration)
    if variant.is_adaptive:
        total += audio_bytes
    return round_half_up(total * correction_factor)


def to_format_option(variant: EncodingVariant, estimated_size: int) -> FormatOption:
    height = variant.height or 0
    return FormatOption(
        format_id=variant.format_id,
        resolution=f"{height}p",
        height=height,
        fps=variant.fps or DEFAULT_FPS,
        filesize=estimated_size,
        ext=variant.ext,
        vcodec=variant.vcodec,
        acodec=variant.acodec,
    )


# ---------------------------------------------------------------------------
# 3. Sort
# ---------------------------------------------------------------------------

def sort_by_height(options: Sequence[FormatOption]) -> list[FormatOption]:
    """Stable ascending sort on height."""
    return sorted(options, key=lambda opt: opt.height)


# ---------------------------------------------------------------------------
# 4. Deduplicate
# ---------------------------------------------------------------------------

def deduplicate_by_height(options: Sequence[FormatOption]) -> list[FormatOption]:
    """Keep the first option per distinct height.

    Callers should sort first to control which entry is retained.
    """
    seen: set[int] = set()
    result: list[FormatOption] = []
    for opt in options:
        if opt.height not in seen:
            seen.add(opt.height)
            result.append(opt)
    return result


# ---------------------------------------------------------------------------
# Composite pipeline
# ---------------------------------------------------------------------------

def build_format_options(
    descriptor: MediaDescriptor,
    *,
    container: str = "mp4",
    target_audio_kbps: float = 30,
    correction_factor: float = 0.60,
) -> list[FormatOption]:
    """Run the full filter → estimate → sort → deduplicate pipeline.

    Returns an empty list when no renderable variants remain.
    """
    audio_bytes = reference_audio_size(target_audio_kbps, descriptor.duration)
    options = [
        to_format_option(
            v,
            estimate_final_size(v, descriptor.duration, audio_bytes, correction_factor),
        )
        for v in filter_renderable(descriptor.variants, container)
    ]
    return deduplicate_by_height(sort_by_height(options))
