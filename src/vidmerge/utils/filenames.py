"""Download filename helpers.

Pure string functions: turning arbitrary source titles into names that
are safe on disk, and into a ``Content-Disposition`` header value that
survives HTTP transport with non-ASCII titles intact.
"""

from __future__ import annotations

import re
from urllib.parse import quote

PLACEHOLDER: str = "_"

_ILLEGAL_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
_NON_PRINTABLE_ASCII = re.compile(r"[^\x20-\x7e]")

# encodeURIComponent-compatible output minus ' ( ) *, which some clients
# mishandle inside ext-value.
_RFC5987_SAFE: str = "!~"


def sanitize_title(
    title: str,
    *,
    max_length: int = 200,
    max_bytes: int | None = None,
) -> str:
    """Replace characters illegal in filenames and bound the length.

    Truncates to *max_length* characters and, when *max_bytes* is given,
    further until the UTF-8 encoding fits in *max_bytes*.
    """
    cleaned = _ILLEGAL_FILENAME_CHARS.sub(PLACEHOLDER, title)[:max_length]
    if max_bytes is not None:
        while len(cleaned.encode("utf-8")) > max_bytes:
            cleaned = cleaned[:-1]
    return cleaned


def ascii_fallback(filename: str) -> str:
    """Replace anything outside printable ASCII with the placeholder."""
    return _NON_PRINTABLE_ASCII.sub(PLACEHOLDER, filename)


def content_disposition(filename: str) -> str:
    """Build an ``attachment`` disposition with both filename forms.

    ``filename`` carries the ASCII-only fallback for old clients;
    ``filename*`` carries the percent-encoded UTF-8 original (RFC 5987).
    """
    fallback = ascii_fallback(filename).replace("\\", PLACEHOLDER).replace('"', PLACEHOLDER)
    encoded = quote(filename, safe=_RFC5987_SAFE, encoding="utf-8")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{encoded}"
