"""vidmerge — video download & merge API server.

Discovers the encodings a remote video offers, estimates merged file
sizes, and streams a single video+audio file produced by yt-dlp and
ffmpeg.
"""

from vidmerge.version import __version__

__all__: list[str] = ["__version__"]
