"""Local-disk implementation of :class:`~vidmerge.core.protocols.ScratchArea`."""

from __future__ import annotations

import logging
import shutil
from collections.abc import AsyncIterator
from pathlib import Path

import anyio

from vidmerge.exceptions import WorkspaceError

logger = logging.getLogger(__name__)


class LocalScratchArea:
    """Job directories on the local filesystem.

    Each job gets its own directory named after its unique id, so jobs
    never need to coordinate with each other.
    """

    def allocate(self, workdir: Path) -> None:
        try:
            workdir.mkdir(parents=True, exist_ok=False)
        except OSError as exc:
            raise WorkspaceError(
                f"Could not create scratch directory {workdir}: {exc}",
            ) from exc

    def release(self, workdir: Path) -> None:
        """Remove *workdir* recursively, logging instead of raising."""
        try:
            shutil.rmtree(workdir)
        except FileNotFoundError:
            return
        except OSError:
            logger.exception(
                "Error during cleanup", extra={"workdir": str(workdir)},
            )

    def size_of(self, path: Path) -> int:
        return path.stat().st_size

    async def read_chunks(self, path: Path, chunk_size: int) -> AsyncIterator[bytes]:
        async with await anyio.open_file(path, "rb") as handle:
            while True:
                chunk = await handle.read(chunk_size)
                if not chunk:
                    break
                yield chunk
