"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters must satisfy.
Core code depends ONLY on these protocols — never on concrete
implementations — preserving the dependency inversion principle.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path
from typing import Protocol

from vidmerge.core.commands import Command
from vidmerge.core.models import CredentialRecord


class CommandRunner(Protocol):
    """Contract for executing external programs.

    Any object that implements :meth:`run` with the correct signature
    satisfies this protocol structurally (no explicit inheritance
    required).
    """

    async def run(self, command: Command) -> str:
        """Run *command* to completion and return its standard output.

        Raises
        ------
        ExternalToolFailure
            When the program cannot be launched, exits with a status not
            in ``command.success_codes``, or exceeds the runner's timeout.
            The captured standard error is attached to the exception.
        """
        ...  # pragma: no cover


class CredentialStore(Protocol):
    """Contract for the API-key store.

    Implementations must map all backend-specific exceptions to
    :class:`~vidmerge.exceptions.CredentialStoreError`.
    """

    def lookup(self, token: str) -> CredentialRecord | None:
        """Return the record whose key equals *token* exactly, if any."""
        ...  # pragma: no cover

    def insert(self) -> CredentialRecord:
        """Issue and persist a new key."""
        ...  # pragma: no cover

    def list_all(self) -> list[CredentialRecord]:
        """All records, newest first."""
        ...  # pragma: no cover


class ScratchArea(Protocol):
    """Contract for per-job scratch directories on local disk."""

    def allocate(self, workdir: Path) -> None:
        """Create *workdir* (and parents).

        Raises
        ------
        WorkspaceError
            When the directory cannot be created or already exists.
        """
        ...  # pragma: no cover

    def release(self, workdir: Path) -> None:
        """Recursively remove *workdir*.  Must never raise."""
        ...  # pragma: no cover

    def size_of(self, path: Path) -> int:
        """Byte length of *path*."""
        ...  # pragma: no cover

    def read_chunks(self, path: Path, chunk_size: int) -> AsyncIterator[bytes]:
        """Yield the contents of *path* in chunks of at most *chunk_size*."""
        ...  # pragma: no cover
