"""Custom exception hierarchy for vidmerge.

All exceptions that cross layer boundaries must inherit from
:class:`VidmergeError`.  Raw third-party exceptions (subprocess, SQL,
filesystem) must NEVER propagate beyond the infrastructure layer — they
are caught there and re-raised as a typed subclass defined here.

Hierarchy
---------
VidmergeError
├── ValidationError
├── Unauthenticated
├── Unauthorized
├── InternalError
├── CredentialStoreError
├── ExternalToolFailure
└── PipelineError
    ├── WorkspaceError
    ├── MetadataUnavailable
    ├── ExtractionFailure
    └── MergeFailure
"""

from __future__ import annotations

from collections.abc import Sequence


class VidmergeError(Exception):
    """Base exception for all vidmerge errors.

    The message is meant for operators (logs, CLI).  HTTP handlers never
    echo it to API callers; they map the exception type to a generic
    client-facing message instead.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Request validation / authentication -----------------------------------

class ValidationError(VidmergeError):
    """Raised when a request field is missing or malformed."""


class Unauthenticated(VidmergeError):
    """Raised when no credential was supplied."""


class Unauthorized(VidmergeError):
    """Raised when the supplied credential is not recognised."""


class InternalError(VidmergeError):
    """Raised for unexpected failures, e.g. credential-store I/O."""


class CredentialStoreError(VidmergeError):
    """Raised when the credential store cannot be read or written."""


# --- External tools --------------------------------------------------------

class ExternalToolFailure(VidmergeError):
    """Raised when an external program cannot be launched or exits non-zero.

    Carries the captured standard error so callers can log it; the text
    is never mixed into the returned standard output.
    """

    def __init__(
        self,
        message: str,
        *,
        command: Sequence[str] = (),
        returncode: int | None = None,
        stderr: str = "",
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.command: tuple[str, ...] = tuple(command)
        self.returncode: int | None = returncode
        self.stderr: str = stderr


# --- Job pipeline stages ---------------------------------------------------

class PipelineError(VidmergeError):
    """Base class for failures of a single job pipeline stage."""


class WorkspaceError(PipelineError):
    """Raised when a job's scratch directory cannot be created."""


class MetadataUnavailable(PipelineError):
    """Raised when source metadata cannot be fetched or parsed."""


class ExtractionFailure(PipelineError):
    """Raised when the video or audio stream fetch fails."""


class MergeFailure(PipelineError):
    """Raised when the mux/encode step fails."""
