"""Core / service layer — business logic and data transformations.

Rules
-----
* No imports from ``api``, ``cli`` or ``infra``.
* External programs, the credential store and scratch directories are
  reached only through the protocols in :mod:`vidmerge.core.protocols`.
* Parsing, filtering and size estimation stay pure and deterministic.
"""

from vidmerge.core.credential_gate import CredentialGate, extract_bearer_token
from vidmerge.core.format_catalog import FormatCatalog, validate_source_url
from vidmerge.core.job_pipeline import JobPipeline
from vidmerge.core.models import (
    AudioSettings,
    CredentialRecord,
    DownloadRequest,
    EncodingVariant,
    FormatListing,
    FormatOption,
    Job,
    JobStage,
    MediaDescriptor,
    MergedDownload,
)
from vidmerge.core.protocols import CommandRunner, CredentialStore, ScratchArea

__all__: list[str] = [
    "AudioSettings",
    "CommandRunner",
    "CredentialGate",
    "CredentialRecord",
    "CredentialStore",
    "DownloadRequest",
    "EncodingVariant",
    "FormatCatalog",
    "FormatListing",
    "FormatOption",
    "Job",
    "JobPipeline",
    "JobStage",
    "MediaDescriptor",
    "MergedDownload",
    "ScratchArea",
    "extract_bearer_token",
    "validate_source_url",
]
