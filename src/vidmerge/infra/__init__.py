"""Infrastructure layer — adapters for processes, disk and the database.

Rules
-----
* May import from ``core`` (protocols, models) and ``exceptions``.
* Must not import from ``api`` or ``cli``.
* Third-party and OS errors are mapped to :mod:`vidmerge.exceptions`
  types before they leave this package.
"""

from vidmerge.infra.command_runner import AsyncCommandRunner
from vidmerge.infra.credential_store import SqlCredentialStore, generate_api_key
from vidmerge.infra.scratch import LocalScratchArea
from vidmerge.infra.tool_detector import ToolStatus, detect_tool

__all__: list[str] = [
    "AsyncCommandRunner",
    "LocalScratchArea",
    "SqlCredentialStore",
    "ToolStatus",
    "detect_tool",
    "generate_api_key",
]
