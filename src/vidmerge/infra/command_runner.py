"""asyncio implementation of :class:`~vidmerge.core.protocols.CommandRunner`.

This module is the **only** place in the codebase that spawns child
processes.  Launch errors, non-zero exits and timeouts all surface as
:class:`~vidmerge.exceptions.ExternalToolFailure` — nothing raw escapes
the infrastructure boundary.
"""

from __future__ import annotations

import asyncio
import logging

from vidmerge.core.commands import Command
from vidmerge.exceptions import ExternalToolFailure

logger = logging.getLogger(__name__)


class AsyncCommandRunner:
    """Runs a :class:`Command` as a child process without a shell.

    Standard output and standard error are captured to completion.  The
    awaiting task is suspended for the whole run, so many jobs can wait
    on their tools concurrently.

    Parameters
    ----------
    timeout:
        Optional limit in seconds per invocation.  ``None`` lets the tool
        run to completion or failure.
    """

    def __init__(self, timeout: float | None = None) -> None:
        self._timeout: float | None = timeout

    async def run(self, command: Command) -> str:
        """Run *command* and return its decoded standard output.

        Raises
        ------
        ExternalToolFailure
            When the program cannot be started, exits with a status not in
            ``command.success_codes``, or exceeds the timeout.
        """
        try:
            process = await asyncio.create_subprocess_exec(
                *command.argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise ExternalToolFailure(
                f"Could not launch {command.program}: {exc}",
                command=command.argv,
                hint="Run `vidmerge doctor` to check the installed tools.",
            ) from exc

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self._timeout,
            )
        except asyncio.TimeoutError as exc:
            await _terminate(process)
            raise ExternalToolFailure(
                f"{command.program} timed out after {self._timeout}s",
                command=command.argv,
            ) from exc
        except asyncio.CancelledError:
            await _terminate(process)
            raise

        stderr_text = stderr.decode("utf-8", errors="replace")
        if not command.is_success(process.returncode):
            logger.error(
                "Command failed",
                extra={
                    "command": command.describe(),
                    "returncode": process.returncode,
                    "stderr": stderr_text,
                },
            )
            raise ExternalToolFailure(
                f"Execution failed: {command.program} exited with status {process.returncode}",
                command=command.argv,
                returncode=process.returncode,
                stderr=stderr_text,
            )

        return stdout.decode("utf-8", errors="replace")


async def _terminate(process: asyncio.subprocess.Process) -> None:
    """Kill *process* if it is still running and reap it."""
    if process.returncode is None:
        try:
            process.kill()
        except ProcessLookupError:
            pass
    await process.wait()
