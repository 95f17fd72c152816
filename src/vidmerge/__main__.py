"""Allow ``python -m vidmerge`` invocation.

This module simply delegates to the CLI error-boundary entry point so
that ``python -m vidmerge`` behaves identically to the ``vidmerge``
console script.
"""

from __future__ import annotations

from vidmerge.cli.app import cli

if __name__ == "__main__":
    cli()
