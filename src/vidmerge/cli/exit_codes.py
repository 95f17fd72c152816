"""Exit-code constants used by the CLI layer.

Every exit path uses one of these values instead of a bare integer.
"""

from __future__ import annotations

SUCCESS: int = 0
"""Command completed; for ``serve``, the server shut down cleanly."""

GENERAL_ERROR: int = 1
"""A known VidmergeError was caught, or a doctor check failed."""

UNEXPECTED_ERROR: int = 2
"""An exception escaped every known error boundary."""

KEYBOARD_INTERRUPT: int = 130
"""Interrupted with Ctrl+C (128 + SIGINT)."""
