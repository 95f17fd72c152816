"""CLI application entry point and command routing for vidmerge.

This module is the **sole error boundary** of the command line.  It
catches :class:`~vidmerge.exceptions.VidmergeError`, ``KeyboardInterrupt``
and any unexpected ``Exception``, renders a readable message via Rich and
returns a well-defined exit code.

Commands
--------
* ``vidmerge serve [--host H] [--port P]`` — run the HTTP API
* ``vidmerge keys create`` / ``vidmerge keys list``
* ``vidmerge doctor`` — environment diagnostics
* ``vidmerge --version``
"""

from __future__ import annotations

import argparse
import sys

from vidmerge.cli import exit_codes
from vidmerge.cli.console import console, print_error
from vidmerge.config import load_settings
from vidmerge.exceptions import VidmergeError
from vidmerge.version import __version__


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vidmerge",
        description="HTTP service that downloads, merges and streams videos.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    commands = parser.add_subparsers(dest="command", metavar="<command>")

    serve = commands.add_parser("serve", help="Run the HTTP API server.")
    serve.add_argument("--host", default=None, help="Bind address (default: $HOST or 0.0.0.0).")
    serve.add_argument("--port", type=int, default=None, help="Port (default: $PORT or 4000).")

    keys = commands.add_parser("keys", help="Manage API keys.")
    key_actions = keys.add_subparsers(dest="action", metavar="<action>", required=True)
    key_actions.add_parser("create", help="Issue a new API key.")
    key_actions.add_parser("list", help="List issued API keys, newest first.")

    commands.add_parser("doctor", help="Check the runtime environment.")
    return parser


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

def _handle_serve(host: str | None, port: int | None) -> int:
    import uvicorn

    from vidmerge.api.app import create_app
    from vidmerge.logging import setup_logging

    settings = load_settings()
    server = settings.server.model_copy(
        update={
            "host": host or settings.server.host,
            "port": port or settings.server.port,
        }
    )
    settings = settings.model_copy(update={"server": server})

    setup_logging(settings.server.log_level)
    uvicorn.run(
        create_app(settings),
        host=settings.server.host,
        port=settings.server.port,
        log_config=None,
    )
    return exit_codes.SUCCESS


def _handle_keys(action: str) -> int:
    from vidmerge.cli.keys import create_key, list_keys

    settings = load_settings()
    if action == "create":
        return create_key(settings)
    return list_keys(settings)


def _handle_doctor() -> int:
    from vidmerge.cli.doctor import run_doctor

    return run_doctor()


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the vidmerge CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.

    Returns
    -------
    int
        OS process exit code.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command == "serve":
        return _handle_serve(args.host, args.port)
    if args.command == "keys":
        return _handle_keys(args.action)
    if args.command == "doctor":
        return _handle_doctor()

    parser.print_help()
    return exit_codes.SUCCESS


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point."""
    try:
        code = main()
        sys.exit(code)
    except VidmergeError as exc:
        print_error(exc)
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {exc}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
