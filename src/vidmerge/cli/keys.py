"""``vidmerge keys`` — issue and list API keys from the command line.

Talks to the same credential store as the server, configured by
``DATABASE_URL``.
"""

from __future__ import annotations

from rich.table import Table

from vidmerge.cli import exit_codes
from vidmerge.cli.console import console, out
from vidmerge.config import AppSettings
from vidmerge.infra.credential_store import SqlCredentialStore


def create_key(settings: AppSettings) -> int:
    """Issue one key and print it to stdout."""
    store = SqlCredentialStore(settings.database.url)
    store.open()
    try:
        record = store.insert()
    finally:
        store.close()

    out.print(record.key)
    console.print(f"[green]Issued key #{record.id}[/green] at {record.created_at.isoformat()}")
    return exit_codes.SUCCESS


def list_keys(settings: AppSettings) -> int:
    """Render every issued key, newest first."""
    store = SqlCredentialStore(settings.database.url)
    store.open()
    try:
        records = store.list_all()
    finally:
        store.close()

    if not records:
        console.print("[yellow]No API keys issued yet.[/yellow]")
        return exit_codes.SUCCESS

    table = Table(
        title="API keys",
        show_header=True,
        header_style="bold cyan",
        border_style="dim",
    )
    table.add_column("ID", justify="right")
    table.add_column("Key", style="bold")
    table.add_column("Created (UTC)")
    for record in records:
        table.add_row(str(record.id), record.key, record.created_at.isoformat())

    console.print()
    console.print(table)
    console.print()
    return exit_codes.SUCCESS
