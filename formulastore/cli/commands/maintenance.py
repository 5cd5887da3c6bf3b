"""``formulastore delete-cache`` / ``status`` — maintenance commands.

``delete-cache`` removes every object in the configured backend, formulas
included. Run it offline: renders stored during the sweep may or may not
survive.
"""

from __future__ import annotations

from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from formulastore.cli.commands._store import (
    BACKEND_OPTION,
    ROOT_OPTION,
    build_settings,
    open_store,
)

console = Console()

_SECRET_FIELDS = {"access_key_id", "secret_access_key"}


def delete_cache_cmd(
    yes: bool = typer.Option(
        False, "--yes", "-y", help="Do not ask for confirmation."
    ),
    backend: str = BACKEND_OPTION,
    root: Path = ROOT_OPTION,
) -> None:
    """Delete ALL cached renders and stored formulas from the backend."""
    if not yes:
        typer.confirm(
            "This deletes every formula and cached render in the backend. Continue?",
            abort=True,
        )

    store = open_store(backend, root)
    try:
        ok = store.delete_cache()
    finally:
        store.close()

    if not ok:
        console.print("[bold red]Cache deletion failed;[/bold red] see the log for details.")
        raise typer.Exit(code=1)
    console.print("[bold green]Cache deleted.[/bold green]")


def status_cmd(
    backend: str = BACKEND_OPTION,
    root: Path = ROOT_OPTION,
) -> None:
    """Show the effective store settings (secrets masked)."""
    try:
        settings = build_settings(backend, root)
    except ValidationError as exc:
        console.print(f"[bold red]Invalid settings:[/bold red] {exc}")
        raise typer.Exit(code=2)

    table = Table(show_header=True, header_style="bold cyan", expand=True)
    table.add_column("Setting", min_width=24)
    table.add_column("Value")

    for name, value in settings.model_dump(mode="json").items():
        if name in _SECRET_FIELDS and value:
            value = "********"
        table.add_row(name, "" if value is None else str(value))

    credentials = (
        "static key pair" if settings.has_static_credentials else "default provider chain"
    )
    console.print()
    console.print(
        Panel(
            table,
            title="[bold]formulastore settings[/bold]",
            subtitle=f"[dim]S3 credentials: {credentials}[/dim]",
            border_style="cyan",
            padding=(1, 2),
        )
    )
    console.print()
