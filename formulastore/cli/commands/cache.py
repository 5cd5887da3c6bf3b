"""``formulastore store`` / ``retrieve`` / ``keys`` — the cache namespace."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from formulastore.cli.commands._store import BACKEND_OPTION, ROOT_OPTION, open_store
from formulastore.core.errors import BackendError, InvalidDigestError, InvalidServiceError
from formulastore.core.key_scheme import artifact_key
from formulastore.models.keys import KeyPurpose

console = Console()


def store_cmd(
    digest: str = typer.Argument(..., help="Digest of the rendered formula."),
    service: str = typer.Argument(..., help="Render service: png, svg, or a text service name."),
    file: Path = typer.Argument(
        ..., exists=True, dir_okay=False, help="File holding the rendered output."
    ),
    backend: str = BACKEND_OPTION,
    root: Path = ROOT_OPTION,
) -> None:
    """Cache rendered output for a (digest, service) pair."""
    data = file.read_bytes()
    store = open_store(backend, root)
    try:
        key = artifact_key(digest, KeyPurpose.CACHE, service)
        store.store_data(digest, service, data)
    except (InvalidDigestError, InvalidServiceError) as exc:
        console.print(f"[bold red]Invalid key:[/bold red] {exc}")
        raise typer.Exit(code=2)
    except BackendError as exc:
        console.print(f"[bold red]Store failed:[/bold red] {exc}")
        raise typer.Exit(code=1)
    finally:
        store.close()

    console.print(
        f"[bold green]Stored[/bold green] {len(data):,} bytes at {key.key} "
        f"[dim]({key.content_type})[/dim]"
    )


def retrieve_cmd(
    digest: str = typer.Argument(..., help="Digest of the rendered formula."),
    service: str = typer.Argument(..., help="Render service: png, svg, or a text service name."),
    output: Path = typer.Option(
        None,
        "--output",
        "-o",
        dir_okay=False,
        help="Write the cached output here instead of stdout.",
    ),
    backend: str = BACKEND_OPTION,
    root: Path = ROOT_OPTION,
) -> None:
    """Fetch cached output for a (digest, service) pair (exit 1 on a miss)."""
    store = open_store(backend, root)
    try:
        data = store.retreive_data(digest, service)
    except (InvalidDigestError, InvalidServiceError) as exc:
        console.print(f"[bold red]Invalid key:[/bold red] {exc}")
        raise typer.Exit(code=2)
    except BackendError as exc:
        console.print(f"[bold red]Read failed:[/bold red] {exc}")
        raise typer.Exit(code=1)
    finally:
        store.close()

    if data is None:
        console.print(f"[yellow]Cache miss:[/yellow] {digest} ({service})")
        raise typer.Exit(code=1)

    if output is not None:
        output.write_bytes(data)
        console.print(f"[bold green]Wrote[/bold green] {len(data):,} bytes to {output}")
        return
    typer.echo(data, nl=False)


def keys_cmd(
    digest: str = typer.Argument(..., help="Digest to lay out."),
    service: list[str] = typer.Option(
        ["png", "svg"],
        "--service",
        "-s",
        help="Render service(s) to show cache keys for.",
    ),
) -> None:
    """Show the backend keys a digest maps to. Touches no backend."""
    try:
        keys = [artifact_key(digest, KeyPurpose.FORMULA)]
        keys.extend(artifact_key(digest, KeyPurpose.CACHE, s) for s in service)
    except (InvalidDigestError, InvalidServiceError) as exc:
        console.print(f"[bold red]Invalid key:[/bold red] {exc}")
        raise typer.Exit(code=2)

    table = Table(title=f"Keys for {digest}", show_header=True, header_style="bold cyan")
    table.add_column("Namespace")
    table.add_column("Service")
    table.add_column("Key", overflow="fold")
    table.add_column("Content-Type")
    for key in keys:
        table.add_row(key.purpose.value, key.service or "-", key.key, key.content_type)
    console.print(table)
