"""``formulastore digest`` / ``decode`` — the formula namespace.

``digest`` stores formula content and prints its digest; ``decode`` prints
the content stored for a digest.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from formulastore.cli.commands._store import BACKEND_OPTION, ROOT_OPTION, open_store
from formulastore.core.errors import BackendError, InvalidDigestError
from formulastore.core.key_scheme import formula_key

console = Console()


def digest_cmd(
    content: str = typer.Argument(
        None,
        help="Formula source to store. Use --file to read it from a file instead.",
    ),
    file: Path = typer.Option(
        None,
        "--file",
        "-f",
        exists=True,
        dir_okay=False,
        help="Read the formula source from this file.",
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Print only the digest."
    ),
    backend: str = BACKEND_OPTION,
    root: Path = ROOT_OPTION,
) -> None:
    """Store formula content and print its digest."""
    if file is not None:
        data: str | bytes = file.read_bytes()
    elif content is not None:
        data = content
    else:
        console.print("[bold red]Nothing to store:[/bold red] pass CONTENT or --file.")
        raise typer.Exit(code=2)

    store = open_store(backend, root)
    try:
        digest = store.code_digest(data)
    except BackendError as exc:
        console.print(f"[bold red]Store failed:[/bold red] {exc}")
        raise typer.Exit(code=1)
    finally:
        store.close()

    if quiet:
        typer.echo(digest)
        return
    console.print(f"[bold green]Digest:[/bold green] {digest}")
    console.print(f"[dim]Key:[/dim]    {formula_key(digest)}")


def decode_cmd(
    digest: str = typer.Argument(..., help="Digest returned by 'formulastore digest'."),
    backend: str = BACKEND_OPTION,
    root: Path = ROOT_OPTION,
) -> None:
    """Print the formula content stored for a digest (exit 1 on a miss)."""
    store = open_store(backend, root)
    try:
        content = store.decode_digest(digest)
    except InvalidDigestError as exc:
        console.print(f"[bold red]Invalid digest:[/bold red] {exc}")
        raise typer.Exit(code=2)
    except BackendError as exc:
        console.print(f"[bold red]Read failed:[/bold red] {exc}")
        raise typer.Exit(code=1)
    finally:
        store.close()

    if content is None:
        console.print(f"[yellow]No formula stored for[/yellow] {digest}")
        raise typer.Exit(code=1)
    typer.echo(content)
