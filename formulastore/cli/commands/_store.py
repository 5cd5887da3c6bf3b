"""Shared helpers for CLI commands: backend overrides and store construction."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import typer
from pydantic import ValidationError
from rich.console import Console

from formulastore.config import BackendKind, StoreSettings
from formulastore.core.errors import FormulaStoreError
from formulastore.core.storage_and_cache import StorageAndCache

console = Console()
err_console = Console(stderr=True)

BACKEND_OPTION = typer.Option(
    None,
    "--backend",
    "-b",
    help="Object backend: memory, filesystem or s3 (default from FORMULASTORE_BACKEND).",
)
ROOT_OPTION = typer.Option(
    None,
    "--root",
    help="Root directory for the filesystem backend (implies --backend filesystem).",
)


def build_settings(backend: str | None = None, root: Path | None = None) -> StoreSettings:
    """Environment-driven settings with command-line overrides applied."""
    overrides: dict[str, Any] = {}
    if root is not None:
        overrides["backend"] = "filesystem"
        overrides["filesystem_root"] = root
    if backend:
        overrides["backend"] = backend
    return StoreSettings(**overrides)


def open_store(backend: str | None = None, root: Path | None = None) -> StorageAndCache:
    """Build and initialize a store for a single CLI invocation.

    Exits with code 2 when the settings cannot produce a backend. Warns on
    stderr when the memory backend is selected, since nothing it holds
    outlives the command.
    """
    try:
        store = StorageAndCache(settings=build_settings(backend, root)).init()
    except (ValidationError, FormulaStoreError) as exc:
        console.print(f"[bold red]Cannot open store:[/bold red] {exc}")
        raise typer.Exit(code=2)

    if store.settings.backend is BackendKind.MEMORY:
        err_console.print(
            "[yellow]Memory backend:[/yellow] nothing persists after this command. "
            "Use --root or FORMULASTORE_BACKEND."
        )
    return store
