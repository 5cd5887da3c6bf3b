"""Main Typer application — imports and registers all CLI commands.

Entry point: ``formulastore`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import logging

import typer
from rich.logging import RichHandler

from formulastore.cli.commands.cache import keys_cmd, retrieve_cmd, store_cmd
from formulastore.cli.commands.digest import decode_cmd, digest_cmd
from formulastore.cli.commands.maintenance import delete_cache_cmd, status_cmd
from formulastore.config import settings

app = typer.Typer(
    name="formulastore",
    help="formulastore: digest-addressed storage and cache for formula rendering.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="digest", help="Store formula content and print its digest.")(digest_cmd)
app.command(name="decode", help="Print the formula stored for a digest.")(decode_cmd)
app.command(name="store", help="Cache rendered output for a digest and service.")(store_cmd)
app.command(name="retrieve", help="Fetch cached output for a digest and service.")(retrieve_cmd)
app.command(name="keys", help="Show the backend keys a digest maps to.")(keys_cmd)
app.command(name="delete-cache", help="Delete every object in the backend.")(delete_cache_cmd)
app.command(name="status", help="Show the effective store settings.")(status_cmd)


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None,
        "--log-level",
        help="Logging level (default from FORMULASTORE_LOG_LEVEL).",
    ),
) -> None:
    """Configure logging before any subcommand runs."""
    level = (log_level or settings.log_level).upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
