"""docshelf CLI: read and write collection documents from the shell."""

from __future__ import annotations

import logging
from typing import Optional

import typer

from docshelf.cli import documents, info, query

app = typer.Typer(
    name="shelf",
    help="docshelf CLI: read and write schemaless document collections.",
    no_args_is_help=True,
)


class _State:
    """Global CLI state shared across subcommands."""

    db: str = "docshelf.db"
    storage_uri: str | None = None
    json_output: bool = False


state = _State()


def _version_callback(value: bool) -> None:
    if value:
        try:
            from importlib.metadata import version

            v = version("docshelf")
        except Exception:
            v = "unknown"
        print(f"shelf {v}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    db: Optional[str] = typer.Option(
        None,
        "--db",
        envvar="DOCSHELF_DB",
        help="SQLite database file path (default: docshelf.db)",
    ),
    storage_uri: Optional[str] = typer.Option(
        None,
        "--storage-uri",
        envvar="DOCSHELF_STORAGE_URI",
        help="Storage URI (e.g. sqlite:///docshelf.db); overrides --db",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log executed statements"),
    version: bool = typer.Option(
        False, "--version", help="Show version", is_eager=True, callback=_version_callback
    ),
) -> None:
    """Global options for all shelf commands."""
    from docshelf.store import parse_storage_target

    if storage_uri:
        try:
            parse_storage_target(storage_uri=storage_uri)
        except Exception as e:
            raise typer.BadParameter(str(e))

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    state.db = db or "docshelf.db"
    state.storage_uri = storage_uri
    state.json_output = json_output
    if ctx.invoked_subcommand is None and not version:
        print(ctx.get_help())
        raise typer.Exit()


# Register top-level commands
app.command(name="insert")(documents.insert_cmd)
app.command(name="update")(documents.update_cmd)
app.command(name="get")(documents.get_cmd)
app.command(name="delete")(documents.delete_cmd)
app.command(name="find")(query.find_cmd)
app.command(name="count")(query.count_cmd)
app.command(name="info")(info.info_cmd)


def main() -> None:
    """Entry point for the shelf CLI."""
    app()
