"""shelf info: show collection statistics."""

from __future__ import annotations

import os

import typer

from docshelf.cli import _exitcodes as ec
from docshelf.cli._output import print_error, print_object
from docshelf.cli._storage import open_collection, open_shelf
from docshelf.errors import BackendError, DocshelfError


def info_cmd(
    collection: str = typer.Argument(..., help="Collection name"),
) -> None:
    """Show document and revision counts for a collection."""
    from docshelf.cli import state

    shelf = open_shelf()
    try:
        data = open_collection(shelf, collection).stats()
        db_path = shelf.target.db_path
        data["db_path"] = db_path
        if db_path != ":memory:" and os.path.exists(db_path):
            data["file_size_bytes"] = os.path.getsize(db_path)
        print_object(data, json_mode=state.json_output)
    except DocshelfError as e:
        print_error(str(e))
        raise typer.Exit(ec.USAGE_ERROR)
    except BackendError as e:
        print_error(f"Cannot open storage backend: {e}")
        raise typer.Exit(ec.DATABASE_ERROR)
    finally:
        shelf.close()
