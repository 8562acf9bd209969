"""shelf insert/update/get/delete: single-document commands."""

from __future__ import annotations

import json
from typing import Any

import typer

from docshelf.cli import _exitcodes as ec
from docshelf.cli._output import print_documents, print_error, print_object
from docshelf.cli._storage import open_collection, open_shelf
from docshelf.errors import BackendError, DocshelfError


def _parse_document(raw: str) -> dict[str, Any]:
    try:
        doc = json.loads(raw)
    except json.JSONDecodeError as e:
        print_error(f"Document is not valid JSON: {e}")
        raise typer.Exit(ec.USAGE_ERROR)
    if not isinstance(doc, dict):
        print_error("Document JSON must be an object")
        raise typer.Exit(ec.USAGE_ERROR)
    return doc


def _write(collection: str, doc_id: str | None, raw: str, versioned: bool) -> None:
    from docshelf.cli import state

    doc = _parse_document(raw)
    shelf = open_shelf()
    try:
        coll = open_collection(shelf, collection, versioned=versioned)
        if doc_id is None:
            written = coll.insert(doc)
        else:
            written = coll.update(doc_id, doc)
        print_object(written, json_mode=state.json_output)
    except DocshelfError as e:
        print_error(str(e))
        raise typer.Exit(ec.USAGE_ERROR)
    except BackendError as e:
        print_error(f"Database error: {e}")
        raise typer.Exit(ec.DATABASE_ERROR)
    finally:
        shelf.close()


def insert_cmd(
    collection: str = typer.Argument(..., help="Collection name"),
    document: str = typer.Argument(..., help="Document as a JSON object"),
    versioned: bool = typer.Option(False, "--versioned", help="Keep previous revisions"),
) -> None:
    """Insert a document under a new id."""
    _write(collection, None, document, versioned)


def update_cmd(
    collection: str = typer.Argument(..., help="Collection name"),
    doc_id: str = typer.Argument(..., metavar="ID", help="Document id"),
    document: str = typer.Argument(..., help="Document as a JSON object"),
    versioned: bool = typer.Option(False, "--versioned", help="Keep previous revisions"),
) -> None:
    """Write a new revision of a document (creating it if the id is unknown)."""
    _write(collection, doc_id, document, versioned)


def get_cmd(
    collection: str = typer.Argument(..., help="Collection name"),
    doc_id: str = typer.Argument(..., metavar="ID", help="Document id"),
    revisions: bool = typer.Option(False, "--revisions", help="List stored revisions instead"),
) -> None:
    """Show the current revision of a document."""
    from docshelf.cli import state

    shelf = open_shelf()
    try:
        coll = open_collection(shelf, collection)
        if revisions:
            print_documents(coll.revisions(doc_id), json_mode=state.json_output)
            return
        doc = coll.find(doc_id)
        if doc is None:
            print_error(f"Document '{doc_id}' not found in '{collection}'")
            raise typer.Exit(ec.NOT_FOUND)
        print_object(doc, json_mode=state.json_output)
    except DocshelfError as e:
        print_error(str(e))
        raise typer.Exit(ec.USAGE_ERROR)
    except BackendError as e:
        print_error(f"Database error: {e}")
        raise typer.Exit(ec.DATABASE_ERROR)
    finally:
        shelf.close()


def delete_cmd(
    collection: str = typer.Argument(..., help="Collection name"),
    doc_id: str = typer.Argument(..., metavar="ID", help="Document id"),
) -> None:
    """Delete every revision of a document."""
    shelf = open_shelf()
    try:
        open_collection(shelf, collection).delete(doc_id)
        print(f"Deleted {doc_id}")
    except DocshelfError as e:
        print_error(str(e))
        raise typer.Exit(ec.USAGE_ERROR)
    except BackendError as e:
        print_error(f"Database error: {e}")
        raise typer.Exit(ec.DATABASE_ERROR)
    finally:
        shelf.close()
