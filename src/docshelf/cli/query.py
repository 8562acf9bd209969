"""shelf find/count: filtered reads over a collection."""

from __future__ import annotations

from typing import Optional

import typer

from docshelf.cli import _exitcodes as ec
from docshelf.cli._filters import parse_where_clauses
from docshelf.cli._output import print_documents, print_error
from docshelf.cli._storage import open_collection, open_shelf
from docshelf.errors import BackendError, DocshelfError, FilterError
from docshelf.filters import FilterQuery


def _build_query(where: list[str] | None, filter_json: str | None) -> FilterQuery:
    if where and filter_json:
        print_error("Use either --where or --filter-json, not both")
        raise typer.Exit(ec.USAGE_ERROR)
    try:
        if filter_json:
            return FilterQuery.from_json(filter_json)
        return parse_where_clauses(where or [])
    except FilterError as e:
        print_error(str(e))
        raise typer.Exit(ec.USAGE_ERROR)


def find_cmd(
    collection: str = typer.Argument(..., help="Collection name"),
    where: Optional[list[str]] = typer.Option(
        None, "--where", "-w", help="'[AND|OR] PROP OP VALUE' (repeatable)"
    ),
    filter_json: Optional[str] = typer.Option(
        None, "--filter-json", help="Complete filter description as JSON"
    ),
    order_by: Optional[str] = typer.Option(None, "--order-by", help="Property to order by"),
    desc: bool = typer.Option(False, "--desc", help="Descending order"),
    limit: Optional[int] = typer.Option(None, "--limit", help="Max results"),
    offset: int = typer.Option(0, "--offset", help="Skip first N results"),
) -> None:
    """Find documents matching --where clauses (all documents when none given)."""
    from docshelf.cli import state

    query = _build_query(where, filter_json)
    shelf = open_shelf()
    try:
        if order_by is not None or desc:
            query.order_by(order_by or query.order_property, reverse=desc)
        if limit is not None or offset:
            query.paginate(offset=offset, length=limit)
        docs = open_collection(shelf, collection).find(query)
        print_documents(docs, json_mode=state.json_output)
    except DocshelfError as e:
        print_error(str(e))
        raise typer.Exit(ec.USAGE_ERROR)
    except BackendError as e:
        print_error(f"Database error: {e}")
        raise typer.Exit(ec.DATABASE_ERROR)
    finally:
        shelf.close()


def count_cmd(
    collection: str = typer.Argument(..., help="Collection name"),
    where: Optional[list[str]] = typer.Option(
        None, "--where", "-w", help="'[AND|OR] PROP OP VALUE' (repeatable)"
    ),
    filter_json: Optional[str] = typer.Option(
        None, "--filter-json", help="Complete filter description as JSON"
    ),
) -> None:
    """Count documents, optionally restricted by --where clauses."""
    query = _build_query(where, filter_json) if (where or filter_json) else None
    shelf = open_shelf()
    try:
        print(open_collection(shelf, collection).count(query))
    except DocshelfError as e:
        print_error(str(e))
        raise typer.Exit(ec.USAGE_ERROR)
    except BackendError as e:
        print_error(f"Database error: {e}")
        raise typer.Exit(ec.DATABASE_ERROR)
    finally:
        shelf.close()
