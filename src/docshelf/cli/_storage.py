"""CLI helpers for opening shelves and collections."""

from __future__ import annotations

from docshelf.collection import Collection
from docshelf.config import CollectionOptions
from docshelf.store import Shelf


def open_shelf() -> Shelf:
    """Open the shelf selected by the global CLI options."""
    from docshelf.cli import state

    if state.storage_uri:
        return Shelf(storage_uri=state.storage_uri)
    return Shelf(state.db)


def open_collection(shelf: Shelf, name: str, *, versioned: bool = False) -> Collection:
    return shelf.collection(name, CollectionOptions(version_tracking=versioned))

