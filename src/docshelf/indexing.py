"""Entity-attribute-value index maintenance for collection documents."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterator

from docshelf import statements
from docshelf.connector import Connector

logger = logging.getLogger(__name__)

METADATA_FIELDS = frozenset({"id", "revision", "updated", "origin"})

VALUE = "value"
REGISTRY = "registry"
INDEX_TYPES = (VALUE, REGISTRY)

# Range of a SQLite INTEGER
SQLITE_INT_MIN = -(2**63)
SQLITE_INT_MAX = 2**63 - 1


@dataclass(frozen=True)
class IndexRow:
    """One row of a collection's ``__index`` table."""

    id: str
    type: str
    property: str
    value: Any
    origin: str

    def as_params(self) -> tuple[Any, ...]:
        return (self.id, self.type, self.property, self.value, self.origin)


def is_property_indexable(name: str) -> bool:
    return name not in METADATA_FIELDS


def is_value_indexable(value: Any) -> bool:
    """Only scalar strings, booleans, integers and nulls are indexed."""
    return value is None or isinstance(value, (str, bool, int))


def fits_sqlite_integer(value: int) -> bool:
    return SQLITE_INT_MIN <= value <= SQLITE_INT_MAX


def encode_index_value(value: Any) -> Any:
    """Return the stored representation of an indexable value.

    Booleans are stored as the text "true" or "false"; integers outside the
    SQLite INTEGER range are stored as their decimal text.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int) and not fits_sqlite_integer(value):
        return str(value)
    return value


def index_rows(document: dict[str, Any]) -> Iterator[IndexRow]:
    """Yield the index rows for a document that already carries its metadata."""
    doc_id = document["id"]
    origin = document["origin"]
    for prop, value in document.items():
        if is_property_indexable(prop) and is_value_indexable(value):
            yield IndexRow(doc_id, VALUE, prop, encode_index_value(value), origin)
    yield IndexRow(doc_id, REGISTRY, "", None, origin)


def reindex(connector: Connector, collection: str, document: dict[str, Any]) -> int:
    """Replace every index row of ``document`` and return the number written."""
    connector.execute(
        statements.get("DELETE_OBJECT_INDEX", collection=collection), (document["id"],)
    )
    insert = statements.get("INSERT_OBJECT_INDEX", collection=collection)
    written = 0
    for row in index_rows(document):
        connector.execute(insert, row.as_params())
        written += 1
    logger.debug("indexed %s/%s with %d rows", collection, document["id"], written)
    return written
