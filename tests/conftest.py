"""Shared test fixtures for docshelf tests."""

from __future__ import annotations

from typing import Any

import pytest
from pydantic import Field

from docshelf import Collection, Connector, DocumentModel

# --- Test model types ---


class Person(DocumentModel):
    name: str = "anonymous"
    age: int = 0
    tags: list[str] = Field(default_factory=list)
    address: dict[str, Any] = Field(default_factory=dict)


# --- Fixtures ---


@pytest.fixture
def tmp_db(tmp_path):
    """Create a temporary SQLite database path."""
    return str(tmp_path / "test.db")


@pytest.fixture
def connector(tmp_db):
    """Create a Connector with a temporary database."""
    c = Connector(tmp_db)
    yield c
    c.close()


@pytest.fixture
def people(connector):
    """A collection without version tracking."""
    return Collection("people", connector)


@pytest.fixture
def history(connector):
    """A collection that keeps every revision."""
    return Collection("history", connector, {"versionTracking": True})


@pytest.fixture
def person_model():
    return Person


@pytest.fixture
def index_rows(connector):
    """Return the index rows of a document as (type, property, value) tuples."""

    def _rows(collection: str, doc_id: str) -> list[tuple[Any, ...]]:
        return connector.query(
            f"SELECT type, property, value FROM {collection}__index "
            "WHERE id = ? ORDER BY type, property",
            (doc_id,),
        ).fetchall()

    return _rows


@pytest.fixture
def row_count(connector):
    """Return the number of primary-table rows, optionally for one id."""

    def _count(collection: str, doc_id: str | None = None) -> int:
        if doc_id is None:
            return connector.query(f"SELECT COUNT(*) FROM {collection}").fetchone()[0]
        return connector.query(
            f"SELECT COUNT(*) FROM {collection} WHERE id = ?", (doc_id,)
        ).fetchone()[0]

    return _count
