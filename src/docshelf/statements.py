"""Named SQL statement catalog.

Templates only ever receive identifiers and fragments built inside docshelf
(collection names are validated, join aliases are positional). Every value
travels as a ``?`` parameter.
"""

from __future__ import annotations

from typing import Any

_CATALOG: dict[str, str] = {
    "CREATE_DB_TABLES": """
        CREATE TABLE IF NOT EXISTS {collection} (
            id        TEXT NOT NULL,
            revision  INTEGER NOT NULL,
            committed INTEGER NOT NULL DEFAULT 0,
            updated   TEXT NOT NULL,
            origin    TEXT NOT NULL,
            obj       TEXT NOT NULL,
            PRIMARY KEY (id, revision)
        );

        CREATE INDEX IF NOT EXISTS {collection}__current
            ON {collection}(id, committed, updated DESC);

        CREATE TABLE IF NOT EXISTS {collection}__index (
            id       TEXT NOT NULL,
            type     TEXT NOT NULL,
            property TEXT NOT NULL,
            value,
            origin   TEXT NOT NULL
        );

        CREATE INDEX IF NOT EXISTS {collection}__index_lookup
            ON {collection}__index(property, id);

        CREATE INDEX IF NOT EXISTS {collection}__index_id
            ON {collection}__index(id, type);
    """,
    "INSERT_OBJECT": (
        "INSERT INTO {collection} (id, revision, committed, updated, origin, obj) "
        "VALUES (?, ?, ?, ?, ?, ?)"
    ),
    "DELETE_OBJECT": "DELETE FROM {collection} WHERE id = ?",
    "DELETE_OBJECT_EXCEPT_REVISION": (
        "DELETE FROM {collection} WHERE id = ? AND revision <> ?"
    ),
    "UPDATE_OBJECT_TO_COMMITTED": (
        "UPDATE {collection} SET committed = 1 WHERE id = ? AND revision = ?"
    ),
    "REVISION_EXISTS": "SELECT 1 FROM {collection} WHERE id = ? AND revision = ? LIMIT 1",
    "INSERT_OBJECT_INDEX": (
        "INSERT INTO {collection}__index (id, type, property, value, origin) "
        "VALUES (?, ?, ?, ?, ?)"
    ),
    "DELETE_OBJECT_INDEX": "DELETE FROM {collection}__index WHERE id = ?",
    "GET_CURRENT_OBJECT": (
        "SELECT obj FROM {collection} "
        "WHERE id = ? AND committed = 1 "
        "ORDER BY updated DESC, rowid DESC LIMIT 1"
    ),
    "GET_OBJECT_ORIGIN_DATE": (
        "SELECT origin FROM {collection} WHERE id = ? ORDER BY updated ASC LIMIT 1"
    ),
    "GET_OBJECTS_BY_FILTER": (
        "SELECT A.id, {order} AS sort_key "
        "FROM {collection}__index AS A "
        "{joins}"
        "WHERE A.type = ?{filters} "
        "GROUP BY A.id "
        "ORDER BY sort_key {direction}, A.id {direction} "
        "LIMIT ? OFFSET ?"
    ),
    "GET_OBJECTS_COUNT_BY_FILTER": (
        "SELECT COUNT(DISTINCT A.id) "
        "FROM {collection}__index AS A "
        "{joins}"
        "WHERE A.type = ?{filters}"
    ),
    "GET_COLLECTION_OBJECT_COUNT": (
        "SELECT COUNT(DISTINCT id) FROM {collection} WHERE committed = 1"
    ),
    "GET_COLLECTION_REVISION_COUNT": "SELECT COUNT(*) FROM {collection}",
    "GET_OBJECT_REVISIONS": (
        "SELECT revision, committed, updated FROM {collection} "
        "WHERE id = ? ORDER BY updated ASC, rowid ASC"
    ),
}


def get(name: str, **substitutions: Any) -> str:
    """Render the statement template ``name`` with the given substitutions."""
    try:
        template = _CATALOG[name]
    except KeyError:
        raise KeyError(f"Unknown statement '{name}'") from None
    return template.format(**substitutions)


def split(name: str, **substitutions: Any) -> list[str]:
    """Render a multi-statement template as its individual statements."""
    return [s.strip() for s in get(name, **substitutions).split(";") if s.strip()]


def names() -> list[str]:
    return sorted(_CATALOG)
