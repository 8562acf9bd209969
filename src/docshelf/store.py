"""Opening document shelves from paths or storage URIs."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping
from urllib.parse import urlparse

from docshelf.collection import Collection
from docshelf.config import CollectionOptions
from docshelf.connector import Connector
from docshelf.errors import ConfigurationError


@dataclass(frozen=True)
class StorageTarget:
    """Resolved storage target from db_path and URI forms."""

    uri: str
    db_path: str


def parse_storage_target(
    db_path: str | None = None,
    storage_uri: str | None = None,
) -> StorageTarget:
    """Resolve the SQLite file from a plain path or a ``sqlite:///`` URI."""
    if storage_uri is None:
        db_path = db_path or "docshelf.db"
        return StorageTarget(uri=f"sqlite:///{db_path}", db_path=db_path)

    parsed = urlparse(storage_uri)
    if parsed.scheme != "sqlite":
        raise ConfigurationError(
            f"unsupported storage URI scheme '{parsed.scheme}' for '{storage_uri}'"
        )
    sqlite_path = parsed.path
    if parsed.netloc:
        sqlite_path = f"{parsed.netloc}{sqlite_path}"
    elif sqlite_path.startswith("//"):
        # sqlite:////abs/path -> /abs/path
        sqlite_path = sqlite_path[1:]
    elif sqlite_path.startswith("/") and sqlite_path != "/:memory:":
        # sqlite:///rel/path -> rel/path
        sqlite_path = sqlite_path[1:]
    if sqlite_path == "/:memory:":
        sqlite_path = ":memory:"
    if not sqlite_path:
        raise ConfigurationError(f"invalid sqlite URI: {storage_uri}")
    if db_path is not None and os.path.abspath(db_path) != os.path.abspath(sqlite_path):
        raise ConfigurationError(
            f"conflicting db_path '{db_path}' and storage_uri '{storage_uri}'"
        )
    return StorageTarget(uri=storage_uri, db_path=sqlite_path)


class Shelf:
    """A database file holding any number of collections over one connection."""

    def __init__(self, db_path: str | None = None, *, storage_uri: str | None = None) -> None:
        self.target = parse_storage_target(db_path, storage_uri)
        self.connector = Connector(self.target.db_path)
        self._collections: dict[str, Collection] = {}

    def collection(
        self,
        name: str,
        options: CollectionOptions | Mapping[str, Any] | None = None,
    ) -> Collection:
        """Return the named collection, creating its tables on first use.

        Options only apply the first time a name is requested on this shelf.
        """
        existing = self._collections.get(name)
        if existing is not None:
            return existing
        coll = Collection(name, self.connector, options)
        self._collections[name] = coll
        return coll

    def close(self) -> None:
        self.connector.close()

    def __enter__(self) -> Shelf:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
