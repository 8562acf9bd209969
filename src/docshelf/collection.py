"""Collections: revisioned, EAV-indexed document storage on top of SQLite."""

from __future__ import annotations

import hashlib
import json
import logging
import random
import time
from datetime import datetime, timezone
from typing import Any, Mapping

from docshelf import indexing, statements
from docshelf.config import CollectionOptions
from docshelf.connector import Connector
from docshelf.errors import DocumentValidationError, TypeMismatchError
from docshelf.filters import FilterQuery, FilterTranslator, is_json_filter
from docshelf.indexing import METADATA_FIELDS
from docshelf.models import DocumentModel, hydrate, to_document

logger = logging.getLogger(__name__)

REVISION_MIN = 1000001
REVISION_MAX = 9999999

Selector = FilterQuery | str | None


def generate_timestamp() -> str:
    """UTC timestamp with microsecond precision."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S.%f")


def generate_unique_id() -> str:
    """Return a 40 character id hashed from a high-resolution timestamp."""
    now = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S%f")
    seed = f"{now}{time.perf_counter_ns()}{random.getrandbits(32)}"
    return hashlib.sha1(seed.encode()).hexdigest()


class Collection:
    """A named group of documents.

    Every write stores a new revision row, rebuilds the document's index rows
    and then commits the revision, all inside one backend transaction.

    Args:
        name: collection name; also the primary table name.
        connector: backend connection shared by all operations.
        options: a CollectionOptions or a mapping with ``versionTracking`` /
            ``model`` keys.
    """

    def __init__(
        self,
        name: str,
        connector: Connector,
        options: CollectionOptions | Mapping[str, Any] | None = None,
    ) -> None:
        if not isinstance(options, CollectionOptions):
            options = CollectionOptions.from_mapping(options)
        self.name = name
        self.options = options
        self.model: type[DocumentModel] | None = options.validate(name)
        self._connector = connector
        self._translator = FilterTranslator(name)
        with self._connector.transaction():
            for statement in statements.split("CREATE_DB_TABLES", collection=name):
                self._connector.execute(statement)
        logger.info(
            "collection %s ready (version_tracking=%s, model=%s)",
            name,
            options.version_tracking,
            self.model.__name__ if self.model else None,
        )

    # --- Public operations ---

    def insert(self, document: Any) -> Any:
        """Store ``document`` under a newly generated id and return it with metadata."""
        payload = self._validate(document)
        if payload.get("id") is not None:
            raise DocumentValidationError(
                "Documents passed to insert() must not carry an id; use update() instead."
            )
        return self._upsert(payload, None)

    def update(self, doc_id: str, document: Any) -> Any:
        """Write a new revision of ``doc_id``. Unknown ids are created."""
        payload = self._validate(document)
        return self._upsert(payload, doc_id)

    def find(self, selector: Selector = None) -> Any:
        """Look documents up by id or by filter.

        ``None`` returns ``[]``; a FilterQuery or a JSON object string returns
        the list of matching documents; any other string is treated as an id
        and returns that document or ``None``.
        """
        if isinstance(selector, FilterQuery):
            return self._find_by_filter(selector)
        if isinstance(selector, str):
            if is_json_filter(selector):
                return self._find_by_filter(FilterQuery.from_json(selector))
            return self._get_object(selector)
        return []

    def count(self, selector: Selector = None) -> int:
        """Count committed documents, optionally restricted by a filter."""
        if selector is None:
            row = self._connector.query(
                statements.get("GET_COLLECTION_OBJECT_COUNT", collection=self.name)
            ).fetchone()
            return int(row[0]) if row else 0
        if isinstance(selector, str) and is_json_filter(selector):
            selector = FilterQuery.from_json(selector)
        if isinstance(selector, FilterQuery):
            return self._count_by_filter(selector)
        return 0

    def delete(self, doc_id: str) -> None:
        """Remove every revision and index row of ``doc_id``."""
        with self._connector.transaction() as conn:
            conn.execute(
                statements.get("DELETE_OBJECT_INDEX", collection=self.name), (doc_id,)
            )
            conn.execute(statements.get("DELETE_OBJECT", collection=self.name), (doc_id,))
        logger.info("deleted %s/%s", self.name, doc_id)

    def revisions(self, doc_id: str) -> list[dict[str, Any]]:
        """List the stored revision rows of ``doc_id``, oldest first."""
        rows = self._connector.query(
            statements.get("GET_OBJECT_REVISIONS", collection=self.name), (doc_id,)
        ).fetchall()
        return [
            {"revision": int(r[0]), "committed": bool(r[1]), "updated": r[2]} for r in rows
        ]

    def stats(self) -> dict[str, Any]:
        revisions = self._connector.query(
            statements.get("GET_COLLECTION_REVISION_COUNT", collection=self.name)
        ).fetchone()
        return {
            "collection": self.name,
            "documents": self.count(),
            "revisions": int(revisions[0]) if revisions else 0,
            "version_tracking": self.options.version_tracking,
            "model": self.model.__name__ if self.model else None,
        }

    # --- Write path ---

    def _validate(self, document: Any) -> dict[str, Any]:
        if self.model is not None:
            if not isinstance(document, self.model):
                raise TypeMismatchError(self.model, type(document))
        elif not isinstance(document, Mapping):
            raise DocumentValidationError(
                f"Documents must be mappings, got {type(document).__name__}"
            )
        return to_document(document)

    def _upsert(self, payload: dict[str, Any], doc_id: str | None) -> Any:
        with self._connector.transaction():
            document = self._write_object(payload, doc_id)
            indexing.reindex(self._connector, self.name, document)
            self._commit_object(document["id"], document["revision"])
        logger.debug(
            "wrote %s/%s revision %s", self.name, document["id"], document["revision"]
        )
        return self._to_result(document)

    def _write_object(self, payload: dict[str, Any], doc_id: str | None) -> dict[str, Any]:
        object_id = doc_id if doc_id is not None else generate_unique_id()
        origin = self._get_object_origin(object_id)
        updated = generate_timestamp()

        document = {k: v for k, v in payload.items() if k not in METADATA_FIELDS}
        document["id"] = object_id
        document["revision"] = self._generate_revision(object_id)
        document["updated"] = updated
        document["origin"] = origin or updated

        self._connector.execute(
            statements.get("INSERT_OBJECT", collection=self.name),
            (
                document["id"],
                document["revision"],
                0,
                document["updated"],
                document["origin"],
                json.dumps(document),
            ),
        )
        return document

    def _commit_object(self, doc_id: str, revision: int) -> None:
        if not self.options.version_tracking:
            self._connector.execute(
                statements.get("DELETE_OBJECT_EXCEPT_REVISION", collection=self.name),
                (doc_id, revision),
            )
        self._connector.execute(
            statements.get("UPDATE_OBJECT_TO_COMMITTED", collection=self.name),
            (doc_id, revision),
        )

    def _generate_revision(self, doc_id: str) -> int:
        exists = statements.get("REVISION_EXISTS", collection=self.name)
        while True:
            revision = random.randint(REVISION_MIN, REVISION_MAX)
            if self._connector.query(exists, (doc_id, revision)).fetchone() is None:
                return revision

    def _get_object_origin(self, doc_id: str) -> str | None:
        row = self._connector.query(
            statements.get("GET_OBJECT_ORIGIN_DATE", collection=self.name), (doc_id,)
        ).fetchone()
        return row[0] if row else None

    # --- Read path ---

    def _get_object(self, doc_id: str) -> Any:
        row = self._connector.query(
            statements.get("GET_CURRENT_OBJECT", collection=self.name), (doc_id,)
        ).fetchone()
        if row is None:
            return None
        return self._to_result(json.loads(row[0]))

    def _find_by_filter(self, query: FilterQuery) -> list[Any]:
        translated = self._translator.translate(query)
        select = statements.get(
            "GET_OBJECTS_BY_FILTER",
            collection=self.name,
            order=translated.order,
            joins=translated.joins,
            filters=translated.filters,
            direction=translated.direction,
        )
        rows = self._connector.query(select, translated.select_params()).fetchall()
        # The join pass only identifies ids; documents are re-read at their current revision.
        results = []
        for row in rows:
            obj = self._get_object(row[0])
            if obj is not None:
                results.append(obj)
        return results

    def _count_by_filter(self, query: FilterQuery) -> int:
        translated = self._translator.translate(query, include_order=False)
        select = statements.get(
            "GET_OBJECTS_COUNT_BY_FILTER",
            collection=self.name,
            joins=translated.joins,
            filters=translated.filters,
        )
        row = self._connector.query(select, translated.count_params()).fetchone()
        return int(row[0]) if row else 0

    def _to_result(self, document: dict[str, Any]) -> Any:
        if self.model is not None:
            return hydrate(self.model, document)
        return document
