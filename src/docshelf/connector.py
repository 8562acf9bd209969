"""Thin wrapper around a single sqlite3 connection."""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from typing import Any, Iterator, Sequence

logger = logging.getLogger(__name__)


class Connector:
    """Executes statements against one SQLite database.

    The connection runs in autocommit mode; multi-statement units of work
    are grouped with :meth:`transaction`.
    """

    def __init__(self, db_path: str, *, timeout: float = 5.0) -> None:
        self.db_path = db_path
        self._conn = sqlite3.connect(db_path, timeout=timeout, isolation_level=None)
        self._conn.execute("PRAGMA journal_mode=WAL")

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> Connector:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    @property
    def in_transaction(self) -> bool:
        return self._conn.in_transaction

    def execute(self, statement: str, params: Sequence[Any] = ()) -> sqlite3.Cursor:
        logger.debug("execute: %s %r", statement, params)
        return self._conn.execute(statement, params)

    def query(self, statement: str, params: Sequence[Any] = ()) -> sqlite3.Cursor:
        logger.debug("query: %s %r", statement, params)
        return self._conn.execute(statement, params)

    # --- Transaction helpers ---

    def begin_transaction(self) -> None:
        self._conn.execute("BEGIN IMMEDIATE")

    def commit_transaction(self) -> None:
        self._conn.commit()

    def rollback_transaction(self) -> None:
        self._conn.rollback()

    @contextmanager
    def transaction(self) -> Iterator[Connector]:
        """Run the enclosed statements atomically.

        Nested use joins the outer transaction.
        """
        if self._conn.in_transaction:
            yield self
            return
        self.begin_transaction()
        try:
            yield self
        except BaseException:
            self.rollback_transaction()
            raise
        self.commit_transaction()
