# ABOUTME: NovelStore, the single handle every component uses to reach SQLite.
# ABOUTME: Adds execute/select helpers, explicit transactions, and error translation.

import logging
import sqlite3
import unicodedata
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from novelshelf.db.errors import ConstraintViolation, StoreUnavailable

logger = logging.getLogger(__name__)

_UNAVAILABLE_MARKERS = ("database is locked", "unable to open", "disk i/o error")
FOLDED = "FOLDED"


def _is_unavailable(exc: sqlite3.OperationalError) -> bool:
    message = str(exc).lower()
    return any(marker in message for marker in _UNAVAILABLE_MARKERS)


def fold_text(value: str) -> str:
    """Casefold and strip accents: 'Élan' -> 'elan'."""
    decomposed = unicodedata.normalize("NFKD", value)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()


def compare_folded(left: str, right: str) -> int:
    """sqlite3 collation ordering text by its accent- and case-folded form."""
    left_key, right_key = fold_text(left), fold_text(right)
    return (left_key > right_key) - (left_key < right_key)


class NovelStore:
    """Wraps one autocommit sqlite3 connection.

    Every statement commits on its own unless it runs between ``begin()`` and
    ``commit()``/``rollback()``, or inside ``transaction()``. A store is built
    once by ``open_library`` and handed to the catalog, finder, and progress
    tracker; it is not shared across threads.
    """

    def __init__(self, conn: sqlite3.Connection, path: Path | None = None) -> None:
        self._conn = conn
        self.path = path
        self._applied_revisions: int | None = None
        conn.create_collation(FOLDED, compare_folded)

    # --- statements ---

    def execute(self, sql: str, params: Sequence[Any] = ()) -> sqlite3.Cursor:
        """Run one statement and return its cursor.

        Raises:
            ConstraintViolation: On a UNIQUE, NOT NULL, or FOREIGN KEY failure.
            StoreUnavailable: When the database is locked or cannot be read.
        """
        try:
            return self._conn.execute(sql, tuple(params))
        except sqlite3.IntegrityError as exc:
            raise ConstraintViolation(str(exc)) from exc
        except sqlite3.OperationalError as exc:
            if _is_unavailable(exc):
                raise StoreUnavailable(str(exc)) from exc
            raise

    def select(self, sql: str, params: Sequence[Any] = ()) -> list[sqlite3.Row]:
        """Run a query and return every row."""
        return self.execute(sql, params).fetchall()

    def select_one(self, sql: str, params: Sequence[Any] = ()) -> sqlite3.Row | None:
        """Run a query and return its first row, or None."""
        return self.execute(sql, params).fetchone()

    # --- transactions ---

    @property
    def in_transaction(self) -> bool:
        return self._conn.in_transaction

    def begin(self) -> None:
        """Open a write transaction, taking the write lock immediately."""
        self.execute("BEGIN IMMEDIATE")

    def commit(self) -> None:
        self.execute("COMMIT")

    def rollback(self) -> None:
        self.execute("ROLLBACK")

    @contextmanager
    def transaction(self) -> Iterator["NovelStore"]:
        """Run the enclosed statements atomically.

        Joins the caller's transaction when one is already open, so helpers
        that use this can be composed inside a larger unit of work.
        """
        if self.in_transaction:
            yield self
            return

        self.begin()
        try:
            yield self
            self.commit()
        except BaseException:
            if self.in_transaction:
                self.rollback()
            raise

    # --- lifecycle ---

    def migrate(self) -> int:
        """Bring the schema to the latest revision, at most once per store.

        Returns:
            The number of revisions applied by the first successful call.
        """
        if self._applied_revisions is None:
            from novelshelf.db.migrations import apply_migrations

            self._applied_revisions = apply_migrations(self)
        return self._applied_revisions

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> "NovelStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
