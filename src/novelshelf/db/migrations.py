# ABOUTME: Schema migration runner for the novelshelf library database.
# ABOUTME: Splits revision blobs into statements and applies each revision in its own transaction.

import logging
import re
import sqlite3
from collections.abc import Sequence
from typing import TYPE_CHECKING

from novelshelf.db.errors import LibraryError, MigrationFailure
from novelshelf.db.schema import MIGRATIONS

if TYPE_CHECKING:
    from novelshelf.db.store import NovelStore

logger = logging.getLogger(__name__)

_BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)
_TRIGGER_START = re.compile(r"^CREATE\s+(?:TEMP\s+|TEMPORARY\s+)?TRIGGER\b", re.IGNORECASE)
_TRIGGER_END = re.compile(r"END", re.IGNORECASE)


def _strip_line_comment(line: str) -> str:
    """Cut a line at the first `--` that is not inside a single-quoted literal."""
    in_literal = False
    for index, char in enumerate(line):
        if char == "'":
            in_literal = not in_literal
        elif not in_literal and line.startswith("--", index):
            return line[:index]
    return line


def split_statements(blob: str) -> list[str]:
    """Split a revision blob into individual statements.

    Drops ``--`` comments (whole lines or trailing) and ``/* */`` blocks,
    then splits on ``;``. A ``CREATE TRIGGER`` opens a unit that swallows
    every following piece up to a bare ``END``, so the semicolons inside a
    trigger body do not split it. Semicolons inside string literals are not
    supported.

    Raises:
        ValueError: If a trigger is never closed with END.
    """
    lines = [_strip_line_comment(line) for line in blob.splitlines()]
    text = _BLOCK_COMMENT.sub("", "\n".join(lines))

    statements: list[str] = []
    trigger: list[str] | None = None

    for part in text.split(";"):
        piece = part.strip()
        if not piece:
            continue

        if trigger is None and _TRIGGER_START.match(piece):
            trigger = [piece]
            continue

        if trigger is not None:
            trigger.append(piece)
            if _TRIGGER_END.fullmatch(piece):
                statements.append(";\n".join(trigger))
                trigger = None
            continue

        statements.append(piece)

    if trigger is not None:
        raise ValueError(f"Unterminated trigger: {trigger[0].splitlines()[0]}")

    return statements


def get_schema_version(store: "NovelStore") -> int:
    """Read the current schema version (PRAGMA user_version, 0 on a new file)."""
    row = store.select_one("PRAGMA user_version")
    return row[0] if row else 0


def _rollback(store: "NovelStore", revision: int) -> None:
    if not store.in_transaction:
        return
    try:
        store.rollback()
    except (LibraryError, sqlite3.Error) as exc:
        logger.warning("Rollback of schema revision %d failed: %s", revision, exc)


def apply_migrations(store: "NovelStore", migrations: Sequence[str] = MIGRATIONS) -> int:
    """Apply pending schema revisions in order.

    Revision ``i`` runs when the stored version is ``<= i``. Each revision's
    statements and the version bump to ``i + 1`` share one IMMEDIATE
    transaction, so a failure leaves both the schema and the version exactly
    as they were before that revision. No-op if already at the latest version.

    Callers must not run this concurrently on one store; ``NovelStore.migrate``
    memoizes the first successful pass.

    Returns:
        Number of revisions applied.

    Raises:
        MigrationFailure: If any statement in a revision fails.
    """
    current = get_schema_version(store)
    applied = 0

    for revision in range(current, len(migrations)):
        try:
            statements = split_statements(migrations[revision])
            store.begin()
            for statement in statements:
                store.execute(statement)
            store.execute(f"PRAGMA user_version = {revision + 1}")
            store.commit()
        except (LibraryError, sqlite3.Error, ValueError) as exc:
            _rollback(store, revision)
            raise MigrationFailure(revision, exc) from exc

        applied += 1
        logger.info("Applied schema revision %d (%d statements)", revision, len(statements))

    return applied
