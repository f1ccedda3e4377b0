# ABOUTME: SQLite connection management for the novelshelf library database.
# ABOUTME: Opens or creates the database, applies migrations, and returns a NovelStore.

import os
import sqlite3
from pathlib import Path

from novelshelf.db.errors import StoreUnavailable
from novelshelf.db.store import NovelStore

DEFAULT_DATA_DIR = Path(os.environ.get("NOVELSHELF_HOME", Path.home() / ".novelshelf"))
DEFAULT_DB_PATH = DEFAULT_DATA_DIR / "library.db"
DEFAULT_TIMEOUT = 5.0


def _connect(db_path: Path, timeout: float) -> sqlite3.Connection:
    """Open the file in autocommit mode with foreign keys and WAL enabled."""
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(db_path), timeout=timeout, isolation_level=None)
    conn.row_factory = sqlite3.Row
    try:
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")
    except sqlite3.Error:
        conn.close()
        raise
    return conn


def open_library(path: Path | None = None, *, timeout: float = DEFAULT_TIMEOUT) -> NovelStore:
    """Open or create the novelshelf library database.

    Creates the database file and parent directories if they don't exist,
    then applies any pending schema revisions. Call this once per process and
    pass the returned store to the components that need it.

    Args:
        path: Path to the database file. Defaults to ~/.novelshelf/library.db.
        timeout: Seconds to wait on a locked database before giving up.

    Returns:
        A migrated NovelStore.

    Raises:
        StoreUnavailable: If the file cannot be created or opened as a database.
        MigrationFailure: If a pending schema revision fails.
    """
    db_path = path or DEFAULT_DB_PATH

    try:
        conn = _connect(db_path, timeout)
    except (OSError, sqlite3.Error) as exc:
        raise StoreUnavailable(f"Cannot open library at {db_path}: {exc}") from exc

    store = NovelStore(conn, path=db_path)
    try:
        store.migrate()
    except Exception:
        store.close()
        raise
    return store
