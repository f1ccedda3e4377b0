# ABOUTME: Integration tests for schema migration across the database lifecycle.
# ABOUTME: Validates that older libraries upgrade in place and keep their data and bookmarks.

import sqlite3
from pathlib import Path

from novelshelf.db.catalog import LibraryCatalog
from novelshelf.db.connection import open_library
from novelshelf.db.migrations import apply_migrations, get_schema_version
from novelshelf.db.progress import ReadingProgressTracker
from novelshelf.db.schema import MIGRATIONS
from novelshelf.db.store import NovelStore


def _store_at_revision(db_path: Path, revisions: int) -> NovelStore:
    conn = sqlite3.connect(str(db_path), isolation_level=None)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys=ON")
    store = NovelStore(conn, path=db_path)
    apply_migrations(store, MIGRATIONS[:revisions])
    return store


def _seed_core_library(store: NovelStore) -> tuple[int, list[int]]:
    """One novel with three chapters and bookmarks on chapters 1 and 3 for one device."""
    novel_id = store.execute(
        "INSERT INTO novels (title, author) VALUES ('Legacy Novel', 'Old Author')"
    ).lastrowid
    chapter_ids = [
        store.execute(
            "INSERT INTO chapters (novel_id, seq) VALUES (?, ?)", (novel_id, seq)
        ).lastrowid
        for seq in (1, 2, 3)
    ]
    store.execute(
        "INSERT INTO bookmarks (chapter_id, position_pct, device_id, created_at, updated_at) "
        "VALUES (?, 1.0, 'kindle', 1000, 1000)",
        (chapter_ids[0],),
    )
    store.execute(
        "INSERT INTO bookmarks (chapter_id, position_pct, device_id, created_at, updated_at) "
        "VALUES (?, 0.4, 'kindle', 2000, 2000)",
        (chapter_ids[2],),
    )
    return novel_id, chapter_ids


class TestMigrationLifecycle:
    """Integration tests for the migration pipeline."""

    def test_core_library_upgrades_and_keeps_novels(self, db_path: Path) -> None:
        """A library created at the first revision opens at the latest one with its data."""
        legacy = _store_at_revision(db_path, 1)
        _seed_core_library(legacy)
        legacy.close()

        store = open_library(db_path)
        assert get_schema_version(store) == len(MIGRATIONS)

        catalog = LibraryCatalog(store)
        novels = catalog.list_novels()
        assert [novel.title for novel in novels] == ["Legacy Novel"]
        assert novels[0].release_status is None
        assert len(catalog.list_chapters(novels[0].id)) == 3
        store.close()

    def test_bookmarks_seed_reading_progress(self, db_path: Path) -> None:
        """Existing bookmarks become log rows, and the newest one becomes the pointer."""
        legacy = _store_at_revision(db_path, 1)
        novel_id, chapter_ids = _seed_core_library(legacy)
        legacy.close()

        store = open_library(db_path)
        tracker = ReadingProgressTracker(store)

        assert tracker.get_read_map(chapter_ids, "kindle") == {chapter_ids[0]}
        point = tracker.get_continue_point(novel_id, "kindle")
        assert point.chapter_id == chapter_ids[2]
        assert point.position_pct == 0.4

        summary = tracker.get_summary(novel_id, "kindle")
        assert summary.last_read_seq == 3
        assert summary.total_chapters == 3
        store.close()

    def test_chapter_counts_backfilled(self, db_path: Path) -> None:
        """Novels that predate the stats table get their chapter counts filled in."""
        legacy = _store_at_revision(db_path, 2)
        novel_id, _ = _seed_core_library(legacy)
        empty_id = legacy.execute("INSERT INTO novels (title) VALUES ('Empty')").lastrowid
        legacy.close()

        store = open_library(db_path)
        counts = {
            row["novel_id"]: row["chapter_count"]
            for row in store.select("SELECT novel_id, chapter_count FROM novel_stats")
        }
        assert counts == {novel_id: 3, empty_id: 0}
        store.close()

    def test_upgraded_library_supports_facets(self, db_path: Path) -> None:
        legacy = _store_at_revision(db_path, 1)
        novel_id, _ = _seed_core_library(legacy)
        legacy.close()

        store = open_library(db_path)
        catalog = LibraryCatalog(store)
        catalog.add_tag(novel_id, "imported")
        catalog.add_genre(novel_id, "Fantasy")
        assert catalog.get_tags_for_novel(novel_id) == ["imported"]
        assert catalog.get_genres_for_novel(novel_id) == ["Fantasy"]
        store.close()

    def test_multiple_reopens_dont_break_schema(self, db_path: Path) -> None:
        """Opening the database multiple times is safe and idempotent."""
        for _ in range(3):
            store = open_library(db_path)
            assert get_schema_version(store) == len(MIGRATIONS)
            store.close()

        store = open_library(db_path)
        assert store.migrate() == 0
        store.close()
