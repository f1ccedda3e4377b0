# ABOUTME: Public API for the novelshelf database layer.
# ABOUTME: Exports the store, migrations, catalog, finder, progress tracker, and record types.

from novelshelf.db.catalog import LibraryCatalog
from novelshelf.db.connection import DEFAULT_DB_PATH, open_library
from novelshelf.db.errors import (
    ConstraintViolation,
    LibraryError,
    MigrationFailure,
    StoreUnavailable,
)
from novelshelf.db.finder import FinderFilters, LibraryFinder, LibraryResult
from novelshelf.db.mapping import (
    Bookmark,
    Chapter,
    ChapterVariant,
    NewBookmark,
    NewChapter,
    NewChapterVariant,
    NewNovel,
    Novel,
    VariantType,
)
from novelshelf.db.migrations import apply_migrations
from novelshelf.db.progress import ReadingProgressTracker
from novelshelf.db.store import NovelStore

__all__ = [
    "DEFAULT_DB_PATH",
    "Bookmark",
    "Chapter",
    "ChapterVariant",
    "ConstraintViolation",
    "FinderFilters",
    "LibraryCatalog",
    "LibraryError",
    "LibraryFinder",
    "LibraryResult",
    "MigrationFailure",
    "NewBookmark",
    "NewChapter",
    "NewChapterVariant",
    "NewNovel",
    "Novel",
    "NovelStore",
    "ReadingProgressTracker",
    "StoreUnavailable",
    "VariantType",
    "apply_migrations",
    "open_library",
]
