# ABOUTME: CRUD operations for the novelshelf library catalog.
# ABOUTME: Novels, chapters, variants, bookmarks, and genre/tag/folder membership.

import re
import unicodedata
from typing import Any

from novelshelf.db.mapping import (
    BOOKMARK_INSERT_COLUMNS,
    CHAPTER_INSERT_COLUMNS,
    NOVEL_INSERT_COLUMNS,
    VARIANT_INSERT_COLUMNS,
    Bookmark,
    Chapter,
    ChapterVariant,
    Folder,
    NewBookmark,
    NewChapter,
    NewChapterVariant,
    NewNovel,
    Novel,
    bookmark_to_insert_values,
    chapter_to_insert_values,
    novel_to_insert_values,
    row_to_bookmark,
    row_to_chapter,
    row_to_folder,
    row_to_novel,
    row_to_variant,
    variant_to_insert_values,
)
from novelshelf.db.schema import NOW
from novelshelf.db.store import FOLDED, NovelStore

_UPDATABLE_NOVEL_FIELDS = frozenset(NOVEL_INSERT_COLUMNS)

_VARIANT_RANK = (
    "CASE variant_type "
    "WHEN 'OFFICIAL' THEN 1 WHEN 'HUMAN' THEN 2 WHEN 'AI' THEN 3 "
    "WHEN 'MTL' THEN 4 WHEN 'RAW' THEN 5 ELSE 6 END"
)


def slugify(name: str) -> str:
    """Lowercase ASCII slug: 'Slice of Life' -> 'slice-of-life'."""
    ascii_name = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-z0-9]+", "-", ascii_name.lower()).strip("-")
    return slug or name.strip().lower()


def _insert_sql(table: str, columns: tuple[str, ...]) -> str:
    placeholders = ", ".join("?" for _ in columns)
    return f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders})"


class LibraryCatalog:
    """Typed CRUD over a NovelStore.

    Constraint failures from the store (duplicate chapter seq, duplicate
    variant kind and language, missing parent rows) propagate as
    ConstraintViolation. Lookups by id return None when nothing matches.
    """

    def __init__(self, store: NovelStore) -> None:
        self._store = store

    @property
    def store(self) -> NovelStore:
        return self._store

    # --- Novels ---

    def add_novel(self, novel: NewNovel) -> int:
        """Add a novel and return its id. The caller checks that title is not empty."""
        cursor = self._store.execute(
            _insert_sql("novels", NOVEL_INSERT_COLUMNS),
            novel_to_insert_values(novel),
        )
        return cursor.lastrowid  # type: ignore[return-value]

    def get_novel(self, novel_id: int) -> Novel | None:
        row = self._store.select_one("SELECT * FROM novels WHERE id = ?", (novel_id,))
        return row_to_novel(row) if row else None

    def list_novels(self) -> list[Novel]:
        """Return all novels, ordered by title."""
        rows = self._store.select(f"SELECT * FROM novels ORDER BY title COLLATE {FOLDED}, id")
        return [row_to_novel(row) for row in rows]

    def update_novel(self, novel_id: int, **fields: Any) -> None:
        """Update one or more columns on a novel.

        updated_at is refreshed by the database trigger, not here.

        Raises:
            ValueError: If a field is not a novel column or the novel does not exist.
        """
        if not fields:
            return

        unknown = set(fields) - _UPDATABLE_NOVEL_FIELDS
        if unknown:
            raise ValueError(f"Unknown novel field(s): {', '.join(sorted(unknown))}")

        set_clause = ", ".join(f"{name} = ?" for name in fields)
        cursor = self._store.execute(
            f"UPDATE novels SET {set_clause} WHERE id = ?",
            [*fields.values(), novel_id],
        )
        if cursor.rowcount == 0:
            raise ValueError(f"Novel with id {novel_id} not found")

    def delete_novel(self, novel_id: int) -> None:
        """Delete a novel with its chapters, variants, bookmarks, and progress.

        Raises:
            ValueError: If the novel does not exist.
        """
        cursor = self._store.execute("DELETE FROM novels WHERE id = ?", (novel_id,))
        if cursor.rowcount == 0:
            raise ValueError(f"Novel with id {novel_id} not found")

    # --- Chapters ---

    def add_chapter(self, chapter: NewChapter) -> int:
        cursor = self._store.execute(
            _insert_sql("chapters", CHAPTER_INSERT_COLUMNS),
            chapter_to_insert_values(chapter),
        )
        return cursor.lastrowid  # type: ignore[return-value]

    def get_chapter(self, chapter_id: int) -> Chapter | None:
        row = self._store.select_one("SELECT * FROM chapters WHERE id = ?", (chapter_id,))
        return row_to_chapter(row) if row else None

    def list_chapters(self, novel_id: int) -> list[Chapter]:
        """Chapters of a novel in reading order."""
        rows = self._store.select(
            "SELECT * FROM chapters WHERE novel_id = ? ORDER BY seq", (novel_id,)
        )
        return [row_to_chapter(row) for row in rows]

    def next_chapter_seq(self, novel_id: int) -> int:
        """One past the highest seq in the novel, 1 for a novel with no chapters."""
        row = self._store.select_one(
            "SELECT IFNULL(MAX(seq), 0) AS m FROM chapters WHERE novel_id = ?", (novel_id,)
        )
        return (row["m"] if row else 0) + 1

    def delete_chapter(self, chapter_id: int) -> None:
        cursor = self._store.execute("DELETE FROM chapters WHERE id = ?", (chapter_id,))
        if cursor.rowcount == 0:
            raise ValueError(f"Chapter with id {chapter_id} not found")

    # --- Variants ---

    def add_variant(self, variant: NewChapterVariant) -> int:
        cursor = self._store.execute(
            _insert_sql("chapter_variants", VARIANT_INSERT_COLUMNS),
            variant_to_insert_values(variant),
        )
        return cursor.lastrowid  # type: ignore[return-value]

    def list_variants(self, chapter_id: int) -> list[ChapterVariant]:
        """Variants of a chapter, primary ones first, then in creation order."""
        rows = self._store.select(
            "SELECT * FROM chapter_variants WHERE chapter_id = ? "
            "ORDER BY is_primary DESC, created_at ASC, id ASC",
            (chapter_id,),
        )
        return [row_to_variant(row) for row in rows]

    def get_preferred_variant(
        self, chapter_id: int, lang: str | None = None
    ) -> ChapterVariant | None:
        """Pick the variant to show for a chapter.

        With a language, variants in that language win when there are any.
        Then the primary hint wins, then the kind by trust
        (OFFICIAL, HUMAN, AI, MTL, RAW, anything else), then the oldest.
        """
        rows = self._store.select(
            "SELECT * FROM chapter_variants WHERE chapter_id = ? "
            "ORDER BY (lang = ?) DESC, is_primary DESC, "
            f"{_VARIANT_RANK} ASC, created_at ASC, id ASC LIMIT 1",
            (chapter_id, lang),
        )
        return row_to_variant(rows[0]) if rows else None

    def set_primary_variant(self, variant_id: int) -> None:
        """Make one variant the chapter's primary and clear the flag on its siblings.

        Raises:
            ValueError: If the variant does not exist.
        """
        row = self._store.select_one(
            "SELECT chapter_id FROM chapter_variants WHERE id = ?", (variant_id,)
        )
        if row is None:
            raise ValueError(f"Variant with id {variant_id} not found")

        with self._store.transaction():
            self._store.execute(
                "UPDATE chapter_variants SET is_primary = 0 "
                "WHERE chapter_id = ? AND is_primary <> 0",
                (row["chapter_id"],),
            )
            self._store.execute(
                "UPDATE chapter_variants SET is_primary = 1 WHERE id = ?", (variant_id,)
            )

    # --- Bookmarks ---

    def set_bookmark(self, bookmark: NewBookmark) -> None:
        """Create or move the bookmark for (chapter, device)."""
        columns = ", ".join(BOOKMARK_INSERT_COLUMNS)
        self._store.execute(
            f"INSERT INTO bookmarks ({columns}) VALUES (?, ?, ?) "
            "ON CONFLICT(chapter_id, device_id) DO UPDATE SET "
            f"position_pct = excluded.position_pct, updated_at = {NOW}",
            bookmark_to_insert_values(bookmark),
        )

    def get_bookmark(self, chapter_id: int, device_id: str = "") -> Bookmark | None:
        row = self._store.select_one(
            "SELECT * FROM bookmarks WHERE chapter_id = ? AND device_id = ?",
            (chapter_id, device_id),
        )
        return row_to_bookmark(row) if row else None

    # --- Tag operations ---

    def _require_novel(self, novel_id: int) -> None:
        if self.get_novel(novel_id) is None:
            raise ValueError(f"Novel with id {novel_id} not found")

    def _ensure_facet(self, table: str, name: str) -> int:
        """Return the id of the tag or genre called name, creating it if needed.

        Names match case-insensitively. A new name whose slug is already taken
        by a different name gets a numbered slug ("c", then "c-2").
        """
        row = self._store.select_one(f"SELECT id FROM {table} WHERE name = ?", (name,))
        if row is not None:
            return row["id"]

        base = slugify(name)
        slug = base
        suffix = 2
        while self._store.select_one(f"SELECT 1 FROM {table} WHERE slug = ?", (slug,)):
            slug = f"{base}-{suffix}"
            suffix += 1

        cursor = self._store.execute(
            f"INSERT INTO {table} (name, slug) VALUES (?, ?)", (name, slug)
        )
        return cursor.lastrowid  # type: ignore[return-value]

    def add_tag(self, novel_id: int, tag_name: str) -> None:
        """Tag a novel. Creates the tag if it doesn't exist. Idempotent.

        Raises:
            ValueError: If the novel does not exist.
        """
        self._require_novel(novel_id)
        with self._store.transaction():
            tag_id = self._ensure_facet("tags", tag_name)
            self._store.execute(
                "INSERT OR IGNORE INTO novel_tags (novel_id, tag_id) VALUES (?, ?)",
                (novel_id, tag_id),
            )

    def remove_tag(self, novel_id: int, tag_name: str) -> None:
        """Remove a tag from a novel.

        Raises:
            ValueError: If the tag doesn't exist or the novel isn't tagged with it.
        """
        tag_row = self._store.select_one("SELECT id FROM tags WHERE name = ?", (tag_name,))
        if tag_row is None:
            raise ValueError(f"Tag '{tag_name}' not found")

        cursor = self._store.execute(
            "DELETE FROM novel_tags WHERE novel_id = ? AND tag_id = ?",
            (novel_id, tag_row["id"]),
        )
        if cursor.rowcount == 0:
            raise ValueError(f"Novel {novel_id} is not tagged with '{tag_name}'")

    def get_tags_for_novel(self, novel_id: int) -> list[str]:
        """Get all tags for a novel, alphabetically sorted."""
        rows = self._store.select(
            "SELECT t.name FROM tags t "
            "JOIN novel_tags nt ON t.id = nt.tag_id "
            "WHERE nt.novel_id = ? "
            "ORDER BY t.name",
            (novel_id,),
        )
        return [row["name"] for row in rows]

    def list_tags(self) -> list[tuple[str, int]]:
        """List tags in use with their novel counts, alphabetically sorted."""
        rows = self._store.select(
            "SELECT t.name, COUNT(nt.novel_id) AS novel_count "
            "FROM tags t "
            "JOIN novel_tags nt ON t.id = nt.tag_id "
            "GROUP BY t.id "
            "ORDER BY t.name"
        )
        return [(row["name"], row["novel_count"]) for row in rows]

    def tag_id(self, tag_name: str) -> int | None:
        row = self._store.select_one("SELECT id FROM tags WHERE name = ?", (tag_name,))
        return row["id"] if row else None

    # --- Genre operations ---

    def add_genre(self, novel_id: int, genre_name: str) -> None:
        """Put a novel in a genre, creating the genre if needed. Idempotent.

        Raises:
            ValueError: If the novel does not exist.
        """
        self._require_novel(novel_id)
        with self._store.transaction():
            genre_id = self._ensure_facet("genres", genre_name)
            self._store.execute(
                "INSERT OR IGNORE INTO novel_genres (novel_id, genre_id) VALUES (?, ?)",
                (novel_id, genre_id),
            )

    def get_genres_for_novel(self, novel_id: int) -> list[str]:
        rows = self._store.select(
            "SELECT g.name FROM genres g "
            "JOIN novel_genres ng ON g.id = ng.genre_id "
            "WHERE ng.novel_id = ? "
            "ORDER BY g.name",
            (novel_id,),
        )
        return [row["name"] for row in rows]

    def genre_id(self, genre_name: str) -> int | None:
        row = self._store.select_one("SELECT id FROM genres WHERE name = ?", (genre_name,))
        return row["id"] if row else None

    # --- Folder operations ---

    def create_folder(self, name: str, color: str | None = None, sort: int = 0) -> int:
        cursor = self._store.execute(
            "INSERT INTO folders (name, color, sort) VALUES (?, ?, ?)", (name, color, sort)
        )
        return cursor.lastrowid  # type: ignore[return-value]

    def get_folder(self, folder_id: int) -> Folder | None:
        row = self._store.select_one("SELECT * FROM folders WHERE id = ?", (folder_id,))
        return row_to_folder(row) if row else None

    def add_to_folder(self, novel_id: int, folder_id: int) -> None:
        """File a novel into a folder. Idempotent; missing ids raise ConstraintViolation."""
        self._store.execute(
            "INSERT OR IGNORE INTO novel_folders (novel_id, folder_id) VALUES (?, ?)",
            (novel_id, folder_id),
        )

    def remove_from_folder(self, novel_id: int, folder_id: int) -> None:
        cursor = self._store.execute(
            "DELETE FROM novel_folders WHERE novel_id = ? AND folder_id = ?",
            (novel_id, folder_id),
        )
        if cursor.rowcount == 0:
            raise ValueError(f"Novel {novel_id} is not in folder {folder_id}")
