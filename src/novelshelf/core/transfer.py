# ABOUTME: Library export/import as a ZIP archive holding a single data.json document.
# ABOUTME: Moves novels with their chapters, variants, bookmarks, tags, and genres between stores.

import json
import logging
import time
import zipfile
from pathlib import Path
from typing import Any

from novelshelf.db.catalog import LibraryCatalog
from novelshelf.db.mapping import VariantType
from novelshelf.db.store import NovelStore

logger = logging.getLogger(__name__)

EXPORT_VERSION = 1
DATA_ENTRY = "data.json"
_VARIANT_TYPES = {member.value for member in VariantType}


class TransferError(Exception):
    """Raised when an archive is missing, malformed, or of an unsupported version."""


def _now() -> int:
    return int(time.time())


def _export_chapter(store: NovelStore, chapter: Any) -> dict[str, Any]:
    variants = store.select(
        "SELECT variant_type, lang, title, content, source_url, provider, model_name, "
        "is_primary, created_at, updated_at FROM chapter_variants "
        "WHERE chapter_id = ? ORDER BY is_primary DESC, created_at ASC, id ASC",
        (chapter["id"],),
    )
    bookmarks = store.select(
        "SELECT position_pct, device_id, created_at, updated_at FROM bookmarks "
        "WHERE chapter_id = ? ORDER BY id",
        (chapter["id"],),
    )
    return {
        "seq": chapter["seq"],
        "volume": chapter["volume"],
        "display_title": chapter["display_title"],
        "created_at": chapter["created_at"],
        "updated_at": chapter["updated_at"],
        "variants": [
            {**dict(variant), "is_primary": 1 if variant["is_primary"] else 0}
            for variant in variants
        ],
        "bookmarks": [dict(bookmark) for bookmark in bookmarks],
    }


def build_export(store: NovelStore) -> dict[str, Any]:
    """Collect the whole library into the data.json document."""
    catalog = LibraryCatalog(store)
    novels = store.select(
        "SELECT id, title, author, description, cover_path, lang_original, status, "
        "release_status, slug, created_at, updated_at FROM novels ORDER BY updated_at DESC, id"
    )

    document: dict[str, Any] = {
        "version": EXPORT_VERSION,
        "exported_at": _now(),
        "novels": [],
    }
    for novel in novels:
        chapters = store.select(
            "SELECT id, seq, volume, display_title, created_at, updated_at "
            "FROM chapters WHERE novel_id = ? ORDER BY seq",
            (novel["id"],),
        )
        entry = {key: novel[key] for key in novel.keys() if key != "id"}
        entry["tags"] = catalog.get_tags_for_novel(novel["id"])
        entry["genres"] = catalog.get_genres_for_novel(novel["id"])
        entry["chapters"] = [_export_chapter(store, chapter) for chapter in chapters]
        document["novels"].append(entry)
    return document


def export_library(store: NovelStore, dest: Path) -> int:
    """Write the library to a ZIP archive at dest.

    Returns:
        The number of novels exported.
    """
    document = build_export(store)
    dest.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(dest, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        archive.writestr(DATA_ENTRY, json.dumps(document, ensure_ascii=False, indent=2))

    count = len(document["novels"])
    logger.info("Exported %d novel(s) to %s", count, dest)
    return count


def read_archive(src: Path) -> dict[str, Any]:
    """Load and version-check data.json from an archive.

    Raises:
        TransferError: If the archive or entry is missing, unreadable, or not version 1.
    """
    try:
        with zipfile.ZipFile(src) as archive:
            raw = archive.read(DATA_ENTRY)
    except KeyError as exc:
        raise TransferError(f"{DATA_ENTRY} not found in {src}") from exc
    except (OSError, zipfile.BadZipFile) as exc:
        raise TransferError(f"Cannot read archive {src}: {exc}") from exc

    try:
        document = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise TransferError(f"{DATA_ENTRY} is not valid JSON: {exc}") from exc

    if not isinstance(document, dict) or document.get("version") != EXPORT_VERSION:
        raise TransferError("Unsupported or missing export version.")
    return document


def _import_novel(store: NovelStore, catalog: LibraryCatalog, novel: dict[str, Any]) -> None:
    now = _now()
    title = (novel.get("title") or "").strip()
    if not title:
        raise TransferError("Novel without a title in archive")

    cursor = store.execute(
        "INSERT INTO novels (title, author, description, cover_path, lang_original, status, "
        "release_status, slug, created_at, updated_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
        (
            title,
            novel.get("author"),
            novel.get("description"),
            novel.get("cover_path"),
            novel.get("lang_original"),
            novel.get("status"),
            novel.get("release_status"),
            novel.get("slug"),
            novel.get("created_at") or now,
            novel.get("updated_at") or now,
        ),
    )
    novel_id = cursor.lastrowid

    for tag in novel.get("tags") or []:
        catalog.add_tag(novel_id, tag)
    for genre in novel.get("genres") or []:
        catalog.add_genre(novel_id, genre)

    for chapter in novel.get("chapters") or []:
        cursor = store.execute(
            "INSERT INTO chapters (novel_id, seq, volume, display_title, created_at, updated_at) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (
                novel_id,
                chapter["seq"],
                chapter.get("volume"),
                chapter.get("display_title"),
                chapter.get("created_at") or now,
                chapter.get("updated_at") or now,
            ),
        )
        chapter_id = cursor.lastrowid

        for variant in chapter.get("variants") or []:
            if variant.get("variant_type") not in _VARIANT_TYPES:
                raise TransferError(f"Unknown variant type: {variant.get('variant_type')!r}")
            store.execute(
                "INSERT INTO chapter_variants (chapter_id, variant_type, lang, title, content, "
                "source_url, provider, model_name, is_primary, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    chapter_id,
                    variant["variant_type"],
                    variant["lang"],
                    variant.get("title"),
                    variant.get("content") or "",
                    variant.get("source_url"),
                    variant.get("provider"),
                    variant.get("model_name"),
                    1 if variant.get("is_primary") else 0,
                    variant.get("created_at") or now,
                    variant.get("updated_at") or now,
                ),
            )

        for bookmark in chapter.get("bookmarks") or []:
            position = bookmark.get("position_pct")
            store.execute(
                "INSERT INTO bookmarks "
                "(chapter_id, position_pct, device_id, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?)",
                (
                    chapter_id,
                    float(position) if isinstance(position, (int, float)) else 0,
                    (bookmark.get("device_id") or "")[:128],
                    bookmark.get("created_at") or now,
                    bookmark.get("updated_at") or now,
                ),
            )


def import_library(store: NovelStore, src: Path) -> int:
    """Add every novel in an archive to the library as new rows.

    Runs in one transaction: a bad record rolls back the whole import.

    Returns:
        The number of novels imported.

    Raises:
        TransferError: If the archive is malformed.
        ConstraintViolation: If the archive breaks a uniqueness rule (e.g. duplicate seq).
    """
    document = read_archive(src)
    novels = document.get("novels") or []
    catalog = LibraryCatalog(store)

    with store.transaction():
        for novel in novels:
            try:
                _import_novel(store, catalog, novel)
            except (KeyError, TypeError, AttributeError) as exc:
                raise TransferError(f"Malformed novel record in archive: {exc}") from exc

    logger.info("Imported %d novel(s) from %s", len(novels), src)
    return len(novels)
