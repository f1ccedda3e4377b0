# ABOUTME: Import pipeline that appends EPUB chapters to a novel in the library.
# ABOUTME: Each chapter gets one RAW variant; the whole file is imported in one transaction.

import logging
from dataclasses import dataclass, field
from pathlib import Path

from novelshelf.db.catalog import LibraryCatalog
from novelshelf.db.mapping import NewChapter, NewChapterVariant, VariantType
from novelshelf.formats.epub import read_epub_chapters

logger = logging.getLogger(__name__)

EPUB_PROVIDER = "epub"


@dataclass
class ImportResult:
    """Summary of an import operation."""

    added: int = 0
    first_seq: int | None = None
    chapter_ids: list[int] = field(default_factory=list)


def import_epub_chapters(
    path: Path,
    novel_id: int,
    catalog: LibraryCatalog,
    *,
    lang: str = "en",
    variant_type: VariantType = VariantType.RAW,
) -> ImportResult:
    """Append the chapters of an EPUB to a novel.

    Chapters are numbered from the novel's next free seq. Each gets a single
    primary variant in ``lang`` with provider "epub". Either every chapter
    lands or none does.

    Args:
        path: EPUB file to read.
        novel_id: Novel the chapters belong to.
        catalog: Catalog to write through.
        lang: Language code stored on the variants.
        variant_type: Variant kind stored on the variants.

    Returns:
        ImportResult with the number of chapters added and their ids.

    Raises:
        EpubReadError: If the EPUB cannot be read.
        ValueError: If the novel does not exist.
    """
    if catalog.get_novel(novel_id) is None:
        raise ValueError(f"Novel with id {novel_id} not found")

    chapters = read_epub_chapters(path)
    result = ImportResult()

    with catalog.store.transaction():
        seq = catalog.next_chapter_seq(novel_id)
        result.first_seq = seq
        for chapter in chapters:
            title = chapter.title or f"Chapter {seq}"
            chapter_id = catalog.add_chapter(
                NewChapter(novel_id=novel_id, seq=seq, display_title=title)
            )
            catalog.add_variant(
                NewChapterVariant(
                    chapter_id=chapter_id,
                    variant_type=variant_type,
                    lang=lang,
                    title=title,
                    content=chapter.text,
                    provider=EPUB_PROVIDER,
                    is_primary=True,
                )
            )
            result.chapter_ids.append(chapter_id)
            result.added += 1
            seq += 1

    logger.info("Imported %d chapter(s) from %s into novel %d", result.added, path, novel_id)
    return result
