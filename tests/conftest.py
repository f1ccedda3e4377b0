# ABOUTME: Shared pytest fixtures for novelshelf tests.
# ABOUTME: Provides a migrated store, a catalog, seeded novels, and sample EPUB files.

from collections.abc import Iterator
from pathlib import Path

import pytest
from ebooklib import epub

from novelshelf.db.catalog import LibraryCatalog
from novelshelf.db.connection import open_library
from novelshelf.db.mapping import NewChapter, NewNovel
from novelshelf.db.store import NovelStore

CHAPTER_TEXT = (
    "The caravan reached the mountain pass at dusk, and the old guide "
    "refused to go any further until the lanterns had been lit."
)


@pytest.fixture()
def db_path(tmp_path: Path) -> Path:
    """Provide a temporary database path."""
    return tmp_path / "library.db"


@pytest.fixture()
def store(db_path: Path) -> Iterator[NovelStore]:
    """Provide a fully migrated NovelStore that is closed after the test."""
    store = open_library(db_path)
    yield store
    store.close()


@pytest.fixture()
def catalog(store: NovelStore) -> LibraryCatalog:
    """Provide a LibraryCatalog over the temporary store."""
    return LibraryCatalog(store)


@pytest.fixture()
def novel_id(catalog: LibraryCatalog) -> int:
    """Add a sample novel and return its ID."""
    return catalog.add_novel(NewNovel(title="Lord of Mysteries", author="Cuttlefish"))


@pytest.fixture()
def chapter_ids(catalog: LibraryCatalog, novel_id: int) -> list[int]:
    """Add five chapters (seq 1-5) to the sample novel and return their IDs in order."""
    return [
        catalog.add_chapter(NewChapter(novel_id=novel_id, seq=seq, display_title=f"Ch {seq}"))
        for seq in range(1, 6)
    ]


def _chapter(file_name: str, title: str, body: str) -> epub.EpubHtml:
    item = epub.EpubHtml(title=title, file_name=file_name, lang="en")
    item.content = f"<html><body><h1>{title}</h1>{body}</body></html>".encode()
    return item


@pytest.fixture()
def novel_epub(tmp_path: Path) -> Path:
    """Create an EPUB with a title page and three readable chapters.

    Spine: nav, title page (short, skipped), Chapter One, Chapter Two, Chapter Three.
    """
    book = epub.EpubBook()
    book.set_identifier("novelshelf-test-0001")
    book.set_title("Lord of Mysteries")
    book.set_language("en")
    book.add_author("Cuttlefish")

    title_page = epub.EpubHtml(title="Title Page", file_name="titlepage.xhtml", lang="en")
    title_page.content = b"<html><body><p>Lord of Mysteries</p></body></html>"
    chapters = [
        _chapter("chap01.xhtml", "Chapter One", f"<p>{CHAPTER_TEXT}</p><p>Crimson moon.</p>"),
        _chapter("chap02.xhtml", "Chapter Two", f"<p>{CHAPTER_TEXT}</p><p>The tarot club.</p>"),
        _chapter("chap03.xhtml", "Chapter Three", f"<p>{CHAPTER_TEXT}</p><p>Fool.</p>"),
    ]

    book.add_item(title_page)
    for chapter in chapters:
        book.add_item(chapter)

    book.toc = [
        epub.Link(chapter.file_name, chapter.title, chapter.file_name.split(".")[0])
        for chapter in chapters
    ]
    book.add_item(epub.EpubNcx())
    book.add_item(epub.EpubNav())
    book.spine = ["nav", title_page, *chapters]

    filepath = tmp_path / "lord_of_mysteries.epub"
    epub.write_epub(str(filepath), book)
    return filepath


@pytest.fixture()
def empty_epub(tmp_path: Path) -> Path:
    """Create a structurally valid EPUB whose only document is too short to be a chapter."""
    book = epub.EpubBook()
    book.set_identifier("novelshelf-test-empty")
    book.set_title("Empty")
    book.set_language("en")

    page = epub.EpubHtml(title="Note", file_name="note.xhtml", lang="en")
    page.content = b"<html><body><p>Short note.</p></body></html>"
    book.add_item(page)

    book.toc = [epub.Link("note.xhtml", "Note", "note")]
    book.add_item(epub.EpubNcx())
    book.add_item(epub.EpubNav())
    book.spine = ["nav", page]

    filepath = tmp_path / "empty.epub"
    epub.write_epub(str(filepath), book)
    return filepath


@pytest.fixture()
def corrupt_epub(tmp_path: Path) -> Path:
    """Create a corrupt file that is not a valid EPUB."""
    filepath = tmp_path / "corrupt.epub"
    filepath.write_text("this is not a valid epub file")
    return filepath
