# ABOUTME: EPUB chapter extraction using ebooklib, with BeautifulSoup for HTML-to-text.
# ABOUTME: Yields readable chapters in spine order and skips covers, TOCs, and front matter.

import logging
import re
from dataclasses import dataclass
from pathlib import Path

import ebooklib
from bs4 import BeautifulSoup
from ebooklib import epub

logger = logging.getLogger(__name__)

MIN_CHAPTER_CHARS = 60

_FRONT_MATTER_ID = re.compile(r"cover|title[-_ ]?page", re.IGNORECASE)
_FRONT_MATTER_TITLE = re.compile(
    r"table of contents|\bcontents\b|\btoc\b|copyright|title page", re.IGNORECASE
)


class EpubReadError(Exception):
    """Raised when an EPUB file cannot be read or parsed."""


@dataclass
class EpubChapter:
    """One chapter's heading and plain text."""

    title: str | None
    text: str


def html_to_text(html: str) -> str:
    """Convert chapter HTML to paragraphs separated by blank lines."""
    soup = BeautifulSoup(html, "lxml")
    for element in soup(["head", "script", "style", "nav", "header", "footer"]):
        element.decompose()

    text = soup.get_text(separator="\n", strip=True)
    lines = [line.strip() for line in text.split("\n") if line.strip()]
    return "\n\n".join(lines)


def extract_title(html: str) -> str | None:
    """First h1/h2/h3 heading, else the <title>, else None."""
    soup = BeautifulSoup(html, "lxml")
    for tag in ("h1", "h2", "h3", "title"):
        heading = soup.find(tag)
        if heading:
            title = heading.get_text(" ", strip=True)
            if title:
                return title
    return None


def _decode(content: bytes) -> str:
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError:
        return content.decode("latin-1")


def _spine_documents(book: epub.EpubBook) -> list[epub.EpubItem]:
    """Document items in reading order, falling back to manifest order."""
    items = []
    for idref, _linear in book.spine:
        item = book.get_item_with_id(idref)
        if item is not None and item.get_type() == ebooklib.ITEM_DOCUMENT:
            items.append(item)
    if not items:
        items = list(book.get_items_of_type(ebooklib.ITEM_DOCUMENT))
    return [item for item in items if not isinstance(item, epub.EpubNav)]


def _is_front_matter(item: epub.EpubItem, title: str | None, text: str) -> bool:
    if _FRONT_MATTER_ID.search(item.get_id() or "") or _FRONT_MATTER_ID.search(
        item.get_name() or ""
    ):
        return True
    if title and (_FRONT_MATTER_TITLE.search(title) or title.strip().lower() == "information"):
        return True
    return len(" ".join(text.split())) < MIN_CHAPTER_CHARS


def read_epub_chapters(path: Path) -> list[EpubChapter]:
    """Extract readable chapters from an EPUB file.

    Args:
        path: Path to the EPUB file.

    Returns:
        Chapters in spine order. Covers, title pages, tables of contents,
        copyright pages, and fragments shorter than MIN_CHAPTER_CHARS are
        left out.

    Raises:
        EpubReadError: If the file cannot be read or holds no readable chapters.
    """
    if not path.exists():
        raise EpubReadError(f"File not found: {path}")

    try:
        book = epub.read_epub(str(path), options={"ignore_ncx": True})
    except Exception as exc:
        raise EpubReadError(f"Failed to read EPUB: {path}: {exc}") from exc

    chapters: list[EpubChapter] = []
    for item in _spine_documents(book):
        html = _decode(item.get_content())
        title = extract_title(html)
        text = html_to_text(html)
        if _is_front_matter(item, title, text):
            logger.debug("Skipping %s (%s)", item.get_name(), title or "untitled")
            continue
        chapters.append(EpubChapter(title=title, text=text))

    if not chapters:
        raise EpubReadError(f"No readable chapters found in EPUB: {path}")

    return chapters
