# ABOUTME: Typed records for stored entities and the functions that cross the row boundary.
# ABOUTME: One decode (row_to_*) and one encode (*_to_insert_values) per entity.

from dataclasses import dataclass
from enum import Enum
from typing import Any


class VariantType(str, Enum):
    """Where a chapter variant's text came from."""

    RAW = "RAW"
    OFFICIAL = "OFFICIAL"
    MTL = "MTL"
    AI = "AI"
    HUMAN = "HUMAN"


@dataclass
class Novel:
    """A novel as stored. Timestamps are epoch seconds assigned by the database."""

    id: int
    title: str
    author: str | None
    description: str | None
    cover_path: str | None
    lang_original: str | None
    status: str | None
    release_status: str | None
    slug: str | None
    created_at: int
    updated_at: int


@dataclass
class NewNovel:
    """Fields for inserting a novel. The caller makes sure title is not empty."""

    title: str
    author: str | None = None
    description: str | None = None
    cover_path: str | None = None
    lang_original: str | None = None
    status: str | None = None
    release_status: str | None = None
    slug: str | None = None


@dataclass
class Chapter:
    id: int
    novel_id: int
    seq: int
    volume: int | None
    display_title: str | None
    created_at: int
    updated_at: int


@dataclass
class NewChapter:
    novel_id: int
    seq: int
    volume: int | None = None
    display_title: str | None = None


@dataclass
class ChapterVariant:
    """One rendition of a chapter's text.

    ``is_primary`` is a selection hint only; nothing stops two variants of the
    same chapter from both carrying it.
    """

    id: int
    chapter_id: int
    variant_type: VariantType | str
    lang: str
    title: str | None
    content: str
    source_url: str | None
    provider: str | None
    model_name: str | None
    is_primary: bool
    created_at: int
    updated_at: int


@dataclass
class NewChapterVariant:
    chapter_id: int
    variant_type: VariantType | str
    lang: str
    content: str
    title: str | None = None
    source_url: str | None = None
    provider: str | None = None
    model_name: str | None = None
    is_primary: bool | None = None


@dataclass
class Bookmark:
    id: int
    chapter_id: int
    position_pct: float
    device_id: str
    created_at: int
    updated_at: int


@dataclass
class NewBookmark:
    chapter_id: int
    position_pct: float | None = None
    device_id: str | None = None


@dataclass
class Facet:
    """A genre or tag."""

    id: int
    name: str
    slug: str | None = None


@dataclass
class Folder:
    id: int
    name: str
    color: str | None = None
    sort: int = 0


# Column order for each *_to_insert_values tuple
NOVEL_INSERT_COLUMNS = (
    "title",
    "author",
    "description",
    "cover_path",
    "lang_original",
    "status",
    "release_status",
    "slug",
)
CHAPTER_INSERT_COLUMNS = ("novel_id", "seq", "volume", "display_title")
VARIANT_INSERT_COLUMNS = (
    "chapter_id",
    "variant_type",
    "lang",
    "title",
    "content",
    "source_url",
    "provider",
    "model_name",
    "is_primary",
)
BOOKMARK_INSERT_COLUMNS = ("chapter_id", "position_pct", "device_id")


def _variant_type(value: str) -> VariantType | str:
    """Decode a stored variant kind, passing unknown values through unchanged."""
    try:
        return VariantType(value)
    except ValueError:
        return value


def _variant_value(value: VariantType | str) -> str:
    return value.value if isinstance(value, VariantType) else value


def row_to_novel(row: Any) -> Novel:
    """Convert a novels row (dict-like) to a Novel."""
    return Novel(
        id=row["id"],
        title=row["title"],
        author=row["author"],
        description=row["description"],
        cover_path=row["cover_path"],
        lang_original=row["lang_original"],
        status=row["status"],
        release_status=row["release_status"],
        slug=row["slug"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def novel_to_insert_values(novel: NewNovel) -> tuple[Any, ...]:
    """Values for INSERT INTO novels in NOVEL_INSERT_COLUMNS order."""
    return (
        novel.title,
        novel.author,
        novel.description,
        novel.cover_path,
        novel.lang_original,
        novel.status,
        novel.release_status,
        novel.slug,
    )


def row_to_chapter(row: Any) -> Chapter:
    return Chapter(
        id=row["id"],
        novel_id=row["novel_id"],
        seq=row["seq"],
        volume=row["volume"],
        display_title=row["display_title"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def chapter_to_insert_values(chapter: NewChapter) -> tuple[Any, ...]:
    return (chapter.novel_id, chapter.seq, chapter.volume, chapter.display_title)


def row_to_variant(row: Any) -> ChapterVariant:
    """Convert a chapter_variants row, turning the stored 0/1 is_primary into a bool."""
    return ChapterVariant(
        id=row["id"],
        chapter_id=row["chapter_id"],
        variant_type=_variant_type(row["variant_type"]),
        lang=row["lang"],
        title=row["title"],
        content=row["content"],
        source_url=row["source_url"],
        provider=row["provider"],
        model_name=row["model_name"],
        is_primary=bool(row["is_primary"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def variant_to_insert_values(variant: NewChapterVariant) -> tuple[Any, ...]:
    """Values for INSERT INTO chapter_variants; an unset is_primary is stored as 0."""
    return (
        variant.chapter_id,
        _variant_value(variant.variant_type),
        variant.lang,
        variant.title,
        variant.content,
        variant.source_url,
        variant.provider,
        variant.model_name,
        1 if variant.is_primary else 0,
    )


def row_to_bookmark(row: Any) -> Bookmark:
    return Bookmark(
        id=row["id"],
        chapter_id=row["chapter_id"],
        position_pct=row["position_pct"],
        device_id=row["device_id"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def bookmark_to_insert_values(bookmark: NewBookmark) -> tuple[Any, ...]:
    """Values for INSERT INTO bookmarks; position defaults to 0 and device to ''."""
    return (
        bookmark.chapter_id,
        bookmark.position_pct if bookmark.position_pct is not None else 0,
        bookmark.device_id if bookmark.device_id is not None else "",
    )


def row_to_facet(row: Any) -> Facet:
    return Facet(id=row["id"], name=row["name"], slug=row["slug"])


def row_to_folder(row: Any) -> Folder:
    return Folder(id=row["id"], name=row["name"], color=row["color"], sort=row["sort"])
