# ABOUTME: Faceted search over the library: compiles FinderFilters into one paginated query.
# ABOUTME: Also lists genres, tags, and folders for building filter menus.

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from novelshelf.db.mapping import Facet, Folder, row_to_facet, row_to_folder
from novelshelf.db.schema import NOW
from novelshelf.db.store import FOLDED, NovelStore

ALL = "all"


class MatchMode(str, Enum):
    AND = "and"
    OR = "or"


class SortBy(str, Enum):
    ADDITION_DATE = "addition_date"
    UPDATED_AT = "updated_at"
    TITLE = "title"
    AUTHOR = "author"
    CHAPTER_COUNT = "chapter_count"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class Age(str, Enum):
    ALL = "all"
    DAY = "24h"
    WEEK = "7d"
    MONTH = "30d"
    HALF_YEAR = "6mo"
    YEAR = "12mo"


AGE_SECONDS: dict[Age, int] = {
    Age.ALL: 0,
    Age.DAY: 86400,
    Age.WEEK: 604800,
    Age.MONTH: 2592000,
    Age.HALF_YEAR: 15811200,
    Age.YEAR: 31536000,
}

# Title and author compare ignoring case and accents; everything else by stored value.
_ORDER_EXPRESSIONS: dict[SortBy, str] = {
    SortBy.ADDITION_DATE: "n.created_at",
    SortBy.UPDATED_AT: "n.updated_at",
    SortBy.TITLE: f"n.title COLLATE {FOLDED}",
    SortBy.AUTHOR: f"n.author COLLATE {FOLDED}",
    SortBy.CHAPTER_COUNT: "IFNULL(s.chapter_count, 0)",
}

_SEPARATOR = "|"


@dataclass
class FinderFilters:
    """What to search for. Every field left at its default adds no predicate."""

    query: str = ""
    status: str = ALL
    release_status: str = ALL
    age: Age = Age.ALL
    min_chapters: int = 0
    genres: list[int] = field(default_factory=list)
    genres_mode: MatchMode = MatchMode.OR
    tags_include: list[int] = field(default_factory=list)
    tags_mode: MatchMode = MatchMode.OR
    tags_exclude: list[int] = field(default_factory=list)
    folder_include: int | None = None
    folder_exclude: int | None = None
    sort_by: SortBy = SortBy.ADDITION_DATE
    sort_order: SortOrder = SortOrder.DESC


@dataclass
class LibraryResult:
    """One novel in a finder result, with its chapter count and facet names."""

    id: int
    title: str
    author: str | None
    description: str | None
    cover_path: str | None
    status: str | None
    release_status: str | None
    created_at: int
    updated_at: int
    chapter_count: int
    genres: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)


@dataclass
class Facets:
    genres: list[Facet]
    tags: list[Facet]
    folders: list[Folder]


Predicate = tuple[str, list[Any]]


def _placeholders(count: int) -> str:
    return ", ".join("?" for _ in range(count))


def _like_pattern(term: str) -> str:
    """Wrap term for a substring LIKE, escaping its own wildcards with a backslash."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _distinct(ids: Sequence[int]) -> list[int]:
    return list(dict.fromkeys(ids))


def _membership(table: str, column: str, ids: list[int], mode: MatchMode) -> Predicate:
    """Match novels against a facet set without multiplying result rows.

    AND counts distinct matched ids per novel and compares with the set size;
    OR only asks whether any membership row exists.
    """
    marks = _placeholders(len(ids))
    if mode is MatchMode.AND:
        sql = (
            f"n.id IN (SELECT m.novel_id FROM {table} m "
            f"WHERE m.{column} IN ({marks}) "
            f"GROUP BY m.novel_id HAVING COUNT(DISTINCT m.{column}) = ?)"
        )
        return sql, [*ids, len(ids)]
    sql = f"EXISTS (SELECT 1 FROM {table} m WHERE m.novel_id = n.id AND m.{column} IN ({marks}))"
    return sql, list(ids)


def _exclusion(table: str, column: str, ids: list[int]) -> Predicate:
    marks = _placeholders(len(ids))
    sql = (
        f"NOT EXISTS (SELECT 1 FROM {table} m WHERE m.novel_id = n.id AND m.{column} IN ({marks}))"
    )
    return sql, list(ids)


def build_predicates(filters: FinderFilters) -> list[Predicate]:
    """Turn each set filter into an independent (sql, params) pair."""
    predicates: list[Predicate] = []

    term = filters.query.strip()
    if term:
        like = _like_pattern(term)
        predicates.append(
            (
                "(n.title LIKE ? ESCAPE '\\' OR n.author LIKE ? ESCAPE '\\' "
                "OR n.slug LIKE ? ESCAPE '\\')",
                [like] * 3,
            )
        )

    if filters.status and filters.status != ALL:
        predicates.append(("n.status = ?", [filters.status]))

    if filters.release_status and filters.release_status != ALL:
        predicates.append(("n.release_status = ?", [filters.release_status]))

    age_seconds = AGE_SECONDS.get(Age(filters.age), 0)
    if age_seconds > 0:
        predicates.append((f"n.created_at >= ({NOW} - ?)", [age_seconds]))

    if filters.min_chapters > 0:
        predicates.append(("IFNULL(s.chapter_count, 0) >= ?", [filters.min_chapters]))

    genres = _distinct(filters.genres)
    if genres:
        predicates.append(
            _membership("novel_genres", "genre_id", genres, MatchMode(filters.genres_mode))
        )

    tags_include = _distinct(filters.tags_include)
    if tags_include:
        predicates.append(
            _membership("novel_tags", "tag_id", tags_include, MatchMode(filters.tags_mode))
        )

    tags_exclude = _distinct(filters.tags_exclude)
    if tags_exclude:
        predicates.append(_exclusion("novel_tags", "tag_id", tags_exclude))

    if filters.folder_include is not None:
        predicates.append(
            _membership("novel_folders", "folder_id", [filters.folder_include], MatchMode.OR)
        )

    if filters.folder_exclude is not None:
        predicates.append(_exclusion("novel_folders", "folder_id", [filters.folder_exclude]))

    return predicates


def build_query(filters: FinderFilters, limit: int, offset: int) -> tuple[str, list[Any]]:
    """Compile filters into one SELECT with positional parameters.

    Chapter counts come from novel_stats and facet names from correlated
    group_concat subqueries, so each novel yields exactly one row.
    """
    predicates = build_predicates(filters)
    where = ""
    params: list[Any] = []
    if predicates:
        where = "WHERE " + " AND ".join(sql for sql, _ in predicates)
        for _, values in predicates:
            params.extend(values)

    order = _ORDER_EXPRESSIONS[SortBy(filters.sort_by)]
    direction = "ASC" if SortOrder(filters.sort_order) is SortOrder.ASC else "DESC"

    sql = (
        "SELECT n.id, n.title, n.author, n.description, n.cover_path, "
        "n.status, n.release_status, n.created_at, n.updated_at, "
        "IFNULL(s.chapter_count, 0) AS chapter_count, "
        "IFNULL((SELECT group_concat(g.name, '|') FROM novel_genres ng "
        "JOIN genres g ON g.id = ng.genre_id WHERE ng.novel_id = n.id), '') AS genres_csv, "
        "IFNULL((SELECT group_concat(t.name, '|') FROM novel_tags nt "
        "JOIN tags t ON t.id = nt.tag_id WHERE nt.novel_id = n.id), '') AS tags_csv "
        "FROM novels n "
        "LEFT JOIN novel_stats s ON s.novel_id = n.id "
        f"{where} "
        f"ORDER BY {order} {direction}, n.id {direction} "
        "LIMIT ? OFFSET ?"
    )
    params.extend([limit, offset])
    return sql, params


def _split_names(value: str | None) -> list[str]:
    return [name for name in (value or "").split(_SEPARATOR) if name]


def row_to_result(row: Any) -> LibraryResult:
    return LibraryResult(
        id=row["id"],
        title=row["title"],
        author=row["author"],
        description=row["description"],
        cover_path=row["cover_path"],
        status=row["status"],
        release_status=row["release_status"],
        created_at=int(row["created_at"] or 0),
        updated_at=int(row["updated_at"] or 0),
        chapter_count=int(row["chapter_count"] or 0),
        genres=_split_names(row["genres_csv"]),
        tags=_split_names(row["tags_csv"]),
    )


class LibraryFinder:
    """Runs faceted searches against a NovelStore."""

    def __init__(self, store: NovelStore) -> None:
        self._store = store

    def find(
        self,
        filters: FinderFilters | None = None,
        limit: int = 25,
        offset: int = 0,
    ) -> list[LibraryResult]:
        """Return one page of novels matching the filters.

        Limit and offset are passed to SQLite as given; the caller requests
        later pages. No match is an empty list, not an error.
        """
        sql, params = build_query(filters or FinderFilters(), limit, offset)
        return [row_to_result(row) for row in self._store.select(sql, params)]

    def load_facets(self) -> Facets:
        """List every genre, tag, and folder for filter menus."""
        genres = self._store.select("SELECT id, name, slug FROM genres ORDER BY name ASC")
        tags = self._store.select("SELECT id, name, slug FROM tags ORDER BY name ASC")
        folders = self._store.select(
            "SELECT id, name, color, sort FROM folders ORDER BY sort ASC, name ASC"
        )
        return Facets(
            genres=[row_to_facet(row) for row in genres],
            tags=[row_to_facet(row) for row in tags],
            folders=[row_to_folder(row) for row in folders],
        )
