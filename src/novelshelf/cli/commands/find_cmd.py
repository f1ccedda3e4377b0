# ABOUTME: The `novelshelf find` command for faceted searches of the library.
# ABOUTME: Maps CLI options onto FinderFilters and renders one page of results as a Rich table.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from novelshelf.cli.options import db_option, open_store
from novelshelf.db.catalog import LibraryCatalog
from novelshelf.db.finder import Age, FinderFilters, LibraryFinder, MatchMode, SortBy, SortOrder

console = Console()

_MODES = click.Choice([mode.value for mode in MatchMode])


def _resolve(names: tuple[str, ...], lookup, kind: str) -> list[int]:
    """Turn facet names into ids, failing on the first unknown name."""
    ids = []
    for name in names:
        facet_id = lookup(name)
        if facet_id is None:
            console.print(f"[red]{kind} '{name}' not found.[/red]")
            raise SystemExit(1)
        ids.append(facet_id)
    return ids


@click.command("find")
@click.option("-q", "--query", default="", help="Substring of title, author, or slug.")
@click.option("--status", default="all", help="Novel status (default: all).")
@click.option("--release-status", default="all", help="Release status (default: all).")
@click.option(
    "--age",
    type=click.Choice([age.value for age in Age]),
    default=Age.ALL.value,
    help="Only novels added within this window.",
)
@click.option("--min-chapters", type=click.IntRange(min=0), default=0, help="Minimum chapters.")
@click.option("--genre", "genres", multiple=True, help="Genre name (repeatable).")
@click.option("--genres-mode", type=_MODES, default="or", help="Match all or any genres.")
@click.option("--tag", "tags", multiple=True, help="Tag to include (repeatable).")
@click.option("--tags-mode", type=_MODES, default="or", help="Match all or any tags.")
@click.option("--exclude-tag", "exclude_tags", multiple=True, help="Tag to exclude (repeatable).")
@click.option("--folder", "folder_include", type=int, default=None, help="Only this folder id.")
@click.option("--exclude-folder", type=int, default=None, help="Skip this folder id.")
@click.option(
    "--sort",
    "sort_by",
    type=click.Choice([sort.value for sort in SortBy]),
    default=SortBy.ADDITION_DATE.value,
    help="Sort field.",
)
@click.option(
    "--order",
    "sort_order",
    type=click.Choice([order.value for order in SortOrder]),
    default=SortOrder.DESC.value,
    help="Sort direction.",
)
@click.option("--limit", type=click.IntRange(min=0), default=25, help="Page size.")
@click.option("--offset", type=click.IntRange(min=0), default=0, help="Rows to skip.")
@db_option
def find(
    query: str,
    status: str,
    release_status: str,
    age: str,
    min_chapters: int,
    genres: tuple[str, ...],
    genres_mode: str,
    tags: tuple[str, ...],
    tags_mode: str,
    exclude_tags: tuple[str, ...],
    folder_include: int | None,
    exclude_folder: int | None,
    sort_by: str,
    sort_order: str,
    limit: int,
    offset: int,
    db_path: Path | None,
) -> None:
    """Search the library by text, status, age, chapters, genres, tags, and folders."""
    with open_store(db_path) as store:
        catalog = LibraryCatalog(store)
        filters = FinderFilters(
            query=query,
            status=status,
            release_status=release_status,
            age=Age(age),
            min_chapters=min_chapters,
            genres=_resolve(genres, catalog.genre_id, "Genre"),
            genres_mode=MatchMode(genres_mode),
            tags_include=_resolve(tags, catalog.tag_id, "Tag"),
            tags_mode=MatchMode(tags_mode),
            tags_exclude=_resolve(exclude_tags, catalog.tag_id, "Tag"),
            folder_include=folder_include,
            folder_exclude=exclude_folder,
            sort_by=SortBy(sort_by),
            sort_order=SortOrder(sort_order),
        )
        results = LibraryFinder(store).find(filters, limit=limit, offset=offset)

    if not results:
        console.print("[yellow]No novels found.[/yellow]")
        return

    table = Table()
    table.add_column("ID", style="dim", width=4)
    table.add_column("Title", style="bold")
    table.add_column("Author")
    table.add_column("Status")
    table.add_column("Ch.", justify="right")
    table.add_column("Genres")
    table.add_column("Tags", style="cyan")

    for result in results:
        table.add_row(
            str(result.id),
            result.title,
            result.author or "[dim]unknown[/dim]",
            result.status or "",
            str(result.chapter_count),
            ", ".join(result.genres),
            ", ".join(result.tags),
        )

    console.print(table)
    console.print(f"\n[dim]{len(results)} novel(s), offset {offset}[/dim]")
