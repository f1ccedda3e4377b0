# ABOUTME: The `novelshelf add`, `info`, and `rm` commands for single novels.
# ABOUTME: Creates novels, shows detailed metadata with chapter and tag info, and deletes them.

from datetime import datetime
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from novelshelf.cli.options import db_option, open_store
from novelshelf.db.catalog import LibraryCatalog
from novelshelf.db.mapping import NewNovel

console = Console()


def _format_time(epoch: int) -> str:
    return datetime.fromtimestamp(epoch).strftime("%Y-%m-%d %H:%M")


@click.command("add")
@click.argument("title")
@click.option("--author", default=None, help="Author name.")
@click.option("--description", default=None, help="Short synopsis.")
@click.option("--lang", "lang_original", default=None, help="Original language code, e.g. zh-CN.")
@click.option("--status", default=None, help="ongoing, completed, hiatus, dropped, ...")
@click.option("--release-status", default=None, help="Release status, e.g. released.")
@click.option("--slug", default=None, help="Short identifier for the novel.")
@click.option("--cover", "cover_path", default=None, help="Cover image path or URL.")
@db_option
def add(
    title: str,
    author: str | None,
    description: str | None,
    lang_original: str | None,
    status: str | None,
    release_status: str | None,
    slug: str | None,
    cover_path: str | None,
    db_path: Path | None,
) -> None:
    """Add a novel to the library."""
    title = title.strip()
    if not title:
        console.print("[red]Title must not be empty.[/red]")
        raise SystemExit(1)

    with open_store(db_path) as store:
        novel_id = LibraryCatalog(store).add_novel(
            NewNovel(
                title=title,
                author=author,
                description=description,
                cover_path=cover_path,
                lang_original=lang_original,
                status=status,
                release_status=release_status,
                slug=slug,
            )
        )

    console.print(f"Added [bold]{title}[/bold] as novel {novel_id}.")


@click.command("info")
@click.argument("novel_id", type=int)
@db_option
def info(novel_id: int, db_path: Path | None) -> None:
    """Show detailed metadata for a novel by ID."""
    with open_store(db_path) as store:
        catalog = LibraryCatalog(store)
        novel = catalog.get_novel(novel_id)

        if novel is None:
            console.print(f"[red]Novel {novel_id} not found.[/red]")
            raise SystemExit(1)

        tags = catalog.get_tags_for_novel(novel_id)
        genres = catalog.get_genres_for_novel(novel_id)
        chapters = catalog.list_chapters(novel_id)

    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("Field", style="bold", width=14)
    table.add_column("Value")

    table.add_row("ID", str(novel.id))
    table.add_row("Title", novel.title)
    table.add_row("Author", novel.author or "unknown")
    if novel.lang_original:
        table.add_row("Language", novel.lang_original)
    if novel.status:
        table.add_row("Status", novel.status)
    if novel.release_status:
        table.add_row("Release", novel.release_status)
    if novel.slug:
        table.add_row("Slug", novel.slug)
    if novel.description:
        table.add_row("Description", novel.description)
    if genres:
        table.add_row("Genres", ", ".join(genres))
    if tags:
        table.add_row("Tags", ", ".join(tags))
    table.add_row("Chapters", str(len(chapters)))
    table.add_row("Added", _format_time(novel.created_at))
    table.add_row("Modified", _format_time(novel.updated_at))

    console.print(table)


@click.command("rm")
@click.argument("novel_id", type=int)
@click.option("--yes", is_flag=True, default=False, help="Do not ask for confirmation.")
@db_option
def rm(novel_id: int, yes: bool, db_path: Path | None) -> None:
    """Delete a novel with all its chapters and reading progress."""
    with open_store(db_path) as store:
        catalog = LibraryCatalog(store)
        novel = catalog.get_novel(novel_id)
        if novel is None:
            console.print(f"[red]Novel {novel_id} not found.[/red]")
            raise SystemExit(1)

        if not yes and not click.confirm(f"Delete '{novel.title}' and all its chapters?"):
            console.print("[yellow]Aborted.[/yellow]")
            return

        catalog.delete_novel(novel_id)

    console.print(f"Deleted [bold]{novel.title}[/bold].")
