# ABOUTME: The `novelshelf genre` and `novelshelf facets` commands.
# ABOUTME: Assigns genres to novels and lists every genre, tag, and folder for filtering.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from novelshelf.cli.options import db_option, open_store
from novelshelf.db.catalog import LibraryCatalog
from novelshelf.db.finder import LibraryFinder

console = Console()


@click.group("genre")
def genre() -> None:
    """Manage novel genres."""


@genre.command("add")
@click.argument("novel_id", type=int)
@click.argument("genre_name")
@db_option
def genre_add(novel_id: int, genre_name: str, db_path: Path | None) -> None:
    """Put a novel in a genre, creating the genre if it is new."""
    with open_store(db_path) as store:
        try:
            LibraryCatalog(store).add_genre(novel_id, genre_name)
        except ValueError as exc:
            console.print(f"[red]{exc}[/red]")
            raise SystemExit(1) from exc

    console.print(f"Added genre [magenta]{genre_name}[/magenta] to novel {novel_id}.")


@click.command("facets")
@db_option
def facets(db_path: Path | None) -> None:
    """List every genre, tag, and folder available for filtering."""
    with open_store(db_path) as store:
        listing = LibraryFinder(store).load_facets()

    table = Table()
    table.add_column("Kind", style="dim")
    table.add_column("ID", justify="right")
    table.add_column("Name", style="bold")

    for item in listing.genres:
        table.add_row("genre", str(item.id), item.name)
    for item in listing.tags:
        table.add_row("tag", str(item.id), item.name)
    for folder in listing.folders:
        table.add_row("folder", str(folder.id), folder.name)

    console.print(table)
