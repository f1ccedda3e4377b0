# ABOUTME: The `novelshelf tag` command group for managing novel tags.
# ABOUTME: Provides add, rm, and ls subcommands for tagging operations.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from novelshelf.cli.options import db_option, open_store
from novelshelf.db.catalog import LibraryCatalog

console = Console()


@click.group("tag")
def tag() -> None:
    """Manage novel tags."""


@tag.command("add")
@click.argument("novel_id", type=int)
@click.argument("tag_name")
@db_option
def tag_add(novel_id: int, tag_name: str, db_path: Path | None) -> None:
    """Add a tag to a novel."""
    with open_store(db_path) as store:
        catalog = LibraryCatalog(store)

        novel = catalog.get_novel(novel_id)
        if novel is None:
            console.print(f"[red]Novel {novel_id} not found.[/red]")
            raise SystemExit(1)

        catalog.add_tag(novel_id, tag_name)

    console.print(f"Tagged [bold]{novel.title}[/bold] with [cyan]{tag_name}[/cyan].")


@tag.command("rm")
@click.argument("novel_id", type=int)
@click.argument("tag_name")
@db_option
def tag_rm(novel_id: int, tag_name: str, db_path: Path | None) -> None:
    """Remove a tag from a novel."""
    with open_store(db_path) as store:
        try:
            LibraryCatalog(store).remove_tag(novel_id, tag_name)
        except ValueError as exc:
            console.print(f"[red]{exc}[/red]")
            raise SystemExit(1) from exc

    console.print(f"Removed tag [cyan]{tag_name}[/cyan] from novel {novel_id}.")


@tag.command("ls")
@db_option
def tag_ls(db_path: Path | None) -> None:
    """List all tags with novel counts."""
    with open_store(db_path) as store:
        tags = LibraryCatalog(store).list_tags()

    if not tags:
        console.print("[yellow]No tags in the library.[/yellow]")
        return

    table = Table()
    table.add_column("Tag", style="cyan")
    table.add_column("Novels", style="dim", justify="right")

    for name, count in tags:
        table.add_row(name, str(count))

    console.print(table)
