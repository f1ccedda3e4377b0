# ABOUTME: The `novelshelf folder` command group for organizing novels into folders.
# ABOUTME: Provides create, add, rm, and ls subcommands.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from novelshelf.cli.options import db_option, open_store
from novelshelf.db.catalog import LibraryCatalog
from novelshelf.db.errors import ConstraintViolation
from novelshelf.db.finder import LibraryFinder

console = Console()


@click.group("folder")
def folder() -> None:
    """Manage library folders."""


@folder.command("create")
@click.argument("name")
@click.option("--color", default=None, help="Display color, e.g. #ff8800.")
@click.option("--sort", "sort_order", type=int, default=0, help="Position in folder lists.")
@db_option
def folder_create(name: str, color: str | None, sort_order: int, db_path: Path | None) -> None:
    """Create a folder."""
    with open_store(db_path) as store:
        try:
            folder_id = LibraryCatalog(store).create_folder(name, color=color, sort=sort_order)
        except ConstraintViolation as exc:
            console.print(f"[red]Folder '{name}' already exists.[/red]")
            raise SystemExit(1) from exc

    console.print(f"Created folder [bold]{name}[/bold] ({folder_id}).")


@folder.command("add")
@click.argument("novel_id", type=int)
@click.argument("folder_id", type=int)
@db_option
def folder_add(novel_id: int, folder_id: int, db_path: Path | None) -> None:
    """File a novel into a folder."""
    with open_store(db_path) as store:
        try:
            LibraryCatalog(store).add_to_folder(novel_id, folder_id)
        except ConstraintViolation as exc:
            console.print(f"[red]Novel {novel_id} or folder {folder_id} not found.[/red]")
            raise SystemExit(1) from exc

    console.print(f"Added novel {novel_id} to folder {folder_id}.")


@folder.command("rm")
@click.argument("novel_id", type=int)
@click.argument("folder_id", type=int)
@db_option
def folder_rm(novel_id: int, folder_id: int, db_path: Path | None) -> None:
    """Take a novel out of a folder."""
    with open_store(db_path) as store:
        try:
            LibraryCatalog(store).remove_from_folder(novel_id, folder_id)
        except ValueError as exc:
            console.print(f"[red]{exc}[/red]")
            raise SystemExit(1) from exc

    console.print(f"Removed novel {novel_id} from folder {folder_id}.")


@folder.command("ls")
@db_option
def folder_ls(db_path: Path | None) -> None:
    """List folders in display order."""
    with open_store(db_path) as store:
        folders = LibraryFinder(store).load_facets().folders

    if not folders:
        console.print("[yellow]No folders in the library.[/yellow]")
        return

    table = Table()
    table.add_column("ID", style="dim", width=4)
    table.add_column("Folder", style="bold")
    table.add_column("Color")

    for item in folders:
        table.add_row(str(item.id), item.name, item.color or "")

    console.print(table)
