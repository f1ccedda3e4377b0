# ABOUTME: The `novelshelf export` and `novelshelf import` commands.
# ABOUTME: Writes the library to a ZIP archive and merges an archive back in as new novels.

from pathlib import Path

import click
from rich.console import Console

from novelshelf.cli.options import db_option, open_store
from novelshelf.core.transfer import TransferError, export_library, import_library
from novelshelf.db.errors import ConstraintViolation

console = Console()


@click.command("export")
@click.argument("dest", type=click.Path(path_type=Path))
@db_option
def export_command(dest: Path, db_path: Path | None) -> None:
    """Export the whole library to a ZIP archive."""
    with open_store(db_path) as store:
        count = export_library(store, dest)

    console.print(f"[green]Exported {count} novel(s)[/green] to {dest}.")


@click.command("import")
@click.argument("src", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@db_option
def import_command(src: Path, db_path: Path | None) -> None:
    """Import novels from an exported ZIP archive."""
    with open_store(db_path) as store:
        try:
            count = import_library(store, src)
        except (TransferError, ConstraintViolation) as exc:
            console.print(f"[red]Import failed: {exc}[/red]")
            raise SystemExit(1) from exc

    console.print(f"[green]Imported {count} novel(s)[/green] from {src}.")
