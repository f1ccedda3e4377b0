# ABOUTME: The `novelshelf migrate` command for bringing the schema up to date.
# ABOUTME: Reports the schema version and how many revisions were applied.

from pathlib import Path

import click
from rich.console import Console

from novelshelf.cli.options import db_option, open_store
from novelshelf.db.migrations import get_schema_version
from novelshelf.db.schema import MIGRATIONS

console = Console()


@click.command("migrate")
@db_option
def migrate(db_path: Path | None) -> None:
    """Apply pending schema revisions to the library database."""
    with open_store(db_path) as store:
        applied = store.migrate()
        version = get_schema_version(store)

    if applied:
        console.print(f"Applied [green]{applied}[/green] revision(s).")
    else:
        console.print("[dim]Schema already up to date.[/dim]")
    console.print(f"Schema version [bold]{version}[/bold] of {len(MIGRATIONS)}.")
