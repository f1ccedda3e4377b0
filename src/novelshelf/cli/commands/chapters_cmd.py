# ABOUTME: The `novelshelf chapters` command group for a novel's chapters.
# ABOUTME: Lists chapters with read marks and imports new chapters from an EPUB file.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from novelshelf.cli.options import db_option, device_option, open_store, resolve_device
from novelshelf.core.importer import import_epub_chapters
from novelshelf.db.catalog import LibraryCatalog
from novelshelf.db.mapping import VariantType
from novelshelf.db.progress import ReadingProgressTracker
from novelshelf.formats.epub import EpubReadError

console = Console()


@click.group("chapters")
def chapters() -> None:
    """Manage a novel's chapters."""


@chapters.command("ls")
@click.argument("novel_id", type=int)
@db_option
@device_option
def chapters_ls(novel_id: int, db_path: Path | None, device_id: str | None) -> None:
    """List a novel's chapters, marking the ones already read."""
    device = resolve_device(device_id)
    with open_store(db_path) as store:
        catalog = LibraryCatalog(store)
        novel = catalog.get_novel(novel_id)
        if novel is None:
            console.print(f"[red]Novel {novel_id} not found.[/red]")
            raise SystemExit(1)

        rows = catalog.list_chapters(novel_id)
        read = ReadingProgressTracker(store).get_read_map([row.id for row in rows], device)

    if not rows:
        console.print(f"[yellow]{novel.title} has no chapters yet.[/yellow]")
        return

    table = Table(title=novel.title)
    table.add_column("ID", style="dim", width=5)
    table.add_column("#", justify="right")
    table.add_column("Title", style="bold")
    table.add_column("Read", justify="center")

    for chapter in rows:
        table.add_row(
            str(chapter.id),
            str(chapter.seq),
            chapter.display_title or "",
            "[green]x[/green]" if chapter.id in read else "",
        )

    console.print(table)


@chapters.command("import-epub")
@click.argument("novel_id", type=int)
@click.argument("path", type=click.Path(path_type=Path))
@click.option("--lang", default="en", help="Language of the chapter text (default: en).")
@click.option(
    "--variant-type",
    type=click.Choice([member.value for member in VariantType]),
    default=VariantType.RAW.value,
    help="Kind of text the EPUB holds (default: raw).",
)
@db_option
def chapters_import_epub(
    novel_id: int, path: Path, lang: str, variant_type: str, db_path: Path | None
) -> None:
    """Append the chapters of an EPUB file to a novel."""
    with open_store(db_path) as store:
        catalog = LibraryCatalog(store)
        try:
            result = import_epub_chapters(
                path, novel_id, catalog, lang=lang, variant_type=VariantType(variant_type)
            )
        except (EpubReadError, ValueError) as exc:
            console.print(f"[red]{exc}[/red]")
            raise SystemExit(1) from exc

    last_seq = result.first_seq + result.added - 1
    console.print(
        f"[green]Imported {result.added} chapter(s)[/green] "
        f"as {result.first_seq}-{last_seq} of novel {novel_id}."
    )
