# ABOUTME: The `novelshelf progress` group and `novelshelf history` command.
# ABOUTME: Saves reading positions and reports continue points, completion, and recent reading.

from datetime import datetime
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from novelshelf.cli.options import db_option, device_option, open_store, resolve_device
from novelshelf.db.catalog import LibraryCatalog
from novelshelf.db.errors import ConstraintViolation
from novelshelf.db.progress import ReadingProgressTracker

console = Console()


@click.group("progress")
def progress() -> None:
    """Track reading progress."""


@progress.command("save")
@click.argument("novel_id", type=int)
@click.argument("chapter_id", type=int)
@click.argument("position", type=float)
@db_option
@device_option
def progress_save(
    novel_id: int, chapter_id: int, position: float, db_path: Path | None, device_id: str | None
) -> None:
    """Record POSITION (0.0-1.0) within a chapter."""
    device = resolve_device(device_id)
    with open_store(db_path) as store:
        try:
            ReadingProgressTracker(store).save_progress(novel_id, chapter_id, position, device)
        except ConstraintViolation as exc:
            console.print(f"[red]Novel {novel_id} or chapter {chapter_id} not found.[/red]")
            raise SystemExit(1) from exc

    console.print(f"Saved chapter {chapter_id} at {min(1.0, max(0.0, position)):.0%}.")


@progress.command("show")
@click.argument("novel_id", type=int)
@db_option
@device_option
def progress_show(novel_id: int, db_path: Path | None, device_id: str | None) -> None:
    """Show where to continue a novel and how far along it is."""
    device = resolve_device(device_id)
    with open_store(db_path) as store:
        novel = LibraryCatalog(store).get_novel(novel_id)
        if novel is None:
            console.print(f"[red]Novel {novel_id} not found.[/red]")
            raise SystemExit(1)

        tracker = ReadingProgressTracker(store)
        point = tracker.get_continue_point(novel_id, device)
        furthest = tracker.get_furthest_progress(novel_id, device)
        summary = tracker.get_summary(novel_id, device)

    table = Table(show_header=False, box=None)
    table.add_column("Field", style="bold cyan", width=14)
    table.add_column("Value")

    table.add_row("Novel", novel.title)
    if point is None:
        table.add_row("Continue", "[dim]not started[/dim]")
    else:
        table.add_row("Continue", f"chapter {point.chapter_id} at {point.position_pct:.0%}")
    if furthest is not None:
        table.add_row(
            "Last logged", f"chapter {furthest.chapter_id} at {furthest.position_pct:.0%}"
        )
    table.add_row(
        "Completion",
        f"{summary.last_read_seq}/{summary.total_chapters} ({summary.percent:.0%})",
    )

    console.print(table)


@click.command("history")
@click.option("--limit", type=click.IntRange(min=1), default=None, help="Show at most N novels.")
@db_option
@device_option
def history(limit: int | None, db_path: Path | None, device_id: str | None) -> None:
    """List novels recently read on this device."""
    device = resolve_device(device_id)
    with open_store(db_path) as store:
        entries = ReadingProgressTracker(store).list_history(device, limit=limit)

    if not entries:
        console.print("[yellow]No reading history.[/yellow]")
        return

    table = Table()
    table.add_column("ID", style="dim", width=4)
    table.add_column("Title", style="bold")
    table.add_column("Chapter", justify="right")
    table.add_column("Overall", justify="right")
    table.add_column("Last read", style="dim")

    for entry in entries:
        table.add_row(
            str(entry.novel_id),
            entry.title,
            f"{entry.last_seq}/{entry.chapter_count}",
            f"{entry.overall_percent:.0%}",
            datetime.fromtimestamp(entry.last_read_at).strftime("%Y-%m-%d %H:%M"),
        )

    console.print(table)
