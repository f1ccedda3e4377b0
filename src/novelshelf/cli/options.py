# ABOUTME: Shared Click options and helpers for novelshelf CLI commands.
# ABOUTME: Provides --db and --device-id plus a store opener that reports errors cleanly.

from pathlib import Path

import click

from novelshelf.db.connection import DEFAULT_DB_PATH, open_library
from novelshelf.db.errors import LibraryError
from novelshelf.db.store import NovelStore
from novelshelf.device import get_device_id

db_option = click.option(
    "--db",
    "db_path",
    type=click.Path(path_type=Path),
    default=None,
    help=f"Path to library database (default: {DEFAULT_DB_PATH})",
)

device_option = click.option(
    "--device-id",
    "device_id",
    default=None,
    help="Device id to read/write progress as (default: this installation's id).",
)


def open_store(db_path: Path | None) -> NovelStore:
    """Open the library, turning database-layer failures into a Click error."""
    try:
        return open_library(db_path or DEFAULT_DB_PATH)
    except LibraryError as exc:
        raise click.ClickException(str(exc)) from exc


def resolve_device(device_id: str | None) -> str:
    return device_id if device_id is not None else get_device_id()
