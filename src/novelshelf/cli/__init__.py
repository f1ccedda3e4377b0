# ABOUTME: CLI package for novelshelf, built on Click.
# ABOUTME: Defines the root command group, logging setup, and registers subcommands.

import logging

import click

from novelshelf.cli.commands import (
    chapters_cmd,
    facets_cmd,
    find_cmd,
    folder_cmd,
    migrate_cmd,
    novel_cmd,
    progress_cmd,
    tag_cmd,
    transfer_cmd,
)


@click.group()
@click.version_option(package_name="novelshelf")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Show debug logging.")
def cli(verbose: bool) -> None:
    """novelshelf - a local-first library for serialized fiction."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


cli.add_command(migrate_cmd.migrate)
cli.add_command(novel_cmd.add)
cli.add_command(novel_cmd.info)
cli.add_command(novel_cmd.rm)
cli.add_command(find_cmd.find)
cli.add_command(find_cmd.find, name="ls")
cli.add_command(tag_cmd.tag)
cli.add_command(facets_cmd.genre)
cli.add_command(facets_cmd.facets)
cli.add_command(folder_cmd.folder)
cli.add_command(chapters_cmd.chapters)
cli.add_command(progress_cmd.progress)
cli.add_command(progress_cmd.history)
cli.add_command(transfer_cmd.export_command)
cli.add_command(transfer_cmd.import_command)
