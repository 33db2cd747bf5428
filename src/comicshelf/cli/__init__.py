# ABOUTME: CLI package for comicshelf, built on Click.
# ABOUTME: Defines the root command group, wires logging, and registers subcommands.

import click

from comicshelf.cli.commands import (
    consolidate_cmd,
    flatten_cmd,
    inspect_cmd,
    manual_cmd,
    organize_cmd,
    rename_cmd,
    series_cmd,
)
from comicshelf.logging_setup import setup_logging


@click.group()
@click.version_option(package_name="comicshelf")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Show debug logging.")
def cli(verbose: bool) -> None:
    """comicshelf - organize comic files into publisher/series folders."""
    setup_logging("DEBUG" if verbose else "WARNING")


cli.add_command(organize_cmd.organize)
cli.add_command(manual_cmd.manual)
cli.add_command(consolidate_cmd.consolidate)
cli.add_command(inspect_cmd.inspect)
cli.add_command(series_cmd.series)
cli.add_command(flatten_cmd.flatten)
cli.add_command(rename_cmd.rename)
