# ABOUTME: Shared Click options for comicshelf CLI commands.
# ABOUTME: Provides reusable decorators for flags like --output-dir and --dry-run.

from pathlib import Path

import click

from comicshelf.core.organizer import DEFAULT_OUTPUT_DIR

output_dir_option = click.option(
    "-o",
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help=f"Root directory for organized folders (default: ./{DEFAULT_OUTPUT_DIR}).",
)

dry_run_option = click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="Show what would be moved without touching any file.",
)

recursive_option = click.option(
    "-r",
    "--recursive",
    is_flag=True,
    default=False,
    help="Also scan subdirectories of SOURCE.",
)

api_option = click.option(
    "--api/--no-api",
    "use_api",
    default=False,
    help="Look up files the embedded metadata can't place (default: --no-api).",
)
