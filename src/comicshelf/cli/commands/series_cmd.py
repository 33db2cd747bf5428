# ABOUTME: The `comicshelf series` command for previewing detected series groups.
# ABOUTME: Groups a folder's comic files by filename similarity without moving anything.

import json
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from comicshelf.cli.options import recursive_option
from comicshelf.core.scanner import find_comic_files
from comicshelf.core.series import (
    SERIES_SIMILARITY_THRESHOLD,
    ClusteringMode,
    detect_series_groups,
)


@click.command()
@click.argument("source", type=click.Path(exists=True, file_okay=False, path_type=Path))
@recursive_option
@click.option(
    "-t",
    "--threshold",
    type=click.FloatRange(0.0, 1.0),
    default=SERIES_SIMILARITY_THRESHOLD,
    help=f"Similarity needed to group two files (default {SERIES_SIMILARITY_THRESHOLD}).",
)
@click.option(
    "--transitive",
    is_flag=True,
    default=False,
    help="Link chains of similar names into one group.",
)
@click.option("--json", "as_json", is_flag=True, default=False, help="Output as JSON.")
def series(
    source: Path, recursive: bool, threshold: float, transitive: bool, as_json: bool
) -> None:
    """Show the series groups detected among comic files in SOURCE."""
    console = Console()

    files = find_comic_files(source, recursive=recursive)
    mode = ClusteringMode.TRANSITIVE if transitive else ClusteringMode.GREEDY
    groups = detect_series_groups(files, threshold=threshold, mode=mode)

    if as_json:
        payload = [
            {
                "series": group.series_name,
                "files": [str(file) for file in group.files],
            }
            for group in groups
        ]
        click.echo(json.dumps(payload, indent=2))
        return

    if not groups:
        console.print(f"No series groups found among {len(files)} file(s).")
        return

    table = Table(title=f"{len(groups)} series group(s)")
    table.add_column("Series", style="bold")
    table.add_column("Files", justify="right")
    table.add_column("Members")
    for group in groups:
        names = "\n".join(escape(Path(file).name) for file in group.files)
        table.add_row(escape(group.series_name), str(group.file_count), names)
    console.print(table)
