# ABOUTME: The `comicshelf consolidate` command for merging similar output folders.
# ABOUTME: Scans an organized tree for near-duplicate series folders and merges them.

from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from comicshelf.cli.review import ConsolidationReview
from comicshelf.core.consolidation import (
    DISK_FOLDER_THRESHOLD,
    find_similar_folders,
    merge_folders,
)
from comicshelf.core.scanner import scan_folders


@click.command()
@click.argument("output", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option(
    "-t",
    "--threshold",
    type=click.FloatRange(0.0, 1.0),
    default=DISK_FOLDER_THRESHOLD,
    help=f"Similarity needed to merge two folders (default {DISK_FOLDER_THRESHOLD}).",
)
@click.option(
    "-q",
    "--quiet",
    is_flag=True,
    default=False,
    help="Merge every suggestion into its suggested folder without prompting.",
)
def consolidate(output: Path, threshold: float, quiet: bool) -> None:
    """Merge similar series folders under an already organized OUTPUT tree."""
    console = Console()

    folder_files = scan_folders(output)
    groups = find_similar_folders(sorted(folder_files), threshold=threshold)
    if not groups:
        console.print("[green]No similar folders found.[/green]")
        return

    console.print(f"Found [bold]{len(groups)}[/bold] group(s) of similar folders.")
    review = ConsolidationReview(console=console, quiet=quiet)
    accepted = review.review_disk_groups(groups, folder_files)

    moved = 0
    errors = 0
    for group, target in accepted:
        result = merge_folders(output, group, target)
        moved += result.moved
        errors += len(result.errors)
        console.print(
            f"  Merged {len(group.folders)} folder(s) into [bold]{escape(target)}[/bold] "
            f"({result.moved} file(s) moved)"
        )
        for file, error in result.errors:
            console.print(f"  [red]Error:[/red] {escape(file.name)}: {escape(error)}")

    console.print(f"\n[bold]Done:[/bold] {moved} file(s) moved.")
    if errors:
        raise SystemExit(1)
