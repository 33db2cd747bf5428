# ABOUTME: The `comicshelf organize` command for automatic organization.
# ABOUTME: Resolves metadata, detects series, reviews consolidations, and moves files.

import logging
from collections.abc import Sequence
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from comicshelf.cli.lookup import open_lookup_client
from comicshelf.cli.options import (
    api_option,
    dry_run_option,
    output_dir_option,
    recursive_option,
)
from comicshelf.cli.progress import resolve_with_progress
from comicshelf.cli.review import ConsolidationReview
from comicshelf.core.consolidation import (
    apply_consolidation,
    find_potential_groups,
    find_series_within_folders,
)
from comicshelf.core.organizer import (
    DEFAULT_OUTPUT_DIR,
    Assignment,
    OrganizeResult,
    execute_plan,
    group_assignments,
    plan_assignments,
)
from comicshelf.core.scanner import find_comic_files
from comicshelf.core.series import create_series_lookup_map, detect_series_groups
from comicshelf.metadata.resolver import MetadataResolver
from comicshelf.metadata.types import ComicMetadata

logger = logging.getLogger(__name__)

_SAMPLE_FILES = 3


def _print_plan(
    console: Console,
    assignments: Sequence[Assignment],
    records_by_file: dict[Path, ComicMetadata],
) -> None:
    table = Table(title="Organization plan")
    table.add_column("Folder", style="bold")
    table.add_column("Files", justify="right")
    table.add_column("Examples")
    table.add_column("Confidence")

    for folder, members in group_assignments(assignments).items():
        sample = ", ".join(a.file.name for a in members[:_SAMPLE_FILES])
        if len(members) > _SAMPLE_FILES:
            sample += f", +{len(members) - _SAMPLE_FILES} more"
        confidences = sorted(
            {
                records_by_file[a.file].confidence.value
                for a in members
                if a.file in records_by_file
            }
        )
        label = escape(folder)
        if any(a.consolidated for a in members):
            label += " [dim](consolidated)[/dim]"
        table.add_row(label, str(len(members)), escape(sample), ", ".join(confidences))

    console.print(table)


def _print_summary(console: Console, result: OrganizeResult, dry_run: bool) -> None:
    if dry_run:
        console.print(
            f"\n[bold]Dry run:[/bold] {result.would_move} of {result.processed} "
            f"file(s) would be moved."
        )
    else:
        console.print(
            f"\n[bold]Done:[/bold] {result.moved} of {result.processed} file(s) moved."
        )
    for file, error in result.errors:
        console.print(f"  [red]Error:[/red] {escape(file.name)}: {escape(error)}")


@click.command()
@click.argument("source", type=click.Path(exists=True, file_okay=False, path_type=Path))
@output_dir_option
@api_option
@dry_run_option
@recursive_option
@click.option(
    "--consolidate/--no-consolidate",
    default=True,
    help="Offer to merge similar folders before moving (default: --consolidate).",
)
@click.option(
    "-q",
    "--quiet",
    is_flag=True,
    default=False,
    help="Accept all consolidation suggestions without prompting.",
)
def organize(
    source: Path,
    output_dir: Path | None,
    use_api: bool,
    dry_run: bool,
    recursive: bool,
    consolidate: bool,
    quiet: bool,
) -> None:
    """Organize comic files from SOURCE into publisher/series folders."""
    console = Console()

    if output_dir is None:
        output_dir = DEFAULT_OUTPUT_DIR

    files = find_comic_files(source, recursive=recursive)
    if not files:
        console.print("[yellow]No comic files found.[/yellow]")
        return

    console.print(f"Found [bold]{len(files)}[/bold] comic file(s) in {escape(str(source))}")

    with open_lookup_client(use_api) as lookup_client:
        resolver = MetadataResolver(lookup_client=lookup_client)
        records = resolve_with_progress(resolver, files, use_api, console)

    groups = detect_series_groups(files, records)
    logger.debug("Detected %d series group(s)", len(groups))
    assignments = plan_assignments(records, files, create_series_lookup_map(groups))

    if consolidate:
        folders = list(group_assignments(assignments))
        folder_groups = find_potential_groups(folders)
        within_groups = find_series_within_folders(assignments)
        if folder_groups or within_groups:
            review = ConsolidationReview(console=console, quiet=quiet)
            accepted = review.review_plan(folder_groups, within_groups, assignments)
            assignments = apply_consolidation(assignments, accepted)

    _print_plan(console, assignments, dict(zip(files, records)))

    result = execute_plan(assignments, output_dir, dry_run=dry_run)
    _print_summary(console, result, dry_run)
    if result.errors:
        raise SystemExit(1)
