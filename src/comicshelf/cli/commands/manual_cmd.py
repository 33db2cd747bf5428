# ABOUTME: The `comicshelf manual` command for rule-based organization.
# ABOUTME: Moves comic files into folders named by nested regex filters from a JSON config.

from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from comicshelf.cli.options import dry_run_option, output_dir_option, recursive_option
from comicshelf.core.filters import (
    UNMATCHED_FOLDER,
    FilterConfigError,
    apply_filters,
    load_filter_config,
)
from comicshelf.core.organizer import DEFAULT_OUTPUT_DIR, execute_plan, group_assignments
from comicshelf.core.scanner import find_comic_files


@click.command()
@click.argument("source", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.argument("config", type=click.Path(path_type=Path))
@output_dir_option
@dry_run_option
@recursive_option
@click.option(
    "--include-unmatched",
    is_flag=True,
    default=False,
    help=f"Move files no filter matched into {UNMATCHED_FOLDER}/.",
)
def manual(
    source: Path,
    config: Path,
    output_dir: Path | None,
    dry_run: bool,
    recursive: bool,
    include_unmatched: bool,
) -> None:
    """Organize comic files from SOURCE using the filters in CONFIG."""
    console = Console()

    try:
        rules = load_filter_config(config)
    except FilterConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    if output_dir is None:
        output_dir = DEFAULT_OUTPUT_DIR

    files = find_comic_files(source, recursive=recursive)
    if not files:
        console.print("[yellow]No comic files found.[/yellow]")
        return

    assignments = apply_filters(
        files, rules, unmatched_folder=UNMATCHED_FOLDER if include_unmatched else None
    )

    table = Table(title="Filter plan")
    table.add_column("Folder", style="bold")
    table.add_column("Files", justify="right")
    for folder, members in group_assignments(assignments).items():
        table.add_row(escape(folder), str(len(members)))
    console.print(table)

    unmatched = len(files) - len(assignments)
    if unmatched:
        console.print(f"[dim]{unmatched} file(s) matched no filter and stay in place.[/dim]")

    result = execute_plan(assignments, output_dir, dry_run=dry_run)
    if dry_run:
        console.print(f"\n[bold]Dry run:[/bold] {result.would_move} file(s) would be moved.")
    else:
        console.print(f"\n[bold]Done:[/bold] {result.moved} file(s) moved.")
    for file, error in result.errors:
        console.print(f"  [red]Error:[/red] {escape(file.name)}: {escape(error)}")
    if result.errors:
        raise SystemExit(1)
