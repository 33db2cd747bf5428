# ABOUTME: The `comicshelf rename` command that renames comics in place from their metadata.
# ABOUTME: Resolves each file, previews old and new names, and confirms before renaming.

from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from comicshelf.cli.lookup import open_lookup_client
from comicshelf.cli.options import api_option, dry_run_option, recursive_option
from comicshelf.cli.progress import resolve_with_progress
from comicshelf.core.rename import (
    RENAME_EXAMPLES,
    RenameFormat,
    execute_renames,
    plan_renames,
)
from comicshelf.core.scanner import find_comic_files
from comicshelf.metadata.resolver import MetadataResolver

_FORMAT_HELP = "; ".join(f"{fmt.value}: {example}" for fmt, example in RENAME_EXAMPLES.items())


@click.command()
@click.argument("source", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option(
    "-f",
    "--format",
    "fmt",
    type=click.Choice([fmt.value for fmt in RenameFormat]),
    default=RenameFormat.PUBLISHER_SERIES_ISSUE_YEAR.value,
    show_default=True,
    help=f"Filename template ({_FORMAT_HELP}).",
)
@api_option
@recursive_option
@dry_run_option
@click.option("-y", "--yes", is_flag=True, default=False, help="Rename without asking.")
def rename(
    source: Path, fmt: str, use_api: bool, recursive: bool, dry_run: bool, yes: bool
) -> None:
    """Rename comic files in SOURCE using their resolved metadata."""
    console = Console()

    files = find_comic_files(source, recursive=recursive)
    if not files:
        console.print("[yellow]No comic files found.[/yellow]")
        return

    console.print(f"Found [bold]{len(files)}[/bold] comic file(s) in {escape(str(source))}")

    with open_lookup_client(use_api) as lookup_client:
        resolver = MetadataResolver(lookup_client=lookup_client)
        records = resolve_with_progress(resolver, files, use_api, console)

    actions = plan_renames(files, records, RenameFormat(fmt))
    if not actions:
        console.print("[green]No files need to be renamed.[/green]")
        return

    table = Table(title="Rename plan")
    table.add_column("Old name")
    table.add_column("New name", style="bold")
    for action in actions:
        table.add_row(escape(action.source.name), escape(action.new_name))
    console.print(table)

    if not dry_run and not yes:
        if not click.confirm(f"Rename {len(actions)} file(s)?", default=True):
            console.print("Rename cancelled.")
            return

    result = execute_renames(actions, dry_run=dry_run)
    if dry_run:
        console.print(f"\n[bold]Dry run:[/bold] {result.would_rename} file(s) would be renamed.")
    else:
        console.print(f"\n[bold]Done:[/bold] {result.renamed} file(s) renamed.")
    for file, error in result.errors:
        console.print(f"  [red]Error:[/red] {escape(file.name)}: {escape(error)}")
    if result.errors:
        raise SystemExit(1)
