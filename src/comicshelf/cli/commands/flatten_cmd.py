# ABOUTME: The `comicshelf flatten` command that pulls comics out of subfolders.
# ABOUTME: Previews the folders involved, warns about name clashes, then moves files to the root.

from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from comicshelf.cli.options import dry_run_option
from comicshelf.core.flatten import files_in_subfolders, find_name_conflicts
from comicshelf.core.flatten import flatten as flatten_tree
from comicshelf.core.scanner import find_comic_files

_SAMPLE_FILES = 3


def _print_preview(console: Console, root: Path, files: list[Path]) -> None:
    by_folder: dict[Path, list[Path]] = {}
    for file in files:
        by_folder.setdefault(file.parent, []).append(file)

    table = Table(title="Files to flatten")
    table.add_column("Folder", style="bold")
    table.add_column("Files", justify="right")
    table.add_column("Examples")
    for folder, members in sorted(by_folder.items()):
        sample = ", ".join(f.name for f in members[:_SAMPLE_FILES])
        if len(members) > _SAMPLE_FILES:
            sample += f", +{len(members) - _SAMPLE_FILES} more"
        table.add_row(
            escape(str(folder.relative_to(root))), str(len(members)), escape(sample)
        )
    console.print(table)


@click.command()
@click.argument("source", type=click.Path(exists=True, file_okay=False, path_type=Path))
@dry_run_option
def flatten(source: Path, dry_run: bool) -> None:
    """Move every comic file in SOURCE's subfolders up into SOURCE."""
    console = Console()

    total = len(find_comic_files(source, recursive=True))
    files = files_in_subfolders(source)
    console.print(
        f"Found [bold]{total}[/bold] comic file(s); [bold]{len(files)}[/bold] in subfolders."
    )
    if not files:
        console.print("[yellow]No files found in subfolders. Nothing to flatten.[/yellow]")
        return

    _print_preview(console, source, files)

    conflicts = find_name_conflicts(source, files)
    if conflicts:
        console.print(
            f"[yellow]Warning:[/yellow] {len(conflicts)} file name(s) already taken; "
            "a numeric suffix will be added:"
        )
        for name in conflicts:
            console.print(f"  {escape(name)}")

    result = flatten_tree(source, dry_run=dry_run)
    if dry_run:
        console.print(f"\n[bold]Dry run:[/bold] {result.would_move} file(s) would be moved.")
    else:
        console.print(
            f"\n[bold]Done:[/bold] {result.moved} file(s) moved, "
            f"{len(result.removed_folders)} empty folder(s) removed."
        )
    for file, error in result.errors:
        console.print(f"  [red]Error:[/red] {escape(file.name)}: {escape(error)}")
    if result.errors:
        raise SystemExit(1)
