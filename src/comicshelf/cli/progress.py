# ABOUTME: Rich progress display for batch metadata resolution.
# ABOUTME: Shared by the commands that resolve every file in a folder.

from collections.abc import Sequence
from pathlib import Path

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeRemainingColumn,
)

from comicshelf.metadata.resolver import MetadataResolver
from comicshelf.metadata.types import ComicMetadata


def make_progress(console: Console) -> Progress:
    """Create a Rich progress bar for batch resolution."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[bold]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeRemainingColumn(),
        console=console,
    )


def resolve_with_progress(
    resolver: MetadataResolver, files: Sequence[Path], use_api: bool, console: Console
) -> list[ComicMetadata]:
    """Resolve files in order while advancing a progress bar."""
    progress = make_progress(console)
    task_id = progress.add_task("Resolving", total=len(files))

    def on_progress(index: int, total: int, record: ComicMetadata) -> None:
        progress.update(task_id, description=record.original_filename)
        progress.advance(task_id)

    with progress:
        return resolver.resolve_batch(files, use_api=use_api, on_progress=on_progress)
