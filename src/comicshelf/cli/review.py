# ABOUTME: Interactive review of suggested folder consolidations.
# ABOUTME: Displays groups in Rich tables and prompts the user to accept, rename, or skip.

from collections.abc import Sequence
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from comicshelf.core.consolidation import (
    Consolidation,
    ConsolidationKind,
    FolderGroup,
    WithinFolderGroup,
    files_in_folders,
)
from comicshelf.core.organizer import Assignment

_PROMPT = "[y] Accept  [e] Edit folder  [x] Exclude files  [s] Skip"


def parse_selection(text: str, count: int) -> set[int]:
    """Parse "1, 3,5" into zero-based indexes, ignoring anything out of range."""
    selected: set[int] = set()
    for part in text.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            index = int(part) - 1
        except ValueError:
            continue
        if 0 <= index < count:
            selected.add(index)
    return selected


class ConsolidationReview:
    """Interactive review for consolidation suggestions.

    In quiet mode every suggestion is accepted with its suggested folder and
    no exclusions, without prompting.
    """

    def __init__(self, *, console: Console | None = None, quiet: bool = False) -> None:
        self._console = console or Console()
        self._quiet = quiet

    def review_plan(
        self,
        folder_groups: Sequence[FolderGroup],
        within_groups: Sequence[WithinFolderGroup],
        assignments: Sequence[Assignment],
    ) -> list[Consolidation]:
        """Review plan-time suggestions and return the accepted consolidations."""
        accepted: list[Consolidation] = []

        counts: dict[str, int] = {}
        for assignment in assignments:
            counts[assignment.folder] = counts.get(assignment.folder, 0) + 1

        for group in folder_groups:
            files = [a.file for a in files_in_folders(assignments, group.folders)]
            decision = self._decide(
                title=f"Similar folders: {escape(group.series_name)}",
                rows=[(escape(folder), str(counts.get(folder, 0))) for folder in group.folders],
                headers=("Folder", "Files"),
                suggested=group.suggested_folder,
                files=files,
            )
            if decision is None:
                continue
            new_folder, excluded = decision
            accepted.append(
                Consolidation(
                    series_name=group.series_name,
                    new_folder=new_folder,
                    kind=ConsolidationKind.FOLDER,
                    original_folders=list(group.folders),
                    included_files=[f for f in files if f not in excluded],
                    excluded_files=sorted(excluded),
                )
            )

        for within in within_groups:
            files = [a.file for a in within.files]
            decision = self._decide(
                title=(
                    f"Series inside {escape(within.parent_folder)}: "
                    f"{escape(within.series_name)}"
                ),
                rows=[(escape(file.name), escape(within.parent_folder)) for file in files],
                headers=("File", "Current folder"),
                suggested=within.suggested_folder,
                files=files,
            )
            if decision is None:
                continue
            new_folder, excluded = decision
            accepted.append(
                Consolidation(
                    series_name=within.series_name,
                    new_folder=new_folder,
                    kind=ConsolidationKind.WITHIN_FOLDER,
                    parent_folder=within.parent_folder,
                    included_files=[f for f in files if f not in excluded],
                    excluded_files=sorted(excluded),
                )
            )

        return accepted

    def review_disk_groups(
        self, groups: Sequence[FolderGroup], folder_files: dict[str, list[Path]]
    ) -> list[tuple[FolderGroup, str]]:
        """Review on-disk folder merges; returns (group, target folder) pairs."""
        accepted: list[tuple[FolderGroup, str]] = []
        for group in groups:
            if self._quiet:
                accepted.append((group, group.suggested_folder))
                continue

            self._show_table(
                f"Similar folders: {escape(group.series_name)}",
                ("Folder", "Files"),
                [
                    (escape(folder), str(len(folder_files.get(folder, []))))
                    for folder in group.folders
                ],
            )
            suggested = escape(group.suggested_folder)
            self._console.print(f"  Suggested target: [bold]{suggested}[/bold]")
            choice = click.prompt("[y] Merge  [e] Edit target  [s] Skip", type=str, default="s")
            if choice.lower() == "y":
                accepted.append((group, group.suggested_folder))
            elif choice.lower() == "e":
                target = click.prompt("Target folder", type=str, default=group.suggested_folder)
                accepted.append((group, target.strip() or group.suggested_folder))
        return accepted

    def _decide(
        self,
        *,
        title: str,
        rows: list[tuple[str, str]],
        headers: tuple[str, str],
        suggested: str,
        files: list[Path],
    ) -> tuple[str, set[Path]] | None:
        """Prompt for one suggestion.

        Returns:
            (target folder, excluded files), or None if the user skips.
        """
        if self._quiet:
            return suggested, set()

        self._show_table(title, headers, rows)
        self._console.print(f"  Suggested folder: [bold]{escape(suggested)}[/bold]")

        new_folder = suggested
        excluded: set[Path] = set()
        while True:
            choice = click.prompt(_PROMPT, type=str, default="y").lower()
            if choice == "y":
                return new_folder, excluded
            if choice == "s":
                return None
            if choice == "e":
                entered = click.prompt("Folder name", type=str, default=new_folder).strip()
                new_folder = entered or new_folder
                continue
            if choice == "x":
                for i, file in enumerate(files, start=1):
                    self._console.print(f"  {i}. {escape(file.name)}")
                text = click.prompt(
                    "File numbers to exclude (comma-separated)", type=str, default=""
                )
                excluded = {files[i] for i in parse_selection(text, len(files))}
                if len(excluded) >= len(files) - 1:
                    self._console.print("[yellow]Fewer than two files left, skipping.[/yellow]")
                    return None
                continue

    def _show_table(
        self, title: str, headers: tuple[str, str], rows: list[tuple[str, str]]
    ) -> None:
        table = Table(title=title)
        table.add_column(headers[0], style="bold")
        table.add_column(headers[1])
        for row in rows:
            table.add_row(*row)
        self._console.print(table)
