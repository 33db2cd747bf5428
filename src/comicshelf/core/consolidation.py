# ABOUTME: Post-hoc consolidation of near-duplicate destination folders into series folders.
# ABOUTME: Finds similar folders, un-split series inside one folder, and applies merges.

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path

from comicshelf.core.organizer import Assignment, move_file
from comicshelf.core.scanner import find_comic_files
from comicshelf.core.series import SERIES_SIMILARITY_THRESHOLD, extract_series_name, title_case
from comicshelf.metadata.similarity import calculate_similarity

logger = logging.getLogger(__name__)

# Merging folders is more destructive than grouping files, so it needs a closer match.
PLAN_FOLDER_THRESHOLD = 0.6
DISK_FOLDER_THRESHOLD = 0.7

_MIN_SERIES_NAME_LENGTH = 3

# Series extraction for folder names during planning, most specific first.
_FOLDER_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"^(.+?)(?:\s*:\s*)",
        r"^(.+?)(?:\s+(?:Volume|Vol\.?|Book|Part|Chapter)\s*\d*)",
        r"^([a-z]+?)(?:volume|vol|book|part|issue)",
        r"^(.+?)(?:\s+(?:#|Issue|No\.?)\s*\d+)",
        r"^(.+?)(?:\s*\(\d{4}\))",
        r"^(.+?)(?:\s*[-–—]\s*)",
        r"^(.+?)(?:\s+\d{2,})",
        r"^([a-z]+?)(?:\d+)",
        r"^(\w+)\s+",
    )
]

# Looser extraction for folders already on disk: only strip trailing numbering.
_DISK_FOLDER_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"^(.+?)(?:\s+[Vv]\d+)",
        r"^(.+?)(?:\s+\d{3,})",
        r"^(.+?)(?:\s+#\d+)",
        r"^(.+?)(?:\s*\(\d{4}\))",
    )
]


class ConsolidationKind(str, Enum):
    FOLDER = "folder"
    WITHIN_FOLDER = "within-folder"


@dataclass
class FolderGroup:
    """Similar folders (same publisher) that could be merged into one."""

    series_name: str
    publisher: str | None
    suggested_folder: str
    folders: list[str] = field(default_factory=list)


@dataclass
class WithinFolderGroup:
    """Files sharing one folder that look like a single series."""

    series_name: str
    parent_folder: str
    suggested_folder: str
    files: list[Assignment] = field(default_factory=list)


@dataclass
class Consolidation:
    """A merge the user accepted, ready to apply to assignments."""

    series_name: str
    new_folder: str
    kind: ConsolidationKind
    original_folders: list[str] = field(default_factory=list)
    parent_folder: str | None = None
    included_files: list[Path] = field(default_factory=list)
    excluded_files: list[Path] = field(default_factory=list)


@dataclass
class MergeResult:
    """Outcome of merging folders on disk."""

    moved: int = 0
    errors: list[tuple[Path, str]] = field(default_factory=list)
    removed_folders: list[Path] = field(default_factory=list)


def _publisher_segment(folder: str) -> str | None:
    parts = folder.split("/")
    return parts[0] if len(parts) > 1 else None


def _last_segment(folder: str) -> str:
    return folder.split("/")[-1]


def folder_series_name(folder: str) -> str:
    """Guess the series name from the last segment of a planned folder path."""
    name = _last_segment(folder)
    for pattern in _FOLDER_PATTERNS:
        match = pattern.match(name)
        if match and len(match.group(1)) >= _MIN_SERIES_NAME_LENGTH:
            return match.group(1).strip()
    return name


def disk_folder_series_name(folder: str) -> str:
    """Guess the series name of an existing folder by stripping trailing numbering."""
    name = _last_segment(folder)
    for pattern in _DISK_FOLDER_PATTERNS:
        match = pattern.match(name)
        if match:
            return match.group(1).strip()
    return name


def _cluster_folders(
    folders: Sequence[str],
    series_names: Sequence[str],
    threshold: float,
    *,
    suggest_existing: bool,
) -> list[FolderGroup]:
    processed: set[int] = set()
    groups: list[FolderGroup] = []

    for i, folder in enumerate(folders):
        if i in processed:
            continue
        processed.add(i)
        publisher = _publisher_segment(folder)
        group = FolderGroup(
            series_name=series_names[i],
            publisher=publisher,
            suggested_folder=_suggest(folder, publisher, series_names[i], suggest_existing),
            folders=[folder],
        )

        for j in range(i + 1, len(folders)):
            if j in processed:
                continue
            other = folders[j]
            if _publisher_segment(other) != publisher:
                continue
            if calculate_similarity(series_names[i], series_names[j]) < threshold:
                continue
            group.folders.append(other)
            processed.add(j)
            # The shorter name is usually the cleaner one.
            if len(series_names[j]) < len(group.series_name):
                group.series_name = series_names[j]
                group.suggested_folder = _suggest(
                    other, publisher, series_names[j], suggest_existing
                )

        if len(group.folders) > 1:
            groups.append(group)

    groups.sort(key=lambda g: len(g.folders), reverse=True)
    return groups


def _suggest(folder: str, publisher: str | None, series: str, suggest_existing: bool) -> str:
    if suggest_existing:
        return folder
    return f"{publisher}/{series}" if publisher else series


def find_potential_groups(
    folders: Sequence[str], threshold: float = PLAN_FOLDER_THRESHOLD
) -> list[FolderGroup]:
    """Find planned folders with similar series names under the same publisher."""
    names = [folder_series_name(f) for f in folders]
    return _cluster_folders(folders, names, threshold, suggest_existing=False)


def find_similar_folders(
    folders: Sequence[str], threshold: float = DISK_FOLDER_THRESHOLD
) -> list[FolderGroup]:
    """Find existing output folders that look like duplicates of each other.

    The suggested target is whichever existing folder has the shortest
    series name, so merges reuse a folder instead of inventing one.
    """
    names = [disk_folder_series_name(f) for f in folders]
    return _cluster_folders(folders, names, threshold, suggest_existing=True)


def find_series_within_folders(
    assignments: Sequence[Assignment], threshold: float = SERIES_SIMILARITY_THRESHOLD
) -> list[WithinFolderGroup]:
    """Find series hiding inside a single folder.

    Catches files that all landed in one publisher-level or Unsorted bucket
    even though several of them clearly share a series name.
    """
    by_folder: dict[str, list[Assignment]] = {}
    for assignment in assignments:
        by_folder.setdefault(assignment.folder, []).append(assignment)

    groups: list[WithinFolderGroup] = []
    for folder, members in by_folder.items():
        if len(members) < 2:
            continue

        names = [extract_series_name(a.file.name) for a in members]
        processed: set[int] = set()
        for i in range(len(members)):
            if i in processed:
                continue
            processed.add(i)
            matching = [i]
            for j in range(i + 1, len(members)):
                if j in processed:
                    continue
                if calculate_similarity(names[i], names[j]) >= threshold:
                    matching.append(j)
                    processed.add(j)

            if len(matching) < 2:
                continue
            series = title_case(min((names[k] for k in matching), key=len))
            # The folder already is this series; nesting it again helps nobody.
            if calculate_similarity(series, _last_segment(folder)) >= threshold:
                continue
            groups.append(
                WithinFolderGroup(
                    series_name=series,
                    parent_folder=folder,
                    suggested_folder=f"{folder}/{series}",
                    files=[members[k] for k in matching],
                )
            )

    groups.sort(key=lambda g: len(g.files), reverse=True)
    return groups


def files_in_folders(
    assignments: Iterable[Assignment], folders: Iterable[str]
) -> list[Assignment]:
    """Assignments whose folder is one of folders."""
    wanted = set(folders)
    return [a for a in assignments if a.folder in wanted]


def apply_consolidation(
    assignments: Sequence[Assignment], consolidations: Sequence[Consolidation]
) -> list[Assignment]:
    """Remap assignment folders according to accepted consolidations.

    Excluded files keep their folder. A file-specific remap (within-folder
    groups) takes precedence over a whole-folder remap. Returns new
    Assignment objects; the input is not modified.
    """
    excluded: set[Path] = set()
    folder_remap: dict[str, str] = {}
    file_remap: dict[Path, str] = {}

    for consolidation in consolidations:
        excluded.update(consolidation.excluded_files)
        if consolidation.kind is ConsolidationKind.WITHIN_FOLDER:
            for file in consolidation.included_files:
                file_remap[file] = consolidation.new_folder
        else:
            for original in consolidation.original_folders:
                folder_remap[original] = consolidation.new_folder

    result: list[Assignment] = []
    for assignment in assignments:
        if assignment.file in excluded:
            result.append(assignment)
            continue
        new_folder = file_remap.get(assignment.file) or folder_remap.get(assignment.folder)
        if new_folder:
            result.append(replace(assignment, folder=new_folder, consolidated=True))
        else:
            result.append(assignment)
    return result


def merge_folders(output_root: Path, group: FolderGroup, target_folder: str) -> MergeResult:
    """Move every comic file from the group's folders into target_folder.

    Files are never overwritten (name collisions get a numeric suffix).
    Source folders left empty afterwards are removed.
    """
    target = output_root / target_folder
    result = MergeResult()

    for folder in group.folders:
        if folder == target_folder:
            continue
        source = output_root / folder
        for file in find_comic_files(source):
            try:
                move_file(file, target)
                result.moved += 1
            except OSError as exc:
                logger.warning("Could not move %s into %s: %s", file, target, exc)
                result.errors.append((file, str(exc)))

        if source.is_dir() and not any(source.iterdir()):
            source.rmdir()
            result.removed_folders.append(source)

    return result
