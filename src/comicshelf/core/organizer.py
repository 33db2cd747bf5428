# ABOUTME: Organization plan and no-clobber file moves into publisher/series folders.
# ABOUTME: Reconciles resolver output with detected series groups, then executes the plan.

import logging
import shutil
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from comicshelf.metadata.resolver import folder_segment
from comicshelf.metadata.types import UNSORTED, ComicMetadata

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_DIR = Path("comicshelf-output")

_MAX_COLLISION_ATTEMPTS = 10_000


@dataclass
class Assignment:
    """A file and the relative folder it should be moved into."""

    file: Path
    folder: str
    consolidated: bool = False


@dataclass
class MoveResult:
    """Outcome of moving (or previewing the move of) one file."""

    source: Path
    destination: Path
    moved: bool


@dataclass
class OrganizeResult:
    """Summary of executing an organization plan."""

    processed: int = 0
    moved: int = 0
    would_move: int = 0
    moves: list[MoveResult] = field(default_factory=list)
    errors: list[tuple[Path, str]] = field(default_factory=list)


def resolve_collision(path: Path) -> Path:
    """Find a non-colliding filename by appending _1, _2, etc."""
    stem = path.stem
    suffix = path.suffix
    parent = path.parent
    for counter in range(1, _MAX_COLLISION_ATTEMPTS + 1):
        candidate = parent / f"{stem}_{counter}{suffix}"
        if not candidate.exists():
            return candidate
    raise OSError(
        f"Could not find a non-colliding filename after "
        f"{_MAX_COLLISION_ATTEMPTS} attempts: {path}"
    )


def move_file(
    source: Path,
    destination_folder: Path,
    *,
    name: str | None = None,
    dry_run: bool = False,
) -> MoveResult:
    """Move a file into destination_folder without overwriting anything.

    The file keeps its name unless name is given. If a file with the target
    name already exists there, a numeric suffix (_1, _2, ...) is appended.
    With dry_run, nothing touches the disk.

    Raises:
        OSError: If the move fails.
    """
    destination = destination_folder / (name or source.name)

    if dry_run:
        return MoveResult(source=source, destination=destination, moved=False)

    if destination.resolve() == source.resolve():
        return MoveResult(source=source, destination=destination, moved=False)

    destination_folder.mkdir(parents=True, exist_ok=True)
    if destination.exists():
        renamed = resolve_collision(destination)
        logger.warning("%s already exists, moving to %s", destination, renamed.name)
        destination = renamed

    shutil.move(str(source), str(destination))
    return MoveResult(source=source, destination=destination, moved=True)


def plan_assignments(
    records: Sequence[ComicMetadata],
    paths: Sequence[Path],
    series_lookup: Mapping[Path, str] | None = None,
) -> list[Assignment]:
    """Decide the target folder for each resolved file.

    A resolver-supplied series wins. Files the resolver couldn't place in a
    series use their detected series group (under the resolver's publisher,
    or Unsorted), and otherwise keep the resolver's suggested folder.
    """
    if len(records) != len(paths):
        raise ValueError(f"{len(records)} records for {len(paths)} paths")

    lookup = series_lookup or {}
    assignments: list[Assignment] = []
    for record, path in zip(records, paths):
        folder = record.suggested_folder
        group_name = lookup.get(path)
        if record.series is None and group_name:
            folder = f"{record.publisher or UNSORTED}/{folder_segment(group_name)}"
        assignments.append(Assignment(file=path, folder=folder))
    return assignments


def group_assignments(assignments: Sequence[Assignment]) -> dict[str, list[Assignment]]:
    """Group assignments by target folder, preserving first-seen order."""
    groups: dict[str, list[Assignment]] = {}
    for assignment in assignments:
        groups.setdefault(assignment.folder, []).append(assignment)
    return groups


def execute_plan(
    assignments: Sequence[Assignment],
    output_root: Path,
    *,
    dry_run: bool = False,
) -> OrganizeResult:
    """Move every assigned file under output_root/<folder>/.

    A failed move is recorded in the result's errors and never stops the
    rest of the batch.
    """
    result = OrganizeResult(processed=len(assignments))

    for assignment in assignments:
        try:
            move = move_file(assignment.file, output_root / assignment.folder, dry_run=dry_run)
        except OSError as exc:
            logger.warning("Could not move %s: %s", assignment.file, exc)
            result.errors.append((assignment.file, str(exc)))
            continue

        result.moves.append(move)
        if move.moved:
            result.moved += 1
        elif dry_run:
            result.would_move += 1

    return result
