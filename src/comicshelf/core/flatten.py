# ABOUTME: Flattening a comic tree: every comic in a subfolder moves up to the root.
# ABOUTME: Moves never overwrite, and folders left empty are removed deepest first.

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from comicshelf.core.organizer import MoveResult, move_file
from comicshelf.core.scanner import find_comic_files

logger = logging.getLogger(__name__)


@dataclass
class FlattenResult:
    """Summary of flattening one root folder."""

    processed: int = 0
    moved: int = 0
    would_move: int = 0
    moves: list[MoveResult] = field(default_factory=list)
    removed_folders: list[Path] = field(default_factory=list)
    errors: list[tuple[Path, str]] = field(default_factory=list)


def files_in_subfolders(root: Path) -> list[Path]:
    """Comic files anywhere below root, excluding those directly in it."""
    return [f for f in find_comic_files(root, recursive=True) if f.parent != root]


def find_subfolders(root: Path) -> list[Path]:
    """Every directory below root, sorted by path."""
    return sorted(path for path in root.rglob("*") if path.is_dir())


def find_name_conflicts(root: Path, files: Sequence[Path]) -> list[str]:
    """Filenames that will need a suffix when files are moved into root."""
    taken = {path.name for path in root.iterdir() if path.is_file()}
    conflicts: list[str] = []
    for file in files:
        if file.name in taken:
            conflicts.append(file.name)
        taken.add(file.name)
    return conflicts


def remove_empty_folders(folders: Sequence[Path]) -> list[Path]:
    """Remove the folders that are empty, deepest first so parents can empty out too."""
    removed: list[Path] = []
    for folder in sorted(folders, key=lambda p: len(p.parts), reverse=True):
        if folder.is_dir() and not any(folder.iterdir()):
            folder.rmdir()
            removed.append(folder)
    return removed


def flatten(root: Path, *, dry_run: bool = False) -> FlattenResult:
    """Move every comic file from root's subfolders into root itself.

    Name clashes get a numeric suffix. A failed move is recorded and the
    rest continue. Afterwards any subfolder left empty is removed; folders
    still holding other files stay. With dry_run nothing touches the disk.
    """
    files = files_in_subfolders(root)
    result = FlattenResult(processed=len(find_comic_files(root, recursive=True)))
    subfolders = find_subfolders(root)

    for file in files:
        try:
            move = move_file(file, root, dry_run=dry_run)
        except OSError as exc:
            logger.warning("Could not move %s: %s", file, exc)
            result.errors.append((file, str(exc)))
            continue

        result.moves.append(move)
        if move.moved:
            result.moved += 1
        elif dry_run:
            result.would_move += 1

    if not dry_run:
        result.removed_folders = remove_empty_folders(subfolders)
    return result
