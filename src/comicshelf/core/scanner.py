# ABOUTME: Directory scanning for comic files and the folders that hold them.
# ABOUTME: Finds .cbr/.cbz/.pdf/.epub files and maps output folders to their contents.

from collections import defaultdict
from pathlib import Path

COMIC_EXTENSIONS: frozenset[str] = frozenset({".cbr", ".cbz", ".pdf", ".epub"})


def is_comic_file(path: Path) -> bool:
    """Whether path has a recognized comic extension (case-insensitive)."""
    return path.suffix.lower() in COMIC_EXTENSIONS


def find_comic_files(directory: Path, *, recursive: bool = False) -> list[Path]:
    """Find comic files in a directory, sorted by path.

    Args:
        directory: Directory to search, or a single file.
        recursive: Whether to descend into subdirectories.
    """
    if directory.is_file():
        return [directory] if is_comic_file(directory) else []
    candidates = directory.rglob("*") if recursive else directory.glob("*")
    return sorted(path for path in candidates if path.is_file() and is_comic_file(path))


def scan_folders(root: Path) -> dict[str, list[Path]]:
    """Map each subfolder of root holding comic files to those files.

    Keys are POSIX-style paths relative to root ("DC Comics/Batman").
    Files directly under root are not included.
    """
    folders: dict[str, list[Path]] = defaultdict(list)
    for path in find_comic_files(root, recursive=True):
        relative = path.parent.relative_to(root)
        if relative.parts:
            folders[relative.as_posix()].append(path)
    return dict(folders)
