# ABOUTME: Metadata-driven renaming of comic files using a small set of filename templates.
# ABOUTME: Builds new names from resolver output and renames in place without overwriting.

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from comicshelf.core.organizer import MoveResult, move_file
from comicshelf.metadata.filename import format_issue_number
from comicshelf.metadata.resolver import folder_segment
from comicshelf.metadata.types import UNSORTED, ComicMetadata

logger = logging.getLogger(__name__)


class RenameFormat(str, Enum):
    PUBLISHER_SERIES_ISSUE_YEAR = "publisher-series-issue-year"
    SERIES_ISSUE_YEAR = "series-issue-year"
    SERIES_ISSUE = "series-issue"
    PUBLISHER_SERIES_YEAR = "publisher-series-year"
    SERIES_ISSUE_YEAR_UNDERSCORES = "series-issue-year-underscores"


RENAME_EXAMPLES: dict[RenameFormat, str] = {
    RenameFormat.PUBLISHER_SERIES_ISSUE_YEAR: "Marvel - Spider-Man - Issue #001 (2023).cbz",
    RenameFormat.SERIES_ISSUE_YEAR: "Spider-Man - #001 (2023).cbz",
    RenameFormat.SERIES_ISSUE: "Spider-Man #001.cbz",
    RenameFormat.PUBLISHER_SERIES_YEAR: "Marvel - Spider-Man (2023).cbz",
    RenameFormat.SERIES_ISSUE_YEAR_UNDERSCORES: "Spider-Man_001_2023.cbz",
}


@dataclass
class RenameAction:
    """A file and the new name it should get in its current folder."""

    source: Path
    new_name: str
    record: ComicMetadata


@dataclass
class RenameResult:
    """Summary of executing rename actions."""

    renamed: int = 0
    would_rename: int = 0
    moves: list[MoveResult] = field(default_factory=list)
    errors: list[tuple[Path, str]] = field(default_factory=list)


def _issue(record: ComicMetadata) -> str | None:
    if record.issue_number is None:
        return None
    return format_issue_number(record.issue_number).zfill(3)


def _publisher(record: ComicMetadata) -> str | None:
    if not record.publisher or record.publisher == UNSORTED:
        return None
    return record.publisher


def _dashed(parts: list[str | None]) -> str | None:
    kept = [part for part in parts if part]
    return " - ".join(kept) if kept else None


def _publisher_series_issue_year(record: ComicMetadata) -> str | None:
    issue = _issue(record)
    return _dashed(
        [
            _publisher(record),
            record.series,
            f"Issue #{issue}" if issue is not None else None,
            f"({record.year})" if record.year else None,
        ]
    )


def _series_issue_year(record: ComicMetadata) -> str | None:
    issue = _issue(record)
    return _dashed(
        [
            record.series,
            f"#{issue}" if issue is not None else None,
            f"({record.year})" if record.year else None,
        ]
    )


def _series_issue(record: ComicMetadata) -> str | None:
    issue = _issue(record)
    if not record.series or issue is None:
        return None
    return f"{record.series} #{issue}"


def _publisher_series_year(record: ComicMetadata) -> str | None:
    return _dashed(
        [
            _publisher(record),
            record.series,
            f"({record.year})" if record.year else None,
        ]
    )


def _series_issue_year_underscores(record: ComicMetadata) -> str | None:
    parts = [
        "_".join(record.series.split()) if record.series else None,
        _issue(record),
        str(record.year) if record.year else None,
    ]
    kept = [part for part in parts if part]
    return "_".join(kept) if kept else None


_FORMATTERS: dict[RenameFormat, Callable[[ComicMetadata], str | None]] = {
    RenameFormat.PUBLISHER_SERIES_ISSUE_YEAR: _publisher_series_issue_year,
    RenameFormat.SERIES_ISSUE_YEAR: _series_issue_year,
    RenameFormat.SERIES_ISSUE: _series_issue,
    RenameFormat.PUBLISHER_SERIES_YEAR: _publisher_series_year,
    RenameFormat.SERIES_ISSUE_YEAR_UNDERSCORES: _series_issue_year_underscores,
}


def format_filename(record: ComicMetadata, fmt: RenameFormat, extension: str) -> str | None:
    """Build a new filename for record, or None if the template has nothing to use.

    Empty fields are left out of the template rather than rendered blank.
    Path separators in the metadata are replaced so the result stays a
    single filename.
    """
    stem = _FORMATTERS[fmt](record)
    if not stem:
        return None
    stem = folder_segment(stem)
    return f"{stem}{extension}" if stem else None


def plan_renames(
    files: Sequence[Path], records: Sequence[ComicMetadata], fmt: RenameFormat
) -> list[RenameAction]:
    """Pair each file with its new name, skipping files whose name wouldn't change.

    Raises:
        ValueError: If records is not aligned with files.
    """
    if len(records) != len(files):
        raise ValueError(f"{len(records)} records for {len(files)} files")

    actions: list[RenameAction] = []
    for file, record in zip(files, records):
        new_name = format_filename(record, fmt, file.suffix)
        if new_name is None:
            logger.debug("No %s name for %s", fmt.value, file.name)
            continue
        if new_name == file.name:
            continue
        actions.append(RenameAction(source=file, new_name=new_name, record=record))
    return actions


def execute_renames(actions: Sequence[RenameAction], *, dry_run: bool = False) -> RenameResult:
    """Rename each file in place; an existing target gets a numeric suffix."""
    result = RenameResult()

    for action in actions:
        try:
            move = move_file(
                action.source, action.source.parent, name=action.new_name, dry_run=dry_run
            )
        except OSError as exc:
            logger.warning("Could not rename %s: %s", action.source, exc)
            result.errors.append((action.source, str(exc)))
            continue

        result.moves.append(move)
        if move.moved:
            result.renamed += 1
        elif dry_run:
            result.would_rename += 1

    return result
