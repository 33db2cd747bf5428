# ABOUTME: ComicInfo.xml extraction from CBZ/CBR archives and parsing into EmbeddedMetadata.
# ABOUTME: Defensive wrapper: unsupported, missing, or malformed data all read as "no metadata".

import logging
import math
import xml.etree.ElementTree as ET
import zipfile
import zlib
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePosixPath

import rarfile

from comicshelf.metadata.filename import get_extension
from comicshelf.metadata.types import EmbeddedMetadata

logger = logging.getLogger(__name__)

COMIC_INFO_NAME = "comicinfo.xml"
ARCHIVE_EXTENSIONS: frozenset[str] = frozenset({".cbz", ".cbr"})


class ComicInfoReadError(Exception):
    """Raised when an archive or its ComicInfo.xml cannot be read or parsed."""


class ComicInfoStatus(str, Enum):
    """Why a read did or did not produce embedded metadata."""

    FOUND = "found"
    NOT_FOUND = "not-found"
    UNSUPPORTED = "unsupported"
    PARSE_ERROR = "parse-error"


@dataclass(frozen=True)
class ComicInfoOutcome:
    """Tagged result of reading embedded metadata from a file."""

    status: ComicInfoStatus
    metadata: EmbeddedMetadata | None = None
    detail: str | None = None


def _to_float(value: str) -> float:
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"not a finite number: {value!r}")
    return number


def _to_int(value: str) -> int:
    return int(_to_float(value))


# ComicInfo element name -> (EmbeddedMetadata field, converter)
_FIELDS: dict[str, tuple[str, Callable[[str], object]]] = {
    "Series": ("series", str),
    "Number": ("number", _to_float),
    "Volume": ("volume", _to_int),
    "Title": ("title", str),
    "Publisher": ("publisher", str),
    "Imprint": ("imprint", str),
    "Year": ("year", _to_int),
    "Month": ("month", _to_int),
    "Day": ("day", _to_int),
    "Writer": ("writer", str),
    "Penciller": ("penciller", str),
    "Inker": ("inker", str),
    "Colorist": ("colorist", str),
    "Letterer": ("letterer", str),
    "CoverArtist": ("cover_artist", str),
    "Editor": ("editor", str),
    "Summary": ("summary", str),
    "StoryArc": ("story_arc", str),
    "SeriesGroup": ("series_group", str),
    "AlternateSeries": ("alternate_series", str),
    "AlternateNumber": ("alternate_number", str),
    "Format": ("format", str),
    "AgeRating": ("age_rating", str),
    "Web": ("web", str),
    "PageCount": ("page_count", _to_int),
    "LanguageISO": ("language_iso", str),
}


def _local_name(tag: str) -> str:
    """Strip any '{namespace}' prefix from an element tag."""
    return tag.rsplit("}", 1)[-1]


def parse_comic_info(xml_text: str | bytes) -> EmbeddedMetadata:
    """Parse ComicInfo.xml content into EmbeddedMetadata.

    Blank elements become None, and numeric fields that don't parse are
    dropped rather than failing the whole document.

    Raises:
        ComicInfoReadError: If the markup is malformed or the root element
            isn't ComicInfo.
    """
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as exc:
        raise ComicInfoReadError(f"Malformed ComicInfo.xml: {exc}") from exc

    if _local_name(root.tag) != "ComicInfo":
        raise ComicInfoReadError(f"Unexpected root element: {root.tag}")

    values: dict[str, object] = {}
    for child in root:
        mapping = _FIELDS.get(_local_name(child.tag))
        if mapping is None:
            continue
        field_name, convert = mapping
        text = (child.text or "").strip()
        if not text:
            continue
        try:
            values[field_name] = convert(text)
        except ValueError:
            logger.debug("Ignoring unparseable %s value %r", child.tag, text)

    return EmbeddedMetadata(**values)  # type: ignore[arg-type]


def _find_entry(names: list[str]) -> str | None:
    """Pick the archive member whose basename is comicinfo.xml (any case)."""
    for name in names:
        if PurePosixPath(name.replace("\\", "/")).name.lower() == COMIC_INFO_NAME:
            return name
    return None


def _extract_from_cbz(path: Path) -> bytes | None:
    try:
        with zipfile.ZipFile(path) as archive:
            entry = _find_entry(archive.namelist())
            return archive.read(entry) if entry else None
    except (
        zipfile.BadZipFile,
        zlib.error,
        EOFError,
        OSError,
        KeyError,
        RuntimeError,
        NotImplementedError,
    ) as exc:
        raise ComicInfoReadError(f"Failed to read CBZ: {path}: {exc}") from exc


def _extract_from_cbr(path: Path) -> bytes | None:
    try:
        with rarfile.RarFile(path) as archive:
            entry = _find_entry(archive.namelist())
            return archive.read(entry) if entry else None
    except (rarfile.Error, OSError) as exc:
        raise ComicInfoReadError(f"Failed to read CBR: {path}: {exc}") from exc


def read_comic_info_outcome(path: Path) -> ComicInfoOutcome:
    """Read embedded ComicInfo metadata and report exactly what happened.

    Only .cbz and .cbr archives are read; everything else is UNSUPPORTED.
    """
    ext = get_extension(path)
    if ext not in ARCHIVE_EXTENSIONS:
        return ComicInfoOutcome(ComicInfoStatus.UNSUPPORTED, detail=f"extension {ext or '(none)'}")

    try:
        raw = _extract_from_cbz(path) if ext == ".cbz" else _extract_from_cbr(path)
        if raw is None:
            return ComicInfoOutcome(ComicInfoStatus.NOT_FOUND, detail="no ComicInfo.xml entry")
        metadata = parse_comic_info(raw)
    except ComicInfoReadError as exc:
        return ComicInfoOutcome(ComicInfoStatus.PARSE_ERROR, detail=str(exc))

    return ComicInfoOutcome(ComicInfoStatus.FOUND, metadata=metadata)


def read_comic_info(path: Path) -> EmbeddedMetadata | None:
    """Read embedded metadata from a comic archive, or None.

    Unsupported formats, archives without ComicInfo.xml, and read/parse
    failures all return None; this function never raises.
    """
    outcome = read_comic_info_outcome(Path(path))
    if outcome.status is not ComicInfoStatus.FOUND:
        logger.debug("No ComicInfo for %s: %s (%s)", path, outcome.status.value, outcome.detail)
        return None
    return outcome.metadata
