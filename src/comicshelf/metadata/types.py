# ABOUTME: Core metadata data structures for comic file resolution.
# ABOUTME: ComicMetadata is the interchange format between resolution, grouping, and moving.

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

# Publisher segment used when no recognized comic publisher could be found.
UNSORTED = "Unsorted"


class Confidence(str, Enum):
    """Coarse trust ranking of a resolved record."""

    HIGHEST = "highest"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class MetadataSource(str, Enum):
    """Resolution stage that produced a record.

    Each source carries a fixed confidence, so the two can never disagree.
    """

    COMICINFO_XML = "comicinfo-xml"
    API_LOOKUP = "api-lookup"
    API_LOOKUP_NON_COMIC_PUBLISHER = "api-lookup-non-comic-publisher"
    PATTERN_MATCH = "pattern-match"
    PUBLISHER_DETECTION = "publisher-detection"
    FILENAME_ANALYSIS = "filename-analysis"

    @property
    def confidence(self) -> Confidence:
        return _SOURCE_CONFIDENCE[self]


_SOURCE_CONFIDENCE: dict[MetadataSource, Confidence] = {
    MetadataSource.COMICINFO_XML: Confidence.HIGHEST,
    MetadataSource.API_LOOKUP: Confidence.HIGH,
    MetadataSource.API_LOOKUP_NON_COMIC_PUBLISHER: Confidence.MEDIUM,
    MetadataSource.PATTERN_MATCH: Confidence.HIGH,
    MetadataSource.PUBLISHER_DETECTION: Confidence.MEDIUM,
    MetadataSource.FILENAME_ANALYSIS: Confidence.LOW,
}


@dataclass(frozen=True)
class EmbeddedMetadata:
    """Catalog fields read from a ComicInfo.xml entry inside an archive.

    Built fresh per file and never mutated. Every field is optional because
    real-world ComicInfo files are frequently sparse.
    """

    series: str | None = None
    number: float | None = None
    volume: int | None = None
    title: str | None = None
    publisher: str | None = None
    imprint: str | None = None
    year: int | None = None
    month: int | None = None
    day: int | None = None
    writer: str | None = None
    penciller: str | None = None
    inker: str | None = None
    colorist: str | None = None
    letterer: str | None = None
    cover_artist: str | None = None
    editor: str | None = None
    summary: str | None = None
    story_arc: str | None = None
    series_group: str | None = None
    alternate_series: str | None = None
    alternate_number: str | None = None
    format: str | None = None
    age_rating: str | None = None
    web: str | None = None
    page_count: int | None = None
    language_iso: str | None = None

    @property
    def publisher_or_imprint(self) -> str | None:
        """Publisher, falling back to the imprint when publisher is blank."""
        return self.publisher or self.imprint


@dataclass
class LookupResult:
    """Best-guess record returned by an external bibliographic search."""

    title: str
    authors: list[str] = field(default_factory=list)
    publisher: str | None = None
    published_date: str | None = None
    description: str | None = None


@dataclass
class ComicMetadata:
    """Resolved metadata for a single comic file.

    Confidence is derived from the source; use `source.confidence` rather than
    setting it by hand.
    """

    original_filename: str
    cleaned_name: str
    suggested_folder: str
    source: MetadataSource
    issue_number: float | None = None
    year: int | None = None
    series: str | None = None
    publisher: str | None = None
    title: str | None = None
    authors: list[str] = field(default_factory=list)
    published_date: str | None = None
    description: str | None = None
    source_path: Path | None = None

    @property
    def confidence(self) -> Confidence:
        return self.source.confidence

    @property
    def author(self) -> str:
        """Convenience property: joined author string for display."""
        return ", ".join(self.authors) if self.authors else ""
