# ABOUTME: Metadata resolver: the priority-ordered pipeline from filename to folder suggestion.
# ABOUTME: Embedded ComicInfo wins, then the external lookup, then series patterns and heuristics.

import logging
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path

from comicshelf.formats.comicinfo import read_comic_info
from comicshelf.metadata.filename import (
    clean_filename_for_lookup,
    extract_issue_number,
    extract_year,
    strip_extension,
)
from comicshelf.metadata.http import MinIntervalGate
from comicshelf.metadata.patterns import (
    DEFAULT_SERIES_CATALOG,
    SeriesPatternCatalog,
    detect_publisher_token,
)
from comicshelf.metadata.provider import LookupClient
from comicshelf.metadata.publishers import DEFAULT_PUBLISHER_TABLE, PublisherTable
from comicshelf.metadata.types import (
    UNSORTED,
    ComicMetadata,
    EmbeddedMetadata,
    MetadataSource,
)

logger = logging.getLogger(__name__)

# Minimum seconds between external lookups (the API's informal rate limit).
DEFAULT_LOOKUP_INTERVAL = 0.2

ComicInfoReader = Callable[[Path], EmbeddedMetadata | None]
ProgressCallback = Callable[[int, int, ComicMetadata], None]


def folder_segment(name: str) -> str:
    """Make a name safe to use as a single folder path segment."""
    return name.replace("/", "-").replace("\\", "-").strip()


def _join_folder(publisher: str | None, series: str) -> str:
    return "/".join(segment for segment in (publisher, series) if segment) or UNSORTED


class MetadataResolver:
    """Resolve a comic file's series, publisher, and target folder.

    Stages run in strict order and the first success wins:

    1. Embedded ComicInfo.xml (only when a path is given and it names a series).
    2. External lookup (only when enabled and the result carries a publisher).
    3. Series patterns, publisher tokens, and finally the cleaned filename.

    Reference tables, the lookup client, and the ComicInfo reader are all
    injected so tests can substitute fixtures.
    """

    def __init__(
        self,
        *,
        publishers: PublisherTable = DEFAULT_PUBLISHER_TABLE,
        catalog: SeriesPatternCatalog = DEFAULT_SERIES_CATALOG,
        lookup_client: LookupClient | None = None,
        comic_info_reader: ComicInfoReader = read_comic_info,
        gate: MinIntervalGate | None = None,
    ) -> None:
        self._publishers = publishers
        self._catalog = catalog
        self._lookup_client = lookup_client
        self._read_comic_info = comic_info_reader
        self._gate = gate if gate is not None else MinIntervalGate(DEFAULT_LOOKUP_INTERVAL)

    @property
    def publishers(self) -> PublisherTable:
        return self._publishers

    def resolve(
        self,
        filename: str,
        *,
        path: Path | None = None,
        use_api: bool = False,
    ) -> ComicMetadata:
        """Resolve metadata for a single file.

        Args:
            filename: The file's basename; all heuristics run against it.
            path: Full path to the file. Enables the embedded-metadata stage.
            use_api: Whether the external lookup stage may run.
        """
        cleaned = clean_filename_for_lookup(filename)
        issue_number = extract_issue_number(filename)
        year = extract_year(filename)

        if path is not None:
            embedded = self._read_comic_info(path)
            series = (embedded.series or "").strip() if embedded is not None else ""
            if embedded is not None and series:
                return self._from_embedded(
                    filename, cleaned, issue_number, year, embedded, series, path
                )

        if use_api:
            record = self._from_lookup(filename, cleaned, issue_number, year, path)
            if record is not None:
                return record

        return self._from_patterns(filename, cleaned, issue_number, year, path)

    def _from_embedded(
        self,
        filename: str,
        cleaned: str,
        issue_number: float | None,
        year: int | None,
        embedded: EmbeddedMetadata,
        series: str,
        path: Path,
    ) -> ComicMetadata:
        publisher = self._publishers.normalize(embedded.publisher_or_imprint) or UNSORTED
        authors = [a.strip() for a in (embedded.writer or "").split(",") if a.strip()]

        return ComicMetadata(
            original_filename=filename,
            cleaned_name=cleaned,
            suggested_folder=f"{publisher}/{folder_segment(series)}",
            source=MetadataSource.COMICINFO_XML,
            issue_number=embedded.number if embedded.number is not None else issue_number,
            year=embedded.year if embedded.year is not None else year,
            series=series,
            publisher=publisher,
            title=embedded.title,
            authors=authors,
            description=embedded.summary,
            source_path=path,
        )

    def _from_lookup(
        self,
        filename: str,
        cleaned: str,
        issue_number: float | None,
        year: int | None,
        path: Path | None,
    ) -> ComicMetadata | None:
        if self._lookup_client is None:
            logger.debug("Lookup requested for %s but no lookup client is configured", filename)
            return None

        self._gate.wait()
        result = self._lookup_client.lookup(cleaned)
        if result is None or not result.publisher:
            return None

        normalized = self._publishers.normalize(result.publisher)
        if normalized is None:
            logger.debug(
                "Publisher %r for %s is not a comic publisher", result.publisher, filename
            )
            source = MetadataSource.API_LOOKUP_NON_COMIC_PUBLISHER
            publisher = UNSORTED
        else:
            source = MetadataSource.API_LOOKUP
            publisher = normalized

        return ComicMetadata(
            original_filename=filename,
            cleaned_name=cleaned,
            suggested_folder=f"{publisher}/{folder_segment(result.title)}",
            source=source,
            issue_number=issue_number,
            year=year,
            series=result.title,
            publisher=publisher,
            title=result.title,
            authors=list(result.authors),
            published_date=result.published_date,
            description=result.description,
            source_path=path,
        )

    def _from_patterns(
        self,
        filename: str,
        cleaned: str,
        issue_number: float | None,
        year: int | None,
        path: Path | None,
    ) -> ComicMetadata:
        match = self._catalog.match_series(filename)
        detected = detect_publisher_token(filename, self._publishers)

        pattern_publisher = self._publishers.normalize(match.publisher) if match else None
        detected_publisher = self._publishers.normalize(detected)
        # Names like "#001.cbz" clean down to nothing; keep the raw stem instead.
        name = folder_segment(cleaned) or folder_segment(strip_extension(filename))

        if match is not None:
            source = MetadataSource.PATTERN_MATCH
            series: str | None = match.series
            publisher = pattern_publisher or detected_publisher
            folder = _join_folder(publisher, folder_segment(match.series))
        elif detected_publisher is not None:
            source = MetadataSource.PUBLISHER_DETECTION
            series = name or None
            publisher = detected_publisher
            folder = _join_folder(publisher, name)
        else:
            source = MetadataSource.FILENAME_ANALYSIS
            series = None
            publisher = None
            folder = _join_folder(UNSORTED, name)

        return ComicMetadata(
            original_filename=filename,
            cleaned_name=cleaned,
            suggested_folder=folder,
            source=source,
            issue_number=issue_number,
            year=year,
            series=series,
            publisher=publisher,
            source_path=path,
        )

    def resolve_batch(
        self,
        paths: Sequence[Path],
        *,
        use_api: bool = False,
        read_embedded: bool = True,
        on_progress: ProgressCallback | None = None,
    ) -> list[ComicMetadata]:
        """Resolve a batch of files sequentially, preserving input order.

        A file that fails unexpectedly still yields a low-confidence
        filename-analysis record, so one bad file never aborts the batch.
        on_progress receives (1-based index, total, record) after each file.
        """
        results: list[ComicMetadata] = []
        total = len(paths)

        for index, file_path in enumerate(paths, start=1):
            file_path = Path(file_path)
            try:
                record = self.resolve(
                    file_path.name,
                    path=file_path if read_embedded else None,
                    use_api=use_api,
                )
            except Exception:
                logger.exception("Resolution failed for %s, using filename only", file_path)
                record = self._from_patterns_only(file_path)
            results.append(record)

            if on_progress is not None:
                on_progress(index, total, record)

        return results

    def _from_patterns_only(self, file_path: Path) -> ComicMetadata:
        filename = file_path.name
        return self._from_patterns(
            filename,
            clean_filename_for_lookup(filename),
            extract_issue_number(filename),
            extract_year(filename),
            file_path,
        )


def group_by_folder(records: Iterable[ComicMetadata]) -> dict[str, list[ComicMetadata]]:
    """Group resolved records by suggested folder, preserving first-seen order."""
    groups: dict[str, list[ComicMetadata]] = {}
    for record in records:
        groups.setdefault(record.suggested_folder or UNSORTED, []).append(record)
    return groups
