# ABOUTME: Unit tests for MetadataResolver.
# ABOUTME: Tests stage priority, folder suggestions, lookup gating, and batch error handling.

import logging
from pathlib import Path

import pytest

from comicshelf.metadata.http import MinIntervalGate
from comicshelf.metadata.resolver import MetadataResolver, group_by_folder
from comicshelf.metadata.types import (
    UNSORTED,
    ComicMetadata,
    Confidence,
    EmbeddedMetadata,
    LookupResult,
    MetadataSource,
)
from tests.fixtures.archives import comic_info_xml, write_damaged_cbz


class FakeLookupClient:
    """Lookup client returning a canned result and recording every query."""

    def __init__(self, result: LookupResult | None = None) -> None:
        self._result = result
        self.calls: list[str] = []

    @property
    def name(self) -> str:
        return "fake"

    def lookup(self, query: str) -> LookupResult | None:
        self.calls.append(query)
        return self._result


class FakeReader:
    """ComicInfo reader returning canned metadata and recording paths."""

    def __init__(self, metadata: EmbeddedMetadata | None = None) -> None:
        self._metadata = metadata
        self.calls: list[Path] = []

    def __call__(self, path: Path) -> EmbeddedMetadata | None:
        self.calls.append(path)
        return self._metadata


class CountingGate(MinIntervalGate):
    def __init__(self) -> None:
        super().__init__(0.0)
        self.waits = 0

    def wait(self) -> None:
        self.waits += 1


def _resolver(
    embedded: EmbeddedMetadata | None = None,
    lookup: LookupResult | None = None,
) -> tuple[MetadataResolver, FakeReader, FakeLookupClient, CountingGate]:
    reader = FakeReader(embedded)
    client = FakeLookupClient(lookup)
    gate = CountingGate()
    resolver = MetadataResolver(lookup_client=client, comic_info_reader=reader, gate=gate)
    return resolver, reader, client, gate


class TestEmbeddedStage:
    """ComicInfo.xml beats every other source."""

    def test_embedded_metadata_wins(self) -> None:
        resolver, _, client, _ = _resolver(
            embedded=EmbeddedMetadata(series="Batman", publisher="DC Comics", number=1.0),
            lookup=LookupResult(title="Something Else", publisher="Marvel"),
        )
        record = resolver.resolve("batman001.cbz", path=Path("batman001.cbz"), use_api=True)

        assert record.series == "Batman"
        assert record.publisher == "DC Comics"
        assert record.suggested_folder == "DC Comics/Batman"
        assert record.issue_number == 1
        assert record.source is MetadataSource.COMICINFO_XML
        assert record.confidence is Confidence.HIGHEST

    def test_lookup_never_called_when_embedded_present(self) -> None:
        resolver, _, client, gate = _resolver(
            embedded=EmbeddedMetadata(series="Saga", publisher="Image Comics"),
            lookup=LookupResult(title="Saga", publisher="Image"),
        )
        resolver.resolve("Saga 001.cbz", path=Path("Saga 001.cbz"), use_api=True)
        assert client.calls == []
        assert gate.waits == 0

    def test_embedded_wins_over_filename_content(self) -> None:
        """The filename says Batman, the archive says Superman."""
        resolver, *_ = _resolver(embedded=EmbeddedMetadata(series="Superman", publisher="DC"))
        record = resolver.resolve("Batman 001.cbz", path=Path("Batman 001.cbz"))
        assert record.suggested_folder == "DC Comics/Superman"

    def test_imprint_is_used_when_publisher_blank(self) -> None:
        resolver, *_ = _resolver(embedded=EmbeddedMetadata(series="Sandman", imprint="Vertigo"))
        record = resolver.resolve("sandman 01.cbz", path=Path("sandman 01.cbz"))
        assert record.suggested_folder == "Vertigo/Sandman"

    def test_unknown_publisher_goes_to_unsorted(self) -> None:
        resolver, *_ = _resolver(
            embedded=EmbeddedMetadata(series="Maus", publisher="Pantheon Books")
        )
        record = resolver.resolve("maus.cbz", path=Path("maus.cbz"))
        assert record.publisher == UNSORTED
        assert record.suggested_folder == "Unsorted/Maus"
        assert record.source is MetadataSource.COMICINFO_XML

    def test_embedded_number_and_year_override_filename(self) -> None:
        resolver, *_ = _resolver(
            embedded=EmbeddedMetadata(series="Batman", publisher="DC", number=7.0)
        )
        record = resolver.resolve("Batman #5 (2016).cbz", path=Path("Batman #5 (2016).cbz"))
        assert record.issue_number == 7
        assert record.year == 2016

    def test_writer_becomes_authors(self) -> None:
        resolver, *_ = _resolver(
            embedded=EmbeddedMetadata(series="Saga", writer="Brian K. Vaughan, Fiona Staples")
        )
        record = resolver.resolve("saga.cbz", path=Path("saga.cbz"))
        assert record.authors == ["Brian K. Vaughan", "Fiona Staples"]

    def test_slash_in_series_is_made_folder_safe(self) -> None:
        resolver, *_ = _resolver(
            embedded=EmbeddedMetadata(series="Batman/Superman", publisher="DC Comics")
        )
        record = resolver.resolve("bs.cbz", path=Path("bs.cbz"))
        assert record.series == "Batman/Superman"
        assert record.suggested_folder == "DC Comics/Batman-Superman"

    def test_embedded_without_series_falls_through(self) -> None:
        resolver, *_ = _resolver(embedded=EmbeddedMetadata(publisher="DC Comics"))
        record = resolver.resolve("Geiger 001.cbz", path=Path("Geiger 001.cbz"))
        assert record.source is MetadataSource.FILENAME_ANALYSIS

    def test_reader_not_called_without_path(self) -> None:
        resolver, reader, _, _ = _resolver(embedded=EmbeddedMetadata(series="Batman"))
        record = resolver.resolve("Geiger 001.cbz")
        assert reader.calls == []
        assert record.source is MetadataSource.FILENAME_ANALYSIS

    def test_real_archive(self, sample_cbz: Path) -> None:
        """The default reader pulls ComicInfo.xml out of a CBZ."""
        record = MetadataResolver().resolve(sample_cbz.name, path=sample_cbz)
        assert record.suggested_folder == "DC Comics/Batman"
        assert record.title == "The Court of Owls"
        assert record.authors == ["Scott Snyder", "Greg Capullo"]
        assert record.year == 2011

    def test_blank_embedded_series_falls_through(self) -> None:
        resolver, _, _, _ = _resolver(embedded=EmbeddedMetadata(series="   ", publisher="DC"))
        record = resolver.resolve("Geiger 001.cbz", path=Path("Geiger 001.cbz"))
        assert record.source is MetadataSource.FILENAME_ANALYSIS

    def test_embedded_series_is_trimmed(self) -> None:
        embedded = EmbeddedMetadata(series=" Saga ", publisher="Image")
        resolver, _, _, _ = _resolver(embedded=embedded)
        record = resolver.resolve("x.cbz", path=Path("x.cbz"))
        assert record.series == "Saga"
        assert record.suggested_folder == "Image/Saga"


class TestLookupStage:
    """The external lookup runs only when enabled and embedded data is absent."""

    def test_comic_publisher(self) -> None:
        resolver, _, client, _ = _resolver(
            lookup=LookupResult(
                title="Batman: Year One", authors=["Frank Miller"], publisher="DC"
            )
        )
        record = resolver.resolve("Batman Year One (1987).cbz", use_api=True)

        assert client.calls == ["Batman Year One"]
        assert record.source is MetadataSource.API_LOOKUP
        assert record.confidence is Confidence.HIGH
        assert record.publisher == "DC Comics"
        assert record.suggested_folder == "DC Comics/Batman: Year One"
        assert record.authors == ["Frank Miller"]

    def test_non_comic_publisher(self) -> None:
        """Random House isn't a comic publisher, so the file goes to Unsorted."""
        resolver, *_ = _resolver(lookup=LookupResult(title="Maus", publisher="Random House"))
        record = resolver.resolve("Maus.cbz", use_api=True)

        assert record.source is MetadataSource.API_LOOKUP_NON_COMIC_PUBLISHER
        assert record.confidence is Confidence.MEDIUM
        assert record.publisher == UNSORTED
        assert record.suggested_folder == "Unsorted/Maus"

    def test_result_without_publisher_falls_through(self) -> None:
        resolver, _, client, _ = _resolver(lookup=LookupResult(title="Geiger"))
        record = resolver.resolve("Geiger 001.cbz", use_api=True)
        assert client.calls == ["Geiger 001"]
        assert record.source is MetadataSource.FILENAME_ANALYSIS

    def test_no_result_falls_through(self) -> None:
        resolver, *_ = _resolver(lookup=None)
        record = resolver.resolve("batman_001.cbz", use_api=True)
        assert record.source is MetadataSource.PATTERN_MATCH

    def test_disabled_lookup_is_never_called(self) -> None:
        resolver, _, client, gate = _resolver(lookup=LookupResult(title="x", publisher="DC"))
        resolver.resolve("Geiger 001.cbz", use_api=False)
        assert client.calls == []
        assert gate.waits == 0

    def test_query_is_cleaned_name(self) -> None:
        resolver, _, client, _ = _resolver()
        resolver.resolve("The_Walking_Dead_#001_(2023)_[Digital].cbz", use_api=True)
        assert client.calls == ["The Walking Dead"]

    def test_gate_is_passed_before_each_lookup(self) -> None:
        resolver, _, _, gate = _resolver()
        resolver.resolve("a.cbz", use_api=True)
        resolver.resolve("b.cbz", use_api=True)
        assert gate.waits == 2

    def test_missing_client_is_tolerated(self) -> None:
        resolver = MetadataResolver(comic_info_reader=FakeReader(), gate=CountingGate())
        record = resolver.resolve("Geiger 001.cbz", use_api=True)
        assert record.source is MetadataSource.FILENAME_ANALYSIS


class TestPatternStage:
    """Fallback heuristics when nothing authoritative is available."""

    def test_series_pattern(self) -> None:
        record = MetadataResolver().resolve("batman_001.cbz")
        assert record.source is MetadataSource.PATTERN_MATCH
        assert record.confidence is Confidence.HIGH
        assert record.series == "Batman"
        assert record.publisher == "DC Comics"
        assert record.suggested_folder == "DC Comics/Batman"
        assert record.issue_number == 1

    def test_publisher_token(self) -> None:
        record = MetadataResolver().resolve("Geiger Image 001.cbz")
        assert record.source is MetadataSource.PUBLISHER_DETECTION
        assert record.confidence is Confidence.MEDIUM
        assert record.publisher == "Image"
        assert record.series == "Geiger Image 001"
        assert record.suggested_folder == "Image/Geiger Image 001"

    def test_filename_analysis(self) -> None:
        record = MetadataResolver().resolve("Geiger 001 (2024).cbz")
        assert record.source is MetadataSource.FILENAME_ANALYSIS
        assert record.confidence is Confidence.LOW
        assert record.series is None
        assert record.publisher is None
        assert record.suggested_folder == "Unsorted/Geiger 001"
        assert record.issue_number == 1
        assert record.year == 2024

    def test_name_that_cleans_to_nothing(self) -> None:
        """A bare issue token still gets a non-empty folder."""
        record = MetadataResolver().resolve("#001.cbz")
        assert record.cleaned_name == ""
        assert record.suggested_folder == "Unsorted/#001"

    @pytest.mark.parametrize(
        "filename",
        [
            "batman_001.cbz",
            "Geiger Image 001.cbz",
            "Geiger 001 (2024).cbz",
            "The Amazing Spider-Man 300.cbr",
            "[scan] (2020).pdf",
            "x.epub",
        ],
    )
    def test_folder_always_has_two_segments(self, filename: str) -> None:
        record = MetadataResolver().resolve(filename)
        segments = record.suggested_folder.split("/")
        assert len(segments) == 2
        assert all(segments)


class TestResolveBatch:
    """Tests for MetadataResolver.resolve_batch()."""

    def test_preserves_order_and_reports_progress(self) -> None:
        resolver, *_ = _resolver()
        paths = [Path("batman_001.cbz"), Path("Geiger 001.cbz"), Path("Saga 001.cbz")]
        progress: list[tuple[int, int, str]] = []

        def on_progress(index: int, total: int, record: ComicMetadata) -> None:
            progress.append((index, total, record.original_filename))

        records = resolver.resolve_batch(paths, on_progress=on_progress)

        assert [r.original_filename for r in records] == [p.name for p in paths]
        assert progress == [
            (1, 3, "batman_001.cbz"),
            (2, 3, "Geiger 001.cbz"),
            (3, 3, "Saga 001.cbz"),
        ]

    def test_read_embedded_false_skips_reader(self) -> None:
        resolver, reader, _, _ = _resolver(embedded=EmbeddedMetadata(series="Batman"))
        resolver.resolve_batch([Path("a.cbz")], read_embedded=False)
        assert reader.calls == []

    def test_lookup_only_when_enabled(self) -> None:
        resolver, _, client, _ = _resolver()
        resolver.resolve_batch([Path("a.cbz"), Path("b.cbz")])
        assert client.calls == []
        resolver.resolve_batch([Path("a.cbz"), Path("b.cbz")], use_api=True)
        assert client.calls == ["a", "b"]

    def test_unexpected_error_yields_low_confidence_record(self, caplog) -> None:
        """One broken file never aborts the batch."""

        def exploding_reader(path: Path) -> EmbeddedMetadata | None:
            if path.name == "bad.cbz":
                raise RuntimeError("boom")
            return None

        resolver = MetadataResolver(comic_info_reader=exploding_reader)
        with caplog.at_level(logging.ERROR, logger="comicshelf.metadata.resolver"):
            records = resolver.resolve_batch([Path("bad.cbz"), Path("batman_001.cbz")])

        assert records[0].original_filename == "bad.cbz"
        assert records[0].source is MetadataSource.FILENAME_ANALYSIS
        assert records[1].source is MetadataSource.PATTERN_MATCH
        assert "Resolution failed" in caplog.text

    def test_damaged_archive_still_reaches_lookup(self, tmp_path: Path) -> None:
        """A damaged ComicInfo entry counts as absent, so the lookup stage runs."""
        path = write_damaged_cbz(tmp_path / "Saga 001.cbz", comic_info_xml(Series="Saga"))
        client = FakeLookupClient(LookupResult(title="Saga", publisher="Image"))
        resolver = MetadataResolver(lookup_client=client, gate=CountingGate())

        records = resolver.resolve_batch([path], use_api=True)

        assert client.calls == ["Saga 001"]
        assert records[0].source is MetadataSource.API_LOOKUP
        assert records[0].suggested_folder == "Image/Saga"


class TestGroupByFolder:
    def test_groups_in_first_seen_order(self):
        def record(name: str, folder: str) -> ComicMetadata:
            return ComicMetadata(
                original_filename=name,
                cleaned_name=name,
                suggested_folder=folder,
                source=MetadataSource.FILENAME_ANALYSIS,
            )

        groups = group_by_folder(
            [
                record("a", "DC Comics/Batman"),
                record("b", "Image/Saga"),
                record("c", "DC Comics/Batman"),
            ]
        )
        assert list(groups) == ["DC Comics/Batman", "Image/Saga"]
        assert [r.original_filename for r in groups["DC Comics/Batman"]] == ["a", "c"]
