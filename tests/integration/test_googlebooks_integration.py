# ABOUTME: Integration tests for the Google Books lookup stage.
# ABOUTME: Tests resolver → GoogleBooksClient → ComicshelfHttpClient over a fake transport.

import httpx

from comicshelf.metadata.googlebooks import GoogleBooksClient
from comicshelf.metadata.http import ComicshelfHttpClient, MinIntervalGate
from comicshelf.metadata.resolver import MetadataResolver
from comicshelf.metadata.types import Confidence, MetadataSource
from tests.fixtures.googlebooks_responses import (
    NO_PUBLISHER_RESPONSE,
    NON_COMIC_PUBLISHER_RESPONSE,
    SEARCH_RESPONSE,
)


class RecordingTransport(httpx.BaseTransport):
    """Transport that answers every request with one canned response."""

    def __init__(self, response: httpx.Response) -> None:
        self._response = response
        self.requests: list[httpx.Request] = []

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._response


def _resolver(response: httpx.Response) -> tuple[MetadataResolver, RecordingTransport]:
    transport = RecordingTransport(response)
    client = GoogleBooksClient(http_client=ComicshelfHttpClient(transport=transport))
    return MetadataResolver(lookup_client=client, gate=MinIntervalGate(0)), transport


class TestGoogleBooksLookup:
    """Lookup results flowing through the whole HTTP stack."""

    def test_comic_publisher_result(self) -> None:
        resolver, transport = _resolver(httpx.Response(200, json=SEARCH_RESPONSE))

        record = resolver.resolve("Batman Year One (1987).cbz", use_api=True)

        assert transport.requests[0].url.params["q"] == "Batman Year One comic"
        assert record.source is MetadataSource.API_LOOKUP
        assert record.confidence is Confidence.HIGH
        assert record.suggested_folder == "DC Comics/Batman: Year One"
        assert record.authors == ["Frank Miller", "David Mazzucchelli"]
        assert record.year == 1987

    def test_non_comic_publisher_goes_to_unsorted(self) -> None:
        resolver, _ = _resolver(httpx.Response(200, json=NON_COMIC_PUBLISHER_RESPONSE))

        record = resolver.resolve("Maus (1986).cbz", use_api=True)

        assert record.source is MetadataSource.API_LOOKUP_NON_COMIC_PUBLISHER
        assert record.suggested_folder == "Unsorted/Maus"

    def test_result_without_publisher_falls_through(self) -> None:
        resolver, _ = _resolver(httpx.Response(200, json=NO_PUBLISHER_RESPONSE))

        record = resolver.resolve("Geiger 001.cbz", use_api=True)

        assert record.source is MetadataSource.FILENAME_ANALYSIS
        assert record.suggested_folder == "Unsorted/Geiger 001"

    def test_malformed_publisher_falls_back_to_patterns(self) -> None:
        payload = {"items": [{"volumeInfo": {"title": "Saga", "publisher": ["Image"]}}]}
        resolver, _ = _resolver(httpx.Response(200, json=payload))

        record = resolver.resolve("Saga 001.cbz", use_api=True)

        assert record.source is MetadataSource.PATTERN_MATCH
        assert record.suggested_folder == "Image/Saga"

    def test_server_error_falls_back_to_patterns(self) -> None:
        resolver, transport = _resolver(httpx.Response(503))

        record = resolver.resolve("Batman Year One (1987).cbz", use_api=True)

        assert len(transport.requests) == 1
        assert record.source is MetadataSource.PATTERN_MATCH
        assert record.suggested_folder == "DC Comics/Batman"

    def test_embedded_metadata_skips_the_network(self, sample_cbz) -> None:
        resolver, transport = _resolver(httpx.Response(200, json=SEARCH_RESPONSE))

        record = resolver.resolve(sample_cbz.name, path=sample_cbz, use_api=True)

        assert transport.requests == []
        assert record.source is MetadataSource.COMICINFO_XML
        assert record.suggested_folder == "DC Comics/Batman"
