# ABOUTME: Google Books lookup client implementation.
# ABOUTME: Searches the volumes endpoint by cleaned title and returns a best-guess record.

import logging

from comicshelf.metadata.googlebooks_parser import parse_search_response
from comicshelf.metadata.http import HttpClient, MetadataFetchError
from comicshelf.metadata.types import LookupResult

logger = logging.getLogger(__name__)

_VOLUMES_URL = "https://www.googleapis.com/books/v1/volumes"
_SEARCH_LIMIT = 5
# Appended to every query to bias results toward comics.
_DOMAIN_HINT = "comic"


def build_query(title: str) -> str:
    """Search query for a cleaned title: the title plus the domain hint."""
    title = title.strip()
    return f"{title} {_DOMAIN_HINT}" if title else _DOMAIN_HINT


class GoogleBooksClient:
    """Lookup client backed by the Google Books volumes search.

    Uses a dependency-injected HttpClient. Any failure is logged and reported
    as None; this client never raises to its caller.
    """

    def __init__(self, http_client: HttpClient) -> None:
        self._http = http_client

    @property
    def name(self) -> str:
        return "googlebooks"

    def lookup(self, query: str) -> LookupResult | None:
        """Search for a title and return the top result, or None."""
        params = {"q": build_query(query), "maxResults": str(_SEARCH_LIMIT)}
        try:
            data = self._http.get(_VOLUMES_URL, params=params)
        except MetadataFetchError as exc:
            logger.warning("Lookup failed for %r: %s", query, exc)
            return None

        if not isinstance(data, dict):
            logger.warning("Unexpected lookup payload for %r: %s", query, type(data).__name__)
            return None

        try:
            result = parse_search_response(data)
        except (AttributeError, TypeError) as exc:
            logger.warning("Could not parse lookup response for %r: %s", query, exc)
            return None

        if result is None:
            logger.debug("No lookup result for %r", query)
        return result
