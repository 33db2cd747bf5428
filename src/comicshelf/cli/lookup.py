# ABOUTME: Lifecycle of the external lookup client used by CLI commands.
# ABOUTME: Opens a Google Books client on demand and closes its HTTP connection afterwards.

from collections.abc import Iterator
from contextlib import contextmanager

from comicshelf.metadata.googlebooks import GoogleBooksClient
from comicshelf.metadata.http import ComicshelfHttpClient
from comicshelf.metadata.provider import LookupClient


@contextmanager
def open_lookup_client(use_api: bool) -> Iterator[LookupClient | None]:
    """Yield the default lookup client (Google Books), or None when lookups are off."""
    if not use_api:
        yield None
        return

    http_client = ComicshelfHttpClient()
    try:
        yield GoogleBooksClient(http_client=http_client)
    finally:
        http_client.close()
