# ABOUTME: Metadata package for comic filename analysis, lookup, and resolution.
# ABOUTME: Exports the ComicMetadata record, reference tables, and lookup protocol.

from comicshelf.metadata.provider import LookupClient
from comicshelf.metadata.publishers import DEFAULT_PUBLISHER_TABLE, PublisherTable
from comicshelf.metadata.types import (
    UNSORTED,
    ComicMetadata,
    Confidence,
    EmbeddedMetadata,
    LookupResult,
    MetadataSource,
)

__all__ = [
    "DEFAULT_PUBLISHER_TABLE",
    "UNSORTED",
    "ComicMetadata",
    "Confidence",
    "EmbeddedMetadata",
    "LookupClient",
    "LookupResult",
    "MetadataSource",
    "PublisherTable",
]
