# ABOUTME: Parsing functions for Google Books API JSON responses.
# ABOUTME: Converts volume search results into LookupResult instances.

from typing import Any

from comicshelf.metadata.types import LookupResult


def _text(value: Any) -> str | None:
    """Keep non-empty strings; anything else the API sends becomes None."""
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def parse_volume(item: dict[str, Any]) -> LookupResult | None:
    """Parse one search item's volumeInfo into a LookupResult.

    Returns None when the item has no usable title.
    """
    info = item.get("volumeInfo") or {}
    title = info.get("title")
    if not isinstance(title, str) or not title.strip():
        return None

    authors = info.get("authors") or []
    if not isinstance(authors, list):
        authors = []

    return LookupResult(
        title=title.strip(),
        authors=[str(a) for a in authors if a],
        publisher=_text(info.get("publisher")),
        published_date=_text(info.get("publishedDate")),
        description=_text(info.get("description")),
    )


def parse_search_response(data: dict[str, Any]) -> LookupResult | None:
    """Return the first item of a volumes search response, or None if empty.

    The API ranks by relevance, so the first item is taken as the best guess.
    """
    items = data.get("items")
    if not isinstance(items, list) or not items:
        return None
    first = items[0]
    if not isinstance(first, dict):
        return None
    return parse_volume(first)
