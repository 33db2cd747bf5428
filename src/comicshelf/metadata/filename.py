# ABOUTME: Filename lexer for comic files: extension, lookup name, issue number, and year.
# ABOUTME: Pure string functions with no error cases, shared by the resolver and the organizer.

import re
from pathlib import PurePath

_BRACKETED_RE = re.compile(r"\[.*?\]")
_PARENTHETICAL_RE = re.compile(r"\(.*?\)")
_VOLUME_TOKEN_RE = re.compile(r"(?<![a-z0-9])v\d+", re.IGNORECASE)
_HASH_ISSUE_RE = re.compile(r"#\s*(\d{1,4}(?:\.\d+)?)(?!\d)")
_ISSUE_TOKEN_RE = re.compile(r"#\d+")
_BARE_YEAR_RE = re.compile(r"(?<!\d)\d{4}(?!\d)")
_SEPARATOR_RE = re.compile(r"[-_]+")
_WHITESPACE_RE = re.compile(r"\s+")

# A standalone 1-4 digit number, optionally fractional ("1.5").
_NUMBER_RE = re.compile(r"(?<![\d.])(\d{1,4}(?:\.\d+)?)(?!\d)")
# Four digits starting with 19 or 20, never directly after '#' (issue marker).
_YEAR_RE = re.compile(r"(?<![\d#])((?:19|20)\d{2})(?!\d)")


def get_extension(path: str | PurePath) -> str:
    """Lowercase suffix after the last dot, including the dot ('' if none)."""
    return PurePath(path).suffix.lower()


def strip_extension(filename: str) -> str:
    """Return the basename of a filename without its extension."""
    pure = PurePath(filename)
    return pure.name[: -len(pure.suffix)] if pure.suffix else pure.name


def clean_filename_for_lookup(filename: str) -> str:
    """Reduce a raw filename to a search-friendly title.

    Strips the extension, bracketed and parenthetical spans, volume tokens
    (v01), issue tokens (#001), and bare four-digit years, then turns dashes
    and underscores into spaces. Always returns a string, possibly empty.
    """
    cleaned = strip_extension(filename)
    cleaned = _BRACKETED_RE.sub("", cleaned)
    cleaned = _PARENTHETICAL_RE.sub("", cleaned)
    cleaned = _VOLUME_TOKEN_RE.sub("", cleaned)
    cleaned = _ISSUE_TOKEN_RE.sub("", cleaned)
    cleaned = _BARE_YEAR_RE.sub("", cleaned)
    cleaned = _SEPARATOR_RE.sub(" ", cleaned)
    cleaned = _WHITESPACE_RE.sub(" ", cleaned)
    return cleaned.strip()


def _to_number(text: str) -> float:
    value = float(text)
    return int(value) if value.is_integer() else value


def _is_year_like(text: str) -> bool:
    return "." not in text and len(text) == 4 and 1900 <= int(text) <= 2099


def extract_issue_number(filename: str) -> float | None:
    """Extract an issue number from a filename.

    A number marked with '#' always wins. Otherwise bracketed, parenthetical
    and volume spans are dropped and the last standalone number is used,
    skipping year-looking tokens when another number is available
    ("Spider-Man 2099 005" is issue 5). Leading zeros are insignificant.
    """
    stem = strip_extension(filename)

    marked = _HASH_ISSUE_RE.search(stem)
    if marked:
        return _to_number(marked.group(1))

    stem = _BRACKETED_RE.sub(" ", stem)
    stem = _PARENTHETICAL_RE.sub(" ", stem)
    stem = _VOLUME_TOKEN_RE.sub(" ", stem)

    numbers = _NUMBER_RE.findall(stem)
    if not numbers:
        return None

    non_years = [n for n in numbers if not _is_year_like(n)]
    return _to_number((non_years or numbers)[-1])


def extract_year(filename: str) -> int | None:
    """Extract the first 19xx/20xx token from a filename, or None."""
    match = _YEAR_RE.search(filename)
    return int(match.group(1)) if match else None


def format_issue_number(number: float | None) -> str:
    """Render an issue number without a trailing '.0' ('' for None)."""
    if number is None:
        return ""
    return str(_to_number(str(number)))
