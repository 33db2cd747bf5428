# ABOUTME: Ordered catalog of well-known series patterns used as a last-resort classifier.
# ABOUTME: First matching regex wins; order in the catalog is significant.

import re
from dataclasses import dataclass

from comicshelf.metadata import publishers as pub
from comicshelf.metadata.publishers import PublisherTable


@dataclass(frozen=True)
class SeriesPattern:
    """A case-insensitive filename pattern mapped to a canonical series and publisher."""

    pattern: re.Pattern[str]
    series: str
    publisher: str

    @classmethod
    def compile(cls, pattern: str, series: str, publisher: str) -> "SeriesPattern":
        return cls(re.compile(pattern, re.IGNORECASE), series, publisher)


@dataclass(frozen=True)
class SeriesMatch:
    """Result of matching a filename against the series catalog."""

    series: str
    publisher: str


@dataclass(frozen=True)
class SeriesPatternCatalog:
    """Immutable, ordered list of series patterns."""

    patterns: tuple[SeriesPattern, ...]

    def match_series(self, filename: str) -> SeriesMatch | None:
        """Return the first catalog entry whose regex matches the raw filename."""
        for entry in self.patterns:
            if entry.pattern.search(filename):
                return SeriesMatch(series=entry.series, publisher=entry.publisher)
        return None

    def __len__(self) -> int:
        return len(self.patterns)


def detect_publisher_token(filename: str, table: PublisherTable) -> str | None:
    """Crude fallback: first canonical publisher name found anywhere in filename."""
    return table.detect_in_filename(filename)


_DEFAULT_PATTERNS: list[tuple[str, str, str]] = [
    (r"batman", "Batman", pub.DC),
    (r"superman", "Superman", pub.DC),
    (r"wonder\s*woman", "Wonder Woman", pub.DC),
    (r"flash", "The Flash", pub.DC),
    (r"green\s*lantern", "Green Lantern", pub.DC),
    (r"aquaman", "Aquaman", pub.DC),
    (r"justice\s*league", "Justice League", pub.DC),
    (r"spider[-\s]?man", "Spider-Man", pub.MARVEL),
    (r"x[-\s]?men", "X-Men", pub.MARVEL),
    (r"avengers", "Avengers", pub.MARVEL),
    (r"iron\s*man", "Iron Man", pub.MARVEL),
    (r"captain\s*america", "Captain America", pub.MARVEL),
    (r"thor\b", "Thor", pub.MARVEL),
    (r"hulk", "Hulk", pub.MARVEL),
    (r"daredevil", "Daredevil", pub.MARVEL),
    (r"deadpool", "Deadpool", pub.MARVEL),
    (r"wolverine", "Wolverine", pub.MARVEL),
    (r"fantastic\s*four", "Fantastic Four", pub.MARVEL),
    (r"walking\s*dead", "The Walking Dead", pub.IMAGE),
    (r"spawn", "Spawn", pub.IMAGE),
    (r"invincible", "Invincible", pub.IMAGE),
    (r"saga\b", "Saga", pub.IMAGE),
    (r"sandman", "Sandman", pub.VERTIGO),
    (r"watchmen", "Watchmen", pub.DC),
    (r"hellboy", "Hellboy", pub.DARK_HORSE),
    (r"tmnt|teenage\s*mutant", "Teenage Mutant Ninja Turtles", pub.IDW),
    (r"transformers", "Transformers", pub.IDW),
    (r"star\s*wars", "Star Wars", pub.MARVEL),
]

DEFAULT_SERIES_CATALOG = SeriesPatternCatalog(
    patterns=tuple(SeriesPattern.compile(*entry) for entry in _DEFAULT_PATTERNS)
)
