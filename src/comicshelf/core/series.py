# ABOUTME: Fuzzy series detection: groups a batch of comic files into inferred series.
# ABOUTME: Filename similarity clustering, overridden by authoritative resolver series names.

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path, PurePath

from comicshelf.metadata.filename import strip_extension
from comicshelf.metadata.similarity import calculate_similarity
from comicshelf.metadata.types import ComicMetadata

SERIES_SIMILARITY_THRESHOLD = 0.5

# Captured names this short ("X", "Vo") are never accepted as a series.
_MIN_SERIES_NAME_LENGTH = 3

FileRef = str | Path


class ClusteringMode(str, Enum):
    """How similar candidate names are clustered.

    GREEDY is single-pass and order-dependent: each unclaimed file claims every
    later unclaimed file similar to itself. TRANSITIVE links chains
    (A~B, B~C puts A, B, C together) and must be requested explicitly.
    """

    GREEDY = "greedy"
    TRANSITIVE = "transitive"


@dataclass
class SeriesGroup:
    """Two or more files inferred to belong to the same series."""

    series_name: str
    files: list[FileRef] = field(default_factory=list)

    @property
    def file_count(self) -> int:
        return len(self.files)


# Most specific first; the first pattern whose capture is long enough wins.
_SERIES_NAME_PATTERNS = [
    # "Speed Racer 003 (2025)"
    r"^(.+?)(?:\s+\d{3,}\s*\(\d{4}\))",
    # "Geiger V04 (2025)", "The Power Fantasy v02"
    r"^(.+?)(?:\s+[Vv]\d+)",
    # "Hellboy: The Bride of Hell"
    r"^(.+?)(?:\s*:\s*)",
    # "Hellboy Volume 11", "Hellboy Vol. 2"
    r"^(.+?)(?:\s+(?:Volume|Vol\.?|Book|Part|Chapter)\s*\d*)",
    # "hellboyvolume11"
    r"^([a-z]+?)(?:volume|vol|book|part|issue)",
    # "Hellboy #1", "Hellboy Issue 5", "Hellboy No. 3"
    r"^(.+?)(?:\s+(?:#|Issue|No\.?)\s*\d+)",
    # "Hellboy (2019)"
    r"^(.+?)(?:\s*\(\d{4}\))",
    # "Hellboy – Something" (plain dashes are already spaces)
    r"^(.+?)(?:\s*[-–—]\s*)",
    # "Hellboy 001"
    r"^(.+?)(?:\s+\d{3,})",
    # "Speed Racer 3"
    r"^(.+?)(?:\s+\d{1,2})$",
    # "hellboy001"
    r"^([a-z]+?)(?:\d+)",
    # first word of a multi-word name
    r"^(\w+)\s+",
]
_SERIES_NAME_RES = [re.compile(p, re.IGNORECASE) for p in _SERIES_NAME_PATTERNS]
_SEPARATOR_RE = re.compile(r"[-_]")
_WHITESPACE_RE = re.compile(r"\s+")


def extract_series_name(filename: str) -> str:
    """Guess the series portion of a comic filename.

    Strips the extension and separators, then applies the ordered extraction
    patterns. Falls back to the whole cleaned name.
    """
    name = strip_extension(filename)
    name = _SEPARATOR_RE.sub(" ", name)
    name = _WHITESPACE_RE.sub(" ", name).strip()

    for pattern in _SERIES_NAME_RES:
        match = pattern.match(name)
        if match and len(match.group(1)) >= _MIN_SERIES_NAME_LENGTH:
            return match.group(1).strip()

    return name


def title_case(name: str) -> str:
    """Capitalize the first letter of each space-separated word, lowercase the rest."""
    return " ".join(word[:1].upper() + word[1:].lower() for word in name.split(" "))


def _greedy_clusters(names: list[str], threshold: float) -> list[list[int]]:
    processed: set[int] = set()
    clusters: list[list[int]] = []

    for i, current in enumerate(names):
        if i in processed:
            continue
        members = [i]
        processed.add(i)

        for j in range(i + 1, len(names)):
            if j in processed:
                continue
            if calculate_similarity(current, names[j]) >= threshold:
                members.append(j)
                processed.add(j)

        clusters.append(members)

    return clusters


def _transitive_clusters(names: list[str], threshold: float) -> list[list[int]]:
    parent = list(range(len(names)))

    def find(i: int) -> int:
        while parent[i] != i:
            parent[i] = parent[parent[i]]
            i = parent[i]
        return i

    for i in range(len(names)):
        for j in range(i + 1, len(names)):
            if calculate_similarity(names[i], names[j]) >= threshold:
                root_i, root_j = find(i), find(j)
                if root_i != root_j:
                    parent[max(root_i, root_j)] = min(root_i, root_j)

    clusters: dict[int, list[int]] = {}
    for i in range(len(names)):
        clusters.setdefault(find(i), []).append(i)
    return list(clusters.values())


def detect_series_groups(
    files: Sequence[FileRef],
    metadata: Sequence[ComicMetadata | None] | None = None,
    *,
    threshold: float = SERIES_SIMILARITY_THRESHOLD,
    mode: ClusteringMode = ClusteringMode.GREEDY,
) -> list[SeriesGroup]:
    """Group files into series using filename similarity.

    When resolver metadata is supplied (aligned with files), files sharing
    the same non-null series value form one group named exactly that value,
    regardless of similarity. Remaining files are clustered by similarity of
    their effective name: the resolver series when present, otherwise the
    name extracted from the filename. Only groups of two or more files are
    returned, largest first.

    Raises:
        ValueError: If metadata is given but not aligned with files.
    """
    if metadata is not None and len(metadata) != len(files):
        raise ValueError(
            f"metadata has {len(metadata)} entries for {len(files)} files"
        )

    groups: list[SeriesGroup] = []
    claimed: set[int] = set()

    if metadata is not None:
        by_series: dict[str, list[int]] = {}
        for index, meta in enumerate(metadata):
            if meta is not None and meta.series:
                by_series.setdefault(meta.series, []).append(index)
        for series, indices in by_series.items():
            if len(indices) >= 2:
                groups.append(SeriesGroup(series, [files[i] for i in indices]))
                claimed.update(indices)

    remaining = [i for i in range(len(files)) if i not in claimed]
    names: list[str] = []
    for i in remaining:
        meta = metadata[i] if metadata is not None else None
        if meta is not None and meta.series:
            names.append(meta.series)
        else:
            names.append(extract_series_name(PurePath(files[i]).name))

    if mode is ClusteringMode.TRANSITIVE:
        clusters = _transitive_clusters(names, threshold)
    else:
        clusters = _greedy_clusters(names, threshold)

    for cluster in clusters:
        if len(cluster) < 2:
            continue
        # The shortest name is usually the cleanest one.
        shortest = min((names[k] for k in cluster), key=len)
        groups.append(
            SeriesGroup(title_case(shortest), [files[remaining[k]] for k in cluster])
        )

    groups.sort(key=lambda group: group.file_count, reverse=True)
    return groups


def create_series_lookup_map(groups: Sequence[SeriesGroup]) -> dict[FileRef, str]:
    """Map each grouped file to its group's series name."""
    lookup: dict[FileRef, str] = {}
    for group in groups:
        for file in group.files:
            lookup[file] = group.series_name
    return lookup
