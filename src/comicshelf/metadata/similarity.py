# ABOUTME: String similarity scoring for series names and folder names.
# ABOUTME: Exact, substring-ratio, and word-overlap scores shared by detection and consolidation.

import re

_APOSTROPHE_RE = re.compile(r"['‘’]")
_PUNCTUATION_RE = re.compile(r"[-_:,.]")
_WHITESPACE_RE = re.compile(r"\s+")

# Words this short ("of", "x", "#1") carry no signal for overlap scoring.
_MIN_TOKEN_LENGTH = 3


def normalize_for_comparison(text: str) -> str:
    """Lowercase, drop apostrophes, and turn punctuation into single spaces."""
    text = text.lower()
    text = _APOSTROPHE_RE.sub("", text)
    text = _PUNCTUATION_RE.sub(" ", text)
    text = _WHITESPACE_RE.sub(" ", text)
    return text.strip()


def _tokens(normalized: str) -> set[str]:
    return {word for word in normalized.split(" ") if len(word) >= _MIN_TOKEN_LENGTH}


def calculate_similarity(first: str, second: str) -> float:
    """Score how alike two series names are, from 0.0 to 1.0.

    Identical normalized forms score 1.0. When one contains the other, the
    score is the length ratio of shorter to longer. Otherwise it is the count
    of shared words (3+ characters) over the larger word set.
    """
    norm_first = normalize_for_comparison(first)
    norm_second = normalize_for_comparison(second)

    if norm_first == norm_second:
        return 1.0

    if norm_first in norm_second or norm_second in norm_first:
        shorter, longer = sorted((norm_first, norm_second), key=len)
        return len(shorter) / len(longer)

    words_first = _tokens(norm_first)
    words_second = _tokens(norm_second)
    if not words_first or not words_second:
        return 0.0

    overlap = len(words_first & words_second)
    return overlap / max(len(words_first), len(words_second))
