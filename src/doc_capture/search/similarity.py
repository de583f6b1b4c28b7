"""Word-level fuzzy matching used by library search."""

import re
from typing import List

from ..config import Config

__all__ = ["levenshtein_distance", "similarity_score", "extract_words", "matches"]

_WORD_RE = re.compile(r"[^\W_]+")


def levenshtein_distance(a: str, b: str) -> int:
    """Classic edit distance with unit cost insertion, deletion and substitution."""
    distances: List[int] = list(range(len(b) + 1))
    for i, a_char in enumerate(a):
        previous = distances[0]
        distances[0] = i + 1
        for j, b_char in enumerate(b):
            old = distances[j + 1]
            cost = 0 if a_char == b_char else 1
            distances[j + 1] = min(distances[j + 1] + 1, distances[j] + 1, previous + cost)
            previous = old
    return distances[len(b)]


def similarity_score(a: str, b: str) -> float:
    """Normalized similarity in [0, 1]; two empty strings are identical."""
    max_len = max(len(a), len(b))
    if max_len == 0:
        return 1.0
    return 1.0 - levenshtein_distance(a, b) / max_len


def extract_words(text: str) -> List[str]:
    """Split ``text`` into maximal runs of alphanumeric characters."""
    return _WORD_RE.findall(text)


def matches(query: str, text: str, threshold: float = Config.SIMILARITY_THRESHOLD) -> bool:
    """Return True when any single word of ``text`` is close enough to ``query``.

    The query is compared as a whole against each lowercased token; this
    is an OR over tokens, not an aggregate document score.
    """
    normalized_query = query.lower()
    for word in extract_words(text):
        if similarity_score(normalized_query, word.lower()) >= threshold:
            return True
    return False
