"""Approximate search across entry titles, text and PDF attachments."""

from typing import Iterable, List

from ..config import Config
from ..models import Entry
from .similarity import matches

__all__ = ["search_entries", "entry_matches"]


def entry_matches(entry: Entry, query: str, threshold: float = Config.SIMILARITY_THRESHOLD) -> bool:
    if entry.title and matches(query, entry.title, threshold):
        return True
    if any(matches(query, pdf.ocr_text, threshold) for pdf in entry.pdfs):
        return True
    if not entry.text:
        return False
    return matches(query, entry.text, threshold)


def search_entries(
    entries: Iterable[Entry],
    query: str,
    threshold: float = Config.SIMILARITY_THRESHOLD,
) -> List[Entry]:
    """Filter ``entries`` down to those matching ``query``.

    An empty or whitespace-only query returns every candidate unchanged.
    No index is built; every token of every candidate is compared.

    Args:
        entries: Candidate entries, already narrowed by any active filter
        query: Free-text query
        threshold: Minimum word similarity for a match

    Returns:
        Matching entries in their original order
    """
    candidates = list(entries)
    trimmed = query.strip()
    if not trimmed:
        return candidates
    return [entry for entry in candidates if entry_matches(entry, trimmed, threshold)]
