"""Search module for the document capture core.

This module contains the Levenshtein-based word matcher, the entry
search built on it, and the library category filters.
"""

from .similarity import levenshtein_distance, similarity_score, extract_words, matches
from .entry_search import search_entries, entry_matches
from .filters import LibraryFilter, filter_entries

__all__ = [
    "levenshtein_distance",
    "similarity_score",
    "extract_words",
    "matches",
    "search_entries",
    "entry_matches",
    "LibraryFilter",
    "filter_entries"
]
