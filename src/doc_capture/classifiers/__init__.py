"""Classifiers module for the document capture core.

This module contains the pasteboard and content-provider abstractions,
the link detector, and the clipboard classifier that resolves mixed
input into a single payload.
"""

from .sources import RepresentationType, ContentProvider, ItemProvider, Pasteboard, MemoryPasteboard
from .link_detector import LinkDetector
from .clipboard_classifier import ClipboardClassifier, first_success

__all__ = [
    "RepresentationType",
    "ContentProvider",
    "ItemProvider",
    "Pasteboard",
    "MemoryPasteboard",
    "LinkDetector",
    "ClipboardClassifier",
    "first_success"
]
