"""Custom exceptions for the document capture core.

This module contains all custom exception classes used throughout
the capture pipeline and entry store.
"""

from .exceptions import (
    CaptureError,
    NoContentError,
    UnsupportedCapabilityError,
    BlobPersistenceError,
    MetadataFetchError,
    StoreIOError,
    EntryNotFoundError,
    TextRecognitionError,
    PDFProcessingError
)

__all__ = [
    "CaptureError",
    "NoContentError",
    "UnsupportedCapabilityError",
    "BlobPersistenceError",
    "MetadataFetchError",
    "StoreIOError",
    "EntryNotFoundError",
    "TextRecognitionError",
    "PDFProcessingError"
]
