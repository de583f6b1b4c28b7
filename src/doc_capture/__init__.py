"""Doc Capture - A personal document capture and search core.

This package classifies clipboard and camera input (text, links, PDFs,
images), extracts text with OCR, and persists everything as searchable
entries in a local library.

The package is organized into the following modules:
- config: Application configuration and logging setup
- exceptions: Custom exception classes
- models: Entry records, payload variants and the scratch model
- database: Scratch database management and repository
- validators: File type validation utilities
- extractors: OCR, PDF and link metadata adapters
- search: Fuzzy word search and library filters
- storage: Entry store, blob storage and the single-writer owner
- classifiers: Clipboard classification
- processors: OCR and capture workflows
- guards: Debounce guard for external capture triggers
"""

__version__ = "1.0.0"
__author__ = "Doc Capture Team"
__description__ = "Document capture core with OCR and fuzzy search"

from .config import Config, setup_logging
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
from .models import (
    Entry,
    PDFAttachment,
    PlainTextPayload,
    LinkPayload,
    FilePayload,
    ImagesPayload,
    Payload,
    CaptureResult
)
from .database import DatabaseManager, ScratchRepository
from .validators import FileValidator
from .extractors import (
    TextRecognizer,
    TesseractRecognizer,
    OpenAIVisionRecognizer,
    PDFPageRenderer,
    PDFTextExtractor,
    LinkMetadataFetcher
)
from .search import search_entries, matches, LibraryFilter, filter_entries
from .storage import BlobStorage, EntryStore, StoreOwner
from .classifiers import ClipboardClassifier, ItemProvider, MemoryPasteboard, Pasteboard
from .processors import DocumentProcessor, CaptureProcessor
from .guards import DebounceGuard

__all__ = [
    # Configuration
    "Config",
    "setup_logging",
    # Exceptions
    "CaptureError",
    "NoContentError",
    "UnsupportedCapabilityError",
    "BlobPersistenceError",
    "MetadataFetchError",
    "StoreIOError",
    "EntryNotFoundError",
    "TextRecognitionError",
    "PDFProcessingError",
    # Models
    "Entry",
    "PDFAttachment",
    "PlainTextPayload",
    "LinkPayload",
    "FilePayload",
    "ImagesPayload",
    "Payload",
    "CaptureResult",
    # Database
    "DatabaseManager",
    "ScratchRepository",
    # Validators
    "FileValidator",
    # Extractors
    "TextRecognizer",
    "TesseractRecognizer",
    "OpenAIVisionRecognizer",
    "PDFPageRenderer",
    "PDFTextExtractor",
    "LinkMetadataFetcher",
    # Search
    "search_entries",
    "matches",
    "LibraryFilter",
    "filter_entries",
    # Storage
    "BlobStorage",
    "EntryStore",
    "StoreOwner",
    # Classifiers
    "ClipboardClassifier",
    "ItemProvider",
    "MemoryPasteboard",
    "Pasteboard",
    # Processors
    "DocumentProcessor",
    "CaptureProcessor",
    # Guards
    "DebounceGuard"
]
