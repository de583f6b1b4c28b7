"""Application wiring for the document capture core.

This module contains the CaptureApp class that builds every component
and connects them. A host (UI shell, automation, CLI) creates one
CaptureApp and calls its processor from inside a running event loop.
"""

import logging
import os
from pathlib import Path
from typing import List, Optional, Union

from .classifiers import ClipboardClassifier
from .config import Config, setup_logging
from .database import DatabaseManager, ScratchRepository
from .extractors import LinkMetadataFetcher, OpenAIVisionRecognizer, TesseractRecognizer, TextRecognizer
from .guards import DebounceGuard
from .models import Entry
from .processors import CaptureProcessor, DocumentProcessor
from .search import LibraryFilter, filter_entries
from .storage import BlobStorage, EntryStore, StoreOwner

__all__ = ["CaptureApp", "create_recognizer"]

logger = logging.getLogger(__name__)


def create_recognizer(engine: str = "tesseract") -> TextRecognizer:
    """Create a text recognizer by engine name.

    Args:
        engine: ``tesseract`` or ``openai``

    Raises:
        ValueError: If the engine is unknown or lacks its API key
    """
    if engine == "tesseract":
        return TesseractRecognizer()
    if engine == "openai":
        api_key = os.getenv("OPENAI_API_KEY")
        if not api_key:
            raise ValueError("OPENAI_API_KEY environment variable is required for the openai engine")
        return OpenAIVisionRecognizer(api_key=api_key)
    raise ValueError(f"Unknown OCR engine: {engine}")


class CaptureApp:
    """Composition root of the capture core.

    Attributes:
        db_manager: DatabaseManager for the scratch database
        store: Durable entry store
        owner: Single writer for the entry store
        guard: Debounce guard for external triggers
        document_processor: OCR over images and PDFs
        classifier: Clipboard classifier
        processor: Capture processor used by the host
    """

    def __init__(
        self,
        data_dir: Union[str, os.PathLike] = Config.DATA_DIR,
        recognizer: Optional[TextRecognizer] = None,
        database_url: Optional[str] = None,
        link_fetcher: Optional[LinkMetadataFetcher] = None,
    ) -> None:
        """Initialize application with all required components.

        Args:
            data_dir: Directory for the entry store and blobs
            recognizer: OCR engine, Tesseract when omitted
            database_url: Scratch database URL, ``Config.DATABASE_URL`` when omitted
            link_fetcher: Link metadata fetcher
        """
        data_path = Path(data_dir)
        self.db_manager: DatabaseManager = DatabaseManager(database_url or Config.DATABASE_URL)
        self.store: EntryStore = EntryStore(data_path, BlobStorage(data_path / "blobs"))
        self.owner: StoreOwner = StoreOwner(self.store)
        self.guard: DebounceGuard = DebounceGuard(ScratchRepository(self.db_manager))
        self.document_processor: DocumentProcessor = DocumentProcessor(recognizer or create_recognizer())
        self.classifier: ClipboardClassifier = ClipboardClassifier(self.document_processor)
        self.processor: CaptureProcessor = CaptureProcessor(
            self.owner,
            self.classifier,
            self.document_processor,
            link_fetcher=link_fetcher,
            guard=self.guard,
        )
        logger.info("Capture core ready with %d entries in %s", len(self.store.entries), data_path)

    async def library(self, query: str = "", library_filter: LibraryFilter = LibraryFilter.ALL) -> List[Entry]:
        """Return the entries shown in the library for a filter and search query."""
        entries = await self.owner.call(lambda: self.store.entries)
        return self.store.search_entries(filter_entries(entries, library_filter), query)

    async def close(self) -> None:
        await self.owner.close()
        self.db_manager.dispose()


def main() -> None:
    """Log the library contents; used as a smoke check of the configuration."""
    setup_logging()
    app = CaptureApp()
    for entry in app.store.entries:
        logger.info("%s  %-12s %s", entry.created_at.isoformat(), entry.display_label, entry.title or "")
    app.db_manager.dispose()


if __name__ == "__main__":
    main()
