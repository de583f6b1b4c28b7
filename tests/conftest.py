"""Pytest configuration and fixtures for the doc capture test suite.

This module provides shared fixtures and test configuration for all test modules.
"""

import os

# Tracing must be off before langfuse creates its client
os.environ.setdefault("LANGFUSE_TRACING_ENABLED", "false")

import io
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Generator, List, Optional, Union
from unittest.mock import Mock
from uuid import uuid4

import pytest
from PIL import Image

from doc_capture.classifiers import ClipboardClassifier
from doc_capture.database import DatabaseManager, ScratchRepository
from doc_capture.extractors import LinkMetadata, LinkMetadataFetcher, PDFPageRenderer, PDFTextExtractor, TextRecognizer
from doc_capture.guards import DebounceGuard
from doc_capture.models import Entry
from doc_capture.processors import CaptureProcessor, DocumentProcessor
from doc_capture.storage import BlobStorage, EntryStore, StoreOwner


class FakeClock:
    """Manually advanced clock returning unix timestamps."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeRecognizer(TextRecognizer):
    """Recognizer returning queued results; an exception in the queue is raised."""

    def __init__(self, results: Optional[List[Union[str, Exception]]] = None, default: str = "") -> None:
        self.results: List[Union[str, Exception]] = list(results or [])
        self.default = default
        self.calls = 0

    def recognize_text(self, image: Any) -> str:
        self.calls += 1
        if not self.results:
            return self.default
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def fake_clock() -> FakeClock:
    """Create a fake clock for timestamp dependent components."""
    return FakeClock()


@pytest.fixture
def fake_recognizer() -> FakeRecognizer:
    """Create a recognizer that returns no text unless configured."""
    return FakeRecognizer()


@pytest.fixture
def sample_image() -> Image.Image:
    """Create a small RGB image."""
    return Image.new("RGB", (16, 16), "white")


@pytest.fixture
def png_bytes(sample_image: Image.Image) -> bytes:
    """Encode the sample image as PNG bytes."""
    buffer = io.BytesIO()
    sample_image.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def sample_pdf_path(tmp_path: Path) -> Path:
    """Write a placeholder PDF file; renderers are mocked where content matters."""
    path = tmp_path / "invoice.pdf"
    path.write_bytes(b"%PDF-1.4\n%placeholder\n%%EOF")
    return path


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Directory holding the durable mirror and blobs for one test."""
    return tmp_path / "data"


@pytest.fixture
def blob_storage(data_dir: Path, fake_clock: FakeClock) -> BlobStorage:
    """Create blob storage with deterministic timestamps."""
    return BlobStorage(data_dir / "blobs", clock=fake_clock)


@pytest.fixture
def entry_store(data_dir: Path, blob_storage: BlobStorage) -> EntryStore:
    """Create an empty entry store."""
    return EntryStore(data_dir, blob_storage)


@pytest.fixture
def store_owner(entry_store: EntryStore) -> StoreOwner:
    """Create a store owner for the entry store."""
    return StoreOwner(entry_store)


@pytest.fixture
def test_db_manager(tmp_path: Path) -> Generator[DatabaseManager, None, None]:
    """Create a DatabaseManager instance with a temporary database."""
    manager = DatabaseManager(database_url=f"sqlite:///{tmp_path / 'scratch.db'}")
    yield manager
    manager.dispose()


@pytest.fixture
def scratch_repository(test_db_manager: DatabaseManager) -> ScratchRepository:
    """Create a ScratchRepository with a test database."""
    return ScratchRepository(test_db_manager)


@pytest.fixture
def debounce_guard(scratch_repository: ScratchRepository, fake_clock: FakeClock) -> DebounceGuard:
    """Create a debounce guard with a 3 second cooldown and a fake clock."""
    return DebounceGuard(scratch_repository, clock=fake_clock, cooldown=3.0)


@pytest.fixture
def mock_page_renderer() -> Mock:
    """Create a page renderer mock that renders no pages."""
    renderer = Mock(spec=PDFPageRenderer)
    renderer.render_pages.return_value = []
    return renderer


@pytest.fixture
def mock_text_extractor() -> Mock:
    """Create a PDF text extractor mock without a text layer."""
    extractor = Mock(spec=PDFTextExtractor)
    extractor.extract_text.return_value = None
    return extractor


@pytest.fixture
def document_processor(fake_recognizer: FakeRecognizer, mock_page_renderer: Mock,
                       mock_text_extractor: Mock) -> DocumentProcessor:
    """Create a document processor with fake OCR and PDF adapters."""
    return DocumentProcessor(fake_recognizer, mock_page_renderer, mock_text_extractor)


@pytest.fixture
def classifier(document_processor: DocumentProcessor, tmp_path: Path) -> ClipboardClassifier:
    """Create a clipboard classifier writing scratch PDFs into the test directory."""
    return ClipboardClassifier(document_processor, temp_dir=tmp_path)


@pytest.fixture
def mock_link_fetcher() -> Mock:
    """Create a link metadata fetcher mock returning empty metadata."""
    fetcher = Mock(spec=LinkMetadataFetcher)
    fetcher.fetch.return_value = LinkMetadata()
    return fetcher


@pytest.fixture
def capture_processor(store_owner: StoreOwner, classifier: ClipboardClassifier,
                      document_processor: DocumentProcessor, mock_link_fetcher: Mock,
                      debounce_guard: DebounceGuard) -> CaptureProcessor:
    """Create a capture processor wired to test collaborators."""
    return CaptureProcessor(
        store_owner, classifier, document_processor,
        link_fetcher=mock_link_fetcher, guard=debounce_guard,
    )


@pytest.fixture
def make_entry() -> Callable[..., Entry]:
    """Factory for entries with a fixed creation time."""
    def factory(**fields: Any) -> Entry:
        fields.setdefault("id", uuid4())
        fields.setdefault("created_at", datetime(2024, 5, 6, 10, 30, tzinfo=timezone.utc))
        return Entry(**fields)
    return factory
