"""Capture processor for the document capture core.

This module contains the CaptureProcessor class, the use case that turns
classified payloads into persisted entries and applies mutations to
existing entries. Blob encoding and copying run in worker threads; every
entry list mutation is submitted to the StoreOwner and awaited, so an
entry is visible in the store by the time the caller receives the result.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Union
from urllib.parse import urlparse
from uuid import UUID

from langfuse import observe

from ..config import Config
from ..exceptions import BlobPersistenceError, CaptureError, EntryNotFoundError, NoContentError
from ..extractors import LinkMetadata, LinkMetadataFetcher
from ..models import (
    LABEL_PDF,
    CaptureResult,
    Entry,
    FilePayload,
    ImagesPayload,
    LinkPayload,
    PDFAttachment,
    Payload,
    PlainTextPayload
)
from ..storage import EntryStore, StoreOwner
from ..validators import FileValidator
from .document_processor import DocumentProcessor

if TYPE_CHECKING:
    from ..classifiers import ClipboardClassifier, Pasteboard
    from ..guards import DebounceGuard

__all__ = ["CaptureProcessor"]

logger = logging.getLogger(__name__)


class CaptureProcessor:
    """Orchestrates captures and entry mutations.

    Public operations never raise for expected failures: every
    ``CaptureError`` is reported as a failed ``CaptureResult`` carrying
    the localized user message.

    Attributes:
        owner: Single writer for the entry store
        classifier: Resolves pasteboard contents into payloads
        document_processor: OCR over images and PDFs
        link_fetcher: Resolves link titles and preview images
        guard: Debounce guard for external capture triggers
    """

    def __init__(
        self,
        owner: StoreOwner,
        classifier: "ClipboardClassifier",
        document_processor: DocumentProcessor,
        link_fetcher: Optional[LinkMetadataFetcher] = None,
        guard: Optional["DebounceGuard"] = None,
    ) -> None:
        self.owner: StoreOwner = owner
        self.classifier = classifier
        self.document_processor: DocumentProcessor = document_processor
        self.link_fetcher: LinkMetadataFetcher = link_fetcher or LinkMetadataFetcher()
        self.guard = guard

    @property
    def store(self) -> EntryStore:
        return self.owner.store

    @observe(name="handle_clipboard", capture_input=False, capture_output=False)
    async def handle_clipboard(self, pasteboard: "Pasteboard") -> CaptureResult:
        """Classify the pasteboard and save the result as a new entry.

        Args:
            pasteboard: Clipboard contents to capture

        Returns:
            Result of the capture
        """
        try:
            payload = await self.classifier.classify(pasteboard)
        except CaptureError as e:
            return self._failure("Clipboard classification failed", e)
        return await self.handle_payload(payload)

    @observe(name="handle_camera_image", capture_input=False, capture_output=False)
    async def handle_camera_image(self, image: Any, title: Optional[str] = None) -> CaptureResult:
        """OCR a captured image and save it as a new entry."""
        return await self.handle_scanned_pages([image], title)

    @observe(name="handle_scanned_pages", capture_input=False, capture_output=False)
    async def handle_scanned_pages(self, images: List[Any], title: Optional[str] = None) -> CaptureResult:
        payload = await self.document_processor.process_images(images, title)
        return await self.handle_payload(payload)

    @observe(name="handle_payload", capture_input=False, capture_output=False)
    async def handle_payload(self, payload: Payload) -> CaptureResult:
        """Persist a classified payload as a new entry.

        Args:
            payload: Classified input

        Returns:
            Success with the new entry id, or failure with a user message
        """
        try:
            if isinstance(payload, LinkPayload):
                return await self._save_link(payload)
            if isinstance(payload, FilePayload):
                return await self._save_file(payload)
            if isinstance(payload, ImagesPayload):
                return await self._save_images(payload)
            if isinstance(payload, PlainTextPayload):
                return await self._save_text(payload)
            raise NoContentError(f"Unsupported payload type: {type(payload).__name__}")
        except CaptureError as e:
            return self._failure("Capture failed", e)

    @observe(name="append_images", capture_input=False, capture_output=False)
    async def append_images(self, entry_id: UUID, images: List[Any]) -> CaptureResult:
        """OCR ``images`` and append them to an existing entry.

        The recognized text is merged into the entry text with a blank
        line separator.
        """
        try:
            await self._require_entry(entry_id)
            text = await self.document_processor.recognize_images(images)
            filenames = await asyncio.to_thread(self.store.save_images, images, Config.SCAN_PREFIX)
            if not filenames:
                raise BlobPersistenceError(f"None of {len(images)} images could be saved")
            entry = await self.owner.call(
                self._attach, entry_id, filenames,
                lambda: self.store.append_images(entry_id, filenames, text),
            )
        except CaptureError as e:
            return self._failure("Append images failed", e)
        logger.info("Appended %d images to entry %s", len(filenames), entry_id)
        return CaptureResult.ok(entry.id, entry.title, text)

    @observe(name="append_pdf_from_clipboard", capture_input=False, capture_output=False)
    async def append_pdf_from_clipboard(self, entry_id: UUID, pasteboard: "Pasteboard") -> CaptureResult:
        """Append the PDF currently on the clipboard to an existing entry."""
        try:
            await self._require_entry(entry_id)
            payload = await self.classifier.find_pdf(pasteboard)
            if payload is None:
                raise NoContentError("Clipboard holds no PDF")
            return await self._append_pdf(entry_id, payload)
        except CaptureError as e:
            return self._failure("Append PDF from clipboard failed", e)

    @observe(name="append_pdf_from_file", capture_input=False, capture_output=False)
    async def append_pdf_from_file(self, entry_id: UUID, path: Union[str, os.PathLike]) -> CaptureResult:
        """Append a PDF picked from the filesystem to an existing entry."""
        try:
            FileValidator.validate_pdf_file(path)
            await self._require_entry(entry_id)
            return await self._append_pdf(entry_id, FilePayload(path=Path(path), title=Path(path).name))
        except CaptureError as e:
            return self._failure("Append PDF from file failed", e)

    async def rename_entry(self, entry_id: UUID, title: Optional[str]) -> CaptureResult:
        """Set the title of an entry; a blank title clears it."""
        new_title = title.strip() if title and title.strip() else None
        try:
            entry = await self.owner.call(
                self._attach, entry_id, [],
                lambda: self.store.update_entry_title(entry_id, new_title),
            )
        except CaptureError as e:
            return self._failure("Rename failed", e)
        return CaptureResult.ok(entry.id, entry.title, entry.text or "")

    async def delete_entry(self, entry_id: UUID) -> CaptureResult:
        """Delete an entry together with every blob it references."""
        try:
            entry = await self._require_entry(entry_id)
            await self.owner.call(self.store.delete_entry, entry)
        except CaptureError as e:
            return self._failure("Delete failed", e)
        return CaptureResult.ok(entry.id, entry.title, entry.text or "")

    def request_capture(self) -> bool:
        """Record an external capture trigger for later processing.

        Returns:
            True when the trigger was recorded, False when debounced
        """
        if self.guard is None:
            raise RuntimeError("CaptureProcessor has no debounce guard configured")
        return self.guard.mark_pending()

    async def handle_pending_capture(self, pasteboard: "Pasteboard") -> Optional[CaptureResult]:
        """Process a recorded capture trigger, if any, through the guard."""
        if self.guard is None:
            raise RuntimeError("CaptureProcessor has no debounce guard configured")
        return await self.guard.handle_pending(self, pasteboard)

    async def _save_link(self, payload: LinkPayload) -> CaptureResult:
        try:
            metadata = await asyncio.to_thread(self.link_fetcher.fetch, payload.url)
        except Exception as e:
            logger.warning("Link metadata fetch for %s raised: %s", payload.url, e)
            metadata = LinkMetadata(error=str(e))

        title = metadata.title or payload.title or urlparse(payload.url).hostname or payload.url
        text = payload.text.strip() or payload.url

        filenames: List[str] = []
        if metadata.preview_image is not None:
            filenames = await asyncio.to_thread(
                self.store.save_images, [metadata.preview_image], Config.LINK_PREFIX
            )

        entry_id = await self.owner.call(
            self.store.add_entry, title=title, text=text, image_filenames=filenames, link_url=payload.url
        )
        logger.info("Saved link %s as entry %s", payload.url, entry_id)
        return CaptureResult.ok(entry_id, title, text)

    async def _save_file(self, payload: FilePayload) -> CaptureResult:
        try:
            filename = await asyncio.to_thread(self.store.save_file, payload.path, Config.PDF_PREFIX)
            if filename is None:
                raise BlobPersistenceError(f"Failed to copy {payload.path} into blob storage")

            text = await self.document_processor.extract_pdf_text(payload.path)
        finally:
            if payload.is_temporary:
                self._discard_temporary(payload.path)

        title = payload.title or (LABEL_PDF if payload.is_temporary else payload.path.name)
        entry_id = await self.owner.call(
            self.store.add_entry, title=title, pdfs=[PDFAttachment(filename=filename, ocr_text=text)]
        )
        logger.info("Saved PDF %s as entry %s", filename, entry_id)
        return CaptureResult.ok(entry_id, title, text)

    async def _save_images(self, payload: ImagesPayload) -> CaptureResult:
        filenames = await asyncio.to_thread(self.store.save_images, payload.images, Config.SCAN_PREFIX)
        if not filenames:
            raise BlobPersistenceError(f"None of {len(payload.images)} images could be saved")

        entry_id = await self.owner.call(
            self.store.add_entry, title=payload.title, text=payload.text or None, image_filenames=filenames
        )
        logger.info("Saved %d images as entry %s", len(filenames), entry_id)
        return CaptureResult.ok(entry_id, payload.title, payload.text)

    async def _save_text(self, payload: PlainTextPayload) -> CaptureResult:
        entry_id = await self.owner.call(self.store.add_entry, title=payload.title, text=payload.text)
        logger.info("Saved text as entry %s", entry_id)
        return CaptureResult.ok(entry_id, payload.title, payload.text)

    async def _append_pdf(self, entry_id: UUID, payload: FilePayload) -> CaptureResult:
        try:
            filename = await asyncio.to_thread(self.store.save_file, payload.path, Config.PDF_PREFIX)
            if filename is None:
                raise BlobPersistenceError(f"Failed to copy {payload.path} into blob storage")

            text = await self.document_processor.extract_pdf_text(payload.path)
        finally:
            if payload.is_temporary:
                self._discard_temporary(payload.path)

        entry = await self.owner.call(
            self._attach, entry_id, [filename],
            lambda: self.store.append_pdf(entry_id, filename, text),
        )
        logger.info("Appended PDF %s to entry %s", filename, entry_id)
        return CaptureResult.ok(entry.id, entry.title, text)

    async def _require_entry(self, entry_id: UUID) -> Entry:
        entry = await self.owner.call(self.store.get_entry, entry_id)
        if entry is None:
            raise EntryNotFoundError(f"Entry {entry_id} not found")
        return entry

    def _attach(self, entry_id: UUID, filenames: List[str], apply: Callable[[], None]) -> Entry:
        """Apply a mutation on the owner, discarding blobs of a vanished entry.

        Runs as a single owner message so the existence check and the
        mutation cannot interleave with a deletion.
        """
        if self.store.get_entry(entry_id) is None:
            for filename in filenames:
                self.store.blobs.delete_blob(filename)
            raise EntryNotFoundError(f"Entry {entry_id} not found")
        apply()
        return self.store.get_entry(entry_id)

    @staticmethod
    def _discard_temporary(path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Failed to remove temporary file %s: %s", path, e)

    @staticmethod
    def _failure(context: str, error: CaptureError) -> CaptureResult:
        logger.warning("%s: %s", context, error)
        return CaptureResult.failure(error.user_message, str(error))
