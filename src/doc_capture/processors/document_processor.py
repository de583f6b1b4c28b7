"""Document processor for the document capture core.

This module contains the DocumentProcessor class that runs OCR over
decoded images and PDFs. Recognition runs in worker threads so the event
loop that owns the entry store is never blocked.
"""

import asyncio
import logging
import os
from typing import Any, List, Optional, Tuple, Union

from ..exceptions import PDFProcessingError
from ..extractors import PDFPageRenderer, PDFTextExtractor, TextRecognizer
from ..models import ImagesPayload

__all__ = ["DocumentProcessor", "OCR_ERROR_MARKER"]

logger = logging.getLogger(__name__)

OCR_ERROR_MARKER = "[Error OCR: {message}]"


class DocumentProcessor:
    """Extracts text from images and PDFs.

    A failure to recognize one image does not fail the whole operation:
    the image contributes an inline ``[Error OCR: ...]`` marker to the
    combined text instead.

    Attributes:
        recognizer: OCR engine
        page_renderer: Rasterizes PDF pages for OCR
        text_extractor: Reads the embedded PDF text layer
    """

    def __init__(
        self,
        recognizer: TextRecognizer,
        page_renderer: Optional[PDFPageRenderer] = None,
        text_extractor: Optional[PDFTextExtractor] = None,
    ) -> None:
        self.recognizer: TextRecognizer = recognizer
        self.page_renderer: PDFPageRenderer = page_renderer or PDFPageRenderer()
        self.text_extractor: PDFTextExtractor = text_extractor or PDFTextExtractor()

    async def recognize_images(self, images: List[Any]) -> str:
        """OCR each image and join the non-empty results with a blank line."""
        parts, _ = await self._recognize(images)
        return "\n\n".join(parts)

    async def process_images(self, images: List[Any], title: Optional[str] = None) -> ImagesPayload:
        text = await self.recognize_images(images)
        return ImagesPayload(images=list(images), text=text, title=title)

    async def extract_pdf_text(self, path: Union[str, os.PathLike]) -> str:
        """Extract the text of a PDF.

        Pages are rendered and OCR'd; only when OCR recognizes nothing is
        the embedded text layer used.

        Args:
            path: Filesystem path of the PDF

        Returns:
            Extracted text, possibly empty
        """
        try:
            pages = await asyncio.to_thread(self.page_renderer.render_pages, path)
        except PDFProcessingError as e:
            logger.warning("Failed to render %s for OCR: %s", path, e)
            pages = []

        parts, recognized = await self._recognize(pages)
        if recognized:
            return "\n\n".join(parts)

        try:
            embedded = await asyncio.to_thread(self.text_extractor.extract_text, path)
        except PDFProcessingError as e:
            logger.warning("Failed to read text layer of %s: %s", path, e)
            embedded = None

        if embedded:
            return embedded
        return "\n\n".join(parts)

    async def _recognize(self, images: List[Any]) -> Tuple[List[str], bool]:
        parts: List[str] = []
        recognized = False
        for index, image in enumerate(images):
            try:
                text = await asyncio.to_thread(self.recognizer.recognize_text, image)
            except Exception as e:
                logger.warning("OCR failed for image %d: %s", index, e)
                parts.append(OCR_ERROR_MARKER.format(message=e))
                continue
            if text and text.strip():
                parts.append(text.strip())
                recognized = True
        return parts, recognized
