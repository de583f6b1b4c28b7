"""PDF extractors for the document capture core.

This module contains the PDFPageRenderer, which rasterizes PDF pages
for OCR, and the PDFTextExtractor, which reads the embedded text layer.
Both use the pdfplumber library.
"""

import logging
import os
from typing import Any, List, Optional, Union

import pdfplumber

from ..config import Config
from ..exceptions import PDFProcessingError

__all__ = ["PDFPageRenderer", "PDFTextExtractor"]

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


class PDFPageRenderer:
    """Rasterizes every page of a PDF into a Pillow image.

    Attributes:
        resolution: Rendering resolution in DPI
    """

    def __init__(self, resolution: int = Config.PDF_RENDER_RESOLUTION) -> None:
        self.resolution: int = resolution

    def render_pages(self, path: PathLike) -> List[Any]:
        """Render each page of the PDF at ``path``.

        Pages that fail to render are logged and skipped.

        Args:
            path: Filesystem path of the PDF

        Returns:
            Rendered page images in page order

        Raises:
            PDFProcessingError: If the PDF cannot be opened or has no pages
        """
        try:
            with pdfplumber.open(path) as pdf:
                if not pdf.pages:
                    raise PDFProcessingError("PDF contains no pages")

                images: List[Any] = []
                for i, page in enumerate(pdf.pages):
                    try:
                        images.append(page.to_image(resolution=self.resolution).original.copy())
                    except Exception as e:
                        logger.warning("Failed to render page %d of %s: %s", i + 1, path, e)
                        continue
                return images

        except PDFProcessingError:
            raise
        except Exception as e:
            raise PDFProcessingError(f"PDF reading error: {str(e)}") from e


class PDFTextExtractor:
    """Extracts the embedded text layer of a PDF."""

    @staticmethod
    def extract_text(path: PathLike) -> Optional[str]:
        """Extract text content from the PDF at ``path``.

        Processes all pages and continues past pages that fail,
        returning partial results when possible.

        Args:
            path: Filesystem path of the PDF

        Returns:
            Page texts joined with newlines, or None when no page has text

        Raises:
            PDFProcessingError: If the PDF cannot be opened
        """
        try:
            with pdfplumber.open(path) as pdf:
                text_parts: List[str] = []
                for i, page in enumerate(pdf.pages):
                    try:
                        page_text: Optional[str] = page.extract_text()
                        if page_text and page_text.strip():
                            text_parts.append(page_text.strip())
                    except Exception as e:
                        logger.warning("Failed to extract text from page %d of %s: %s", i + 1, path, e)
                        continue

                return "\n".join(text_parts) if text_parts else None

        except Exception as e:
            raise PDFProcessingError(f"PDF reading error: {str(e)}") from e
