"""Extractors module for the document capture core.

This module contains the external capabilities the core consumes:
text recognition (Tesseract or OpenAI vision), PDF page rendering and
embedded text extraction with pdfplumber, and link metadata fetching.
"""

from .text_recognizer import TextRecognizer, TesseractRecognizer, OpenAIVisionRecognizer
from .pdf_extractor import PDFPageRenderer, PDFTextExtractor
from .link_metadata import LinkMetadata, LinkMetadataFetcher

__all__ = [
    "TextRecognizer",
    "TesseractRecognizer",
    "OpenAIVisionRecognizer",
    "PDFPageRenderer",
    "PDFTextExtractor",
    "LinkMetadata",
    "LinkMetadataFetcher"
]
