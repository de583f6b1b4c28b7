"""Processors module for the document capture core.

This module contains the OCR document processor and the capture
processor that turns classified input into persisted entries.
"""

from .document_processor import DocumentProcessor, OCR_ERROR_MARKER
from .capture_processor import CaptureProcessor

__all__ = [
    "DocumentProcessor",
    "OCR_ERROR_MARKER",
    "CaptureProcessor"
]
