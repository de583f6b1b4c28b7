"""Models for the document capture core.

This module contains the persisted entry records, the transient
classified payload variants, the capture result reported to callers
and the SQLAlchemy scratch model.
"""

from .entry import (
    Entry,
    PDFAttachment,
    LABEL_LINK,
    LABEL_PDF,
    LABEL_OCR_PHOTOS,
    LABEL_OCR,
    LABEL_PHOTOS
)
from .payload import (
    PlainTextPayload,
    LinkPayload,
    FilePayload,
    ImagesPayload,
    Payload,
    CaptureResult
)
from .scratch import Base, ScratchValue

__all__ = [
    "Entry",
    "PDFAttachment",
    "LABEL_LINK",
    "LABEL_PDF",
    "LABEL_OCR_PHOTOS",
    "LABEL_OCR",
    "LABEL_PHOTOS",
    "PlainTextPayload",
    "LinkPayload",
    "FilePayload",
    "ImagesPayload",
    "Payload",
    "CaptureResult",
    "Base",
    "ScratchValue"
]
