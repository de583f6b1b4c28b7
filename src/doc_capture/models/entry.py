"""Entry models for the document capture core.

This module contains the persisted records of the library: the
``Entry`` shown in the reverse-chronological list and the
``PDFAttachment`` records appended to it.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional
from uuid import UUID, uuid4

__all__ = ["Entry", "PDFAttachment", "LABEL_LINK", "LABEL_PDF", "LABEL_OCR_PHOTOS", "LABEL_OCR", "LABEL_PHOTOS"]

LABEL_LINK = "Link"
LABEL_PDF = "PDF"
LABEL_OCR_PHOTOS = "OCR + Fotos"
LABEL_OCR = "OCR"
LABEL_PHOTOS = "Fotos"


@dataclass(frozen=True)
class PDFAttachment:
    """A PDF blob attached to an entry together with its extracted text.

    Attributes:
        filename: Name of the persisted PDF blob
        ocr_text: Text extracted from the PDF, possibly empty
        id: Unique identifier of the attachment
    """
    filename: str
    ocr_text: str = ""
    id: UUID = field(default_factory=uuid4)


@dataclass(frozen=True)
class Entry:
    """A capture record in the library.

    Entries are immutable values; the entry store replaces an entry with
    an updated copy when it appends images, PDFs or renames it.

    Attributes:
        id: Unique identifier assigned at creation
        created_at: Creation timestamp
        title: Optional user or metadata derived label
        text: Optional OCR or plain text body
        image_filenames: Ordered names of persisted image blobs
        file_filename: Optional legacy single-file attachment
        link_url: URL string when the entry came from a detected link
        pdfs: Ordered PDF attachments
    """
    id: UUID
    created_at: datetime
    title: Optional[str] = None
    text: Optional[str] = None
    image_filenames: List[str] = field(default_factory=list)
    file_filename: Optional[str] = None
    link_url: Optional[str] = None
    pdfs: List[PDFAttachment] = field(default_factory=list)

    @property
    def has_text(self) -> bool:
        return bool(self.text)

    @property
    def display_label(self) -> str:
        """Label shown in the library, evaluated in fixed priority order."""
        if self.link_url is not None:
            return LABEL_LINK
        if self.file_filename is not None or self.pdfs:
            return LABEL_PDF
        if self.has_text and self.image_filenames:
            return LABEL_OCR_PHOTOS
        if self.has_text:
            return LABEL_OCR
        return LABEL_PHOTOS

    @property
    def blob_filenames(self) -> List[str]:
        """Every blob referenced by this entry, in deletion order."""
        names: List[str] = list(self.image_filenames)
        if self.file_filename:
            names.append(self.file_filename)
        names.extend(pdf.filename for pdf in self.pdfs)
        return names
