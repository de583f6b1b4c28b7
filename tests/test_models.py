"""Tests for the models module."""

import itertools

import pytest

from doc_capture.models import (
    LABEL_LINK,
    LABEL_OCR,
    LABEL_OCR_PHOTOS,
    LABEL_PDF,
    LABEL_PHOTOS,
    CaptureResult,
    PDFAttachment
)


class TestEntryLabel:
    """Test cases for Entry.display_label."""

    @pytest.mark.parametrize(
        "has_link,has_file,has_pdf,has_text,has_images",
        list(itertools.product([False, True], repeat=5)),
    )
    def test_label_is_total(self, make_entry, has_link, has_file, has_pdf, has_text, has_images):
        """Test that every field combination yields the label of the highest priority field."""
        entry = make_entry(
            link_url="https://example.com" if has_link else None,
            file_filename="pdf_1_old.pdf" if has_file else None,
            pdfs=[PDFAttachment(filename="pdf_1_new.pdf")] if has_pdf else [],
            text="hello" if has_text else None,
            image_filenames=["scan_1_0.jpg"] if has_images else [],
        )

        if has_link:
            expected = LABEL_LINK
        elif has_file or has_pdf:
            expected = LABEL_PDF
        elif has_text and has_images:
            expected = LABEL_OCR_PHOTOS
        elif has_text:
            expected = LABEL_OCR
        else:
            expected = LABEL_PHOTOS
        assert entry.display_label == expected

    def test_empty_text_counts_as_absent(self, make_entry):
        """Test that an empty string does not count as text."""
        entry = make_entry(text="", image_filenames=["scan_1_0.jpg"])
        assert entry.display_label == LABEL_PHOTOS


class TestEntryBlobs:
    """Test cases for Entry.blob_filenames."""

    def test_blob_filenames_lists_every_blob(self, make_entry):
        """Test that images, legacy file and PDFs are all listed."""
        entry = make_entry(
            image_filenames=["scan_1_0.jpg", "scan_1_1.jpg"],
            file_filename="pdf_1_legacy.pdf",
            pdfs=[PDFAttachment(filename="pdf_2_new.pdf")],
        )
        assert entry.blob_filenames == ["scan_1_0.jpg", "scan_1_1.jpg", "pdf_1_legacy.pdf", "pdf_2_new.pdf"]


class TestCaptureResult:
    """Test cases for CaptureResult constructors."""

    def test_ok(self, make_entry):
        """Test a successful result."""
        entry = make_entry()
        result = CaptureResult.ok(entry.id, "Title", "body")
        assert result.success
        assert result.entry_id == entry.id
        assert result.error is None

    def test_failure(self):
        """Test a failed result keeps message and details."""
        result = CaptureResult.failure("No hay texto", "detail one")
        assert not result.success
        assert result.entry_id is None
        assert result.error == "No hay texto"
        assert result.details == ["detail one"]
