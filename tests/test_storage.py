"""Tests for the storage module.

This module contains tests for the entry codec, blob storage and the
entry store, including schema migration and cascading deletes.
"""

import json
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from unittest.mock import patch
from uuid import UUID, uuid4

import pytest
from PIL import Image

from doc_capture.exceptions import BlobPersistenceError, StoreIOError
from doc_capture.models import PDFAttachment
from doc_capture.storage import EntryStore, decode_entries, encode_entries, merge_text


class TestEntryCodec:
    """Test cases for encoding and decoding the durable mirror."""

    def test_round_trip(self, make_entry):
        """Test that full and minimal entries survive encoding."""
        full = make_entry(
            title="Factura",
            text="Total 12,50",
            image_filenames=["scan_1_0.jpg", "scan_1_1.jpg"],
            file_filename="pdf_1_legacy.pdf",
            link_url="https://example.com/a",
            pdfs=[PDFAttachment(filename="pdf_2_a.pdf", ocr_text="page one")],
        )
        minimal = make_entry()

        assert decode_entries(encode_entries([full, minimal])) == [full, minimal]

    def test_encodes_schema_wrapper(self, make_entry):
        """Test that the document is wrapped with its schema version."""
        document = json.loads(encode_entries([make_entry(title="a")]))
        assert document["schemaVersion"] == 2
        assert document["entries"][0]["title"] == "a"
        assert "linkURL" not in document["entries"][0]

    def test_decodes_legacy_bare_list(self):
        """Test that a version 1 bare list is accepted."""
        entry_id = uuid4()
        data = json.dumps([{"id": str(entry_id), "createdAt": "2024-05-06T10:30:00Z", "text": "hola"}])

        entries = decode_entries(data)

        assert len(entries) == 1
        assert entries[0].id == entry_id
        assert entries[0].text == "hola"
        assert entries[0].created_at == datetime(2024, 5, 6, 10, 30, tzinfo=timezone.utc)

    def test_migrates_legacy_file_filename(self):
        """Test that a legacy file attachment becomes a single PDF attachment."""
        data = json.dumps([{
            "id": str(uuid4()),
            "createdAt": "2024-05-06T10:30:00+00:00",
            "fileFilename": "pdf_1_contract.pdf",
        }])

        entry = decode_entries(data)[0]

        assert entry.file_filename is None
        assert [pdf.filename for pdf in entry.pdfs] == ["pdf_1_contract.pdf"]
        assert entry.pdfs[0].ocr_text == ""

    def test_keeps_file_filename_when_pdfs_present(self):
        """Test that migration only applies when there are no PDF attachments."""
        data = json.dumps([{
            "id": str(uuid4()),
            "createdAt": "2024-05-06T10:30:00+00:00",
            "fileFilename": "pdf_1_old.pdf",
            "pdfs": [{"id": str(uuid4()), "filename": "pdf_2_new.pdf", "ocrText": "x"}],
        }])

        entry = decode_entries(data)[0]

        assert entry.file_filename == "pdf_1_old.pdf"
        assert [pdf.filename for pdf in entry.pdfs] == ["pdf_2_new.pdf"]

    def test_ignores_unknown_keys(self):
        """Test that unknown keys are ignored."""
        data = json.dumps({"schemaVersion": 2, "entries": [
            {"id": str(uuid4()), "createdAt": "2024-05-06T10:30:00+00:00", "color": "red"}
        ]})
        assert len(decode_entries(data)) == 1

    @pytest.mark.parametrize("data", ["not json", "{}", "[{\"id\": \"nope\"}]", "42"])
    def test_corrupt_document_raises(self, data):
        """Test that malformed documents raise StoreIOError."""
        with pytest.raises(StoreIOError, match="Entry decoding error"):
            decode_entries(data)


class TestBlobStorage:
    """Test cases for BlobStorage."""

    def test_save_images_names(self, blob_storage, sample_image):
        """Test that images are named by prefix, timestamp and index."""
        names = blob_storage.save_images([sample_image, sample_image], "scan")

        assert names == ["scan_1700000000_0.jpg", "scan_1700000000_1.jpg"]
        assert all(blob_storage.exists(name) for name in names)

    def test_save_images_unique_names(self, blob_storage, sample_image):
        """Test that a second save in the same second does not overwrite."""
        first = blob_storage.save_images([sample_image], "scan")
        second = blob_storage.save_images([sample_image], "scan")

        assert first == ["scan_1700000000_0.jpg"]
        assert second == ["scan_1700000000_0-1.jpg"]

    def test_concurrent_saves_get_distinct_names(self, blob_storage, sample_image):
        """Test that saves running on worker threads never share a blob name."""
        images = [sample_image.copy() for _ in range(8)]
        with ThreadPoolExecutor(max_workers=4) as pool:
            results = list(pool.map(lambda image: blob_storage.save_images([image], "scan"), images))

        names = [name for result in results for name in result]
        assert len(names) == 8
        assert len(set(names)) == 8
        assert all(blob_storage.exists(name) for name in names)

    def test_save_images_skips_failures(self, blob_storage, sample_image):
        """Test that an unencodable image is skipped and the rest saved."""
        names = blob_storage.save_images([object(), sample_image], "scan")
        assert names == ["scan_1700000000_1.jpg"]

    def test_save_images_converts_rgba(self, blob_storage):
        """Test that images with alpha are stored as JPEG."""
        names = blob_storage.save_images([Image.new("RGBA", (4, 4))], "scan")
        assert len(names) == 1
        assert blob_storage.read_blob(names[0])[:2] == b"\xff\xd8"

    def test_save_file(self, blob_storage, sample_pdf_path):
        """Test that files are copied under a prefixed name."""
        name = blob_storage.save_file(sample_pdf_path, "pdf")

        assert name == "pdf_1700000000_invoice.pdf"
        assert blob_storage.read_blob(name) == sample_pdf_path.read_bytes()

    def test_save_file_overwrites(self, blob_storage, sample_pdf_path):
        """Test that an existing blob with the same name is replaced."""
        blob_storage.save_file(sample_pdf_path, "pdf")
        sample_pdf_path.write_bytes(b"%PDF-1.4 changed")

        name = blob_storage.save_file(sample_pdf_path, "pdf")

        assert blob_storage.read_blob(name) == b"%PDF-1.4 changed"

    def test_save_file_missing_source(self, blob_storage, tmp_path):
        """Test that a failed copy returns None."""
        assert blob_storage.save_file(tmp_path / "missing.pdf", "pdf") is None

    def test_persist_and_read_blob(self, blob_storage):
        """Test raw blob persistence."""
        name = blob_storage.persist_blob(b"data", "note.bin")
        assert blob_storage.read_blob(name) == b"data"

    def test_persist_blob_failure(self, blob_storage):
        """Test that write failures raise BlobPersistenceError."""
        with patch("doc_capture.storage.blob_storage.tempfile.mkstemp", side_effect=OSError("disk full")):
            with pytest.raises(BlobPersistenceError, match="disk full"):
                blob_storage.persist_blob(b"data", "note.bin")

    def test_delete_missing_blob(self, blob_storage):
        """Test that deleting an absent blob does not raise."""
        blob_storage.delete_blob("never_written.jpg")

    def test_read_missing_blob(self, blob_storage):
        """Test that reading an absent blob returns None."""
        assert blob_storage.read_blob("never_written.jpg") is None


class TestMergeText:
    """Test cases for merge_text."""

    @pytest.mark.parametrize("existing,addition,expected", [
        ("A", "B", "A\n\nB"),
        ("A", "", "A"),
        (None, "C", "C"),
        ("", "C", "C"),
        (None, "", None),
    ])
    def test_merge_text(self, existing, addition, expected):
        """Test blank-line joining of OCR text."""
        assert merge_text(existing, addition) == expected


class TestEntryStore:
    """Test cases for EntryStore."""

    def test_starts_empty(self, entry_store):
        """Test that a fresh directory yields an empty library."""
        assert entry_store.entries == ()
        assert entry_store.loaded

    def test_add_entry_inserts_at_head(self, entry_store):
        """Test that new entries are newest first."""
        first = entry_store.add_entry(text="first")
        second = entry_store.add_entry(text="second")

        assert [entry.id for entry in entry_store.entries] == [second, first]
        assert isinstance(first, UUID)

    def test_add_entry_persists(self, entry_store, data_dir, blob_storage):
        """Test that a reloaded store sees added entries."""
        entry_id = entry_store.add_entry(title="Nota", text="hola")

        reloaded = EntryStore(data_dir, blob_storage)

        assert reloaded.get_entry(entry_id) == entry_store.get_entry(entry_id)

    def test_append_images_merges_text(self, entry_store):
        """Test append semantics for non-empty, empty and absent text."""
        entry_id = entry_store.add_entry(text="A", image_filenames=["scan_1_0.jpg"])

        entry_store.append_images(entry_id, ["scan_2_0.jpg"], "B")
        assert entry_store.get_entry(entry_id).text == "A\n\nB"
        assert entry_store.get_entry(entry_id).image_filenames == ["scan_1_0.jpg", "scan_2_0.jpg"]

        entry_store.append_images(entry_id, ["scan_3_0.jpg"], "")
        assert entry_store.get_entry(entry_id).text == "A\n\nB"

        empty_id = entry_store.add_entry()
        entry_store.append_images(empty_id, ["scan_4_0.jpg"], "C")
        assert entry_store.get_entry(empty_id).text == "C"

    def test_append_pdf_keeps_text(self, entry_store):
        """Test that appending a PDF leaves the entry text untouched."""
        entry_id = entry_store.add_entry(text="A")

        entry_store.append_pdf(entry_id, "pdf_1_a.pdf", "pdf text")

        entry = entry_store.get_entry(entry_id)
        assert entry.text == "A"
        assert [(pdf.filename, pdf.ocr_text) for pdf in entry.pdfs] == [("pdf_1_a.pdf", "pdf text")]

    def test_update_entry_title(self, entry_store):
        """Test renaming an entry."""
        entry_id = entry_store.add_entry(title="old")
        entry_store.update_entry_title(entry_id, "new")
        assert entry_store.get_entry(entry_id).title == "new"

    def test_mutating_missing_entry_is_noop(self, entry_store):
        """Test that mutations of unknown ids change nothing."""
        entry_store.add_entry(text="kept")
        before = entry_store.entries

        entry_store.update_entry_title(uuid4(), "x")
        entry_store.append_images(uuid4(), ["scan_1_0.jpg"], "x")
        entry_store.append_pdf(uuid4(), "pdf_1_a.pdf", "x")

        assert entry_store.entries == before

    def test_delete_entry_cascades(self, entry_store, blob_storage):
        """Test that deleting an entry removes every blob it references."""
        images = [blob_storage.persist_blob(b"img", f"scan_1_{i}.jpg") for i in range(2)]
        legacy = blob_storage.persist_blob(b"%PDF", "pdf_1_legacy.pdf")
        attached = blob_storage.persist_blob(b"%PDF", "pdf_2_new.pdf")
        entry_id = entry_store.add_entry(
            image_filenames=images,
            file_filename=legacy,
            pdfs=[PDFAttachment(filename=attached)],
        )

        entry_store.delete_entry(entry_store.get_entry(entry_id))

        assert entry_store.get_entry(entry_id) is None
        assert not any(blob_storage.exists(name) for name in images + [legacy, attached])

    def test_delete_entry_with_missing_blobs(self, entry_store):
        """Test that absent blobs do not prevent deletion."""
        entry_id = entry_store.add_entry(image_filenames=["scan_9_0.jpg"])
        entry_store.delete_entry(entry_store.get_entry(entry_id))
        assert entry_store.entries == ()

    def test_delete_entries_by_position(self, entry_store):
        """Test that positions are resolved before deleting."""
        ids = [entry_store.add_entry(text=str(i)) for i in range(4)]
        # Display order is newest first: ids[3], ids[2], ids[1], ids[0]
        entry_store.delete_entries([0, 2])
        assert [entry.id for entry in entry_store.entries] == [ids[2], ids[0]]

    @pytest.mark.parametrize("positions", [[0, 5], [-1], [2, -3]])
    def test_delete_entries_rejects_invalid_positions(self, entry_store, positions):
        """Test that an out-of-range or negative position deletes nothing."""
        ids = [entry_store.add_entry(text=str(i)) for i in range(3)]

        with pytest.raises(IndexError, match="out of range"):
            entry_store.delete_entries(positions)

        assert [entry.id for entry in entry_store.entries] == list(reversed(ids))

    def test_load_corrupt_mirror(self, data_dir, blob_storage):
        """Test that an unreadable mirror yields an empty library."""
        data_dir.mkdir(parents=True)
        (data_dir / "documents.json").write_text("{broken", encoding="utf-8")

        store = EntryStore(data_dir, blob_storage)

        assert store.entries == ()
        assert store.loaded

    def test_save_failure_keeps_memory(self, entry_store):
        """Test that a failed save is reported and memory is not rolled back."""
        with patch("doc_capture.storage.entry_store.tempfile.mkstemp", side_effect=OSError("read-only")):
            entry_id = entry_store.add_entry(text="unsaved")
            assert entry_store.save() is False

        assert entry_store.get_entry(entry_id) is not None

    def test_save_leaves_no_temporary_files(self, entry_store, data_dir):
        """Test that the atomic write cleans up after itself."""
        entry_store.add_entry(text="a")
        assert [path.name for path in data_dir.iterdir() if path.is_file()] == ["documents.json"]

    def test_search_entries_uses_threshold(self, entry_store):
        """Test that store search delegates to the word matcher."""
        entry_store.add_entry(text="receive")
        assert len(entry_store.search_entries(entry_store.entries, "recieve")) == 1
        assert entry_store.search_entries(entry_store.entries, "xyz") == []
