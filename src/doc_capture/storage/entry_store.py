"""Entry store for the document capture core.

This module contains the EntryStore class that owns the ordered list of
entries (newest first) and its durable JSON mirror, and the blob files
referenced by those entries.
"""

import dataclasses
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, List, Optional, Tuple, Union
from uuid import UUID, uuid4

from ..config import Config
from ..exceptions import StoreIOError
from ..models import Entry, PDFAttachment
from ..search import search_entries
from .blob_storage import BlobStorage
from .entry_codec import decode_entries, encode_entries

__all__ = ["EntryStore", "merge_text"]

logger = logging.getLogger(__name__)


def merge_text(existing: Optional[str], addition: str) -> Optional[str]:
    """Append ``addition`` to ``existing`` separated by a blank line.

    Empty existing text is replaced; an empty addition leaves the
    existing text unchanged.
    """
    if existing:
        return f"{existing}\n\n{addition}" if addition else existing
    return addition if addition else existing


class EntryStore:
    """Durable, ordered collection of entries.

    Every mutation rewrites the whole durable mirror. The store performs
    no locking; callers funnel mutations through a single owner (see
    ``StoreOwner``).

    Attributes:
        data_dir: Directory holding the durable mirror
        store_path: Path of the JSON mirror
        blobs: Blob storage for images and files
        similarity_threshold: Threshold used by ``search_entries``
    """

    def __init__(
        self,
        data_dir: Union[str, os.PathLike] = Config.DATA_DIR,
        blob_storage: Optional[BlobStorage] = None,
        similarity_threshold: float = Config.SIMILARITY_THRESHOLD,
        autoload: bool = True,
    ) -> None:
        """Initialize the store and load the durable mirror.

        Args:
            data_dir: Directory for ``documents.json``
            blob_storage: Blob storage, defaults to ``<data_dir>/blobs``
            similarity_threshold: Word similarity threshold for search
            autoload: Load the durable mirror immediately
        """
        self.data_dir: Path = Path(data_dir)
        self.store_path: Path = self.data_dir / Config.STORE_FILENAME
        self.blobs: BlobStorage = blob_storage or BlobStorage(self.data_dir / "blobs")
        self.similarity_threshold: float = similarity_threshold
        self._entries: List[Entry] = []
        self.loaded: bool = False
        if autoload:
            self.load()

    @property
    def entries(self) -> Tuple[Entry, ...]:
        return tuple(self._entries)

    def get_entry(self, entry_id: UUID) -> Optional[Entry]:
        index = self._index_of(entry_id)
        return None if index is None else self._entries[index]

    def add_entry(
        self,
        title: Optional[str] = None,
        text: Optional[str] = None,
        image_filenames: Iterable[str] = (),
        file_filename: Optional[str] = None,
        link_url: Optional[str] = None,
        pdfs: Iterable[PDFAttachment] = (),
    ) -> UUID:
        """Create a new entry at the head of the list and persist.

        Returns:
            Identifier of the new entry
        """
        entry = Entry(
            id=uuid4(),
            created_at=datetime.now(timezone.utc),
            title=title,
            text=text,
            image_filenames=list(image_filenames),
            file_filename=file_filename,
            link_url=link_url,
            pdfs=list(pdfs),
        )
        logger.debug(
            "addEntry title=%s images=%d file=%s link=%s pdfs=%d",
            title, len(entry.image_filenames), file_filename is not None,
            link_url is not None, len(entry.pdfs),
        )
        self._entries.insert(0, entry)
        self.save()
        return entry.id

    def update_entry_title(self, entry_id: UUID, title: Optional[str]) -> None:
        self._replace(entry_id, lambda entry: dataclasses.replace(entry, title=title))

    def append_images(self, entry_id: UUID, filenames: List[str], ocr_text: str) -> None:
        """Append image blobs and their OCR text to an existing entry."""
        self._replace(
            entry_id,
            lambda entry: dataclasses.replace(
                entry,
                image_filenames=entry.image_filenames + list(filenames),
                text=merge_text(entry.text, ocr_text),
            ),
        )

    def append_pdf(self, entry_id: UUID, filename: str, ocr_text: str) -> None:
        """Append a PDF attachment; the entry's top-level text is untouched."""
        attachment = PDFAttachment(filename=filename, ocr_text=ocr_text)
        self._replace(
            entry_id,
            lambda entry: dataclasses.replace(entry, pdfs=entry.pdfs + [attachment]),
        )

    def delete_entry(self, entry: Entry) -> None:
        """Delete every blob the entry references, then the entry itself."""
        for filename in entry.blob_filenames:
            self.blobs.delete_blob(filename)
        self._entries = [item for item in self._entries if item.id != entry.id]
        logger.info("Deleted entry %s", entry.id)
        self.save()

    def delete_entries(self, indices: Iterable[int]) -> None:
        """Delete entries by position in the current ordering.

        Positions are resolved to entries before anything is deleted,
        since each deletion shifts the remaining positions.

        Raises:
            IndexError: If any position is outside the list; nothing is deleted
        """
        positions = sorted(set(indices))
        invalid = [index for index in positions if not 0 <= index < len(self._entries)]
        if invalid:
            raise IndexError(f"Entry positions out of range: {invalid}")
        targets = [self._entries[index] for index in positions]
        for entry in targets:
            self.delete_entry(entry)

    def load(self) -> None:
        """Replace the in-memory list with the durable mirror.

        Any read or decode failure resets the list to empty. The previous
        file content is not recovered, so a corrupt mirror loses its entries.
        """
        try:
            data = self.store_path.read_text(encoding="utf-8")
            self._entries = decode_entries(data)
        except FileNotFoundError:
            self._entries = []
        except (OSError, UnicodeDecodeError, StoreIOError) as e:
            logger.error("Failed to load %s, starting with an empty library: %s", self.store_path, e)
            self._entries = []
        self.loaded = True

    def save(self) -> bool:
        """Atomically overwrite the durable mirror with the in-memory list.

        Write failures are logged and swallowed; the in-memory list is not
        rolled back.

        Returns:
            True when the mirror was written
        """
        try:
            data = encode_entries(self._entries)
            self.data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.data_dir, prefix=".documents_", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(data)
                os.replace(tmp_path, self.store_path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except (OSError, TypeError, ValueError) as e:
            logger.error("Failed to save %s: %s", self.store_path, e)
            return False
        return True

    def save_images(self, images: List[Any], prefix: str) -> List[str]:
        return self.blobs.save_images(images, prefix)

    def save_file(self, source: Union[str, os.PathLike], prefix: str) -> Optional[str]:
        return self.blobs.save_file(source, prefix)

    def search_entries(self, entries: Iterable[Entry], query: str) -> List[Entry]:
        return search_entries(entries, query, self.similarity_threshold)

    def _index_of(self, entry_id: UUID) -> Optional[int]:
        for index, entry in enumerate(self._entries):
            if entry.id == entry_id:
                return index
        return None

    def _replace(self, entry_id: UUID, update: Any) -> None:
        index = self._index_of(entry_id)
        if index is None:
            logger.debug("Entry %s not found, nothing to update", entry_id)
            return
        self._entries[index] = update(self._entries[index])
        self.save()
