"""Blob storage for the document capture core.

This module contains the BlobStorage class that persists images and
files referenced by entries inside an app-private directory. Blobs are
addressed by filename only.
"""

import logging
import os
import shutil
import tempfile
import threading
import time
from pathlib import Path
from typing import Any, Callable, List, Optional, Set, Union

from PIL import Image

from ..config import Config
from ..exceptions import BlobPersistenceError

__all__ = ["BlobStorage"]

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


class BlobStorage:
    """Filename-addressed storage for image and file blobs.

    Attributes:
        base_dir: Directory holding every blob
        jpeg_quality: Quality used when encoding images
    """

    def __init__(
        self,
        base_dir: PathLike = Path(Config.DATA_DIR) / "blobs",
        jpeg_quality: int = Config.JPEG_QUALITY,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize blob storage rooted at ``base_dir``.

        Args:
            base_dir: Directory for blobs, created on first write
            jpeg_quality: JPEG quality for persisted images
            clock: Source of the unix timestamp used in blob names
        """
        self.base_dir: Path = Path(base_dir)
        self.jpeg_quality: int = jpeg_quality
        self._clock = clock
        self._reserved: Set[str] = set()
        self._names_lock = threading.Lock()

    def path_for(self, filename: str) -> Path:
        return self.base_dir / filename

    def exists(self, filename: str) -> bool:
        return self.path_for(filename).exists()

    def save_images(self, images: List[Any], prefix: str) -> List[str]:
        """Persist each image as an independent JPEG blob.

        A failure on one image is logged and skipped; the others are
        still written.

        Args:
            images: Pillow images in display order
            prefix: Blob name prefix such as ``scan``

        Returns:
            Names of the images that were written, in original order
        """
        filenames: List[str] = []
        timestamp = int(self._clock())

        for index, image in enumerate(images):
            filename = self._unique_name(f"{prefix}_{timestamp}_{index}.jpg")
            try:
                self._write_atomic(filename, lambda handle, img=image: self._encode_jpeg(img, handle))
            except (OSError, ValueError, AttributeError) as e:
                logger.warning("Failed to save image %d as %s: %s", index, filename, e)
                continue
            finally:
                self._release_name(filename)
            filenames.append(filename)

        logger.debug("Saved %d of %d images with prefix %s", len(filenames), len(images), prefix)
        return filenames

    def save_file(self, source: PathLike, prefix: str) -> Optional[str]:
        """Copy an external file into blob storage.

        The blob is named ``<prefix>_<timestamp>_<original name>``; an
        existing blob with the same name is overwritten.

        Args:
            source: Path of the file to copy
            prefix: Blob name prefix such as ``pdf``

        Returns:
            The blob filename, or None when the copy failed
        """
        source_path = Path(source)
        filename = f"{prefix}_{int(self._clock())}_{source_path.name}"
        destination = self.path_for(filename)

        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
            if destination.exists():
                destination.unlink()
            shutil.copyfile(source_path, destination)
        except OSError as e:
            logger.warning("Failed to copy %s into blob storage: %s", source_path, e)
            return None

        return filename

    def persist_blob(self, data: bytes, suggested_name: str) -> str:
        """Write raw bytes under a collision-free name derived from ``suggested_name``.

        Raises:
            BlobPersistenceError: If the blob cannot be written
        """
        filename = self._unique_name(suggested_name)
        try:
            self._write_atomic(filename, lambda handle: handle.write(data))
        except OSError as e:
            raise BlobPersistenceError(f"Blob write error for {filename}: {str(e)}") from e
        finally:
            self._release_name(filename)
        return filename

    def read_blob(self, filename: str) -> Optional[bytes]:
        try:
            return self.path_for(filename).read_bytes()
        except OSError:
            return None

    def delete_blob(self, filename: str) -> None:
        """Remove a blob; a blob that is already absent is not an error."""
        try:
            self.path_for(filename).unlink()
        except FileNotFoundError:
            logger.debug("Blob %s already absent", filename)
        except OSError as e:
            logger.warning("Failed to delete blob %s: %s", filename, e)

    def _encode_jpeg(self, image: Any, handle: Any) -> None:
        if image.mode not in ("RGB", "L"):
            image = image.convert("RGB")
        image.save(handle, format="JPEG", quality=self.jpeg_quality)

    def _taken(self, filename: str) -> bool:
        return filename in self._reserved or self.exists(filename)

    def _unique_name(self, filename: str) -> str:
        """Reserve a free blob name; writers on other threads skip reserved names."""
        with self._names_lock:
            if self._taken(filename):
                stem, suffix = os.path.splitext(filename)
                counter = 1
                while self._taken(f"{stem}-{counter}{suffix}"):
                    counter += 1
                filename = f"{stem}-{counter}{suffix}"
            self._reserved.add(filename)
        return filename

    def _release_name(self, filename: str) -> None:
        with self._names_lock:
            self._reserved.discard(filename)

    def _write_atomic(self, filename: str, writer: Callable[[Any], Any]) -> None:
        self.base_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.base_dir, prefix=".tmp_")
        try:
            with os.fdopen(fd, "wb") as handle:
                writer(handle)
            os.replace(tmp_path, self.path_for(filename))
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
