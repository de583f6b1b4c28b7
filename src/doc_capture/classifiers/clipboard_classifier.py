"""Clipboard classifier for the document capture core.

This module contains the ClipboardClassifier class that resolves a
heterogeneous pasteboard into exactly one payload. Stages are tried in a
fixed order and the first one that yields a payload wins:

    text > link within text > PDF > image > generic string fallback
"""

import asyncio
import io
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Awaitable, Callable, Iterable, Optional, Tuple, Union
from urllib.parse import unquote, urlparse

from PIL import Image, UnidentifiedImageError
from striprtf.striprtf import rtf_to_text

from ..exceptions import NoContentError, UnsupportedCapabilityError
from ..models import FilePayload, LinkPayload, Payload, PlainTextPayload
from ..processors.document_processor import DocumentProcessor
from ..validators import FileValidator
from .link_detector import LinkDetector
from .sources import ContentProvider, Pasteboard, RepresentationType

__all__ = ["ClipboardClassifier", "first_success"]

logger = logging.getLogger(__name__)

Attempt = Callable[[Pasteboard], Awaitable[Optional[Payload]]]

TEXT_REPRESENTATIONS = (
    RepresentationType.PLAIN_TEXT,
    RepresentationType.RICH_TEXT,
    RepresentationType.UTF8_TEXT,
    RepresentationType.FILE_URL,
)


async def first_success(attempts: Iterable[Attempt], pasteboard: Pasteboard) -> Optional[Payload]:
    """Run ``attempts`` in order and return the first payload produced."""
    for attempt in attempts:
        payload = await attempt(pasteboard)
        if payload is not None:
            return payload
    return None


def _decode_text(data: bytes) -> Optional[str]:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return None


def _rtf_to_plain(data: bytes) -> str:
    try:
        source = data.decode("utf-8")
    except UnicodeDecodeError:
        source = data.decode("latin-1")
    return rtf_to_text(source)


def _read_bytes(path: Path) -> Optional[bytes]:
    try:
        return path.read_bytes()
    except OSError as e:
        logger.debug("Failed to read %s: %s", path, e)
        return None


def _decode_image(data: Optional[bytes]) -> Optional[Any]:
    if not data:
        return None
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
        return image
    except (UnidentifiedImageError, OSError, ValueError) as e:
        logger.debug("Failed to decode image representation: %s", e)
        return None


def _has_representation(provider: ContentProvider, kind: RepresentationType) -> bool:
    try:
        return bool(provider.has_representation(kind))
    except Exception as e:
        logger.debug("Provider failed to report %s: %s", kind.name, e)
        return False


def _call_host(read: Callable[[], Any], what: str) -> Any:
    """Call a host pasteboard accessor, treating a failure as no content."""
    try:
        return read()
    except Exception as e:
        logger.debug("Failed to read %s: %s", what, e)
        return None


def _path_from_item(item: Any) -> Optional[Path]:
    """Interpret a file-URL representation as a local path."""
    if isinstance(item, bytes):
        item = _decode_text(item)
    if isinstance(item, os.PathLike):
        return Path(item)
    if not isinstance(item, str) or not item.strip():
        return None
    value = item.strip()
    if value.startswith("file://"):
        return Path(unquote(urlparse(value).path))
    return Path(value)


class ClipboardClassifier:
    """Resolves pasteboard contents into a single classified payload.

    Attributes:
        document_processor: OCR service applied to a classified image
        temp_dir: Directory for PDFs offered only as raw data
    """

    def __init__(self, document_processor: DocumentProcessor,
                 temp_dir: Optional[Union[str, os.PathLike]] = None) -> None:
        self.document_processor: DocumentProcessor = document_processor
        self.temp_dir: Optional[str] = str(temp_dir) if temp_dir is not None else None

    async def classify(self, pasteboard: Pasteboard) -> Payload:
        """Classify the pasteboard contents.

        Args:
            pasteboard: Input source to inspect

        Returns:
            The payload of the first stage that matched

        Raises:
            UnsupportedCapabilityError: If the pasteboard is not available
            NoContentError: If no stage found usable content
        """
        if not pasteboard.available:
            raise UnsupportedCapabilityError("Clipboard API is not available")

        payload = await first_success(
            [self._text_stage, self._pdf_stage, self._image_stage, self._fallback_text_stage],
            pasteboard,
        )
        if payload is None:
            raise NoContentError("Clipboard holds no text, PDF or image")
        logger.debug("Classified clipboard as %s", type(payload).__name__)
        return payload

    async def find_pdf(self, pasteboard: Pasteboard) -> Optional[FilePayload]:
        """Run only the PDF stage; used when appending a PDF to an entry."""
        if not pasteboard.available:
            raise UnsupportedCapabilityError("Clipboard API is not available")
        return await self._pdf_stage(pasteboard)

    @staticmethod
    def text_payload(text: str, title: Optional[str] = None) -> Payload:
        url = LinkDetector.full_link(text)
        if url is not None:
            return LinkPayload(url=url, text=text, title=title)
        return PlainTextPayload(text=text, title=title)

    async def _text_stage(self, pasteboard: Pasteboard) -> Optional[Payload]:
        for provider in pasteboard.providers:
            for kind in TEXT_REPRESENTATIONS:
                if not _has_representation(provider, kind):
                    continue
                found = await asyncio.to_thread(self._load_text, provider, kind)
                if found is not None:
                    text, title = found
                    return self.text_payload(text, title)
        return None

    async def _pdf_stage(self, pasteboard: Pasteboard) -> Optional[FilePayload]:
        for provider in pasteboard.providers:
            payload = await asyncio.to_thread(self._load_pdf, provider)
            if payload is not None:
                return payload
        return None

    async def _image_stage(self, pasteboard: Pasteboard) -> Optional[Payload]:
        image = None
        for provider in pasteboard.providers:
            image = await asyncio.to_thread(self._load_image, provider)
            if image is not None:
                break
        if image is None:
            image = _call_host(pasteboard.image, "pasteboard image")
        if image is None:
            return None
        return await self.document_processor.process_images([image])

    async def _fallback_text_stage(self, pasteboard: Pasteboard) -> Optional[Payload]:
        text = _call_host(pasteboard.string, "pasteboard string")
        if not text:
            return None
        return self.text_payload(text)

    def _load_text(self, provider: ContentProvider, kind: RepresentationType) -> Optional[Tuple[str, Optional[str]]]:
        try:
            if kind is RepresentationType.FILE_URL:
                return self._read_text_file(provider.load_object(kind) or provider.load_data(kind))
            data = provider.load_data(kind)
            if data is None:
                return None
            text = _rtf_to_plain(data) if kind is RepresentationType.RICH_TEXT else _decode_text(data)
        except Exception as e:
            logger.debug("Failed to load %s representation: %s", kind.name, e)
            return None
        return (text, None) if text else None

    @staticmethod
    def _read_text_file(item: Any) -> Optional[Tuple[str, Optional[str]]]:
        path = _path_from_item(item)
        if path is None or not FileValidator.is_text_file(path):
            return None
        try:
            data = path.read_bytes()
        except OSError as e:
            logger.debug("Failed to read text file %s: %s", path, e)
            return None
        text = _rtf_to_plain(data) if FileValidator.extension(path) == "rtf" else _decode_text(data)
        return (text, path.name) if text else None

    def _load_pdf(self, provider: ContentProvider) -> Optional[FilePayload]:
        kind = RepresentationType.PDF
        try:
            if provider.has_representation(kind):
                path = provider.load_file(kind)
                if path is not None and Path(path).is_file():
                    return FilePayload(path=Path(path), title=Path(path).name)
                data = provider.load_data(kind)
                if data:
                    temp_path = self._write_temp_pdf(data)
                    return FilePayload(path=temp_path, is_temporary=True)

            if provider.has_representation(RepresentationType.FILE_URL):
                path = _path_from_item(
                    provider.load_object(RepresentationType.FILE_URL)
                    or provider.load_data(RepresentationType.FILE_URL)
                )
                if path is not None and FileValidator.is_pdf_file(path) and path.is_file():
                    return FilePayload(path=path, title=path.name)
        except Exception as e:
            logger.debug("Failed to load PDF representation: %s", e)
        return None

    def _write_temp_pdf(self, data: bytes) -> Path:
        with tempfile.NamedTemporaryFile(suffix=".pdf", dir=self.temp_dir, delete=False) as handle:
            handle.write(data)
        return Path(handle.name)

    @staticmethod
    def _load_image(provider: ContentProvider) -> Optional[Any]:
        kind = RepresentationType.IMAGE
        try:
            if not provider.has_representation(kind):
                return None

            native = provider.load_object(kind)
            if isinstance(native, Image.Image):
                return native

            image = _decode_image(provider.load_data(kind))
            if image is None:
                path = provider.load_file(kind)
                if path is not None:
                    image = _decode_image(_read_bytes(Path(path)))
        except Exception as e:
            logger.debug("Failed to load image representation: %s", e)
            return None
        return image
