"""Input sources inspected by the clipboard classifier.

A pasteboard holds an ordered list of content providers. Each provider
may offer several typed representations of the same item, loadable as
raw data, as a file on disk, or as a native object. Host adapters
implement ``ContentProvider`` and ``Pasteboard``; ``ItemProvider`` and
``MemoryPasteboard`` are in-memory implementations.
"""

import os
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

__all__ = ["RepresentationType", "ContentProvider", "ItemProvider", "Pasteboard", "MemoryPasteboard"]


class RepresentationType(Enum):
    """Typed representations a provider may offer."""
    PLAIN_TEXT = "public.plain-text"
    RICH_TEXT = "public.rtf"
    UTF8_TEXT = "public.utf8-plain-text"
    FILE_URL = "public.file-url"
    PDF = "com.adobe.pdf"
    IMAGE = "public.image"


class ContentProvider(ABC):
    """One item of a heterogeneous input, offering typed representations."""

    @abstractmethod
    def has_representation(self, kind: RepresentationType) -> bool:
        pass

    @abstractmethod
    def load_data(self, kind: RepresentationType) -> Optional[bytes]:
        """Return the representation as raw bytes, or None if unavailable."""
        pass

    @abstractmethod
    def load_file(self, kind: RepresentationType) -> Optional[Path]:
        """Return a file on disk holding the representation, or None."""
        pass

    @abstractmethod
    def load_object(self, kind: RepresentationType) -> Optional[Any]:
        """Return a native object such as a Pillow image or a file URL, or None."""
        pass


class ItemProvider(ContentProvider):
    """Content provider backed by in-memory mappings.

    Attributes:
        data: Raw bytes per representation
        files: Files on disk per representation
        objects: Native objects per representation
    """

    def __init__(
        self,
        data: Optional[Dict[RepresentationType, bytes]] = None,
        files: Optional[Dict[RepresentationType, Union[str, os.PathLike]]] = None,
        objects: Optional[Dict[RepresentationType, Any]] = None,
    ) -> None:
        self.data: Dict[RepresentationType, bytes] = dict(data or {})
        self.files: Dict[RepresentationType, Path] = {k: Path(v) for k, v in (files or {}).items()}
        self.objects: Dict[RepresentationType, Any] = dict(objects or {})

    def has_representation(self, kind: RepresentationType) -> bool:
        return kind in self.data or kind in self.files or kind in self.objects

    def load_data(self, kind: RepresentationType) -> Optional[bytes]:
        return self.data.get(kind)

    def load_file(self, kind: RepresentationType) -> Optional[Path]:
        return self.files.get(kind)

    def load_object(self, kind: RepresentationType) -> Optional[Any]:
        return self.objects.get(kind)


class Pasteboard(ABC):
    """A clipboard or other heterogeneous input source."""

    available: bool = True

    @property
    @abstractmethod
    def providers(self) -> List[ContentProvider]:
        pass

    @abstractmethod
    def string(self) -> Optional[str]:
        """Generic plain-text accessor used as the last fallback."""
        pass

    @abstractmethod
    def image(self) -> Optional[Any]:
        """Generic image accessor used when no provider yields an image."""
        pass

    @abstractmethod
    def change_count(self) -> int:
        """Counter that increases every time the clipboard contents change."""
        pass


class MemoryPasteboard(Pasteboard):
    """Pasteboard holding its contents in memory."""

    def __init__(
        self,
        providers: Iterable[ContentProvider] = (),
        string: Optional[str] = None,
        image: Optional[Any] = None,
        change_count: int = 0,
        available: bool = True,
    ) -> None:
        self._providers: List[ContentProvider] = list(providers)
        self._string = string
        self._image = image
        self._change_count = change_count
        self.available = available

    @property
    def providers(self) -> List[ContentProvider]:
        return list(self._providers)

    def string(self) -> Optional[str]:
        return self._string

    def image(self) -> Optional[Any]:
        return self._image

    def change_count(self) -> int:
        return self._change_count

    def set_contents(
        self,
        providers: Iterable[ContentProvider] = (),
        string: Optional[str] = None,
        image: Optional[Any] = None,
    ) -> None:
        """Replace the contents and bump the change counter."""
        self._providers = list(providers)
        self._string = string
        self._image = image
        self._change_count += 1
