"""Classified payload models.

A payload is the transient result of classifying a clipboard or input
source, before it becomes an entry. Each variant carries only the
fields relevant to it.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Union
from uuid import UUID

__all__ = [
    "PlainTextPayload",
    "LinkPayload",
    "FilePayload",
    "ImagesPayload",
    "Payload",
    "CaptureResult",
]


@dataclass(frozen=True)
class PlainTextPayload:
    text: str
    title: Optional[str] = None


@dataclass(frozen=True)
class LinkPayload:
    """Text whose whole trimmed content is a single link."""
    url: str
    text: str
    title: Optional[str] = None


@dataclass(frozen=True)
class FilePayload:
    """An unpersisted PDF on disk, found on the clipboard.

    ``is_temporary`` marks a scratch copy written by the classifier, removed
    once the capture has been processed.
    """
    path: Path
    title: Optional[str] = None
    is_temporary: bool = False


@dataclass(frozen=True)
class ImagesPayload:
    """Decoded images together with their combined OCR text."""
    images: List[Any]
    text: str = ""
    title: Optional[str] = None


Payload = Union[PlainTextPayload, LinkPayload, FilePayload, ImagesPayload]


@dataclass
class CaptureResult:
    """Outcome of a capture operation reported to the UI layer.

    Attributes:
        success: Whether the operation completed
        entry_id: Identifier of the created or mutated entry
        title: Title of the entry, if any
        text: Text shown to the user after the capture
        error: Localized failure message when ``success`` is false
    """
    success: bool
    entry_id: Optional[UUID] = None
    title: Optional[str] = None
    text: str = ""
    error: Optional[str] = None
    details: List[str] = field(default_factory=list)

    @classmethod
    def ok(cls, entry_id: UUID, title: Optional[str], text: str) -> "CaptureResult":
        return cls(success=True, entry_id=entry_id, title=title, text=text)

    @classmethod
    def failure(cls, message: str, *details: str) -> "CaptureResult":
        return cls(success=False, error=message, details=list(details))
