"""JSON codec for the durable entry list.

The durable mirror is a single JSON document. Version 2 wraps the list
as ``{"schemaVersion": 2, "entries": [...]}``; version 1 files are a
bare list. Entries written before PDF attachments existed carry a single
``fileFilename`` and are migrated to a one-element ``pdfs`` list on
decode.
"""

import json
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID, uuid4

from ..config import Config
from ..exceptions import StoreIOError
from ..models import Entry, PDFAttachment

__all__ = ["encode_entries", "decode_entries", "entry_to_dict", "entry_from_dict"]


def _parse_datetime(value: str) -> datetime:
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def _optional_str(raw: Dict[str, Any], key: str) -> Optional[str]:
    value = raw.get(key)
    return None if value is None else str(value)


def entry_to_dict(entry: Entry) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "id": str(entry.id),
        "createdAt": entry.created_at.isoformat(),
        "imageFilenames": list(entry.image_filenames),
        "pdfs": [
            {"id": str(pdf.id), "filename": pdf.filename, "ocrText": pdf.ocr_text}
            for pdf in entry.pdfs
        ],
    }
    # Optional keys are omitted when absent
    for key, value in (
        ("title", entry.title),
        ("text", entry.text),
        ("fileFilename", entry.file_filename),
        ("linkURL", entry.link_url),
    ):
        if value is not None:
            payload[key] = value
    return payload


def entry_from_dict(raw: Dict[str, Any]) -> Entry:
    """Build an entry from its JSON form, migrating legacy file attachments.

    Raises:
        KeyError: If ``id`` or ``createdAt`` is missing
        ValueError: If an identifier or timestamp is malformed
    """
    pdfs = [
        PDFAttachment(
            id=UUID(str(item["id"])) if item.get("id") else uuid4(),
            filename=str(item["filename"]),
            ocr_text=str(item.get("ocrText") or ""),
        )
        for item in raw.get("pdfs") or []
    ]
    file_filename = _optional_str(raw, "fileFilename")
    if file_filename is not None and not pdfs:
        pdfs = [PDFAttachment(filename=file_filename, ocr_text="")]
        file_filename = None

    return Entry(
        id=UUID(str(raw["id"])),
        created_at=_parse_datetime(str(raw["createdAt"])),
        title=_optional_str(raw, "title"),
        text=_optional_str(raw, "text"),
        image_filenames=[str(name) for name in raw.get("imageFilenames") or []],
        file_filename=file_filename,
        link_url=_optional_str(raw, "linkURL"),
        pdfs=pdfs,
    )


def encode_entries(entries: List[Entry]) -> str:
    document = {
        "schemaVersion": Config.STORE_SCHEMA_VERSION,
        "entries": [entry_to_dict(entry) for entry in entries],
    }
    return json.dumps(document, ensure_ascii=False, indent=2)


def decode_entries(data: str) -> List[Entry]:
    """Decode a durable mirror in either the wrapped or the legacy bare-list shape.

    Raises:
        StoreIOError: If the document is not valid JSON or has the wrong shape
    """
    try:
        document = json.loads(data)
        if isinstance(document, dict):
            items = document.get("entries")
        else:
            items = document
        if not isinstance(items, list):
            raise ValueError("entry list missing")
        return [entry_from_dict(item) for item in items]
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        raise StoreIOError(f"Entry decoding error: {str(e)}") from e
