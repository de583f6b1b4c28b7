"""Category filters applied to the library before searching."""

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Iterable, List, Optional

from ..models import Entry

__all__ = ["LibraryFilter", "filter_entries"]


class LibraryFilter(Enum):
    """Filters offered by the library view."""
    ALL = "All"
    PHOTOS = "Photos"
    LINKS = "Links"
    TEXT = "Text"
    TODAY = "Hoy"
    WEEK = "Semana"


def _local(value: datetime) -> datetime:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone()


def _same_day(created_at: datetime, now: datetime) -> bool:
    return _local(created_at).date() == _local(now).date()


def _same_week(created_at: datetime, now: datetime) -> bool:
    today = _local(now).date()
    week_start = today - timedelta(days=today.weekday())
    return week_start <= _local(created_at).date() < week_start + timedelta(days=7)


def filter_entries(
    entries: Iterable[Entry],
    library_filter: LibraryFilter,
    now: Optional[datetime] = None,
) -> List[Entry]:
    """Return the entries selected by ``library_filter``, order preserved.

    Args:
        entries: Entries in display order
        library_filter: Filter to apply
        now: Reference time for the day and week filters, defaults to now

    Returns:
        Selected entries
    """
    candidates = list(entries)
    if library_filter is LibraryFilter.ALL:
        return candidates
    if library_filter is LibraryFilter.PHOTOS:
        return [e for e in candidates if e.image_filenames and e.link_url is None]
    if library_filter is LibraryFilter.LINKS:
        return [e for e in candidates if e.link_url is not None]
    if library_filter is LibraryFilter.TEXT:
        return [
            e for e in candidates
            if e.text and not e.image_filenames and e.file_filename is None and e.link_url is None
        ]

    now = now or datetime.now(timezone.utc)
    if library_filter is LibraryFilter.TODAY:
        return [e for e in candidates if _same_day(e.created_at, now)]
    return [e for e in candidates if _same_week(e.created_at, now)]
