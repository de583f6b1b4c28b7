"""Scratch repository for the capture core.

This module contains the ScratchRepository class, a durable key-value
store used for the small amount of cross-call state the debounce guard
needs (pending flag, timestamps, clipboard generation).
"""

from typing import Optional

from ..models import ScratchValue
from .database_manager import DatabaseManager

__all__ = ["ScratchRepository"]


class ScratchRepository:
    """Key-value access to the scratch table.

    Every method runs in its own transaction; database failures surface
    as ``StoreIOError``.

    Attributes:
        db_manager: DatabaseManager instance for database operations
    """

    def __init__(self, db_manager: DatabaseManager) -> None:
        self.db_manager: DatabaseManager = db_manager

    def get(self, key: str) -> Optional[str]:
        """Return the stored value for ``key`` or None when absent."""
        with self.db_manager.transaction("read") as session:
            record = session.get(ScratchValue, key)
            return record.value if record is not None else None

    def set(self, key: str, value: str) -> None:
        """Insert or overwrite the value stored under ``key``."""
        with self.db_manager.transaction("write") as session:
            session.merge(ScratchValue(key=key, value=value))

    def pop(self, key: str) -> Optional[str]:
        """Read and delete ``key`` in a single transaction.

        Returns:
            The value that was stored, or None when absent
        """
        with self.db_manager.transaction("delete") as session:
            record = session.get(ScratchValue, key)
            if record is None:
                return None
            value = record.value
            session.delete(record)
            return value
