"""Database module for the document capture core.

This module contains database management classes including connection
management, session creation, and the scratch key-value repository.
"""

from .database_manager import DatabaseManager
from .scratch_repository import ScratchRepository

__all__ = ["DatabaseManager", "ScratchRepository"]
