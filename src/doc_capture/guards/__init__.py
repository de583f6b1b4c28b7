"""Guards module for the document capture core.

This module contains the debounce guard applied to external capture
triggers.
"""

from .debounce_guard import DebounceGuard

__all__ = ["DebounceGuard"]
