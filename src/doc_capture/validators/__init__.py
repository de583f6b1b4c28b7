"""Validators module for the document capture core.

This module contains file validation helpers including text extension
checks and PDF detection.
"""

from .validators import FileValidator

__all__ = ["FileValidator"]
