"""Custom exceptions for the document capture core.

This module contains all custom exception classes used throughout
classification, OCR, blob persistence and the entry store.
"""

__all__ = [
    "CaptureError",
    "NoContentError",
    "UnsupportedCapabilityError",
    "BlobPersistenceError",
    "MetadataFetchError",
    "StoreIOError",
    "EntryNotFoundError",
    "TextRecognitionError",
    "PDFProcessingError",
]


class CaptureError(Exception):
    """Base class for every error raised by the capture core.

    Each subclass carries a localized ``user_message`` that the capture
    processor reports to the UI layer instead of the technical message.
    """

    user_message: str = "No se pudo completar la captura."


class NoContentError(CaptureError):
    """Exception raised when classification finds nothing usable.

    Also used when a required blob could not be persisted, since no entry
    may reference a blob that does not exist.
    """

    user_message = "No hay texto ni imagen en el portapapeles."


class UnsupportedCapabilityError(CaptureError):
    """Exception raised when the host lacks a required capability.

    For example, a pasteboard that reports no clipboard API is available.
    """

    user_message = "Esta funcion no esta disponible en esta plataforma."


class BlobPersistenceError(CaptureError):
    """Exception raised when an image or file blob cannot be written."""

    user_message = NoContentError.user_message


class MetadataFetchError(CaptureError):
    """Exception raised when link metadata cannot be fetched.

    Never surfaced to the user; the capture processor falls back to the
    title composition chain.
    """


class StoreIOError(CaptureError):
    """Exception raised when the durable entry list cannot be read or written."""


class EntryNotFoundError(CaptureError):
    """Exception raised when a mutation targets an entry that no longer exists."""

    user_message = "No se encontro el documento."


class TextRecognitionError(CaptureError):
    """Exception raised by a text recognizer when OCR fails for an image."""


class PDFProcessingError(CaptureError):
    """Exception raised during PDF rendering or text layer extraction."""
