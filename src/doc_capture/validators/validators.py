"""File validators for the document capture core.

This module contains the FileValidator class used by the classifier and
the capture processor to decide which files are accepted as text
sources and which as PDFs.
"""

import os
from pathlib import Path
from typing import Union

from ..config import Config
from ..exceptions import NoContentError

__all__ = ["FileValidator"]

PathLike = Union[str, os.PathLike]


class FileValidator:
    """Validates files offered by the clipboard or picked by the user.

    All methods are static; extension checks are case-insensitive.
    """

    @staticmethod
    def extension(path: PathLike) -> str:
        return Path(path).suffix.lstrip(".").lower()

    @staticmethod
    def is_text_file(path: PathLike) -> bool:
        """Return True when the file extension is an allowed text extension."""
        return FileValidator.extension(path) in Config.TEXT_FILE_EXTENSIONS

    @staticmethod
    def is_pdf_file(path: PathLike) -> bool:
        return FileValidator.extension(path) == "pdf"

    @staticmethod
    def validate_pdf_file(path: PathLike) -> None:
        """Check that ``path`` names an existing PDF file.

        Raises:
            NoContentError: If the file is missing or is not a PDF
        """
        if not FileValidator.is_pdf_file(path):
            raise NoContentError(
                f"Invalid file extension. Expected .pdf, got: {Path(path).suffix or '(none)'}"
            )
        if not Path(path).is_file():
            raise NoContentError(f"File {path} does not exist")
