"""Configuration module for the document capture core.

This module contains all configuration parameters including storage
locations, OCR and PDF rendering settings, search and debounce
thresholds, and the logging setup shared by every sub-package.
"""

import logging
import os
from typing import Optional, Tuple

from dotenv import load_dotenv

__all__ = ["Config", "setup_logging"]

# Load environment variables
load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    """Configuration class containing application settings and constants.

    Values that a host may want to tune (storage locations, thresholds,
    log level) are read from the environment once at import time; the
    remaining attributes are fixed constants.
    """

    # Storage configuration
    DATA_DIR: str = os.getenv("DOC_CAPTURE_DATA_DIR", "data")
    STORE_FILENAME: str = "documents.json"
    STORE_SCHEMA_VERSION: int = 2
    DATABASE_URL: str = os.getenv("DOC_CAPTURE_DATABASE_URL", "sqlite:///doc_capture_scratch.db")

    # Blob naming
    SCAN_PREFIX: str = "scan"
    PDF_PREFIX: str = "pdf"
    LINK_PREFIX: str = "link"
    JPEG_QUALITY: int = 90

    # Classification
    TEXT_FILE_EXTENSIONS: Tuple[str, ...] = ("txt", "md", "rtf")

    # OCR and PDF rendering
    OCR_LANGUAGES: str = "spa+eng"
    PDF_RENDER_RESOLUTION: int = 200
    OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")

    # Link metadata
    LINK_FETCH_TIMEOUT: float = 8.0
    LINK_USER_AGENT: str = "doc-capture/1.0"
    LINK_MAX_PAGE_BYTES: int = 2 * 1024 * 1024
    LINK_MAX_IMAGE_BYTES: int = 10 * 1024 * 1024

    # Search and debounce thresholds
    SIMILARITY_THRESHOLD: float = float(os.getenv("DOC_CAPTURE_SIMILARITY_THRESHOLD", "0.7"))
    CAPTURE_COOLDOWN_SECONDS: float = float(os.getenv("DOC_CAPTURE_COOLDOWN_SECONDS", "3.0"))

    # Logging
    LOG_LEVEL: str = os.getenv("DOC_CAPTURE_LOG_LEVEL", "INFO").upper()
    DEBUG_LOGGING: bool = _env_bool("DOC_CAPTURE_DEBUG_LOGGING")


def setup_logging(level: Optional[str] = None, debug: Optional[bool] = None) -> logging.Logger:
    """Configure the ``doc_capture`` logger.

    Attaches a single console handler the first time it is called.
    The debug toggle overrides the configured level with DEBUG.

    Args:
        level: Log level name, defaults to ``Config.LOG_LEVEL``
        debug: Enable debug logging, defaults to ``Config.DEBUG_LOGGING``

    Returns:
        The configured package logger
    """
    logger = logging.getLogger("doc_capture")
    debug = Config.DEBUG_LOGGING if debug is None else debug
    level_name = "DEBUG" if debug else (level or Config.LOG_LEVEL).upper()
    logger.setLevel(getattr(logging, level_name, logging.INFO))

    if logger.handlers:
        return logger

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    logger.addHandler(console_handler)
    return logger
