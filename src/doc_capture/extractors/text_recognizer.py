"""Text recognizers for the document capture core.

This module contains the TextRecognizer interface through which the
core performs OCR, and two implementations: a local Tesseract engine
and an OpenAI vision model.
"""

import base64
import io
from abc import ABC, abstractmethod
from typing import Any, Optional

import pytesseract
from langfuse import observe
from openai import OpenAI, OpenAIError

from ..config import Config
from ..exceptions import TextRecognitionError

__all__ = ["TextRecognizer", "TesseractRecognizer", "OpenAIVisionRecognizer"]


class TextRecognizer(ABC):
    """Abstract base class for OCR implementations.

    Implementations return the recognized text of one decoded image,
    possibly empty, and raise ``TextRecognitionError`` when the engine
    fails.
    """

    @abstractmethod
    def recognize_text(self, image: Any) -> str:
        """Extract text from a decoded image.

        Args:
            image: Pillow image to recognize

        Returns:
            Recognized text, lines separated by newlines

        Raises:
            TextRecognitionError: If the OCR engine fails
        """
        pass


class TesseractRecognizer(TextRecognizer):
    """Local OCR using the Tesseract engine through pytesseract.

    Attributes:
        languages: Tesseract language string such as ``spa+eng``
        config: Extra command line configuration for Tesseract
    """

    def __init__(self, languages: str = Config.OCR_LANGUAGES, config: str = "--oem 3 --psm 6",
                 tesseract_cmd: Optional[str] = None) -> None:
        self.languages: str = languages
        self.config: str = config
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd

    @observe(name="tesseract_ocr", capture_input=False)
    def recognize_text(self, image: Any) -> str:
        try:
            text: str = pytesseract.image_to_string(image, lang=self.languages, config=self.config)
        except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError, OSError) as e:
            raise TextRecognitionError(str(e)) from e
        lines = [line.strip() for line in text.splitlines() if line.strip()]
        return "\n".join(lines)


class OpenAIVisionRecognizer(TextRecognizer):
    """OCR using an OpenAI vision-capable chat model.

    Attributes:
        cli: OpenAI client instance for API communication
        model: Model name used for recognition
    """

    PROMPT = (
        "Transcribe all text visible in this image exactly as written, "
        "one line per line of text. Return only the text. "
        "If there is no text, return an empty response."
    )

    def __init__(self, api_key: str, model: str = Config.OPENAI_MODEL) -> None:
        """Initialize recognizer with OpenAI API key.

        Raises:
            TextRecognitionError: If API key is missing or client creation fails
        """
        if not api_key:
            raise TextRecognitionError("Missing OpenAI API key")

        try:
            self.cli: OpenAI = OpenAI(api_key=api_key)
        except Exception as e:
            raise TextRecognitionError(f"OpenAI client initialization error: {str(e)}") from e
        self.model: str = model

    @observe(name="openai_vision_ocr", as_type="generation", capture_input=False)
    def recognize_text(self, image: Any) -> str:
        try:
            response = self.cli.chat.completions.create(
                model=self.model,
                temperature=0,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": self.PROMPT},
                            {"type": "image_url", "image_url": {"url": self._data_url(image)}},
                        ],
                    }
                ],
            )
        except OpenAIError as e:
            raise TextRecognitionError(f"OpenAI API error: {str(e)}") from e

        if not response.choices or not response.choices[0].message.content:
            return ""
        return response.choices[0].message.content.strip()

    @staticmethod
    def _data_url(image: Any) -> str:
        buffer = io.BytesIO()
        if image.mode not in ("RGB", "L"):
            image = image.convert("RGB")
        image.save(buffer, format="JPEG", quality=Config.JPEG_QUALITY)
        encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
        return f"data:image/jpeg;base64,{encoded}"
