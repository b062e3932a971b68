"""OCR processing module for screen-text."""
import asyncio
import io
import logging
from typing import Callable, Optional, Union

import pytesseract
from PIL import Image

from .errors import RecognitionError
from .image_normalizer import encode_for_recognition

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "eng"


def configure_tesseract(tesseract_cmd: Optional[str]) -> None:
    """Point pytesseract at a specific tesseract binary (process-wide)."""
    if tesseract_cmd:
        pytesseract.pytesseract.tesseract_cmd = tesseract_cmd


class TesseractEngine:
    """A Tesseract recognition engine bound to one language set.

    ``open`` verifies every ``+``-separated language pack is installed;
    ``close`` releases the engine. Both are called once per recognition.
    """

    def __init__(self, language: str = DEFAULT_LANGUAGE, config: str = ""):
        self.language = language
        self.config = config
        self._opened = False

    def open(self) -> None:
        try:
            available = set(pytesseract.get_languages(config=""))
        except pytesseract.TesseractNotFoundError as e:
            raise RecognitionError(f"Tesseract is not installed or not on PATH: {e}") from e
        except (pytesseract.TesseractError, OSError) as e:
            raise RecognitionError(f"Failed to query Tesseract languages: {e}") from e

        requested = [part for part in self.language.split("+") if part]
        missing = [lang for lang in requested if lang not in available]
        if not requested or missing:
            raise RecognitionError(
                f"Language data not available for {self.language!r} "
                f"(installed: {', '.join(sorted(available)) or 'none'})"
            )
        self._opened = True

    def recognize(self, image_bytes: bytes) -> str:
        if not self._opened:
            raise RecognitionError("Recognition engine used before it was opened")
        try:
            with Image.open(io.BytesIO(image_bytes)) as image:
                return pytesseract.image_to_string(image, lang=self.language, config=self.config)
        except (pytesseract.TesseractError, OSError, RuntimeError) as e:
            raise RecognitionError(f"Tesseract failed: {e}") from e

    def close(self) -> None:
        self._opened = False


class OCRProcessor:
    """Runs OCR on an image file or buffer with a fresh engine per call."""

    def __init__(self, engine_factory: Optional[Callable[[str], TesseractEngine]] = None,
                 tesseract_config: str = ""):
        self._engine_factory = engine_factory or (
            lambda language: TesseractEngine(language, config=tesseract_config)
        )

    async def extract_text(self, source: Union[str, bytes],
                           language: str = DEFAULT_LANGUAGE) -> str:
        """Extract trimmed text from a path or an in-memory image.

        The engine is released on every exit path. Returns "" when no text
        is detected.
        """
        engine = self._engine_factory(language)
        await asyncio.to_thread(engine.open)
        try:
            image_bytes = await self._read_source(source)
            try:
                prepared = await asyncio.to_thread(encode_for_recognition, image_bytes)
            except (OSError, ValueError) as e:
                raise RecognitionError(f"Failed to preprocess image: {e}") from e
            text = await asyncio.to_thread(engine.recognize, prepared)
        finally:
            engine.close()

        text = text.strip()
        if not text:
            logger.warning("No text found in image")
        else:
            logger.info(f"OCR extracted {len(text)} characters (language={language})")
        return text

    async def _read_source(self, source: Union[str, bytes]) -> bytes:
        if isinstance(source, (bytes, bytearray)):
            return bytes(source)
        try:
            return await asyncio.to_thread(_read_file, source)
        except OSError as e:
            raise RecognitionError(f"Failed to read image {source}: {e}") from e


def _read_file(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()
