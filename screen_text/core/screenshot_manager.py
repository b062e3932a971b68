"""Screenshot management module for screen-text.

``ScreenshotManager`` is the capture orchestrator. It sequences storage
preparation, capture, encoding, persistence and OCR for each request. Every
call is one-shot: nothing is retained between calls except the files written
to the screenshot folder.

Steps within one request run strictly in order. Concurrent requests share no
mutable state apart from the filesystem and, for application captures, the
desktop focus (see ``windowing``).
"""
import asyncio
import logging
from typing import List, Optional

from .capture import ScreenCapturer
from .errors import CaptureError
from .image_normalizer import DEFAULT_JPEG_QUALITY, encode_for_output
from .models import (
    ApplicationDescriptor,
    CaptureOutcome,
    CaptureRequest,
    CaptureResult,
    CombinedResult,
    OutputFormat,
    PositionalIndex,
    RecognitionRequest,
)
from .ocr_processor import DEFAULT_LANGUAGE, OCRProcessor, configure_tesseract
from .storage import ScreenshotStorage
from .windowing import MacWindowController
from ..utils.config_loader import ConfigManager

logger = logging.getLogger(__name__)


class ScreenshotManager:
    """Composes capture, encoding, storage and OCR into tool operations.

    Collaborators are injectable so tests can substitute fakes for the
    screen, the window system and the OCR engine.
    """

    def __init__(self, storage: Optional[ScreenshotStorage] = None,
                 capturer: Optional[ScreenCapturer] = None,
                 ocr_processor: Optional[OCRProcessor] = None,
                 window_controller: Optional[MacWindowController] = None,
                 jpeg_quality: int = DEFAULT_JPEG_QUALITY,
                 honor_combined_format: bool = False):
        self.window_controller = window_controller or MacWindowController()
        self.storage = storage or ScreenshotStorage()
        self.capturer = capturer or ScreenCapturer(window_controller=self.window_controller)
        self.ocr_processor = ocr_processor or OCRProcessor()
        self.jpeg_quality = jpeg_quality
        # When False, capture_and_recognize always persists PNG
        self.honor_combined_format = honor_combined_format

    async def _capture(self, request: CaptureRequest) -> CaptureOutcome:
        if request.application_name:
            # Application wins; the display index is ignored
            return await self.capturer.capture_application(request.application_name)
        return await self.capturer.capture_display(request.display)

    async def _encode(self, raw: bytes, output_format: OutputFormat) -> bytes:
        try:
            return await asyncio.to_thread(encode_for_output, raw, output_format, self.jpeg_quality)
        except (OSError, ValueError) as e:
            raise CaptureError(f"Failed to encode capture as {output_format.value}: {e}") from e

    async def _persist(self, outcome: CaptureOutcome, output_format: OutputFormat,
                       encoded: bytes) -> CaptureResult:
        path = await self.storage.persist(outcome.context, output_format, encoded)
        return CaptureResult(file_path=path, encoded_bytes=encoded,
                             format=output_format, source=outcome.source)

    async def capture_only(self, request: CaptureRequest) -> CaptureResult:
        """Capture, encode in the requested format and persist."""
        await self.storage.prepare()
        outcome = await self._capture(request)
        encoded = await self._encode(outcome.image, request.format)
        result = await self._persist(outcome, request.format, encoded)
        logger.info(f"Captured: {result.file_path} (source={outcome.source.value})")
        return result

    async def capture_and_recognize(self, request: CaptureRequest,
                                    language: str = DEFAULT_LANGUAGE) -> CombinedResult:
        """Capture once, OCR the lossless encoding and persist.

        The persisted file is PNG unless ``honor_combined_format`` is set, in
        which case the requested format is persisted instead. Recognition
        always runs on the PNG encoding.
        """
        persist_format = request.format if self.honor_combined_format else OutputFormat.PNG
        if persist_format is not request.format:
            logger.info(f"Combined capture persists PNG; requested {request.format.value} ignored")

        await self.storage.prepare()
        outcome = await self._capture(request)
        lossless = await self._encode(outcome.image, OutputFormat.PNG)
        encoded = lossless if persist_format.lossless else await self._encode(outcome.image, persist_format)
        screenshot = await self._persist(outcome, persist_format, encoded)

        text = await self.ocr_processor.extract_text(lossless, language)
        return CombinedResult(text=text, screenshot=screenshot)

    async def extract_text(self, request: RecognitionRequest) -> str:
        """OCR an existing image file or buffer."""
        return await self.ocr_processor.extract_text(request.image_source, request.language)

    async def list_applications(self) -> List[ApplicationDescriptor]:
        """Running foreground-capable applications with positional indices."""
        names = await self.window_controller.list_application_names()
        return [
            ApplicationDescriptor(name=name, ordinal_index=PositionalIndex(position))
            for position, name in enumerate(names)
        ]


def create_screenshot_manager(config: ConfigManager) -> ScreenshotManager:
    """Build a manager wired to the real primitives from configuration."""
    configure_tesseract(config.get('recognition', 'tesseract_cmd'))
    window_controller = MacWindowController()
    return ScreenshotManager(
        storage=ScreenshotStorage(
            base_dir=config.get('storage', 'base_dir') or None,
            folder_name=config.get('storage', 'folder_name', default='mcp-screenshots'),
        ),
        capturer=ScreenCapturer(
            window_controller=window_controller,
            settle_delay=config.get('capture', 'settle_delay', default=0.5),
            fallback_display=config.get('capture', 'fallback_display', default=0),
        ),
        ocr_processor=OCRProcessor(
            tesseract_config=config.get('recognition', 'tesseract_config', default=''),
        ),
        window_controller=window_controller,
        jpeg_quality=config.get('capture', 'jpeg_quality', default=DEFAULT_JPEG_QUALITY),
        honor_combined_format=bool(config.get('recognition', 'honor_requested_format', default=False)),
    )
