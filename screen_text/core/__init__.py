"""Core functionality for screen-text.

Components:
- ScreenshotManager: capture orchestrator behind every tool
- ScreenCapturer: display capture and application capture with fallback
- OCRProcessor: Tesseract text recognition with a per-call engine
- ScreenshotStorage: screenshot folder preparation and file persistence
"""

from .capture import ScreenCapturer
from .errors import (
    CaptureError,
    ErrorKind,
    RecognitionError,
    ScreenTextError,
    StorageError,
    ValidationError,
    WindowingError,
)
from .models import (
    ApplicationDescriptor,
    CaptureRequest,
    CaptureResult,
    CaptureSource,
    CombinedResult,
    OutputFormat,
    PositionalIndex,
    RecognitionRequest,
)
from .ocr_processor import OCRProcessor
from .screenshot_manager import ScreenshotManager, create_screenshot_manager
from .storage import ScreenshotStorage

__all__ = [
    'ScreenCapturer',
    'OCRProcessor',
    'ScreenshotManager',
    'ScreenshotStorage',
    'create_screenshot_manager',
    'ApplicationDescriptor',
    'CaptureRequest',
    'CaptureResult',
    'CaptureSource',
    'CombinedResult',
    'OutputFormat',
    'PositionalIndex',
    'RecognitionRequest',
    'ErrorKind',
    'ScreenTextError',
    'StorageError',
    'CaptureError',
    'WindowingError',
    'RecognitionError',
    'ValidationError',
]
