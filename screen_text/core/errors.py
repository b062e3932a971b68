"""Error taxonomy for screen-text.

Every error carries an ``ErrorKind`` so tool responses can report a
machine-readable kind next to the human-readable message.
"""
import enum


class ErrorKind(enum.Enum):
    STORAGE = "storage_error"
    CAPTURE = "capture_error"
    RECOGNITION = "recognition_error"
    VALIDATION = "validation_error"
    INTERNAL = "internal_error"


class ScreenTextError(Exception):
    """Base class for all screen-text failures."""
    kind = ErrorKind.INTERNAL


class StorageError(ScreenTextError):
    """The screenshot directory or a screenshot file could not be written."""
    kind = ErrorKind.STORAGE


class CaptureError(ScreenTextError):
    """Pixel capture failed after exhausting any fallback."""
    kind = ErrorKind.CAPTURE


class WindowingError(CaptureError):
    """OS scripting (activation, window query, app listing) failed."""


class RecognitionError(ScreenTextError):
    """The OCR language could not be loaded or recognition failed."""
    kind = ErrorKind.RECOGNITION


class ValidationError(ScreenTextError):
    """A tool request was malformed; raised before any I/O."""
    kind = ErrorKind.VALIDATION
