"""Data model for capture and recognition requests and results."""
import base64
import enum
from dataclasses import dataclass
from typing import Optional, Union


class OutputFormat(enum.Enum):
    """Output encodings. PNG is lossless, JPG is lossy."""
    PNG = "png"
    JPG = "jpg"

    @property
    def extension(self) -> str:
        return self.value

    @property
    def mime_type(self) -> str:
        return "image/jpeg" if self is OutputFormat.JPG else "image/png"

    @property
    def lossless(self) -> bool:
        return self is OutputFormat.PNG


class CaptureSource(enum.Enum):
    """Where the pixels of a capture came from."""
    DISPLAY = "display"
    APPLICATION = "application"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class CaptureRequest:
    """A capture request.

    ``application_name`` takes precedence over ``display`` when present; the
    display index is then ignored, not validated.
    """
    display: int = 0
    format: OutputFormat = OutputFormat.PNG
    application_name: Optional[str] = None


@dataclass(frozen=True)
class CaptureOutcome:
    """Raw capture plus the branch that produced it."""
    image: bytes
    context: str
    source: CaptureSource
    fallback_reason: Optional[str] = None

    @property
    def used_fallback(self) -> bool:
        return self.source is CaptureSource.FALLBACK


@dataclass(frozen=True)
class CaptureResult:
    """A persisted capture.

    ``file_path`` refers to a file that was written before this object was
    created; ``text_encoding`` is always derived from ``encoded_bytes``.
    """
    file_path: str
    encoded_bytes: bytes
    format: OutputFormat = OutputFormat.PNG
    source: CaptureSource = CaptureSource.DISPLAY

    @property
    def text_encoding(self) -> str:
        return base64.b64encode(self.encoded_bytes).decode("ascii")


@dataclass(frozen=True)
class RecognitionRequest:
    image_source: Union[str, bytes]
    language: str = "eng"


@dataclass(frozen=True)
class CombinedResult:
    text: str
    screenshot: CaptureResult


@dataclass(frozen=True)
class PositionalIndex:
    """Position of an entry in one application listing.

    Not a process identifier: it is only meaningful within the listing that
    produced it and must not be reused across calls.
    """
    position: int

    def __str__(self) -> str:
        return f"#{self.position}"


@dataclass(frozen=True)
class ApplicationDescriptor:
    name: str
    ordinal_index: PositionalIndex


@dataclass(frozen=True)
class WindowBounds:
    """Front window rectangle in screen coordinates (points)."""
    left: int
    top: int
    width: int
    height: int

    def as_region(self) -> dict:
        return {"left": self.left, "top": self.top, "width": self.width, "height": self.height}
