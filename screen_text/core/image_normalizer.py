"""Image encoding helpers.

Two independent transforms over raw image bytes:
- ``encode_for_output``: re-encode to the requested output format.
- ``encode_for_recognition``: greyscale, contrast normalization and
  sharpening ahead of OCR.

Both are deterministic: the same input and target always yield the same bytes.
Pillow errors (``UnidentifiedImageError`` is an ``OSError``) propagate to the
caller, which maps them onto the error taxonomy.
"""
import io

from PIL import Image, ImageFilter, ImageOps

from .models import OutputFormat

DEFAULT_JPEG_QUALITY = 90
# Percent of darkest/lightest pixels ignored when stretching contrast
CONTRAST_CUTOFF = 1


def encode_for_output(raw: bytes, output_format: OutputFormat,
                      jpeg_quality: int = DEFAULT_JPEG_QUALITY) -> bytes:
    """Re-encode ``raw`` as PNG or as JPEG with a fixed quality."""
    buffer = io.BytesIO()
    with Image.open(io.BytesIO(raw)) as image:
        if output_format is OutputFormat.JPG:
            image.convert("RGB").save(buffer, format="JPEG", quality=jpeg_quality)
        else:
            image.save(buffer, format="PNG")
    return buffer.getvalue()


def encode_for_recognition(raw: bytes) -> bytes:
    """Greyscale, normalize contrast and sharpen; returns PNG bytes."""
    buffer = io.BytesIO()
    with Image.open(io.BytesIO(raw)) as image:
        grey = ImageOps.grayscale(image)
        normalized = ImageOps.autocontrast(grey, cutoff=CONTRAST_CUTOFF)
        sharpened = normalized.filter(ImageFilter.SHARPEN)
        sharpened.save(buffer, format="PNG")
    return buffer.getvalue()
