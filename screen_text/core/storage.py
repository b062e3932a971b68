"""Screenshot storage for screen-text.

Screenshots are written to a fixed folder on the user's desktop and are never
cleaned up by this application. Filenames are timestamped and created
exclusively so concurrent requests never write to the same file.
"""
import asyncio
import logging
import os
from datetime import datetime, timezone
from typing import Callable, Optional

from .errors import StorageError
from .models import OutputFormat
from ..utils.path_config import DEFAULT_SCREENSHOTS_FOLDER, get_screenshots_dir

logger = logging.getLogger(__name__)

# Bounded so a broken clock cannot spin forever
MAX_NAME_ATTEMPTS = 1000


def format_timestamp(moment: datetime) -> str:
    """ISO 8601 UTC with millisecond precision, ':' and '.' replaced by '-'."""
    iso = moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"
    return iso.replace(":", "-").replace(".", "-")


def sanitize_context(context: str) -> str:
    """Make a naming context safe to use as a single path component."""
    cleaned = context.replace(os.sep, "_").replace("/", "_").strip()
    return cleaned or "screenshot"


class ScreenshotStorage:
    """Prepares the screenshot directory and persists encoded captures."""

    def __init__(self, base_dir: Optional[str] = None,
                 folder_name: str = DEFAULT_SCREENSHOTS_FOLDER,
                 clock: Optional[Callable[[], datetime]] = None):
        self.directory = get_screenshots_dir(base_dir or None, folder_name)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def prepare(self) -> str:
        """Ensure the screenshot directory exists and return its path."""
        try:
            await asyncio.to_thread(os.makedirs, self.directory, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to create screenshots folder {self.directory}: {e}") from e
        return self.directory

    def build_filename(self, context: str, output_format: OutputFormat, attempt: int = 0) -> str:
        stem = f"{sanitize_context(context)}-{format_timestamp(self._clock())}"
        if attempt:
            stem = f"{stem}-{attempt}"
        return f"{stem}.{output_format.extension}"

    async def persist(self, context: str, output_format: OutputFormat, data: bytes) -> str:
        """Write ``data`` to a new file and return its absolute path."""
        return await asyncio.to_thread(self._write_exclusive, context, output_format, data)

    def _write_exclusive(self, context: str, output_format: OutputFormat, data: bytes) -> str:
        for attempt in range(MAX_NAME_ATTEMPTS):
            path = os.path.join(self.directory, self.build_filename(context, output_format, attempt))
            try:
                with open(path, "xb") as f:
                    f.write(data)
            except FileExistsError:
                continue
            except OSError as e:
                raise StorageError(f"Failed to write screenshot {path}: {e}") from e
            logger.debug(f"Screenshot saved: {os.path.basename(path)} ({len(data)} bytes)")
            return path
        raise StorageError(f"Could not find a free filename for context {context!r}")
