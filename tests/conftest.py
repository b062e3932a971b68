"""Test configuration and fixtures for screen-text tests."""
import io
import os
import sys
from typing import List, Optional

import pytest
from PIL import Image

# Add application root to Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from screen_text.core.capture import ScreenCapturer
from screen_text.core.errors import CaptureError, RecognitionError, WindowingError
from screen_text.core.models import WindowBounds
from screen_text.core.ocr_processor import OCRProcessor
from screen_text.core.screenshot_manager import ScreenshotManager
from screen_text.core.storage import ScreenshotStorage
from screen_text.server.tools import ToolHandler


def make_png(size=(64, 32), color=(200, 30, 30)) -> bytes:
    """Create a solid-colour PNG in memory."""
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


class FakeGrabber:
    """Stands in for MssGrabber; records every grab."""

    def __init__(self, displays: int = 1, image: Optional[bytes] = None,
                 window_image: Optional[bytes] = None, fail: bool = False,
                 fail_region: bool = False):
        self.displays = displays
        self.image = image or make_png()
        self.window_image = window_image or make_png((32, 16), (30, 200, 30))
        self.fail = fail
        self.fail_region = fail_region
        self.display_grabs: List[int] = []
        self.region_grabs: List[WindowBounds] = []

    def grab_display(self, display: int) -> bytes:
        self.display_grabs.append(display)
        if self.fail:
            raise CaptureError("screen capture is not permitted")
        if display >= self.displays:
            raise CaptureError(f"Display {display} is not available ({self.displays} detected)")
        return self.image

    def grab_region(self, bounds: WindowBounds) -> bytes:
        self.region_grabs.append(bounds)
        if self.fail_region:
            raise CaptureError("window region could not be captured")
        return self.window_image


class FakeWindowController:
    """Stands in for MacWindowController; records calls in order."""

    def __init__(self, names: Optional[List[str]] = None,
                 bounds: Optional[WindowBounds] = None,
                 fail_activate: bool = False, no_windows: bool = False,
                 fail_listing: bool = False):
        self.names = names if names is not None else ["Finder", "Safari", "Terminal"]
        self.bounds = bounds or WindowBounds(left=10, top=20, width=32, height=16)
        self.fail_activate = fail_activate
        self.no_windows = no_windows
        self.fail_listing = fail_listing
        self.calls: List[tuple] = []

    async def activate(self, application_name: str) -> None:
        self.calls.append(("activate", application_name))
        if self.fail_activate:
            raise WindowingError(f"Application {application_name!r} is not running")

    async def front_window_bounds(self, application_name: str) -> WindowBounds:
        self.calls.append(("front_window_bounds", application_name))
        if self.no_windows:
            raise WindowingError("application has no open windows")
        return self.bounds

    async def list_application_names(self) -> List[str]:
        self.calls.append(("list_application_names",))
        if self.fail_listing:
            raise WindowingError("cannot run osascript (macOS only)")
        return list(self.names)


class FakeEngine:
    """Recognition engine double counting open/close calls."""

    def __init__(self, language: str, text: str = "", fail_open: bool = False,
                 fail_recognize: bool = False):
        self.language = language
        self.text = text
        self.fail_open = fail_open
        self.fail_recognize = fail_recognize
        self.opened = 0
        self.closed = 0
        self.recognized: List[bytes] = []

    def open(self) -> None:
        self.opened += 1
        if self.fail_open:
            raise RecognitionError(f"Language data not available for {self.language!r}")

    def recognize(self, image_bytes: bytes) -> str:
        self.recognized.append(image_bytes)
        if self.fail_recognize:
            raise RecognitionError("Tesseract failed: engine crashed")
        return self.text

    def close(self) -> None:
        self.closed += 1


class FakeEngineFactory:
    """Builds FakeEngines and keeps every instance for inspection."""

    def __init__(self, text: str = "", fail_open: bool = False, fail_recognize: bool = False):
        self.text = text
        self.fail_open = fail_open
        self.fail_recognize = fail_recognize
        self.engines: List[FakeEngine] = []

    def __call__(self, language: str) -> FakeEngine:
        engine = FakeEngine(language, text=self.text, fail_open=self.fail_open,
                            fail_recognize=self.fail_recognize)
        self.engines.append(engine)
        return engine


@pytest.fixture
def png_bytes():
    return make_png()


@pytest.fixture
def storage(tmp_path):
    return ScreenshotStorage(base_dir=str(tmp_path), folder_name="mcp-screenshots")


@pytest.fixture
def grabber():
    return FakeGrabber(displays=2)


@pytest.fixture
def window_controller():
    return FakeWindowController()


@pytest.fixture
def engine_factory():
    return FakeEngineFactory(text="  Hello from the screen \n")


@pytest.fixture
def capturer(grabber, window_controller):
    return ScreenCapturer(grabber=grabber, window_controller=window_controller, settle_delay=0)


@pytest.fixture
def manager(storage, capturer, window_controller, engine_factory):
    return ScreenshotManager(
        storage=storage,
        capturer=capturer,
        ocr_processor=OCRProcessor(engine_factory=engine_factory),
        window_controller=window_controller,
    )


@pytest.fixture
def tool_handler(manager):
    return ToolHandler(manager)
