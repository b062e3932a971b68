"""Tests for the capture orchestrator."""
import asyncio
import io
import os

import pytest
from PIL import Image

from screen_text.core.capture import ScreenCapturer
from screen_text.core.errors import CaptureError, RecognitionError, StorageError
from screen_text.core.models import (
    CaptureRequest,
    CaptureSource,
    OutputFormat,
    PositionalIndex,
    RecognitionRequest,
)
from screen_text.core.ocr_processor import OCRProcessor
from screen_text.core.screenshot_manager import ScreenshotManager, create_screenshot_manager
from screen_text.core.storage import ScreenshotStorage
from screen_text.utils.config_loader import ConfigManager

from conftest import FakeEngineFactory, FakeWindowController

pytestmark = pytest.mark.asyncio


def _image_format(data: bytes) -> str:
    with Image.open(io.BytesIO(data)) as image:
        return image.format


async def test_capture_only_persists_requested_format(manager, storage):
    result = await manager.capture_only(CaptureRequest(display=1, format=OutputFormat.JPG))

    assert os.path.exists(result.file_path)
    assert os.path.getsize(result.file_path) == len(result.encoded_bytes)
    assert result.file_path.startswith(storage.directory + os.sep)
    assert os.path.basename(result.file_path).startswith("screenshot-display-1-")
    assert result.file_path.endswith(".jpg")
    assert result.format is OutputFormat.JPG
    assert _image_format(result.encoded_bytes) == "JPEG"


async def test_capture_only_creates_missing_folder(manager, storage):
    assert not os.path.isdir(storage.directory)
    await manager.capture_only(CaptureRequest())
    assert os.path.isdir(storage.directory)


async def test_application_name_wins_over_display(manager, grabber):
    result = await manager.capture_only(
        CaptureRequest(display=7, application_name="Safari")
    )

    assert result.source is CaptureSource.APPLICATION
    assert os.path.basename(result.file_path).startswith("Safari-")
    # Display 7 does not exist but is never consulted
    assert grabber.display_grabs == []


async def test_application_fallback_produces_display_zero_result(storage, grabber, engine_factory):
    controller = FakeWindowController(fail_activate=True)
    manager = ScreenshotManager(
        storage=storage,
        capturer=ScreenCapturer(grabber=grabber, window_controller=controller, settle_delay=0),
        ocr_processor=OCRProcessor(engine_factory=engine_factory),
        window_controller=controller,
    )

    result = await manager.capture_only(CaptureRequest(application_name="Ghost"))

    assert result.source is CaptureSource.FALLBACK
    assert os.path.basename(result.file_path).startswith("screenshot-display-0-")
    assert os.path.getsize(result.file_path) == len(result.encoded_bytes)


async def test_missing_display_raises_capture_error(manager):
    with pytest.raises(CaptureError):
        await manager.capture_only(CaptureRequest(display=3))


async def test_storage_failure_stops_before_capture(tmp_path, grabber, window_controller):
    blocker = tmp_path / "blocker"
    blocker.write_text("")
    manager = ScreenshotManager(
        storage=ScreenshotStorage(base_dir=str(blocker)),
        capturer=ScreenCapturer(grabber=grabber, window_controller=window_controller, settle_delay=0),
        window_controller=window_controller,
    )

    with pytest.raises(StorageError):
        await manager.capture_only(CaptureRequest())
    assert grabber.display_grabs == []


async def test_concurrent_captures_write_distinct_files(manager):
    results = await asyncio.gather(*(
        manager.capture_only(CaptureRequest(display=i % 2)) for i in range(6)
    ))

    paths = [result.file_path for result in results]
    assert len(set(paths)) == 6
    for result in results:
        assert os.path.getsize(result.file_path) == len(result.encoded_bytes)


async def test_capture_and_recognize_persists_png_by_default(manager, engine_factory):
    combined = await manager.capture_and_recognize(
        CaptureRequest(format=OutputFormat.JPG), language="deu"
    )

    assert combined.text == "Hello from the screen"
    assert combined.screenshot.format is OutputFormat.PNG
    assert combined.screenshot.file_path.endswith(".png")
    assert _image_format(combined.screenshot.encoded_bytes) == "PNG"
    engine, = engine_factory.engines
    assert engine.language == "deu"
    assert engine.closed == 1


async def test_capture_and_recognize_can_honor_requested_format(storage, capturer, window_controller):
    factory = FakeEngineFactory(text="x")
    manager = ScreenshotManager(
        storage=storage, capturer=capturer,
        ocr_processor=OCRProcessor(engine_factory=factory),
        window_controller=window_controller,
        honor_combined_format=True,
    )

    combined = await manager.capture_and_recognize(CaptureRequest(format=OutputFormat.JPG))

    assert combined.screenshot.file_path.endswith(".jpg")
    assert _image_format(combined.screenshot.encoded_bytes) == "JPEG"
    # Recognition still sees a lossless image
    assert factory.engines[0].recognized


async def test_recognition_failure_keeps_persisted_file(storage, capturer, window_controller):
    manager = ScreenshotManager(
        storage=storage, capturer=capturer,
        ocr_processor=OCRProcessor(engine_factory=FakeEngineFactory(fail_open=True)),
        window_controller=window_controller,
    )

    with pytest.raises(RecognitionError):
        await manager.capture_and_recognize(CaptureRequest())
    assert len(os.listdir(storage.directory)) == 1


async def test_extract_text_from_saved_capture(manager):
    result = await manager.capture_only(CaptureRequest())
    text = await manager.extract_text(RecognitionRequest(image_source=result.file_path))
    assert text == "Hello from the screen"


async def test_list_applications_positional_indices(manager):
    applications = await manager.list_applications()

    assert [app.name for app in applications] == ["Finder", "Safari", "Terminal"]
    assert [app.ordinal_index for app in applications] == [
        PositionalIndex(0), PositionalIndex(1), PositionalIndex(2)
    ]
    assert str(applications[2].ordinal_index) == "#2"


async def test_list_applications_empty(storage, capturer):
    manager = ScreenshotManager(storage=storage, capturer=capturer,
                                window_controller=FakeWindowController(names=[]))
    assert await manager.list_applications() == []


async def test_create_screenshot_manager_from_config(tmp_path):
    config = ConfigManager(config_file=str(tmp_path / "missing.json"), environ={
        "SCREEN_TEXT_STORAGE_BASE_DIR": str(tmp_path),
        "SCREEN_TEXT_STORAGE_FOLDER_NAME": "shots",
        "SCREEN_TEXT_CAPTURE_SETTLE_DELAY": "0.25",
        "SCREEN_TEXT_CAPTURE_JPEG_QUALITY": "75",
        "SCREEN_TEXT_RECOGNITION_HONOR_REQUESTED_FORMAT": "true",
    })

    manager = create_screenshot_manager(config)

    assert manager.storage.directory == os.path.join(str(tmp_path), "shots")
    assert manager.capturer.settle_delay == 0.25
    assert manager.jpeg_quality == 75
    assert manager.honor_combined_format is True
    assert manager.capturer.window_controller is manager.window_controller
