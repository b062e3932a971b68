"""Screen capture for screen-text.

``ScreenCapturer`` produces raw PNG bytes for either a whole display or the
front window of a named application. Application capture is best effort:
when activation, window verification or the window-scoped grab fails, the
capturer falls back to a full-screen capture of the fallback display and
tags the outcome accordingly instead of raising.
"""
import asyncio
import logging

import mss
import mss.tools
from mss.exception import ScreenShotError

from .errors import CaptureError
from .models import CaptureOutcome, CaptureSource, WindowBounds
from .windowing import MacWindowController

logger = logging.getLogger(__name__)

DEFAULT_SETTLE_DELAY = 0.5


def display_context(display: int) -> str:
    return f"screenshot-display-{display}"


class MssGrabber:
    """Blocking pixel grabs through mss; one mss instance per call."""

    def grab_display(self, display: int) -> bytes:
        """Capture display ``display`` (0 = primary) as PNG bytes."""
        try:
            with mss.mss() as sct:
                # monitors[0] is the union of all screens
                monitors = sct.monitors[1:]
                if display < 0 or display >= len(monitors):
                    raise CaptureError(
                        f"Display {display} is not available ({len(monitors)} detected)"
                    )
                shot = sct.grab(monitors[display])
                return mss.tools.to_png(shot.rgb, shot.size)
        except ScreenShotError as e:
            raise CaptureError(f"Failed to capture display {display}: {e}") from e

    def grab_region(self, bounds: WindowBounds) -> bytes:
        """Capture a screen rectangle as PNG bytes."""
        try:
            with mss.mss() as sct:
                shot = sct.grab(bounds.as_region())
                return mss.tools.to_png(shot.rgb, shot.size)
        except ScreenShotError as e:
            raise CaptureError(f"Failed to capture region {bounds}: {e}") from e


class ScreenCapturer:
    """Capture Primitive Adapter: display capture and application capture with fallback."""

    def __init__(self, grabber=None, window_controller=None,
                 settle_delay: float = DEFAULT_SETTLE_DELAY,
                 fallback_display: int = 0):
        self.grabber = grabber or MssGrabber()
        self.window_controller = window_controller or MacWindowController()
        self.settle_delay = settle_delay
        self.fallback_display = fallback_display

    async def capture_display(self, display: int) -> CaptureOutcome:
        """Capture a whole display. Raises CaptureError on failure."""
        image = await asyncio.to_thread(self.grabber.grab_display, display)
        logger.debug(f"Captured display {display} ({len(image)} bytes)")
        return CaptureOutcome(image=image, context=display_context(display),
                              source=CaptureSource.DISPLAY)

    async def capture_application(self, application_name: str) -> CaptureOutcome:
        """Capture the front window of ``application_name``.

        Activate -> verify windows -> settle -> window-scoped grab. Any
        failure along the way falls back to ``capture_display`` of the
        fallback display; only a failure of that fallback raises.
        """
        try:
            await self.window_controller.activate(application_name)
            bounds = await self.window_controller.front_window_bounds(application_name)
            # Let window-manager focus animations finish; heuristic only
            await asyncio.sleep(self.settle_delay)
            image = await asyncio.to_thread(self.grabber.grab_region, bounds)
        except Exception as e:
            return await self._fallback(application_name, e)

        logger.info(f"Captured window of {application_name} at {bounds}")
        return CaptureOutcome(image=image, context=application_name,
                              source=CaptureSource.APPLICATION)

    async def _fallback(self, application_name: str, error: Exception) -> CaptureOutcome:
        logger.warning(
            f"App-specific capture of {application_name!r} failed, "
            f"falling back to display {self.fallback_display}: {error}"
        )
        outcome = await self.capture_display(self.fallback_display)
        return CaptureOutcome(image=outcome.image, context=outcome.context,
                              source=CaptureSource.FALLBACK,
                              fallback_reason=str(error))
