"""macOS window control through ``osascript``.

The foreground window is a shared desktop resource: activating one
application steals focus from whatever the user (or another request) had in
front. Two concurrent application captures can therefore race on focus. This
module is the only place that touches that state.

Application names are handed to AppleScript as ``argv`` items and are never
interpolated into script source.
"""
import asyncio
import logging
from typing import List

from .errors import WindowingError
from .models import WindowBounds

logger = logging.getLogger(__name__)

ACTIVATE_SCRIPT = """on run argv
    tell application (item 1 of argv) to activate
end run"""

# Returns "" when the process has no windows, else "left,top,width,height"
FRONT_WINDOW_SCRIPT = """on run argv
    set appName to item 1 of argv
    tell application "System Events"
        tell process appName
            set frontmost to true
            if (count of windows) is 0 then return ""
            set {x, y} to position of window 1
            set {w, h} to size of window 1
        end tell
    end tell
    return (x as text) & "," & (y as text) & "," & (w as text) & "," & (h as text)
end run"""

LIST_APPLICATIONS_SCRIPT = (
    'tell application "System Events" to get name of every process whose background only is false'
)


def parse_application_names(output: str) -> List[str]:
    """Split osascript list output into distinct names, keeping first-seen order."""
    names: List[str] = []
    for part in output.strip().split(", "):
        name = part.strip()
        if name and name not in names:
            names.append(name)
    return names


def parse_window_bounds(output: str) -> WindowBounds:
    """Parse "left,top,width,height" as produced by FRONT_WINDOW_SCRIPT."""
    text = output.strip()
    if not text:
        raise WindowingError("application has no open windows")
    try:
        left, top, width, height = (int(float(part)) for part in text.split(","))
    except ValueError as e:
        raise WindowingError(f"unexpected window bounds {text!r}") from e
    if width <= 0 or height <= 0:
        raise WindowingError(f"front window has empty bounds {text!r}")
    return WindowBounds(left=left, top=top, width=width, height=height)


class MacWindowController:
    """Activates applications and queries their windows via AppleScript."""

    def __init__(self, osascript: str = "osascript"):
        self.osascript = osascript

    async def _run(self, script: str, *args: str) -> str:
        try:
            process = await asyncio.create_subprocess_exec(
                self.osascript, "-e", script, *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise WindowingError(f"cannot run {self.osascript} (macOS only): {e}") from e
        stdout, stderr = await process.communicate()
        if process.returncode != 0:
            message = stderr.decode(errors="replace").strip() or f"exit status {process.returncode}"
            raise WindowingError(f"osascript failed: {message}")
        return stdout.decode(errors="replace")

    async def activate(self, application_name: str) -> None:
        """Bring ``application_name`` to the foreground."""
        logger.debug(f"Activating application: {application_name}")
        await self._run(ACTIVATE_SCRIPT, application_name)

    async def front_window_bounds(self, application_name: str) -> WindowBounds:
        """Make the process frontmost and return its first window's bounds.

        Raises WindowingError when the process exposes zero windows.
        """
        output = await self._run(FRONT_WINDOW_SCRIPT, application_name)
        return parse_window_bounds(output)

    async def list_application_names(self) -> List[str]:
        """Names of running, foreground-capable processes."""
        output = await self._run(LIST_APPLICATIONS_SCRIPT)
        names = parse_application_names(output)
        logger.info(f"Found {len(names)} running applications")
        return names
