"""Tool declarations and dispatch for screen-text.

``TOOL_DEFINITIONS`` holds the tool schemas served by every transport.
``ToolHandler`` validates arguments, calls the ``ScreenshotManager`` and
turns results or failures into response dictionaries (see
``utils.message_utils``). Failures never escape ``call_tool``.
"""
import logging
import math
from typing import Any, Awaitable, Callable, Dict, List, Optional

from ..core.errors import ErrorKind, ScreenTextError, ValidationError
from ..core.models import CaptureRequest, OutputFormat, RecognitionRequest
from ..core.ocr_processor import DEFAULT_LANGUAGE
from ..core.screenshot_manager import ScreenshotManager
from ..utils.message_utils import (
    create_error_response,
    create_image_content,
    create_text_content,
    create_tool_response,
)

logger = logging.getLogger(__name__)

_FORMAT_PROPERTY = {
    "type": "string",
    "enum": [fmt.value for fmt in OutputFormat],
    "description": "Image format",
    "default": OutputFormat.PNG.value,
}
_LANGUAGE_PROPERTY = {
    "type": "string",
    "description": "Language code for OCR (e.g., eng, spa, fra)",
    "default": DEFAULT_LANGUAGE,
}

TOOL_DEFINITIONS: List[Dict[str, Any]] = [
    {
        "name": "capture_screen",
        "description": "Captures a screenshot of the specified display",
        "inputSchema": {
            "type": "object",
            "properties": {
                "display": {
                    "type": "integer",
                    "minimum": 0,
                    "description": "Display number (0 for primary display)",
                    "default": 0,
                },
                "format": _FORMAT_PROPERTY,
            },
            "additionalProperties": False,
        },
    },
    {
        "name": "capture_application_screen",
        "description": "Captures a screenshot of a specific application window",
        "inputSchema": {
            "type": "object",
            "properties": {
                "applicationName": {
                    "type": "string",
                    "description": "Name of the application to capture (e.g., 'Safari', 'Chrome', 'Finder')",
                },
                "format": _FORMAT_PROPERTY,
            },
            "required": ["applicationName"],
            "additionalProperties": False,
        },
    },
    {
        "name": "list_applications",
        "description": "Lists all running applications that can be captured",
        "inputSchema": {
            "type": "object",
            "properties": {},
            "additionalProperties": False,
        },
    },
    {
        "name": "extract_text",
        "description": "Extracts text from an image using OCR",
        "inputSchema": {
            "type": "object",
            "properties": {
                "imagePath": {
                    "type": "string",
                    "description": "Path to the image file",
                },
                "language": _LANGUAGE_PROPERTY,
            },
            "required": ["imagePath"],
            "additionalProperties": False,
        },
    },
    {
        "name": "capture_screen_and_extract_text",
        "description": (
            "Captures a screenshot and extracts text from it in one operation. "
            "Can capture full screen or a specific application window."
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "display": {
                    "type": "integer",
                    "minimum": 0,
                    "description": "Display number (0 for primary display) - ignored if applicationName is provided",
                    "default": 0,
                },
                "language": _LANGUAGE_PROPERTY,
                "applicationName": {
                    "type": "string",
                    "description": (
                        "Name of the application to capture (e.g., 'Safari', 'Chrome'). If provided, "
                        "captures only this application's window instead of full screen."
                    ),
                },
                "format": dict(_FORMAT_PROPERTY, description=(
                    "Format of the saved screenshot; honored only when the server is configured "
                    "to, otherwise png is always saved"
                )),
            },
            "additionalProperties": False,
        },
    },
]

TOOL_NAMES = [definition["name"] for definition in TOOL_DEFINITIONS]


# --- Argument parsing ---

def _optional_string(arguments: Dict[str, Any], key: str) -> Optional[str]:
    value = arguments.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string")
    return value or None


def _required_string(arguments: Dict[str, Any], key: str) -> str:
    value = _optional_string(arguments, key)
    if not value:
        raise ValidationError(f"{key} is required")
    return value


def _display(arguments: Dict[str, Any]) -> int:
    value = arguments.get("display", 0)
    if value is None:
        return 0
    # bool is an int subclass; floats like 1.0 come from JSON number handling
    if (
        isinstance(value, bool) or
        not isinstance(value, (int, float)) or
        (isinstance(value, float) and not math.isfinite(value)) or
        value != int(value)
    ):
        raise ValidationError("display must be a non-negative integer")
    if value < 0:
        raise ValidationError("display must be a non-negative integer")
    return int(value)


def _format(arguments: Dict[str, Any], default: OutputFormat = OutputFormat.PNG) -> OutputFormat:
    value = arguments.get("format") or default.value
    try:
        return OutputFormat(value)
    except (ValueError, TypeError):
        raise ValidationError(f"format must be one of: png, jpg (got {value!r})") from None


def _language(arguments: Dict[str, Any], default: str = DEFAULT_LANGUAGE) -> str:
    return _optional_string(arguments, "language") or default


def _reject_unknown(name: str, arguments: Dict[str, Any]) -> None:
    definition = next(d for d in TOOL_DEFINITIONS if d["name"] == name)
    unknown = sorted(set(arguments) - set(definition["inputSchema"]["properties"]))
    if unknown:
        raise ValidationError(f"unexpected arguments: {', '.join(unknown)}")


class ToolHandler:
    """Dispatches tool calls to the screenshot manager."""

    def __init__(self, manager: ScreenshotManager, default_language: str = DEFAULT_LANGUAGE,
                 default_format: OutputFormat = OutputFormat.PNG):
        self.manager = manager
        self.default_language = default_language
        self.default_format = default_format
        self._tools: Dict[str, Callable[[Dict[str, Any]], Awaitable[Dict[str, Any]]]] = {
            "capture_screen": self._capture_screen,
            "capture_application_screen": self._capture_application_screen,
            "list_applications": self._list_applications,
            "extract_text": self._extract_text,
            "capture_screen_and_extract_text": self._capture_screen_and_extract_text,
        }

    def list_tools(self) -> List[Dict[str, Any]]:
        return [dict(definition) for definition in TOOL_DEFINITIONS]

    async def call_tool(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Run one tool and return its response dictionary.

        Errors are logged and returned as error responses.
        """
        try:
            tool = self._tools.get(name)
            if tool is None:
                raise ValidationError(f"Unknown tool: {name}")
            if arguments is None:
                arguments = {}
            if not isinstance(arguments, dict):
                raise ValidationError("arguments must be an object")
            _reject_unknown(name, arguments)
            return await tool(arguments)
        except ScreenTextError as e:
            logger.error(f"Error executing tool '{name}' [{e.kind.value}]: {e}")
            return create_error_response(name, str(e), e.kind.value)
        except Exception as e:
            logger.exception(f"Unexpected error executing tool '{name}': {e}")
            return create_error_response(name, str(e) or type(e).__name__, ErrorKind.INTERNAL.value)

    async def _capture_screen(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        display = _display(arguments)
        output_format = _format(arguments, self.default_format)
        logger.info(f"Capturing screen - Display: {display}, Format: {output_format.value}")

        result = await self.manager.capture_only(CaptureRequest(display=display, format=output_format))
        return create_tool_response([
            create_text_content(
                f"Screenshot captured successfully!\nPath: {result.file_path}\n"
                f"Format: {output_format.value}\nDisplay: {display}"
            ),
            create_image_content(result.text_encoding, result.format.mime_type),
        ])

    async def _capture_application_screen(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        application_name = _required_string(arguments, "applicationName")
        output_format = _format(arguments, self.default_format)
        logger.info(f"Capturing application screen - App: {application_name}, Format: {output_format.value}")

        result = await self.manager.capture_only(
            CaptureRequest(format=output_format, application_name=application_name)
        )
        return create_tool_response([
            create_text_content(
                f"Application screenshot captured successfully!\nApp: {application_name}\n"
                f"Path: {result.file_path}\nFormat: {output_format.value}"
            ),
            create_image_content(result.text_encoding, result.format.mime_type),
        ])

    async def _list_applications(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        logger.info("Listing running applications")
        applications = await self.manager.list_applications()
        app_list = "\n".join(f"• {app.name}" for app in applications)
        return create_tool_response([
            create_text_content(
                f"Running applications:\n\n{app_list}\n\n"
                "You can use any of these application names with the capture_application_screen tool."
            ),
        ])

    async def _extract_text(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        image_path = _required_string(arguments, "imagePath")
        language = _language(arguments, self.default_language)
        logger.info(f"Extracting text from: {image_path}, Language: {language}")

        text = await self.manager.extract_text(RecognitionRequest(image_source=image_path, language=language))
        return create_tool_response([
            create_text_content(f"Text extracted successfully from: {image_path}\n\nExtracted text:\n{text}"),
        ])

    async def _capture_screen_and_extract_text(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        application_name = _optional_string(arguments, "applicationName")
        # The display index is ignored when an application is named
        display = _display(arguments) if application_name is None else 0
        language = _language(arguments, self.default_language)
        output_format = _format(arguments, self.default_format)
        logger.info(
            f"Capturing screen and extracting text - Display: {display}, Language: {language}"
            + (f", App: {application_name}" if application_name else "")
        )

        result = await self.manager.capture_and_recognize(
            CaptureRequest(display=display, format=output_format, application_name=application_name),
            language=language,
        )
        screenshot = result.screenshot
        target = f"Application: {application_name}" if application_name else f"Display: {display}"
        return create_tool_response([
            create_text_content(
                f"Screenshot captured and text extracted successfully!\nPath: {screenshot.file_path}\n"
                f"{target}\nLanguage: {language}\n\nExtracted text:\n{result.text}"
            ),
            create_image_content(screenshot.text_encoding, screenshot.format.mime_type),
        ])
