"""Tests for the MCP stdio transport wiring."""
import mcp.types as types
import pytest

from screen_text.server.mcp_server import (
    ToolCallFailed,
    create_server,
    format_error_text,
    to_mcp_content,
)
from screen_text.utils.message_utils import (
    create_error_response,
    create_image_content,
    create_text_content,
    create_tool_response,
)


def test_format_error_text_tags_kind():
    response = create_error_response("extract_text", "file not found", "recognition_error")
    assert format_error_text("extract_text", response) == \
        "Error executing tool 'extract_text' [recognition_error]: file not found"


def test_tool_call_failed_carries_kind():
    error = ToolCallFailed("capture_screen", create_error_response("capture_screen", "boom", "capture_error"))
    assert error.error_kind == "capture_error"
    assert "[capture_error]" in str(error)


def test_to_mcp_content_maps_items():
    response = create_tool_response([
        create_text_content("done"),
        create_image_content("aGVsbG8=", "image/jpeg"),
    ])

    text, image = to_mcp_content(response)

    assert isinstance(text, types.TextContent) and text.text == "done"
    assert isinstance(image, types.ImageContent)
    assert image.mimeType == "image/jpeg"
    assert image.data == "aGVsbG8="


@pytest.mark.asyncio
async def test_list_tools_handler(tool_handler):
    server = create_server(tool_handler)

    result = await server.request_handlers[types.ListToolsRequest](
        types.ListToolsRequest(method="tools/list")
    )

    names = [tool.name for tool in result.root.tools]
    assert "capture_screen_and_extract_text" in names
    assert len(names) == 5


@pytest.mark.asyncio
async def test_call_tool_success(tool_handler):
    server = create_server(tool_handler)

    result = await server.request_handlers[types.CallToolRequest](
        types.CallToolRequest(
            method="tools/call",
            params=types.CallToolRequestParams(name="capture_screen", arguments={"format": "jpg"}),
        )
    )

    call_result = result.root
    assert not call_result.isError
    assert call_result.content[0].text.startswith("Screenshot captured successfully!")
    assert call_result.content[1].mimeType == "image/jpeg"


@pytest.mark.asyncio
async def test_call_tool_error_is_flagged_with_kind(tool_handler):
    server = create_server(tool_handler)

    result = await server.request_handlers[types.CallToolRequest](
        types.CallToolRequest(
            method="tools/call",
            params=types.CallToolRequestParams(name="capture_application_screen", arguments={}),
        )
    )

    call_result = result.root
    assert call_result.isError
    assert call_result.content[0].text.startswith(
        "Error executing tool 'capture_application_screen' [validation_error]: "
    )
