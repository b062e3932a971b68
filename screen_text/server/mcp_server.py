"""MCP stdio transport for screen-text.

Serves ``TOOL_DEFINITIONS`` through the MCP SDK's low-level ``Server`` and
forwards calls to a ``ToolHandler``. Error responses are raised as
``ToolCallFailed`` so the SDK reports them as ``isError`` results; the error
kind is carried in the text as ``[<kind>]`` after the tool name.
"""
import logging
from typing import Any, Dict, List, Optional, Union

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from .. import __version__
from ..utils.message_utils import ContentType, get_error_kind, get_response_text
from .tools import ToolHandler

logger = logging.getLogger(__name__)

DEFAULT_SERVER_NAME = "mcp-screen-text"

Content = Union[types.TextContent, types.ImageContent]


class ToolCallFailed(Exception):
    """A tool returned an error response."""

    def __init__(self, tool_name: str, response: Dict[str, Any]):
        self.tool_name = tool_name
        self.response = response
        self.error_kind = get_error_kind(response)
        super().__init__(format_error_text(tool_name, response))


def format_error_text(tool_name: str, response: Dict[str, Any]) -> str:
    """Insert ``[<errorKind>]`` after the tool name of an error response text."""
    text = get_response_text(response)
    kind = get_error_kind(response)
    if not kind:
        return text
    prefix = f"Error executing tool '{tool_name}':"
    if text.startswith(prefix):
        return f"Error executing tool '{tool_name}' [{kind}]:{text[len(prefix):]}"
    return f"[{kind}] {text}"


def to_mcp_content(response: Dict[str, Any]) -> List[Content]:
    """Convert response content dictionaries to MCP content objects."""
    content: List[Content] = []
    for item in response.get("content", []):
        if item.get("type") == ContentType.IMAGE.value:
            content.append(types.ImageContent(type="image", data=item["data"], mimeType=item["mimeType"]))
        else:
            content.append(types.TextContent(type="text", text=item.get("text", "")))
    return content


def create_server(handler: ToolHandler, name: str = DEFAULT_SERVER_NAME) -> Server:
    server = Server(name, version=__version__)

    @server.list_tools()
    async def list_tools() -> List[types.Tool]:
        return [
            types.Tool(
                name=definition["name"],
                description=definition["description"],
                inputSchema=definition["inputSchema"],
            )
            for definition in handler.list_tools()
        ]

    # Arguments are validated by ToolHandler so failures carry validation_error
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: Optional[Dict[str, Any]]) -> List[Content]:
        response = await handler.call_tool(name, arguments or {})
        if response.get("isError"):
            raise ToolCallFailed(name, response)
        return to_mcp_content(response)

    return server


async def run_stdio(handler: ToolHandler, name: str = DEFAULT_SERVER_NAME) -> None:
    """Serve tools over stdin/stdout until the client disconnects."""
    server = create_server(handler, name)
    logger.info(f"Starting MCP server '{name}' on stdio")
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())
    logger.info("MCP stdio session ended")
