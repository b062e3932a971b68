"""Transports for screen-text: MCP over stdio and the Socket.IO tool bridge."""

from .tools import TOOL_DEFINITIONS, TOOL_NAMES, ToolHandler

__all__ = ['TOOL_DEFINITIONS', 'TOOL_NAMES', 'ToolHandler']
