"""screen-text: screen capture and OCR tools for AI agents.

This package exposes screenshot capture, application window capture and
Tesseract OCR as callable tools. Tools are served over MCP (stdio) and,
optionally, over a Socket.IO bridge.
"""

__version__ = "1.0.0"
