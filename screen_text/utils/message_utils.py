"""Utilities for creating standardized tool response messages.

Responses are plain dictionaries shared by every transport:

    {"content": [<content item>, ...], "isError": bool}

Error responses additionally carry ``errorKind``.
"""

import enum
from typing import Any, Dict, List, Optional


class ContentType(enum.Enum):
    """Enumerates the content item types a tool response may carry."""
    TEXT = "text"
    IMAGE = "image"


def create_text_content(text: str) -> Dict[str, Any]:
    """Creates a text content item."""
    return {"type": ContentType.TEXT.value, "text": text}


def create_image_content(data: str, mime_type: str) -> Dict[str, Any]:
    """Creates an image content item from base64 data."""
    return {"type": ContentType.IMAGE.value, "data": data, "mimeType": mime_type}


def create_tool_response(content: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Creates a successful tool response.

    Args:
        content: Content items; the first one must be a text item.

    Returns:
        A dictionary representing the structured response.
    """
    if not content or content[0].get("type") != ContentType.TEXT.value:
        raise ValueError("A tool response must start with a text content item")
    return {"content": content, "isError": False}


def create_error_response(tool_name: str, reason: str, error_kind: str) -> Dict[str, Any]:
    """Creates an error response naming the tool and the failure reason."""
    return {
        "content": [create_text_content(f"Error executing tool '{tool_name}': {reason}")],
        "isError": True,
        "errorKind": error_kind,
    }


def get_response_text(response: Dict[str, Any]) -> str:
    """Joins the text items of a response."""
    return "\n".join(
        item["text"] for item in response.get("content", [])
        if item.get("type") == ContentType.TEXT.value
    )


def get_error_kind(response: Dict[str, Any]) -> Optional[str]:
    """Returns the error kind of an error response, or None."""
    if not response.get("isError"):
        return None
    return response.get("errorKind")
