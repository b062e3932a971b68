import enum


class EventType(enum.Enum):
    """
    Enumerates the events emitted by the Socket.IO tool bridge.
    Events signify that something *has happened*. Payloads provide context.
    """
    # Server Lifecycle
    SERVER_STARTED = "server_started"  # Payload: {}

    # Client Lifecycle
    CLIENT_CONNECTED = "client_connected"  # Payload: {"sid": str, "address": str}
    CLIENT_DISCONNECTED = "client_disconnected"  # Payload: {"sid": str}

    # Tool calls
    TOOL_CALL_STARTED = "tool_call_started"  # Payload: {"sid": str, "tool": str}
    TOOL_CALL_COMPLETED = "tool_call_completed"  # Payload: {"sid": str, "tool": str, "success": bool, "errorKind": Optional[str]}


class RequestEvent(enum.Enum):
    """Acknowledged request events a client may send to the bridge."""
    LIST_TOOLS = "list_tools"  # Ack: [tool schema, ...]
    CALL_TOOL = "call_tool"  # Data: {"name": str, "arguments": dict}; Ack: tool response
