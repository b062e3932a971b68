"""Socket.IO tool bridge for screen-text.

Exposes the same tools as the MCP transport to Socket.IO clients. Requests
are acknowledged events:

- ``list_tools`` -> list of tool schemas
- ``call_tool`` with ``{"name": str, "arguments": dict}`` -> tool response

Every connected client joins the configured room, which receives
``tool_call_started`` / ``tool_call_completed`` notifications.
"""
import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import socketio
from aiohttp import web

from ..core.errors import ErrorKind
from ..utils.event_utils import EventType, RequestEvent
from ..utils.message_utils import create_error_response, get_error_kind
from .tools import ToolHandler

logger = logging.getLogger(__name__)

DEFAULT_ROOM = "screen_text_room"


def create_app(handler: ToolHandler, room: Optional[str] = DEFAULT_ROOM,
               cors_origins: str = '*') -> Tuple[socketio.AsyncServer, web.Application]:
    """Build a Socket.IO server attached to a fresh aiohttp application."""
    sio = socketio.AsyncServer(async_mode='aiohttp', cors_allowed_origins=cors_origins)
    app = web.Application()
    sio.attach(app)

    connected_clients: Dict[str, Dict[str, Any]] = {}

    @sio.event
    async def connect(sid: str, environ: Dict, auth: Optional[Dict] = None):
        client_ip = environ.get('REMOTE_ADDR', 'Unknown IP')
        connected_clients[sid] = {
            "address": client_ip,
            "connect_time": datetime.now().isoformat(),
        }
        logger.info(f"Client connected: {sid} ({client_ip})")

        if room:
            await sio.enter_room(sid, room)
            await sio.emit(EventType.CLIENT_CONNECTED.value, {"sid": sid, "address": client_ip}, room=room)

    @sio.event
    async def disconnect(sid: str):
        if connected_clients.pop(sid, None) is None:
            logger.warning(f"Disconnect event received for unknown SID: {sid}")
            return
        logger.info(f"Client disconnected: {sid}")
        if room:
            await sio.emit(EventType.CLIENT_DISCONNECTED.value, {"sid": sid}, room=room)

    @sio.on(RequestEvent.LIST_TOOLS.value)
    async def on_list_tools(sid: str, data: Any = None) -> List[Dict[str, Any]]:
        logger.debug(f"Client {sid} requested the tool list")
        return handler.list_tools()

    @sio.on(RequestEvent.CALL_TOOL.value)
    async def on_call_tool(sid: str, data: Any = None) -> Dict[str, Any]:
        if not isinstance(data, dict) or not isinstance(data.get('name'), str):
            logger.warning(f"Malformed {RequestEvent.CALL_TOOL.value} request from {sid}: {data!r}")
            return create_error_response("<unknown>", "request must be an object with a 'name' string",
                                         ErrorKind.VALIDATION.value)

        name = data['name']
        logger.info(f"Client {sid} called tool '{name}'")
        if room:
            await sio.emit(EventType.TOOL_CALL_STARTED.value, {"sid": sid, "tool": name}, room=room)

        response = await handler.call_tool(name, data.get('arguments'))

        if room:
            await sio.emit(EventType.TOOL_CALL_COMPLETED.value, {
                "sid": sid,
                "tool": name,
                "success": not response.get("isError", False),
                "errorKind": get_error_kind(response),
            }, room=room)
        return response

    return sio, app


async def start_server(handler: ToolHandler, host: str, port: int,
                       room: Optional[str] = DEFAULT_ROOM, cors_origins: str = '*') -> None:
    """Run the bridge until cancelled."""
    sio, app = create_app(handler, room=room, cors_origins=cors_origins)
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host, port)

    logger.info(f"Starting Socket.IO server on {host}:{port}")
    await site.start()
    logger.info(f"Socket.IO server running. Default room: {room}")
    try:
        if room:
            await sio.emit(EventType.SERVER_STARTED.value, {}, room=room)
        await asyncio.Event().wait()
    finally:
        logger.info("Stopping Socket.IO server...")
        await runner.cleanup()
