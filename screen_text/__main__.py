"""Command-line entry point for screen-text.

Usage:
    python -m screen_text [--transport stdio|socketio] [--host HOST] [--port PORT] [--log-level LEVEL]

The MCP stdio transport is the default. SIGINT and SIGTERM exit with status
0; an unhandled failure in the event loop is logged and exits with status 1.
"""
import argparse
import asyncio
import logging
import os
import signal
import sys
from typing import Any, Dict, List, Optional

from . import __version__
from .core.models import OutputFormat
from .core.screenshot_manager import create_screenshot_manager
from .server.tools import ToolHandler
from .utils.config_loader import config as config_manager
from .utils.logging_config import setup_logging

logger = logging.getLogger("screen_text")

TRANSPORTS = ("stdio", "socketio")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="screen-text",
                                     description="Screen capture and OCR tool server")
    parser.add_argument('--transport', choices=TRANSPORTS,
                        default=config_manager.get('server', 'transport', default='stdio'),
                        help='Tool transport to serve (default: %(default)s)')
    parser.add_argument('--host', type=str, default=config_manager.get('server', 'host', default='127.0.0.1'),
                        help='Host IP address for the Socket.IO bridge.')
    parser.add_argument('--port', type=int, default=config_manager.get('server', 'port', default=5348),
                        help='Port number for the Socket.IO bridge.')
    parser.add_argument('--log-level', type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default=str(config_manager.get('logging', 'level', default='INFO')).upper(),
                        help='Logging level (default: %(default)s)')
    parser.add_argument('--version', action='version', version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def handle_signal(signum, frame):
    """Exit immediately without waiting on the blocked stdin reader thread."""
    logger.info(f"Received signal {signal.Signals(signum).name}. Shutting down...")
    logging.shutdown()
    os._exit(0)


def handle_loop_exception(loop: asyncio.AbstractEventLoop, context: Dict[str, Any]) -> None:
    """Treat an unhandled event-loop failure as fatal."""
    exception = context.get("exception")
    logger.critical(f"Unhandled error in event loop: {context.get('message')}",
                    exc_info=exception)
    logging.shutdown()
    os._exit(1)


def build_handler() -> ToolHandler:
    manager = create_screenshot_manager(config_manager)
    return ToolHandler(
        manager,
        default_language=config_manager.get('recognition', 'default_language', default='eng'),
        default_format=OutputFormat(config_manager.get('capture', 'default_format', default='png')),
    )


async def serve(args: argparse.Namespace) -> None:
    asyncio.get_running_loop().set_exception_handler(handle_loop_exception)
    handler = build_handler()

    if args.transport == "socketio":
        from .server.socketio_server import start_server
        await start_server(
            handler, args.host, args.port,
            room=config_manager.get('server', 'room', default='screen_text_room'),
            cors_origins=config_manager.get('server', 'cors_origins', default='*'),
        )
    else:
        from .server.mcp_server import run_stdio
        await run_stdio(handler, name=config_manager.get('server', 'name', default='mcp-screen-text'))


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(
        level=args.log_level,
        fmt=config_manager.get('logging', 'format'),
        log_file=config_manager.get('logging', 'file') or None,
    )
    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    logger.info(f"screen-text {__version__} starting (transport={args.transport})")
    try:
        asyncio.run(serve(args))
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user (KeyboardInterrupt).")
    except SystemExit as e:
        if e.code not in (0, None):
            logger.warning(f"Exiting with error code {e.code}")
            return e.code if isinstance(e.code, int) else 1
        logger.info("Exiting normally.")
    except Exception as e:
        logger.critical(f"Server encountered critical error: {e}", exc_info=True)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
