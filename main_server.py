#!/usr/bin/env python3
"""
Remote File Shell Server - Main Entry Point

Unified entry point for the server application that integrates:
- Command shell (browse and edit the root folder over telnet)
- File transfer (framed upload/download)

Usage:
    python main_server.py

Optional arguments:
    --host HOST           Bind address (default: 0.0.0.0)
    --port PORT           Command shell TCP port (default: 5678)
    --transfer-port PORT  File transfer TCP port (default: 8189)
    --root-dir DIR        Root folder exposed to clients (default: storage)
    --workers N           Worker threads for filesystem commands (default: 4)
    --username NAME       Default nickname (default: system user name)
    --debug               Log every received command
"""

import sys
import os
import argparse

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from common.constants import (
    DEFAULT_SERVER_HOST, DEFAULT_PORT, DEFAULT_TRANSFER_PORT, DEFAULT_MAX_WORKERS, ROOT_DIR
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Remote File Shell Server')
    parser.add_argument('--host', type=str, default=DEFAULT_SERVER_HOST,
                       help=f'Host to bind to (default: {DEFAULT_SERVER_HOST})')
    parser.add_argument('--port', type=int, default=DEFAULT_PORT,
                       help=f'TCP port for the command shell (default: {DEFAULT_PORT})')
    parser.add_argument('--transfer-port', type=int, default=DEFAULT_TRANSFER_PORT,
                       help=f'TCP port for file transfers (default: {DEFAULT_TRANSFER_PORT})')
    parser.add_argument('--root-dir', type=str, default=ROOT_DIR,
                       help=f'Root folder exposed to clients (default: {ROOT_DIR})')
    parser.add_argument('--workers', type=int, default=DEFAULT_MAX_WORKERS,
                       help=f'Worker threads for filesystem commands (default: {DEFAULT_MAX_WORKERS})')
    parser.add_argument('--username', type=str, default=None,
                       help='Default nickname (default: system user name)')
    parser.add_argument('--debug', action='store_true',
                       help='Enable debug logging')
    return parser


def main():
    """Main entry point."""
    import asyncio
    import logging

    from server.main_server import RemoteShellServer
    from server.utils.config import ServerConfig
    from server.utils.logger import logger

    args = build_parser().parse_args()

    if args.debug:
        logger.set_level(logging.DEBUG)

    config = ServerConfig(
        host=args.host,
        port=args.port,
        transfer_port=args.transfer_port,
        root_dir=args.root_dir,
        max_workers=args.workers,
        default_username=args.username
    )

    # Create and start the server
    server = RemoteShellServer(config)
    try:
        logger.info(f"Server binding to {args.host}:{args.port} (transfers on {args.transfer_port})")
        asyncio.run(server.start())
    except KeyboardInterrupt:
        logger.info("Server shutting down...")
    except Exception as e:
        import traceback
        logger.error(f"Server failed to start: {e}")
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
