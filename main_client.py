#!/usr/bin/env python3
"""
Remote File Shell Client - Main Entry Point

Command-line client for the file transfer service.

Usage:
    python main_client.py upload LOCAL_FILE [--name REMOTE_NAME]
    python main_client.py download REMOTE_NAME [--output LOCAL_FILE]

Common options:
    --server-ip HOST     Server address (default: localhost)
    --port PORT          Transfer port (default: 8189)

For the command shell, connect with any telnet client to port 5678.
"""

import sys
import os
import argparse

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from common.constants import DEFAULT_HOST, DEFAULT_TRANSFER_PORT


def run_transfer(args) -> int:
    """Run one upload or download and return the process exit code."""
    from client.files.transfer_client import TransferClient
    from client.utils.config import ClientConfig
    from client.utils.logger import logger

    config = ClientConfig(host=args.server_ip, port=args.port)
    try:
        with TransferClient(config.host, config.port, config.chunk_size, config.timeout) as client:
            if args.action == 'upload':
                ok = client.upload(args.path, args.name)
            else:
                ok = client.download(args.path, args.output)
    except OSError as e:
        logger.log_error(args.action, e)
        return 1
    return 0 if ok else 1


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description='Remote File Shell transfer client')
    parser.add_argument('--server-ip', type=str, default=DEFAULT_HOST,
                       help=f'Server IP address (default: {DEFAULT_HOST})')
    parser.add_argument('--port', type=int, default=DEFAULT_TRANSFER_PORT,
                       help=f'Transfer port (default: {DEFAULT_TRANSFER_PORT})')
    subparsers = parser.add_subparsers(dest='action', required=True)

    upload = subparsers.add_parser('upload', help='Upload a local file into the root folder')
    upload.add_argument('path', help='Local file to upload')
    upload.add_argument('--name', default=None, help='Name to store it under (default: local file name)')

    download = subparsers.add_parser('download', help='Download a file from the root folder')
    download.add_argument('path', help='Name of the file on the server')
    download.add_argument('--output', default=None, help='Where to save it (default: current folder)')

    args = parser.parse_args()
    sys.exit(run_transfer(args))


if __name__ == "__main__":
    main()
