#!/usr/bin/env python3
"""
Remote File Shell Server

This module integrates the two services of the server: the line-oriented
command shell and the framed file transfer service, both rooted at the same
directory.
"""

import asyncio

import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from server.files.transfer_server import TransferServer
from server.shell.shell_server import ShellServer
from server.utils.config import ServerConfig
from server.utils.logger import logger


class RemoteShellServer:
    """Main server class that runs the shell and the transfer service."""

    def __init__(self, config: ServerConfig = None):
        self.config = config or ServerConfig()
        self.shell_server = ShellServer(
            root_dir=self.config.root_dir,
            host=self.config.host,
            port=self.config.port,
            max_workers=self.config.max_workers,
            default_username=self.config.default_username,
            read_buffer_size=self.config.read_buffer_size
        )
        self.transfer_server = TransferServer(
            root_dir=self.config.root_dir,
            host=self.config.host,
            port=self.config.transfer_port,
            chunk_size=self.config.chunk_size
        )

    async def start(self):
        """Start the transfer service, then serve the shell until cancelled."""
        logger.info(f"Starting server with {self.config.get_connection_info()} {self.config.get_file_settings()}")
        self.transfer_server.start()
        try:
            await self.shell_server.start()
        finally:
            await self.stop()

    async def stop(self):
        """Stop both services."""
        self.transfer_server.stop()
        await self.shell_server.stop()

