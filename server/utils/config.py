"""
Server configuration module.

This module handles server-side configuration settings.
"""

import getpass

from common.constants import (
    DEFAULT_SERVER_HOST, DEFAULT_PORT, DEFAULT_TRANSFER_PORT, DEFAULT_MAX_WORKERS,
    ROOT_DIR, CHUNK_SIZE, READ_BUFFER_SIZE, DEFAULT_USERNAME
)


def system_username() -> str:
    """Name of the account running the server, used as the default nickname."""
    try:
        return getpass.getuser() or DEFAULT_USERNAME
    except (OSError, KeyError):
        return DEFAULT_USERNAME


class ServerConfig:
    """Server configuration class."""

    def __init__(self, host: str = DEFAULT_SERVER_HOST, port: int = DEFAULT_PORT,
                 transfer_port: int = DEFAULT_TRANSFER_PORT, root_dir: str = ROOT_DIR,
                 max_workers: int = DEFAULT_MAX_WORKERS, default_username: str = None):
        self.host = host
        self.port = port
        self.transfer_port = transfer_port
        self.root_dir = root_dir

        # Shell settings
        self.read_buffer_size = READ_BUFFER_SIZE
        self.max_workers = max_workers
        self.default_username = default_username or system_username()

        # File transfer settings
        self.chunk_size = CHUNK_SIZE

    def get_connection_info(self):
        """Get connection information."""
        return {
            'host': self.host,
            'port': self.port,
            'transfer_port': self.transfer_port
        }

    def get_file_settings(self):
        """Get file settings."""
        return {
            'root_dir': self.root_dir,
            'chunk_size': self.chunk_size,
            'max_workers': self.max_workers
        }

