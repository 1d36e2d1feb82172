"""
Client configuration module.

This module handles client-side configuration settings.
"""

from common.constants import DEFAULT_HOST, DEFAULT_TRANSFER_PORT, CHUNK_SIZE


class ClientConfig:
    """Client configuration class."""

    def __init__(self, host: str = DEFAULT_HOST, port: int = DEFAULT_TRANSFER_PORT, timeout: float = 10.0):
        self.host = host
        self.port = port

        # File transfer settings
        self.chunk_size = CHUNK_SIZE

        # Connection settings
        self.timeout = timeout  # seconds

