"""
Transfer client module.

This module handles client-side file transfer functionality.
"""

import socket
from pathlib import Path
from typing import Optional

from common.constants import DEFAULT_HOST, DEFAULT_TRANSFER_PORT, CHUNK_SIZE, TransferTokens
from common.protocol_definitions import (
    TransferProtocolError, recv_exact, recv_token, recv_length, send_token, send_length
)
from client.utils.logger import logger


class TransferClient:
    """Client-side file transfer functionality."""

    def __init__(self, host: str = DEFAULT_HOST, port: int = DEFAULT_TRANSFER_PORT,
                 chunk_size: int = CHUNK_SIZE, timeout: Optional[float] = None):
        self.host = host
        self.port = port
        self.chunk_size = chunk_size
        self.timeout = timeout
        self.sock: Optional[socket.socket] = None

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def connect(self):
        """Open the transfer connection."""
        try:
            self.sock = socket.create_connection((self.host, self.port), timeout=self.timeout)
        except OSError:
            logger.log_connection(self.host, self.port, False)
            raise
        logger.log_connection(self.host, self.port, True)

    def _require_connection(self) -> socket.socket:
        if self.sock is None:
            raise TransferProtocolError("Not connected to server")
        return self.sock

    def request(self, command: str) -> str:
        """Send a bare command token and return the server's reply token."""
        sock = self._require_connection()
        send_token(sock, command)
        return recv_token(sock)

    def upload(self, local_path: str, remote_name: str = None) -> bool:
        """Upload a local file. Returns True if the server replied OK."""
        sock = self._require_connection()
        path = Path(local_path)
        if not path.is_file():
            logger.error(f"[ERROR] Not a file: {local_path}")
            return False

        remote_name = remote_name or path.name
        size = path.stat().st_size
        logger.log_file_upload(remote_name, size)

        send_token(sock, TransferTokens.UPLOAD)
        send_token(sock, remote_name)
        send_length(sock, size)
        sent = 0
        with open(path, 'rb') as f:
            while sent < size:
                data = f.read(min(self.chunk_size, size - sent))
                if not data:
                    raise TransferProtocolError(f"{path} shrank during upload ({sent}/{size} bytes)")
                sock.sendall(data)
                sent += len(data)

        status = recv_token(sock)
        if status != TransferTokens.OK:
            logger.error(f"[ERROR] Upload of '{remote_name}' failed: {status}")
            return False
        logger.info(f"[UPLOAD] '{remote_name}' stored ({size} bytes)")
        return True

    def download(self, remote_name: str, local_path: str = None) -> bool:
        """Download a file from the root folder. Returns False if it was not found."""
        sock = self._require_connection()
        path = Path(local_path) if local_path else Path(Path(remote_name).name)
        logger.log_file_download(remote_name)

        send_token(sock, TransferTokens.DOWNLOAD)
        send_token(sock, remote_name)
        status = recv_token(sock)
        if status == TransferTokens.FILE_NOT_FOUND:
            logger.error(f"[ERROR] File not found on server: {remote_name}")
            return False
        if status != TransferTokens.FILE_FOUND:
            raise TransferProtocolError(f"Unexpected reply to download: {status!r}")

        size = recv_length(sock)
        received = 0
        with open(path, 'wb') as f:
            while received < size:
                data = recv_exact(sock, min(self.chunk_size, size - received))
                f.write(data)
                received += len(data)

        logger.info(f"[DOWNLOAD] '{remote_name}' saved to {path} ({received} bytes)")
        return True

    def close(self):
        """Say goodbye and close the connection."""
        if self.sock is None:
            return
        try:
            status = self.request(TransferTokens.EXIT)
            if status != TransferTokens.DONE:
                logger.warning(f"Unexpected reply to exit: {status!r}")
        except OSError as e:
            logger.debug(f"Error while closing transfer connection: {e}")
        finally:
            self.sock.close()
            self.sock = None
