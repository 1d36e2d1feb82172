"""
File transfer server module.

This module handles whole-file upload and download over a framed binary
protocol. Each accepted connection gets its own blocking worker thread that
answers every request with exactly one framed reply.
"""

import socket
import threading
from pathlib import Path
from typing import Optional

from common.constants import (
    DEFAULT_SERVER_HOST, DEFAULT_TRANSFER_PORT, ROOT_DIR, CHUNK_SIZE, ACCEPT_POLL_INTERVAL, TransferTokens
)
from common.protocol_definitions import (
    TransferProtocolError, recv_token, recv_length, send_token, send_length
)
from server.shell.navigator import Navigator, OutsideRootError
from server.utils.logger import logger


class TransferSession:
    """Blocking request/response loop for one transfer connection."""

    def __init__(self, conn: socket.socket, addr: tuple, navigator: Navigator, chunk_size: int = CHUNK_SIZE):
        self.conn = conn
        self.addr = addr
        self.navigator = navigator
        self.chunk_size = chunk_size
        self.closed = False

    def run(self):
        """Serve requests until exit or disconnect."""
        logger.log_connection(self.addr, service='transfer')
        try:
            while not self.closed:
                command = recv_token(self.conn)
                if command == TransferTokens.UPLOAD:
                    self.handle_upload()
                elif command == TransferTokens.DOWNLOAD:
                    self.handle_download()
                elif command == TransferTokens.EXIT:
                    send_token(self.conn, TransferTokens.DONE)
                    logger.info(f"Client {self.addr} disconnected correctly")
                    break
                else:
                    logger.warning(f"Unknown transfer command {command!r} from {self.addr}")
                    send_token(self.conn, TransferTokens.UNKNOWN)
        except (TransferProtocolError, ConnectionError) as e:
            logger.info(f"Client {self.addr} disconnected: {e}")
        except Exception as e:
            logger.log_error(f"transfer session {self.addr}", e)
        finally:
            self.close()

    def close(self):
        if self.closed:
            return
        self.closed = True
        try:
            self.conn.close()
        except OSError as e:
            logger.debug(f"Error closing {self.addr}: {e}")
        logger.log_disconnect(self.addr, service='transfer')

    def _resolve(self, filename: str) -> Path:
        return self.navigator.resolve(self.navigator.root, filename)

    def _drain(self, size: int):
        """Consume a payload we cannot store so the stream stays in sync."""
        remaining = size
        while remaining > 0:
            chunk = self.conn.recv(min(self.chunk_size, remaining))
            if not chunk:
                raise TransferProtocolError(f"Connection closed with {remaining} payload bytes pending")
            remaining -= len(chunk)

    def handle_upload(self):
        """Receive a file: filename, 8-byte length, then exactly that many bytes."""
        filename = recv_token(self.conn)
        size = recv_length(self.conn)

        if size < 0:
            logger.warning(f"Upload of '{filename}' from {self.addr} declared negative size {size}")
            send_token(self.conn, TransferTokens.WRONG)
            return

        try:
            path = self._resolve(filename)
            if path.is_dir():
                raise IsADirectoryError(f"{path} is a directory")
            f = open(path, 'wb')
        except (OSError, OutsideRootError) as e:
            logger.log_error(f"upload of '{filename}' from {self.addr}", e)
            self._drain(size)
            send_token(self.conn, TransferTokens.WRONG)
            return

        received = 0
        try:
            with f:
                while received < size:
                    chunk = self.conn.recv(min(self.chunk_size, size - received))
                    if not chunk:
                        raise TransferProtocolError(f"Upload ended after {received}/{size} bytes")
                    f.write(chunk)
                    received += len(chunk)
        except TransferProtocolError:
            logger.error(f"Upload incomplete: {received}/{size} bytes of '{filename}' from {self.addr}")
            self._discard(path)
            self._reply_best_effort(TransferTokens.WRONG)
            raise
        except OSError as e:
            logger.log_error(f"upload of '{filename}' from {self.addr}", e)
            self._discard(path)
            self._drain(size - received)
            send_token(self.conn, TransferTokens.WRONG)
            return

        logger.log_file_upload(filename, received, self.addr)
        send_token(self.conn, TransferTokens.OK)

    def handle_download(self):
        """Send a file: 'File found', 8-byte length, then the bytes; or only FNF."""
        filename = recv_token(self.conn)
        path = self._find(filename)
        if path is None:
            logger.warning(f"Download of missing '{filename}' requested by {self.addr}")
            send_token(self.conn, TransferTokens.FILE_NOT_FOUND)
            return

        try:
            f = open(path, 'rb')
            size = path.stat().st_size
        except OSError as e:
            logger.log_error(f"download of '{filename}' by {self.addr}", e)
            send_token(self.conn, TransferTokens.FILE_NOT_FOUND)
            return

        with f:
            send_token(self.conn, TransferTokens.FILE_FOUND)
            send_length(self.conn, size)
            sent = 0
            while sent < size:
                chunk = f.read(min(self.chunk_size, size - sent))
                if not chunk:
                    raise TransferProtocolError(f"'{filename}' shrank during download ({sent}/{size} bytes)")
                self.conn.sendall(chunk)
                sent += len(chunk)

        logger.log_file_download(filename, sent, self.addr)

    def _find(self, filename: str) -> Optional[Path]:
        try:
            path = self._resolve(filename)
        except OutsideRootError:
            return None
        if not path.is_file():
            return None
        return path

    def _discard(self, path: Path):
        try:
            path.unlink()
        except OSError as e:
            logger.debug(f"Could not remove partial upload {path}: {e}")

    def _reply_best_effort(self, token: str):
        try:
            send_token(self.conn, token)
        except OSError as e:
            logger.debug(f"Could not deliver {token} to {self.addr}: {e}")


class TransferServer:
    """Accepts transfer connections, one worker thread per connection."""

    def __init__(self, root_dir: str = ROOT_DIR, host: str = DEFAULT_SERVER_HOST,
                 port: int = DEFAULT_TRANSFER_PORT, chunk_size: int = CHUNK_SIZE):
        self.host = host
        self.port = port
        self.chunk_size = chunk_size
        self.navigator = Navigator(root_dir)
        self.sock: Optional[socket.socket] = None
        self.accept_thread: Optional[threading.Thread] = None
        self.running = False

    @property
    def address(self) -> tuple:
        """Bound (host, port) once started."""
        return self.sock.getsockname()

    def start(self):
        """Bind, listen and accept on a background thread."""
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self.sock.bind((self.host, self.port))
        self.sock.listen()
        self.sock.settimeout(ACCEPT_POLL_INTERVAL)
        self.running = True

        self.accept_thread = threading.Thread(target=self.serve_forever, name='transfer-accept', daemon=True)
        self.accept_thread.start()
        logger.info(f"Transfer server listening on {self.address}, root={self.navigator.root}")

    def serve_forever(self):
        """Accept connections until stopped."""
        while self.running:
            try:
                conn, addr = self.sock.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if self.running:
                    logger.log_error("transfer accept", e)
                break

            conn.settimeout(None)
            session = TransferSession(conn, addr, self.navigator, self.chunk_size)
            worker = threading.Thread(target=session.run, name=f'transfer-{addr[1]}', daemon=True)
            worker.start()

    def stop(self):
        """Stop accepting. Sessions already running finish on their own."""
        self.running = False
        if self.sock is not None:
            try:
                self.sock.close()
            except OSError as e:
                logger.debug(f"Error closing transfer socket: {e}")
        if self.accept_thread is not None:
            self.accept_thread.join(timeout=5)
        logger.info("Transfer server stopped")
